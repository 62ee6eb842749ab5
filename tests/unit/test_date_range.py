"""
Unit tests for date range resolution
"""

import pytest
from datetime import datetime, timezone
from reporting.transformers.date_range import (
    get_date_range_bounds,
    next_day,
    normalize_date_param,
    to_date_key,
)


class TestNormalizeDateParam:
    """Test YYYY-MM-DD validation"""

    @pytest.mark.parametrize("value", ["2024-01-01", "2024-02-29", "1999-12-31"])
    def test_valid_dates_are_returned_unchanged(self, value):
        assert normalize_date_param(value) == value

    @pytest.mark.parametrize(
        "value",
        [None, "", "2024-1-01", "2024/01/01", "20240101", "2024-02-30", "2023-02-29", "2024-13-01", "yesterday", " 2024-01-01"],
    )
    def test_invalid_values_become_none(self, value):
        assert normalize_date_param(value) is None

    def test_non_string_values_become_none(self):
        assert normalize_date_param(20240101) is None


class TestDateRangeBounds:
    """Test bound derivation"""

    def test_reversed_range_is_swapped(self):
        bounds = get_date_range_bounds("2024-03-10", "2024-01-01")

        assert bounds.from_date == "2024-01-01"
        assert bounds.to_date == "2024-03-10"

    def test_iso_bounds_cover_whole_last_day(self):
        bounds = get_date_range_bounds("2024-02-01", "2024-02-29")

        assert bounds.from_iso == "2024-02-01T00:00:00.000Z"
        assert bounds.to_exclusive_iso == "2024-03-01T00:00:00.000Z"
        assert bounds.from_datetime == datetime(2024, 2, 1, tzinfo=timezone.utc)
        assert bounds.to_exclusive_datetime == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_invalid_ends_are_unbounded(self):
        bounds = get_date_range_bounds("not-a-date", None)

        assert bounds.from_date is None
        assert bounds.to_date is None
        assert bounds.from_iso is None
        assert bounds.to_exclusive_iso is None
        assert bounds.from_datetime is None
        assert bounds.to_exclusive_datetime is None

    def test_single_bound(self):
        bounds = get_date_range_bounds(None, "2024-12-31")

        assert bounds.from_date is None
        assert bounds.to_exclusive_iso == "2025-01-01T00:00:00.000Z"


def test_next_day_crosses_month_and_leap_day():
    assert next_day("2024-02-28") == "2024-02-29"
    assert next_day("2024-02-29") == "2024-03-01"
    assert next_day("2023-12-31") == "2024-01-01"


def test_to_date_key_uses_utc():
    assert to_date_key("2024-02-01T23:30:00-05:00") == "2024-02-02"
    assert to_date_key("2024-02-01T10:00:00Z") == "2024-02-01"
    assert to_date_key(datetime(2024, 2, 1, 10, 0)) == "2024-02-01"
    assert to_date_key("garbage") is None
    assert to_date_key(None) is None
