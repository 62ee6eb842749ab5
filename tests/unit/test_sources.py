"""
Unit tests for capture table queries
"""

import pytest
from datetime import datetime, timezone
from conftest import FakeSessionFactory, make_db_error, missing_relation_error
from core.exceptions import StoreError
from models.base import CaptureSource
from reporting.sources.capture_sources import CaptureSourceQuery, describe_error
from reporting.transformers.date_range import get_date_range_bounds


class TestBuildStatement:

    def test_bounded_window(self):
        query = CaptureSourceQuery(FakeSessionFactory(), CaptureSource.FIELD_RECORDS)
        stmt = query.build_statement("P1", get_date_range_bounds("2024-02-01", "2024-02-29"))

        sql = str(stmt)
        params = stmt.compile().params

        assert "FROM field_records" in sql
        assert "field_records.created_at >=" in sql
        assert "field_records.created_at <" in sql
        assert "ORDER BY field_records.created_at ASC" in sql
        assert "P1" in params.values()
        assert datetime(2024, 2, 1, tzinfo=timezone.utc) in params.values()
        assert datetime(2024, 3, 1, tzinfo=timezone.utc) in params.values()

    def test_unbounded_window_filters_only_project(self):
        query = CaptureSourceQuery(FakeSessionFactory(), CaptureSource.MATERIAL_RECORDS)
        stmt = query.build_statement("P1", get_date_range_bounds())

        sql = str(stmt)

        assert "FROM material_records" in sql
        assert "material_records.project_id =" in sql
        assert "created_at >=" not in sql
        assert "created_at <" not in sql


class TestFetch:

    @pytest.mark.asyncio
    async def test_returns_rows(self, roll_installation_row):
        factory = FakeSessionFactory(tables={"roll_installation": [roll_installation_row]})
        query = CaptureSourceQuery(factory, CaptureSource.ROLL_INSTALLATION)

        result = await query.fetch("P1", get_date_range_bounds())

        assert result.source == CaptureSource.ROLL_INSTALLATION
        assert result.missing is False
        assert result.rows == [roll_installation_row]

    @pytest.mark.asyncio
    async def test_missing_table_is_not_an_error(self):
        factory = FakeSessionFactory(errors={"material_records": missing_relation_error("material_records")})
        query = CaptureSourceQuery(factory, CaptureSource.MATERIAL_RECORDS)

        result = await query.fetch("P1", get_date_range_bounds())

        assert result.missing is True
        assert result.rows == []

    @pytest.mark.asyncio
    async def test_other_failures_raise_store_error(self):
        error = make_db_error('permission denied for table field_records', "42501")
        factory = FakeSessionFactory(errors={"field_records": error})
        query = CaptureSourceQuery(factory, CaptureSource.FIELD_RECORDS)

        with pytest.raises(StoreError) as exc_info:
            await query.fetch("P1", get_date_range_bounds())

        assert exc_info.value.message == "permission denied for table field_records"
        assert exc_info.value.context["table_name"] == "field_records"
        assert exc_info.value.context["sqlstate"] == "42501"
        assert exc_info.value.original_exception is error


def test_describe_error_uses_driver_message():
    assert describe_error(missing_relation_error("x")) == 'relation "x" does not exist'
    assert describe_error(ValueError("boom")) == "boom"
