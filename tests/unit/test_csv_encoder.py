"""
Unit tests for CSV encoding
"""

import csv
import io
from reporting.exporters.csv_encoder import (
    capture_rows_to_csv,
    csv_escape,
    rows_to_csv,
    zone_snapshots_to_csv,
)
from schemas.captures import CAPTURE_EXPORT_COLUMNS, ZONE_SNAPSHOT_COLUMNS, CaptureExportRow, ZoneDailySnapshotRow


class TestCsvEscape:

    def test_plain_values_are_not_quoted(self):
        assert csv_escape("CENTRAL") == "CENTRAL"
        assert csv_escape(None) == ""
        assert csv_escape(3.5) == "3.5"
        assert csv_escape(120.0) == "120"
        assert csv_escape(True) == "true"
        assert csv_escape(False) == "false"

    def test_floats_never_use_exponent_notation(self):
        assert csv_escape(0.00001) == "0.00001"
        assert csv_escape(1.5e-07) == "0.00000015"
        assert csv_escape(-0.0004) == "-0.0004"
        assert csv_escape(0.1 + 0.2) == "0.30000000000000004"
        assert csv_escape(1e16) == "10000000000000000"

    def test_special_characters_are_quoted(self):
        assert csv_escape('He said "hi", then left\n') == '"He said ""hi"", then left\n"'
        assert csv_escape("a,b") == '"a,b"'
        assert csv_escape("line\rbreak") == '"line\rbreak"'


def test_round_trip_with_csv_reader():
    value = 'He said "hi", then left\n'
    text = rows_to_csv(["id", "note"], [{"id": 1, "note": value}])

    parsed = list(csv.reader(io.StringIO(text)))

    assert parsed == [["id", "note"], ["1", value]]


def test_layout_has_no_trailing_newline():
    text = rows_to_csv(["a", "b"], [{"a": 1, "b": None}, {"a": 2}])

    assert text == "a,b\n1,\n2,"


def test_header_only_when_no_rows():
    assert rows_to_csv(["a", "b"], []) == "a,b"


def test_capture_rows_follow_export_column_order():
    row = CaptureExportRow(
        project_id="P1",
        created_at="2024-02-01T10:00:00Z",
        capture_date="2024-02-01",
        module="pegada",
        macro_zone="CENTRAL",
        zone="CENTRAL",
        ft_totales=120,
        photos_count=0,
    )

    header, line = capture_rows_to_csv([row]).split("\n")
    values = dict(zip(header.split(","), line.split(",")))

    assert header == ",".join(CAPTURE_EXPORT_COLUMNS)
    assert values["ft_totales"] == "120"
    assert values["capture_status"] == "complete"
    assert values["botes_usados"] == ""
    assert values["photos_count"] == "0"


def test_snapshot_rows_use_same_encoding():
    row = ZoneDailySnapshotRow(
        project_id="P1",
        snapshot_date="2024-01-01",
        zone_key="A, north::(sin-micro)",
        macro_zone="A, north",
        cumulative_ft=10.25,
    )

    header, line = zone_snapshots_to_csv([row]).split("\n")

    assert header == ",".join(ZONE_SNAPSHOT_COLUMNS)
    assert line == 'P1,2024-01-01,"A, north::(sin-micro)","A, north",,10.25,0,0,0,0,'
