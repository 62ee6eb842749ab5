"""
CSV encoding shared by the capture export and the zone snapshot export.

Rules:
- Header line, then one line per row, joined with "\n" (no trailing newline)
- A field is quoted, with inner quotes doubled, only when it contains a
  comma, a double quote, or a line break
- None is an empty field
"""

from typing import Any, Mapping, Sequence, Union
from pydantic import BaseModel
from schemas.captures import (
    CAPTURE_EXPORT_COLUMNS,
    ZONE_SNAPSHOT_COLUMNS,
    CaptureExportRow,
    ZoneDailySnapshotRow,
)
from decimal import Decimal
import enum

Row = Union[Mapping[str, Any], BaseModel]

_QUOTE_TRIGGERS = (",", '"', "\n", "\r")


def format_float(value: float) -> str:
    """
    Shortest decimal text of a float, never in exponent notation.

    Integral values drop the fractional part (120.0 -> "120"); small and
    large values are expanded (1e-05 -> "0.00001").
    """
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        return format(Decimal(text), "f")
    return text


def format_value(value: Any) -> str:
    """Render a value the way the CSV consumers expect it"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, float):
        return format_float(value)
    return str(value)


def csv_escape(value: Any) -> str:
    text = format_value(value)
    if not any(trigger in text for trigger in _QUOTE_TRIGGERS):
        return text
    return '"' + text.replace('"', '""') + '"'


def _cell(row: Row, column: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(column)
    return getattr(row, column, None)


def rows_to_csv(columns: Sequence[str], rows: Sequence[Row]) -> str:
    """Project ``rows`` onto ``columns`` and encode them as CSV text"""
    lines = [",".join(columns)]
    for row in rows:
        lines.append(",".join(csv_escape(_cell(row, column)) for column in columns))
    return "\n".join(lines)


def capture_rows_to_csv(rows: Sequence[CaptureExportRow]) -> str:
    return rows_to_csv(CAPTURE_EXPORT_COLUMNS, rows)


def zone_snapshots_to_csv(rows: Sequence[ZoneDailySnapshotRow]) -> str:
    return rows_to_csv(ZONE_SNAPSHOT_COLUMNS, rows)
