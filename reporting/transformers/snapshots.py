"""
Build dense per-zone daily cumulative snapshots from normalized captures
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from schemas.captures import CaptureExportRow, ZoneDailySnapshotRow
from reporting.transformers.date_range import get_date_range_bounds, next_day, to_date_key
from reporting.transformers.normalizer import to_number, to_string_safe
import logging
import math

logger = logging.getLogger(__name__)

NO_MICRO_ZONE = "(sin-micro)"


@dataclass(frozen=True)
class ZoneMetricEvent:
    """One capture's contribution to one zone on one day"""
    created_at: str
    date_key: str
    zone_key: str
    macro_zone: Optional[str]
    micro_zone: Optional[str]
    ft: float
    botes: float
    rolls: float
    seams: float


@dataclass
class ZoneAccumulator:
    macro_zone: Optional[str]
    micro_zone: Optional[str]
    cumulative_ft: float = 0.0
    cumulative_botes: float = 0.0
    cumulative_rolls: float = 0.0
    cumulative_seams: float = 0.0
    captures_count: int = 0
    last_capture_at: Optional[str] = None

    def add(self, event: ZoneMetricEvent) -> None:
        self.macro_zone = event.macro_zone or self.macro_zone
        self.micro_zone = event.micro_zone or self.micro_zone
        self.cumulative_ft += event.ft
        self.cumulative_botes += event.botes
        self.cumulative_rolls += event.rolls
        self.cumulative_seams += event.seams
        self.captures_count += 1
        if self.last_capture_at is None or event.created_at >= self.last_capture_at:
            self.last_capture_at = event.created_at


def _field(row: Union[CaptureExportRow, Mapping[str, Any]], name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _non_negative(value: Any) -> float:
    """Metric contribution of a capture; negative and missing values count as 0"""
    return max(0.0, to_number(value) or 0.0)


def zone_key_for(macro_zone: Optional[str], micro_zone: Optional[str], zone: Optional[str]) -> Optional[str]:
    """
    Aggregation key for a capture location.

    macro::micro when both are known, macro::(sin-micro) with only a macro
    zone, else the free-form zone text.
    """
    if macro_zone and micro_zone:
        return f"{macro_zone}::{micro_zone}"
    if macro_zone:
        return f"{macro_zone}::{NO_MICRO_ZONE}"
    return zone or None


def to_metric_event(row: Union[CaptureExportRow, Mapping[str, Any]]) -> Optional[ZoneMetricEvent]:
    """Extract the zone event of a capture row; None when it has no zone or no date"""
    macro_zone = to_string_safe(_field(row, "macro_zone"))
    micro_zone = to_string_safe(_field(row, "micro_zone"))
    zone_key = zone_key_for(macro_zone, micro_zone, to_string_safe(_field(row, "zone")))
    if not zone_key:
        return None

    created_at = to_string_safe(_field(row, "created_at"))
    date_key = to_date_key(created_at)
    if not created_at or not date_key:
        return None

    return ZoneMetricEvent(
        created_at=created_at,
        date_key=date_key,
        zone_key=zone_key,
        macro_zone=macro_zone,
        micro_zone=micro_zone,
        ft=_non_negative(_field(row, "ft_totales")),
        botes=_non_negative(_field(row, "botes_usados")),
        rolls=_non_negative(_field(row, "total_rolls_used")),
        seams=_non_negative(_field(row, "total_seams")),
    )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_daily_zone_snapshots(
    project_id: str,
    rows: Sequence[Union[CaptureExportRow, Mapping[str, Any]]],
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
) -> List[ZoneDailySnapshotRow]:
    """
    Walk every day of the window and emit one cumulative row per known zone.

    The window is the requested bounds, or the span of the events when a
    bound is missing. Zones appear from their first capture onwards and keep
    their totals on days without captures, so each zone's series is gap free.

    Returns:
        Snapshot rows ordered by day, then by first appearance of the zone.
        Empty when no row yields a zone event.
    """
    events = [event for event in (to_metric_event(row) for row in rows) if event is not None]
    events.sort(key=lambda event: event.created_at)

    if not events:
        return []

    bounds = get_date_range_bounds(from_date, to_date)
    first_date = bounds.from_date or events[0].date_key
    last_date = bounds.to_date or events[-1].date_key

    events_by_date: Dict[str, List[ZoneMetricEvent]] = {}
    for event in events:
        if event.date_key < first_date or event.date_key > last_date:
            continue
        events_by_date.setdefault(event.date_key, []).append(event)

    accumulators: Dict[str, ZoneAccumulator] = {}
    snapshots: List[ZoneDailySnapshotRow] = []
    cursor = first_date

    while cursor <= last_date:
        for event in events_by_date.get(cursor, []):
            accumulator = accumulators.get(event.zone_key)
            if accumulator is None:
                accumulator = ZoneAccumulator(macro_zone=event.macro_zone, micro_zone=event.micro_zone)
                accumulators[event.zone_key] = accumulator
            accumulator.add(event)

        for zone_key, accumulator in accumulators.items():
            snapshots.append(ZoneDailySnapshotRow(
                project_id=project_id,
                snapshot_date=cursor,
                zone_key=zone_key,
                macro_zone=accumulator.macro_zone,
                micro_zone=accumulator.micro_zone,
                cumulative_ft=round(accumulator.cumulative_ft, 4),
                cumulative_botes=round(accumulator.cumulative_botes, 4),
                cumulative_rolls=round_half_up(accumulator.cumulative_rolls),
                cumulative_seams=round_half_up(accumulator.cumulative_seams),
                captures_count=accumulator.captures_count,
                last_capture_at=accumulator.last_capture_at,
            ))

        cursor = next_day(cursor)

    logger.info(
        f"Built {len(snapshots)} snapshot rows for project {project_id} "
        f"({len(accumulators)} zones, {first_date}..{last_date})"
    )
    return snapshots
