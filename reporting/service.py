"""
Snapshot rebuild pipeline: fetch captures, build daily zone snapshots, persist them
"""

from dataclasses import dataclass
from typing import Optional
import logging

from reporting.fetcher import CaptureExportFetcher
from reporting.loaders.snapshot_store import ZoneSnapshotStore
from reporting.transformers.date_range import normalize_date_param
from reporting.transformers.snapshots import build_daily_zone_snapshots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotBuildSummary:
    project_id: str
    from_date: Optional[str]
    to_date: Optional[str]
    snapshot_rows: int
    zones: int
    persisted: int
    used_fallback_insert: bool
    relation_warnings: tuple = ()


class SnapshotService:
    """Rebuild the persisted snapshots of a project for a date window"""

    def __init__(self, fetcher: CaptureExportFetcher, store: ZoneSnapshotStore):
        self.fetcher = fetcher
        self.store = store

    async def rebuild(
        self,
        project_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> SnapshotBuildSummary:
        from_date = normalize_date_param(from_date)
        to_date = normalize_date_param(to_date)

        fetched = await self.fetcher.fetch(project_id, from_date, to_date)
        snapshots = build_daily_zone_snapshots(project_id, fetched.rows, from_date, to_date)
        result = await self.store.persist(project_id, snapshots, from_date, to_date)

        summary = SnapshotBuildSummary(
            project_id=project_id,
            from_date=from_date,
            to_date=to_date,
            snapshot_rows=len(snapshots),
            zones=len({snapshot.zone_key for snapshot in snapshots}),
            persisted=result.persisted,
            used_fallback_insert=result.used_fallback_insert,
            relation_warnings=tuple(fetched.relation_warnings),
        )
        logger.info(
            f"Snapshot rebuild for project {project_id}: {summary.snapshot_rows} rows, "
            f"{summary.zones} zones, persisted={summary.persisted}, fallback={summary.used_fallback_insert}"
        )
        return summary
