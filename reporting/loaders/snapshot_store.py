"""
Persist and read zone daily snapshots with idempotent upsert logic
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import and_, delete, insert as plain_insert, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import settings
from core.database import get_sqlstate, is_missing_relation_error, is_on_conflict_constraint_error
from core.exceptions import PulseException, SnapshotTableMissingError, StoreError
from models.snapshots import ZoneDailySnapshot
from reporting.sources.capture_sources import describe_error
from reporting.transformers.date_range import DateRangeBounds, get_date_range_bounds, parse_timestamp
from reporting.transformers.normalizer import to_number, to_string_safe, to_timestamp_string
from schemas.captures import ZoneDailySnapshotRow
import logging

logger = logging.getLogger(__name__)

CONFLICT_COLUMNS = ["project_id", "snapshot_date", "zone_key"]
UPDATABLE_COLUMNS = [
    "macro_zone",
    "micro_zone",
    "cumulative_ft",
    "cumulative_botes",
    "cumulative_rolls",
    "cumulative_seams",
    "captures_count",
    "last_capture_at",
]


@dataclass(frozen=True)
class PersistResult:
    persisted: int
    used_fallback_insert: bool


def chunk(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [items[index:index + size] for index in range(0, len(items), size)]


class ZoneSnapshotStore:
    """
    Read and write zone_daily_snapshots.
    
    Ensures:
    - Rebuilding a window never duplicates rows (upsert on
      project_id, snapshot_date, zone_key)
    - Deployments without that unique constraint still get a clean
      replacement (delete the window, then insert)
    - A missing snapshot table is reported, never ignored
    """
    
    def __init__(
        self,
        db_session: AsyncSession,
        batch_size: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.db = db_session
        self.batch_size = batch_size or settings.SNAPSHOT_BATCH_SIZE
        self.logger = logger or logging.getLogger(__name__)
    
    async def persist(
        self,
        project_id: str,
        snapshots: Sequence[ZoneDailySnapshotRow],
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> PersistResult:
        """
        Upsert snapshot rows in batches.
        
        The first batch rejected for lacking a matching unique constraint
        switches the whole call to delete + insert, which then writes every
        row; no further upserts are attempted.
        
        Returns:
            PersistResult with the number of rows written and whether the
            fallback was used
        
        Raises:
            SnapshotTableMissingError: If zone_daily_snapshots does not exist
            StoreError: On any other write failure
        """
        if not snapshots:
            return PersistResult(persisted=0, used_fallback_insert=False)
        
        bounds = get_date_range_bounds(from_date, to_date)
        records = [self._to_record(snapshot) for snapshot in snapshots]
        used_fallback_insert = False
        
        for batch_index, batch in enumerate(chunk(records, self.batch_size)):
            try:
                await self.db.execute(self._upsert_statement(batch))
                await self.db.commit()
            except Exception as e:
                await self.db.rollback()
                
                if is_missing_relation_error(e):
                    raise SnapshotTableMissingError(
                        context={"project_id": project_id, "operation": "UPSERT"},
                        original_exception=e
                    )
                if not is_on_conflict_constraint_error(e):
                    raise StoreError(
                        describe_error(e),
                        context={
                            "project_id": project_id,
                            "operation": "UPSERT",
                            "table_name": ZoneDailySnapshot.__tablename__,
                            "batch_index": batch_index,
                            "sqlstate": get_sqlstate(e)
                        },
                        original_exception=e
                    )
                
                self.logger.warning(
                    f"No unique constraint on zone_daily_snapshots for project {project_id}, "
                    f"replacing snapshots with delete + insert"
                )
                used_fallback_insert = True
                await self._replace(project_id, bounds, records)
                break
            
            self.logger.info(f"Batch {batch_index + 1}: Upserted {len(batch)} snapshot rows")
        
        self.logger.info(
            f"Persisted {len(records)} snapshot rows for project {project_id} "
            f"(fallback={used_fallback_insert})"
        )
        return PersistResult(persisted=len(records), used_fallback_insert=used_fallback_insert)
    
    async def load(
        self,
        project_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> List[ZoneDailySnapshotRow]:
        """
        Read persisted snapshots ordered by day and zone.
        
        Raises:
            SnapshotTableMissingError: If zone_daily_snapshots does not exist
            StoreError: On any other read failure
        """
        bounds = get_date_range_bounds(from_date, to_date)
        stmt = (
            select(ZoneDailySnapshot)
            .where(and_(*self._window_filters(project_id, bounds)))
            .order_by(ZoneDailySnapshot.snapshot_date.asc(), ZoneDailySnapshot.zone_key.asc())
        )
        
        try:
            result = await self.db.execute(stmt)
        except Exception as e:
            raise self._store_error(e, project_id, "SELECT")
        
        return [self._to_row(item, project_id) for item in result.scalars().all()]
    
    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------
    
    @staticmethod
    def _upsert_statement(batch: Sequence[Dict[str, Any]]):
        stmt = insert(ZoneDailySnapshot).values(list(batch))
        return stmt.on_conflict_do_update(
            index_elements=CONFLICT_COLUMNS,
            set_={column: stmt.excluded[column] for column in UPDATABLE_COLUMNS}
        )
    
    @staticmethod
    def _window_filters(project_id: str, bounds: DateRangeBounds) -> list:
        filters = [ZoneDailySnapshot.project_id == project_id]
        if bounds.from_date:
            filters.append(ZoneDailySnapshot.snapshot_date >= date.fromisoformat(bounds.from_date))
        if bounds.to_date:
            filters.append(ZoneDailySnapshot.snapshot_date <= date.fromisoformat(bounds.to_date))
        return filters
    
    async def _replace(self, project_id: str, bounds: DateRangeBounds, records: Sequence[Dict[str, Any]]) -> None:
        """Delete the project's snapshots inside ``bounds`` and insert ``records`` in one transaction"""
        try:
            await self.db.execute(
                delete(ZoneDailySnapshot).where(and_(*self._window_filters(project_id, bounds)))
            )
            for batch in chunk(records, self.batch_size):
                await self.db.execute(plain_insert(ZoneDailySnapshot).values(list(batch)))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise self._store_error(e, project_id, "DELETE+INSERT")
    
    def _store_error(self, error: Exception, project_id: str, operation: str) -> PulseException:
        if isinstance(error, PulseException):
            return error
        if is_missing_relation_error(error):
            return SnapshotTableMissingError(
                context={"project_id": project_id, "operation": operation},
                original_exception=error
            )
        return StoreError(
            describe_error(error),
            context={
                "project_id": project_id,
                "operation": operation,
                "table_name": ZoneDailySnapshot.__tablename__,
                "sqlstate": get_sqlstate(error)
            },
            original_exception=error
        )
    
    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    
    @staticmethod
    def _to_record(snapshot: ZoneDailySnapshotRow) -> Dict[str, Any]:
        """Snapshot row as column values typed for the database"""
        return {
            "project_id": snapshot.project_id,
            "snapshot_date": date.fromisoformat(snapshot.snapshot_date),
            "zone_key": snapshot.zone_key,
            "macro_zone": snapshot.macro_zone,
            "micro_zone": snapshot.micro_zone,
            "cumulative_ft": snapshot.cumulative_ft,
            "cumulative_botes": snapshot.cumulative_botes,
            "cumulative_rolls": snapshot.cumulative_rolls,
            "cumulative_seams": snapshot.cumulative_seams,
            "captures_count": snapshot.captures_count,
            "last_capture_at": parse_timestamp(snapshot.last_capture_at),
        }
    
    @staticmethod
    def _to_row(item: ZoneDailySnapshot, project_id: str) -> ZoneDailySnapshotRow:
        snapshot_date = item.snapshot_date
        if isinstance(snapshot_date, date):
            snapshot_date = snapshot_date.isoformat()
        
        return ZoneDailySnapshotRow(
            project_id=to_string_safe(item.project_id) or project_id,
            snapshot_date=to_string_safe(snapshot_date) or "",
            zone_key=to_string_safe(item.zone_key) or "",
            macro_zone=to_string_safe(item.macro_zone),
            micro_zone=to_string_safe(item.micro_zone),
            cumulative_ft=to_number(item.cumulative_ft) or 0,
            cumulative_botes=to_number(item.cumulative_botes) or 0,
            cumulative_rolls=int(to_number(item.cumulative_rolls) or 0),
            cumulative_seams=int(to_number(item.cumulative_seams) or 0),
            captures_count=int(to_number(item.captures_count) or 0),
            last_capture_at=to_timestamp_string(item.last_capture_at),
        )
