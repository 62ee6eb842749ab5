"""
Range-filtered reads from the capture tables
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy import literal_column, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from core.database import get_sqlstate, is_missing_relation_error
from core.exceptions import StoreError
from models.base import CaptureSource
from models.captures import FieldRecord, MaterialRecord, RollInstallation
from reporting.transformers.date_range import DateRangeBounds
import logging

logger = logging.getLogger(__name__)

SOURCE_MODELS = {
    CaptureSource.FIELD_RECORDS: FieldRecord,
    CaptureSource.ROLL_INSTALLATION: RollInstallation,
    CaptureSource.MATERIAL_RECORDS: MaterialRecord,
}


@dataclass
class SourceQueryResult:
    """
    Rows read from one capture table.
    
    ``missing`` distinguishes an absent table from an empty one.
    """
    source: CaptureSource
    rows: List[Dict[str, Any]] = field(default_factory=list)
    missing: bool = False


def describe_error(error: BaseException) -> str:
    """Underlying database message of a wrapped DBAPI error"""
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error)


class CaptureSourceQuery:
    """
    Query one capture table for a project.
    
    Every column is selected: the tables are owned by the capture
    application and their optional columns vary between deployments.
    Each query opens its own session so the three tables can be read
    concurrently.
    """
    
    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        source: CaptureSource,
        logger: Optional[logging.Logger] = None
    ):
        self.session_factory = session_factory
        self.source = source
        self.table = SOURCE_MODELS[source].__table__
        self.logger = logger or logging.getLogger(__name__)
    
    def build_statement(self, project_id: str, bounds: DateRangeBounds) -> Select:
        stmt = (
            select(literal_column("*"))
            .select_from(self.table)
            .where(self.table.c.project_id == project_id)
        )
        if bounds.from_datetime is not None:
            stmt = stmt.where(self.table.c.created_at >= bounds.from_datetime)
        if bounds.to_exclusive_datetime is not None:
            stmt = stmt.where(self.table.c.created_at < bounds.to_exclusive_datetime)
        return stmt.order_by(self.table.c.created_at.asc())
    
    async def fetch(self, project_id: str, bounds: DateRangeBounds) -> SourceQueryResult:
        """
        Read the project's rows inside ``bounds``.
        
        Raises:
            StoreError: On any failure other than a missing table
        """
        stmt = self.build_statement(project_id, bounds)
        
        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
            except Exception as e:
                if is_missing_relation_error(e):
                    self.logger.warning(f"Capture table {self.source.value} does not exist, exporting without it")
                    return SourceQueryResult(source=self.source, missing=True)
                
                raise StoreError(
                    describe_error(e),
                    context={
                        "operation": "SELECT",
                        "table_name": self.source.value,
                        "project_id": project_id,
                        "sqlstate": get_sqlstate(e)
                    },
                    original_exception=e
                )
            
            rows = [dict(row) for row in result.mappings().all()]
        
        self.logger.debug(f"Fetched {len(rows)} rows from {self.source.value} for project {project_id}")
        return SourceQueryResult(source=self.source, rows=rows)
