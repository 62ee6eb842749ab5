# ============================================================================
# File: reporting/fetcher.py
# Description: Capture export orchestrator (read, normalize, merge)
# ============================================================================
"""
Capture Export Fetcher - unified, sorted capture rows for one project.

This module provides the read side of every export:
- Concurrent reads of the three capture tables
- Missing-table tolerance (reported as relation warnings)
- Normalization into CaptureExportRow
- Deterministic ordering (created_at, then module)
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import asyncio
import logging

from core.exceptions import ExportError, PulseException
from models.base import CaptureSource
from reporting.sources.capture_sources import CaptureSourceQuery, SourceQueryResult
from reporting.transformers.date_range import get_date_range_bounds
from reporting.transformers.normalizer import CaptureNormalizer
from schemas.captures import CaptureExportRow

logger = logging.getLogger(__name__)


@dataclass
class FetchCaptureExportResult:
    rows: List[CaptureExportRow] = field(default_factory=list)
    relation_warnings: List[str] = field(default_factory=list)


def sort_capture_rows(rows: List[CaptureExportRow]) -> List[CaptureExportRow]:
    """Order by created_at, breaking ties by module name"""
    return sorted(rows, key=lambda row: (row.created_at, row.module))


class CaptureExportFetcher:
    """
    Read and normalize every capture of a project within a date window.

    Responsibilities:
    - Fan out one query per capture table; the first hard failure cancels the others
    - Turn missing tables into relation warnings
    - Abort the whole fetch on any other store failure
    - Normalize and merge the rows
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.queries = [
            CaptureSourceQuery(session_factory, source, logger=self.logger)
            for source in CaptureSource
        ]

    async def fetch(
        self,
        project_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None
    ) -> FetchCaptureExportResult:
        """
        Fetch the unified capture rows of ``project_id``.

        Args:
            project_id: Project whose captures are exported
            from_date: Inclusive first day (YYYY-MM-DD), invalid values mean unbounded
            to_date: Inclusive last day (YYYY-MM-DD), invalid values mean unbounded

        Returns:
            FetchCaptureExportResult with sorted rows and relation warnings

        Raises:
            StoreError: If any capture table read fails for a reason other
                than the table not existing
            ExportError: If normalization fails unexpectedly
        """
        bounds = get_date_range_bounds(from_date, to_date)
        self.logger.info(
            f"Fetching captures for project {project_id} "
            f"({bounds.from_date or 'all'}..{bounds.to_date or 'all'})"
        )

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(query.fetch(project_id, bounds)) for query in self.queries]
        except ExceptionGroup as group_error:
            # The remaining queries were cancelled; surface the first failure
            raise group_error.exceptions[0]

        results: List[SourceQueryResult] = [task.result() for task in tasks]

        relation_warnings = [result.source.value for result in results if result.missing]
        normalizer = CaptureNormalizer(project_id)

        try:
            rows: List[CaptureExportRow] = []
            for result in results:
                rows.extend(normalizer.normalize_many(result.source, result.rows))
        except PulseException:
            raise
        except Exception as e:
            raise ExportError(
                "Failed to normalize capture rows",
                context={"project_id": project_id},
                original_exception=e
            )

        rows = sort_capture_rows(rows)

        if relation_warnings:
            self.logger.warning(f"Missing capture tables for project {project_id}: {', '.join(relation_warnings)}")
        self.logger.info(f"Fetched {len(rows)} capture rows for project {project_id}")

        return FetchCaptureExportResult(rows=rows, relation_warnings=relation_warnings)
