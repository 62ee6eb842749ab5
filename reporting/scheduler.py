import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from core.database import async_session_maker
from reporting.fetcher import CaptureExportFetcher
from reporting.loaders.snapshot_store import ZoneSnapshotStore
from reporting.service import SnapshotService

logger = logging.getLogger(__name__)


class SnapshotScheduler:
    """Periodically rebuild the trailing snapshot window of configured projects"""

    def __init__(self, project_ids: Optional[List[str]] = None, session_factory=None):
        self.scheduler = AsyncIOScheduler()
        self.project_ids = project_ids if project_ids is not None else settings.snapshot_refresh_projects
        self.SessionLocal = session_factory or async_session_maker

    @property
    def enabled(self) -> bool:
        return bool(self.project_ids)

    def refresh_window(self):
        """(from_date, to_date) covering the configured lookback, ending today (UTC)"""
        today = datetime.now(timezone.utc).date()
        start = today - timedelta(days=max(settings.SNAPSHOT_REFRESH_LOOKBACK_DAYS - 1, 0))
        return start.isoformat(), today.isoformat()

    async def run_refresh_job(self):
        """Job to rebuild snapshots for every configured project"""
        from_date, to_date = self.refresh_window()
        logger.info(f"Scheduler: refreshing snapshots for {len(self.project_ids)} projects ({from_date}..{to_date})")
        fetcher = CaptureExportFetcher(self.SessionLocal)

        for project_id in self.project_ids:
            async with self.SessionLocal() as session:
                try:
                    service = SnapshotService(fetcher, ZoneSnapshotStore(session))
                    await service.rebuild(project_id, from_date, to_date)
                except Exception as e:
                    logger.error(f"Scheduler: snapshot refresh failed for project {project_id} - {e}")

    def start(self):
        """Start the scheduler when at least one project is configured"""
        if not self.enabled:
            logger.info("Snapshot scheduler disabled (SNAPSHOT_REFRESH_PROJECTS is empty)")
            return
        self.scheduler.add_job(
            self.run_refresh_job,
            trigger=IntervalTrigger(minutes=settings.SNAPSHOT_REFRESH_MINUTES),
            id="snapshot_refresh_job",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info("Snapshot scheduler started")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Snapshot scheduler stopped")
