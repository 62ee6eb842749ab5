"""
FastAPI dependencies (overridden in tests)
"""

from typing import AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import async_session_maker
from reporting.fetcher import CaptureExportFetcher
from reporting.loaders.snapshot_store import ZoneSnapshotStore
from reporting.service import SnapshotService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


def get_capture_fetcher() -> CaptureExportFetcher:
    return CaptureExportFetcher(async_session_maker)


def get_snapshot_store(db: AsyncSession = Depends(get_db)) -> ZoneSnapshotStore:
    return ZoneSnapshotStore(db)


def get_snapshot_service(
    fetcher: CaptureExportFetcher = Depends(get_capture_fetcher),
    store: ZoneSnapshotStore = Depends(get_snapshot_store)
) -> SnapshotService:
    return SnapshotService(fetcher, store)
