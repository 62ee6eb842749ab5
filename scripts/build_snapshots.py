"""
Script to rebuild and persist zone daily snapshots for one or more projects
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import async_session_maker, engine
from core.logging import setup_logging
from reporting.fetcher import CaptureExportFetcher
from reporting.loaders.snapshot_store import ZoneSnapshotStore
from reporting.service import SnapshotService

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Rebuild zone daily snapshots")
    parser.add_argument("projects", nargs="+", help="Project ids")
    parser.add_argument("--from", dest="from_date", default=None, help="First day (YYYY-MM-DD)")
    parser.add_argument("--to", dest="to_date", default=None, help="Last day (YYYY-MM-DD)")
    parser.add_argument("--log-level", default=None, help="Log level (defaults to LOG_LEVEL)")
    return parser.parse_args(argv)


async def build_snapshots(args) -> int:
    """Rebuild every project; returns the number of projects that failed"""
    failures = 0
    fetcher = CaptureExportFetcher(async_session_maker)
    
    try:
        for project_id in args.projects:
            async with async_session_maker() as session:
                try:
                    service = SnapshotService(fetcher, ZoneSnapshotStore(session))
                    summary = await service.rebuild(project_id, args.from_date, args.to_date)
                    logger.info(
                        f"Snapshots rebuilt for {project_id}: "
                        f"Rows={summary.snapshot_rows}, Zones={summary.zones}, "
                        f"Fallback={summary.used_fallback_insert}"
                    )
                except Exception as e:
                    failures += 1
                    logger.error(f"Snapshot rebuild failed for {project_id}: {str(e)}")
                    continue
        
        logger.info("All snapshot rebuilds completed")
        return failures
    finally:
        await engine.dispose()


if __name__ == "__main__":
    args = parse_args()
    setup_logging(args.log_level)
    sys.exit(1 if asyncio.run(build_snapshots(args)) else 0)
