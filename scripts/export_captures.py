"""
Script to export the captures of a project as CSV
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
from reporting.exporters.csv_encoder import capture_rows_to_csv
from reporting.fetcher import CaptureExportFetcher

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Export project captures as CSV")
    parser.add_argument("project", help="Project id")
    parser.add_argument("--from", dest="from_date", default=None, help="First day (YYYY-MM-DD)")
    parser.add_argument("--to", dest="to_date", default=None, help="Last day (YYYY-MM-DD)")
    parser.add_argument("--output", "-o", default=None, help="Output file (stdout when omitted)")
    parser.add_argument("--log-level", default=None, help="Log level (defaults to LOG_LEVEL)")
    return parser.parse_args(argv)


async def export_captures(args) -> int:
    """Write the CSV and return the number of rows exported"""
    try:
        fetcher = CaptureExportFetcher(async_session_maker)
        result = await fetcher.fetch(args.project, args.from_date, args.to_date)
        csv_text = capture_rows_to_csv(result.rows)
        
        if args.output:
            with open(args.output, "w", encoding="utf-8", newline="") as handle:
                handle.write(csv_text)
            logger.info(f"Wrote {len(result.rows)} rows to {args.output}")
        else:
            sys.stdout.write(csv_text + "\n")
        
        for table_name in result.relation_warnings:
            logger.warning(f"Table {table_name} does not exist; its captures were not exported")
        
        return len(result.rows)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    args = parse_args()
    setup_logging(args.log_level)
    try:
        asyncio.run(export_captures(args))
    except Exception as e:
        logger.error(f"Capture export failed: {str(e)}")
        sys.exit(1)
