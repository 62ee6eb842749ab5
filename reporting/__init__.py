"""
Reporting pipeline for field capture data.

This package contains the components that turn raw captures into exports:

Modules:
    fetcher: Capture export orchestrator (concurrent reads, normalization, ordering)
    service: Snapshot rebuild pipeline (fetch, build, persist)
    scheduler: APScheduler integration for periodic snapshot refreshes

Subpackages:
    sources: Range-filtered reads of the capture tables
    transformers: Date range resolution, row normalization, snapshot building
    exporters: CSV encoding shared by every export
    loaders: Snapshot persistence with idempotent upsert

Architecture:
    1. Read - field_records, roll_installation and material_records are
       queried concurrently; a missing table becomes a relation warning
    2. Normalize - every row becomes a CaptureExportRow
    3. Aggregate - rows fold into dense per-zone daily cumulative snapshots
    4. Write - snapshots are upserted, or replaced when the upsert
       constraint is missing

Usage:
    from reporting.fetcher import CaptureExportFetcher
    from reporting.exporters.csv_encoder import capture_rows_to_csv

Example:
    fetcher = CaptureExportFetcher(async_session_maker)
    result = await fetcher.fetch("P1", "2024-02-01", "2024-02-29")
    csv_text = capture_rows_to_csv(result.rows)

Error Handling:
    All components raise exceptions from core.exceptions; route handlers
    convert them into {"error": message} responses.
"""

__all__ = [
    "CaptureExportFetcher",
    "CaptureNormalizer",
    "SnapshotService",
    "ZoneSnapshotStore",
    "build_daily_zone_snapshots",
    "rows_to_csv",
]
