"""
Integration tests for the capture export and snapshot rebuild pipelines
"""

import asyncio
import csv
import io
import pytest
from unittest.mock import AsyncMock
from conftest import FakeSessionFactory, make_db_error, missing_relation_error
from core.exceptions import StoreError
from reporting.exporters.csv_encoder import capture_rows_to_csv
from reporting.fetcher import CaptureExportFetcher
from reporting.loaders.snapshot_store import ZoneSnapshotStore
from reporting.service import SnapshotService


@pytest.fixture
def capture_tables(pegada_field_record, legacy_compaction_record, roll_installation_row, material_row):
    return {
        "field_records": [pegada_field_record, legacy_compaction_record],
        "roll_installation": [roll_installation_row],
        "material_records": [material_row],
    }


@pytest.mark.asyncio
async def test_single_capture_export(pegada_field_record):
    """
    Integration test: read → normalize → encode for one field record
    """
    fetcher = CaptureExportFetcher(FakeSessionFactory(tables={"field_records": [pegada_field_record]}))

    result = await fetcher.fetch("P1", "2024-02-01", "2024-02-29")
    parsed = list(csv.DictReader(io.StringIO(capture_rows_to_csv(result.rows))))

    assert result.relation_warnings == []
    assert len(parsed) == 1
    assert parsed[0]["project_id"] == "P1"
    assert parsed[0]["ft_totales"] == "120"
    assert parsed[0]["botes_usados"] == "3.5"
    assert parsed[0]["capture_date"] == "2024-02-01"
    assert parsed[0]["module"] == "pegada"
    assert parsed[0]["zone"] == "CENTRAL"
    assert parsed[0]["photos_count"] == "2"
    assert parsed[0]["observaciones"] == "Seam glued, edge lifted"


@pytest.mark.asyncio
async def test_rows_from_all_tables_are_merged_and_sorted(capture_tables):
    factory = FakeSessionFactory(tables=capture_tables)
    fetcher = CaptureExportFetcher(factory)

    result = await fetcher.fetch("P1")

    assert [row.module for row in result.rows] == ["compactacion", "pegada", "material", "roll_installation"]
    assert len(factory.sessions) == 3


@pytest.mark.asyncio
async def test_export_is_deterministic(capture_tables):
    fetcher = CaptureExportFetcher(FakeSessionFactory(tables=capture_tables))

    first = capture_rows_to_csv((await fetcher.fetch("P1", "2024-02-01", "2024-02-02")).rows)
    second = capture_rows_to_csv((await fetcher.fetch("P1", "2024-02-01", "2024-02-02")).rows)

    assert first == second


@pytest.mark.asyncio
async def test_missing_tables_become_warnings(pegada_field_record):
    factory = FakeSessionFactory(
        tables={"field_records": [pegada_field_record]},
        errors={
            "roll_installation": missing_relation_error("roll_installation"),
            "material_records": missing_relation_error("material_records"),
        }
    )

    result = await CaptureExportFetcher(factory).fetch("P1")

    assert len(result.rows) == 1
    assert result.relation_warnings == ["roll_installation", "material_records"]


@pytest.mark.asyncio
async def test_store_failure_aborts_export(pegada_field_record):
    factory = FakeSessionFactory(
        tables={"field_records": [pegada_field_record]},
        errors={"material_records": make_db_error("connection reset", "08006")}
    )

    with pytest.raises(StoreError) as exc_info:
        await CaptureExportFetcher(factory).fetch("P1")

    assert exc_info.value.message == "connection reset"


@pytest.mark.asyncio
async def test_snapshot_rebuild_pipeline(capture_tables):
    """
    Integration test: fetch → build snapshots → persist
    """
    mock_session = AsyncMock()
    store = ZoneSnapshotStore(mock_session)
    service = SnapshotService(CaptureExportFetcher(FakeSessionFactory(tables=capture_tables)), store)

    summary = await service.rebuild("P1", "2024-02-01", "2024-02-02")

    # material_records row has no zone and is left out
    assert summary.zones == 2
    assert summary.snapshot_rows == 4
    assert summary.persisted == 4
    assert summary.used_fallback_insert is False
    assert summary.relation_warnings == ()
    mock_session.commit.assert_called_once()


@pytest.mark.asyncio
async def test_snapshot_rebuild_ignores_invalid_dates(capture_tables):
    mock_session = AsyncMock()
    service = SnapshotService(
        CaptureExportFetcher(FakeSessionFactory(tables=capture_tables)),
        ZoneSnapshotStore(mock_session)
    )

    summary = await service.rebuild("P1", "2024-02-31", "not-a-date")

    assert summary.from_date is None
    assert summary.to_date is None
    assert summary.snapshot_rows == 4


class SlowSourceQuery:
    """Source query that only finishes when cancelled"""

    def __init__(self):
        self.cancelled = False

    async def fetch(self, project_id, bounds):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FailingSourceQuery:

    async def fetch(self, project_id, bounds):
        await asyncio.sleep(0)
        raise StoreError("connection reset", context={"table_name": "material_records"})


@pytest.mark.asyncio
async def test_store_failure_cancels_pending_reads():
    fetcher = CaptureExportFetcher(FakeSessionFactory())
    slow_queries = [SlowSourceQuery(), SlowSourceQuery()]
    fetcher.queries = [*slow_queries, FailingSourceQuery()]

    with pytest.raises(StoreError) as exc_info:
        await asyncio.wait_for(fetcher.fetch("P1"), timeout=5)

    assert exc_info.value.message == "connection reset"
    assert all(query.cancelled for query in slow_queries)
