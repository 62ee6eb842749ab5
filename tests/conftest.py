"""
Pytest configuration and fixtures
"""

import pytest
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock
from sqlalchemy.exc import ProgrammingError
from models.base import CaptureSource


class FakeDriverError(Exception):
    """Stand-in for a driver exception carrying a SQLSTATE"""

    def __init__(self, message: str, sqlstate: str):
        super().__init__(message)
        self.sqlstate = sqlstate


def make_db_error(message: str, sqlstate: str) -> ProgrammingError:
    """SQLAlchemy-wrapped database error, as raised by session.execute"""
    return ProgrammingError("SELECT", {}, FakeDriverError(message, sqlstate))


def missing_relation_error(table_name: str) -> ProgrammingError:
    return make_db_error(f'relation "{table_name}" does not exist', "42P01")


def on_conflict_error() -> ProgrammingError:
    return make_db_error(
        "there is no unique or exclusion constraint matching the ON CONFLICT specification",
        "42P10"
    )


def make_result(rows: List[Dict[str, Any]]) -> MagicMock:
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows
    return result


class FakeSession:
    """
    Async session answering capture table queries from in-memory rows.

    The table is recognised from the compiled SQL; filtering is not
    emulated, tests provide the rows a query would return.
    """

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]], errors: Dict[str, Exception]):
        self.tables = tables
        self.errors = errors
        self.statements = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def execute(self, stmt):
        self.statements.append(stmt)
        sql = str(stmt)
        for source in CaptureSource:
            if f"FROM {source.value}" in sql:
                if source.value in self.errors:
                    raise self.errors[source.value]
                return make_result([dict(row) for row in self.tables.get(source.value, [])])
        raise AssertionError(f"Unexpected statement: {sql}")


class FakeSessionFactory:
    """Callable returning a fresh FakeSession per query, like async_sessionmaker"""

    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        errors: Optional[Dict[str, Exception]] = None
    ):
        self.tables = tables or {}
        self.errors = errors or {}
        self.sessions: List[FakeSession] = []

    def __call__(self) -> FakeSession:
        session = FakeSession(self.tables, self.errors)
        self.sessions.append(session)
        return session


@pytest.fixture
def pegada_field_record():
    """field_records row with a nested payload"""
    return {
        "id": "fr_001",
        "project_id": "P1",
        "module": "pegada",
        "field_type": "football",
        "project_zone_id": "pz_01",
        "capture_session_id": "cs_01",
        "capture_status": "complete",
        "macro_zone": "CENTRAL",
        "micro_zone": None,
        "payload": {
            "metadata": {
                "ftTotales": 120,
                "botesUsados": "3.5",
                "observaciones": "Seam glued, edge lifted",
                "evidencePhotos": {"start": "https://cdn/p1.jpg", "end": "https://cdn/p2.jpg", "extra": ""},
            },
            "photosUrls": ["https://cdn/p1.jpg"],
        },
        "created_at": "2024-02-01T10:00:00Z",
    }


@pytest.fixture
def legacy_compaction_record():
    """field_records row whose payload is the metadata itself (legacy shape)"""
    return {
        "id": "fr_002",
        "project_id": "P1",
        "module": "compactacion",
        "payload": {
            "macroZone": "NORTE",
            "microZone": "N1",
            "compactionMethod": "roller",
            "surfaceFirm": "true",
            "moistureOk": False,
            "doubleCompaction": "FALSE",
            "captureStatus": "incomplete",
            "notes": "wet",
        },
        "created_at": "2024-02-01T08:30:00Z",
    }


@pytest.fixture
def roll_installation_row():
    return {
        "id": "ri_001",
        "project_id": "P1",
        "project_zone_id": "pz_02",
        "field_type": "football",
        "macro_zone": "NORTE",
        "micro_zone": "N1",
        "zone": None,
        "roll_length_fit": "exact",
        "total_rolls_used": 4,
        "total_seams": "3",
        "compaction_surface_firm": True,
        "compaction_moisture_ok": True,
        "compaction_double": False,
        "compaction_method": "plate",
        "capture_session_id": "cs_02",
        "capture_status": "complete",
        "photos": ["https://cdn/r1.jpg", {"url": "https://cdn/r2.jpg"}, {"url": ""}, ""],
        "observations": "  ok  ",
        "created_at": "2024-02-02T09:00:00Z",
    }


@pytest.fixture
def material_row():
    return {
        "id": "mr_001",
        "project_id": "P1",
        "field_type": "football",
        "tipo_material": "arena",
        "tipo_pasada": "primera",
        "valvula": "2",
        "bolsas_esperadas": 10,
        "bolsas_utilizadas": 12,
        "desviacion": 20,
        "status_color": "amarillo",
        "fotos": '["https://cdn/m1.jpg", "https://cdn/m2.jpg"]',
        "observaciones": None,
        "created_at": "2024-02-02T09:00:00Z",
    }
