"""
SQLAlchemy ORM models for the tables the reporting service touches.

Models:
    base: Base declarative class and shared enums (CaptureStatus, CaptureSource)
    captures: Capture source tables (field_records, roll_installation, material_records)
    snapshots: Persisted per-zone daily snapshots (zone_daily_snapshots)

Database Schema:
    The capture tables are written by the field capture application and are
    only read here. Their JSONB columns (payload, photos, fotos) hold loosely
    typed data whose keys evolved over time; the export normalizer tolerates
    every known variant. Schema creation and migrations are owned by the
    capture application, not by this service.

Usage:
    from models.captures import FieldRecord, RollInstallation, MaterialRecord
    from models.snapshots import ZoneDailySnapshot
    from models.base import CaptureStatus, CaptureSource
"""

__all__ = [
    "Base",
    "CaptureStatus",
    "CaptureSource",
    "FieldRecord",
    "RollInstallation",
    "MaterialRecord",
    "ZoneDailySnapshot",
]
