"""
Pydantic schemas for data validation and serialization.

Schemas:
    captures: Canonical capture export row and zone daily snapshot row,
              plus their CSV column orders
    api: API endpoint request/response schemas

Features:
    - Automatic data validation
    - camelCase aliases on the wire, snake_case attributes in Python
    - OpenAPI schema generation for FastAPI

Usage:
    from schemas.captures import CaptureExportRow, ZoneDailySnapshotRow
    from schemas.api import SnapshotBuildRequest, SnapshotBuildResponse
"""

__all__ = [
    "CAPTURE_EXPORT_COLUMNS",
    "ZONE_SNAPSHOT_COLUMNS",
    "CaptureExportRow",
    "ZoneDailySnapshotRow",
    "ErrorResponse",
    "SnapshotBuildRequest",
    "SnapshotBuildResponse",
    "SnapshotListResponse",
    "HealthCheckResponse",
]
