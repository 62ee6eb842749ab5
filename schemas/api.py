"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Any, Optional, List
from datetime import datetime, timezone
from schemas.captures import ZoneDailySnapshotRow


class ErrorResponse(BaseModel):
    """Body returned by every failing endpoint"""
    error: str


# ============================================================================
# Snapshot Schemas
# ============================================================================

class SnapshotBuildRequest(BaseModel):
    """
    Body of POST /api/snapshots/zone-daily
    
    Values are left loosely typed: a date that is not a ``YYYY-MM-DD``
    string means "unbounded", and a non-string projectId is reported as
    missing by the route.
    """
    project_id: Optional[Any] = Field(None, alias="projectId")
    from_date: Optional[Any] = Field(None, alias="fromDate")
    to_date: Optional[Any] = Field(None, alias="toDate")
    
    class Config:
        populate_by_name = True


class SnapshotBuildResponse(BaseModel):
    """Summary of a snapshot build + persist run"""
    project_id: str = Field(..., alias="projectId")
    from_date: Optional[str] = Field(None, alias="fromDate")
    to_date: Optional[str] = Field(None, alias="toDate")
    snapshot_rows: int = Field(..., alias="snapshotRows")
    zones: int
    persisted: int
    used_fallback_insert: bool = Field(..., alias="usedFallbackInsert")
    
    class Config:
        populate_by_name = True


class SnapshotListResponse(BaseModel):
    """Persisted snapshots for a project and date window"""
    project_id: str = Field(..., alias="projectId")
    from_date: Optional[str] = Field(None, alias="fromDate")
    to_date: Optional[str] = Field(None, alias="toDate")
    rows: List[ZoneDailySnapshotRow] = Field(default_factory=list)
    count: int
    
    class Config:
        populate_by_name = True


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    database_connected: bool
    missing_relations: List[str] = Field(default_factory=list)
