"""
Zone daily snapshot endpoints: rebuild + persist, and read back as JSON or CSV
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from api.dependencies import get_snapshot_service, get_snapshot_store
from api.responses import build_file_name, csv_headers, error_response
from core.exceptions import RequestValidationError
from reporting.exporters.csv_encoder import zone_snapshots_to_csv
from reporting.loaders.snapshot_store import ZoneSnapshotStore
from reporting.service import SnapshotService
from reporting.transformers.date_range import normalize_date_param
from schemas.api import SnapshotBuildRequest, SnapshotBuildResponse, SnapshotListResponse
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/snapshots", tags=["Snapshots"])


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")


async def _read_build_request(request: Request) -> SnapshotBuildRequest:
    """Parse the POST body; anything that is not a JSON object is a 400"""
    try:
        payload = await request.json()
    except ValueError as e:
        raise RequestValidationError("Request body must be valid JSON", original_exception=e)
    
    if not isinstance(payload, dict):
        raise RequestValidationError("Request body must be a JSON object")
    return SnapshotBuildRequest(**payload)


@router.post("/zone-daily", response_model=SnapshotBuildResponse)
async def build_zone_daily_snapshots(
    request: Request,
    service: SnapshotService = Depends(get_snapshot_service)
):
    """
    Rebuild and persist the daily zone snapshots of a project.
    
    Returns the number of rows built, distinct zones, rows persisted and
    whether the delete + insert fallback was needed.
    """
    request_id = _request_id(request)
    
    try:
        body = await _read_build_request(request)
        project_id = body.project_id.strip() if isinstance(body.project_id, str) else ""
        if not project_id:
            raise RequestValidationError("projectId is required", context={"parameter": "projectId"})
        
        logger.info(f"[{request_id}] POST /api/snapshots/zone-daily - project={project_id}")
        summary = await service.rebuild(
            project_id,
            normalize_date_param(body.from_date),
            normalize_date_param(body.to_date)
        )
    except Exception as e:
        return error_response(e, request_id)
    
    return SnapshotBuildResponse(
        project_id=summary.project_id,
        from_date=summary.from_date,
        to_date=summary.to_date,
        snapshot_rows=summary.snapshot_rows,
        zones=summary.zones,
        persisted=summary.persisted,
        used_fallback_insert=summary.used_fallback_insert
    )


@router.get("/zone-daily")
async def get_zone_daily_snapshots(
    request: Request,
    project: Optional[str] = Query(None, description="Project id"),
    from_: Optional[str] = Query(None, alias="from", description="First day (YYYY-MM-DD)"),
    to: Optional[str] = Query(None, description="Last day (YYYY-MM-DD)"),
    format: Optional[str] = Query(None, description="csv or json (default)"),
    store: ZoneSnapshotStore = Depends(get_snapshot_store)
):
    """Persisted snapshots of a project as JSON, or as CSV with format=csv"""
    request_id = _request_id(request)
    
    try:
        project_id = (project or "").strip()
        if not project_id:
            raise RequestValidationError("project is required", context={"parameter": "project"})
        
        from_date = normalize_date_param(from_)
        to_date = normalize_date_param(to)
        logger.info(f"[{request_id}] GET /api/snapshots/zone-daily - project={project_id}, format={format or 'json'}")
        
        snapshots = await store.load(project_id, from_date, to_date)
    except Exception as e:
        return error_response(e, request_id)
    
    if format == "csv":
        file_name = build_file_name("pulse-zone-snapshots", project_id, from_date, to_date)
        return Response(
            content=zone_snapshots_to_csv(snapshots),
            media_type="text/csv; charset=utf-8",
            headers=csv_headers(file_name, len(snapshots))
        )
    
    return SnapshotListResponse(
        project_id=project_id,
        from_date=from_date,
        to_date=to_date,
        rows=snapshots,
        count=len(snapshots)
    ).dict(by_alias=True)
