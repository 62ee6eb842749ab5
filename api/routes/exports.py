"""
Capture CSV export endpoint
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from api.dependencies import get_capture_fetcher
from api.responses import build_file_name, csv_headers, error_response
from core.exceptions import RequestValidationError
from reporting.exporters.csv_encoder import capture_rows_to_csv
from reporting.fetcher import CaptureExportFetcher
from reporting.transformers.date_range import normalize_date_param
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/exports", tags=["Exports"])


@router.get("/project-csv")
async def export_project_csv(
    request: Request,
    project: Optional[str] = Query(None, description="Project id"),
    from_: Optional[str] = Query(None, alias="from", description="First day (YYYY-MM-DD)"),
    to: Optional[str] = Query(None, description="Last day (YYYY-MM-DD)"),
    fetcher: CaptureExportFetcher = Depends(get_capture_fetcher)
):
    """
    Download every capture of a project as CSV.
    
    Missing capture tables do not fail the export; they are listed in
    the X-Pulse-Relation-Warnings header.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    
    try:
        if not project:
            raise RequestValidationError("project is required", context={"parameter": "project"})
        
        from_date = normalize_date_param(from_)
        to_date = normalize_date_param(to)
        logger.info(f"[{request_id}] GET /api/exports/project-csv - project={project}, from={from_date}, to={to_date}")
        
        result = await fetcher.fetch(project, from_date, to_date)
        csv_text = capture_rows_to_csv(result.rows)
    except Exception as e:
        return error_response(e, request_id)
    
    headers = csv_headers(build_file_name("pulse-captures", project, from_date, to_date), len(result.rows))
    headers["X-Pulse-Relation-Warnings"] = ",".join(result.relation_warnings)
    
    logger.info(f"[{request_id}] Exported {len(result.rows)} capture rows")
    return Response(content=csv_text, media_type="text/csv; charset=utf-8", headers=headers)
