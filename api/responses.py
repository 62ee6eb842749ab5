"""
Response helpers shared by the export and snapshot routes
"""

from fastapi.responses import JSONResponse
from core.exceptions import PulseException
import logging

logger = logging.getLogger(__name__)


def error_response(error: Exception, request_id: str = "-") -> JSONResponse:
    """JSON error body with the status carried by the exception (500 when unknown)"""
    if isinstance(error, PulseException):
        if error.status_code >= 500:
            logger.error(f"[{request_id}] {error.message}", extra={"error_context": error.to_dict()})
        else:
            logger.info(f"[{request_id}] Rejected request: {error.message}")
        return JSONResponse({"error": error.message}, status_code=error.status_code)

    logger.exception(f"[{request_id}] Unexpected error")
    return JSONResponse({"error": str(error) or "Unexpected error"}, status_code=500)


def build_file_name(prefix: str, project_id: str, from_date, to_date) -> str:
    return f"{prefix}-{project_id}-{from_date or 'all'}-{to_date or 'all'}.csv"


def csv_headers(file_name: str, row_count: int) -> dict:
    return {
        "Content-Disposition": f'attachment; filename="{file_name}"',
        "Cache-Control": "no-store",
        "X-Pulse-Row-Count": str(row_count),
    }
