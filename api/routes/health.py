"""
Health check endpoint with database and table status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from api.dependencies import get_db
from core.database import is_missing_relation_error
from models.base import CaptureSource
from models.snapshots import ZoneDailySnapshot
from schemas.api import HealthCheckResponse
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])

CHECKED_TABLES = [source.value for source in CaptureSource] + [ZoneDailySnapshot.__tablename__]


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.
    
    Returns:
    - Database connectivity status
    - Capture and snapshot tables that do not exist yet
    """
    
    # Check database connectivity
    db_connected = False
    
    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
    
    missing_relations = []
    
    if db_connected:
        for table_name in CHECKED_TABLES:
            try:
                await db.execute(text(f"SELECT 1 FROM {table_name} LIMIT 1"))
            except Exception as e:
                await db.rollback()
                if is_missing_relation_error(e):
                    missing_relations.append(table_name)
                else:
                    logger.error(f"Failed to probe table {table_name}: {str(e)}")
    
    if not db_connected:
        status = "unhealthy"
    elif missing_relations:
        status = "degraded"
    else:
        status = "healthy"
    
    return HealthCheckResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
        database_connected=db_connected,
        missing_relations=missing_relations
    )
