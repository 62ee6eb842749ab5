"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, exports, snapshots
from core.config import settings
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from reporting.scheduler import SnapshotScheduler

# Configure logging
setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Pulse Field Reporting API",
    description="Capture CSV exports and per-zone daily snapshots for field installation projects",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Request id + latency headers
app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = SnapshotScheduler()


# Include routers
app.include_router(health.router)
app.include_router(exports.router)
app.include_router(snapshots.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Pulse Field Reporting API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    
    # Start Scheduler
    scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Pulse Field Reporting API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Pulse Field Reporting API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "captures_csv": "/api/exports/project-csv",
            "zone_daily_snapshots": "/api/snapshots/zone-daily"
        }
    }
