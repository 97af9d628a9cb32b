"""Health check endpoints for monitoring."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.config.settings import settings

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    database: str
    storage: str
    email: str


def check_database(db: Session) -> tuple[str, str | None]:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
        return "connected", None
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return "disconnected", str(e)


def integration_status(configured: bool) -> str:
    return "configured" if configured else "default_credentials"


@router.get("", response_model=HealthResponse)
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """Overall status and component health."""
    db_status, _ = check_database(db)
    return HealthResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=db_status,
        storage=integration_status(bool(settings.S3_ACCESS_KEY_ID)),
        email=integration_status(bool(settings.SES_ACCESS_KEY_ID)),
    )


@router.get("/ready")
async def readiness_check(db: Session = Depends(get_db)) -> dict:
    """Readiness probe: the database must answer."""
    db_status, error = check_database(db)
    if db_status != "connected":
        raise HTTPException(status_code=503, detail=f"Database not ready: {error}")
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness probe."""
    return {"status": "alive"}
