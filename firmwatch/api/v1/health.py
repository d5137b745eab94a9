"""Health check endpoint with database connectivity and scheduler status."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from firmwatch.core.config import settings
from firmwatch.core.database import check_db_connected, get_db
from firmwatch.scheduler import is_scheduler_running
from firmwatch.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health status, database connectivity and whether scans are scheduled.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        scheduler="running" if is_scheduler_running() else "stopped",
    )
