"""Health check endpoint with database connectivity check."""

from fastapi import APIRouter, Depends
from pymongo.database import Database

from insurance_api.core.config import settings
from insurance_api.core.database import check_db_connected, get_db
from insurance_api.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: Database = Depends(get_db)) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
    )
