"""Health check endpoint with database connectivity and AI service configuration status."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medadmin.api.deps import get_ai_service, get_settings_dep
from medadmin.core.config import Settings
from medadmin.core.database import check_db_connected, get_db
from medadmin.schemas.health import HealthResponse
from medadmin.services.ai_service import AIServiceClient

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        ai_service="configured" if ai.is_configured else "not_configured",
    )
