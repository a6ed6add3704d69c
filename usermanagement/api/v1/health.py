"""Health check endpoint with database connectivity and session table size."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from usermanagement.api.v1.auth import get_session_registry
from usermanagement.core.database import check_db_connected, get_db
from usermanagement.schemas.health import HealthResponse
from usermanagement.services.sessions import SessionRegistry

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    sessions: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=request.app.state.settings.APP_ENV,
        database="connected" if connected else "disconnected",
        live_sessions=len(sessions),
    )
