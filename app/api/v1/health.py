"""Liveness probe that also reports whether the user/catalog store answers."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_app_settings
from app.core.config import Settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """The process is up; `database` says whether a trivial query succeeded."""
    connected = check_db_connected(db)
    if not connected:
        logger.warning("Health check could not reach the database")
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
    )
