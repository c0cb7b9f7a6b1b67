"""Health check endpoint."""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from pharmaforecast.core.config import get_settings
from pharmaforecast.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["ok"]
    service: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. The forecaster has no backing store to check."""
    logger.debug("health.check_started")
    return HealthResponse(status="ok", service=get_settings().app_name)
