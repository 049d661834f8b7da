"""
Health check endpoint.

Provides service health status for container orchestration
(Docker health checks, Kubernetes liveness checks).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter

from cas_service.core.state import get_app_state
from cas_service.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check service health.

    Unhealthy when the content store was never initialized.
    """
    state = get_app_state()

    system_time = datetime.now(UTC).strftime("%Y-%m-%d %H:%M")
    status: Literal["healthy", "unhealthy"] = (
        "healthy" if state.content_store is not None else "unhealthy"
    )

    return HealthResponse(
        status=status,
        uptime_seconds=state.uptime_seconds,
        uptime=state.uptime_formatted,
        system_time=system_time,
    )
