"""System endpoints (health)."""

from __future__ import annotations

import time

from fastapi import APIRouter

from .. import schemas

router = APIRouter(prefix="", tags=["System"])

# Global startup time for uptime calculation
_STARTUP_TIME = time.time()


@router.get("/health", response_model=schemas.Envelope[schemas.HealthResponse])
def get_health() -> schemas.Envelope[schemas.HealthResponse]:
    """Liveness check."""
    uptime_s = time.time() - _STARTUP_TIME
    return schemas.Envelope(data=schemas.HealthResponse(status="ok", uptime_s=uptime_s))
