"""Health endpoints."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/optimizer", status_code=status.HTTP_200_OK)
def health_optimizer() -> dict:
    """Check that the optimization service answers at all."""
    if not settings.optimizer_base_url:
        return {"service": "optimizer", "healthy": False, "error": "ROUTE_DESK_OPTIMIZER_BASE_URL is not set"}
    try:
        response = httpx.get(
            f"{settings.optimizer_base_url}/api/all-stops",
            params={"dbName": settings.db_name},
            timeout=5.0,
        )
        return {"service": "optimizer", "healthy": response.is_success, "status_code": response.status_code}
    except httpx.HTTPError as exc:
        return {"service": "optimizer", "healthy": False, "error": str(exc)}
