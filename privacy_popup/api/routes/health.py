"""Health check and configuration probe endpoints (no auth)."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from privacy_popup.core.config import settings
from privacy_popup.core.deps import Backend
from privacy_popup.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=settings.version,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness probe for container orchestration.

    Simple check that the service is running.
    """
    return {"status": "alive"}


@router.get("/health/ready", response_model=None)
async def readiness_check(backend: Backend) -> dict[str, str] | JSONResponse:
    """
    Readiness probe.

    Checks that the session/settings storage answers.
    """
    try:
        ok = await backend.ping()
    except Exception as e:
        logger.warning("Storage backend unavailable: %s", e)
        ok = False

    if not ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    return {"status": "ready"}


@router.get("/config")
async def config_probe() -> dict[str, Any]:
    """Report which settings are configured, without revealing their values."""
    return {
        "shopify_api_key": "Set" if settings.shopify_api_key else "Missing",
        "shopify_api_secret": "Set" if settings.shopify_api_secret else "Missing",
        "host": settings.app_url,
        "scopes": settings.scopes,
        "storage": "redis" if settings.redis_url is not None else "memory",
        "configured": bool(settings.shopify_api_key and settings.shopify_api_secret),
    }


@router.get("/app-info")
async def app_info() -> dict[str, Any]:
    return {
        "name": settings.project_name,
        "version": settings.version,
        "type": "shopify_app",
        "embedded": True,
        "scopes": settings.scope_list,
    }
