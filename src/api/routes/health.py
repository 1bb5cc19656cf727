"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Any, Dict

from fastapi import APIRouter

from config.settings import get_settings
from photos.factory import get_photo_service, get_stylist_chat


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "photo-engine",
    }


@router.get("/health/detailed")
def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health with source status.

    Checks:
    - Catalog directory readable, image count, gender rules loaded
    - Pexels / OpenAI credentials configured (never the values)
    - Recency cache size

    The service is "degraded" when it cannot serve any photos locally and
    has no provider key either.
    """
    settings = get_settings()
    stats = get_photo_service().stats()

    catalog_ok = stats["catalog"]["readable"] and stats["catalog"]["image_count"] > 0
    status = "healthy" if catalog_ok and stats["pexels_configured"] else "degraded"
    if not catalog_ok and not stats["pexels_configured"]:
        status = "unhealthy"

    return {
        "status": status,
        "service": "photo-engine",
        "environment": settings.environment,
        "checks": {
            "catalog": stats["catalog"],
            "pexels": {"configured": stats["pexels_configured"]},
            "openai": {
                "configured": settings.openai_configured,
                "keyword_synthesis_enabled": stats["keyword_synthesis_enabled"],
            },
            "recency_cache": stats["recency_cache"],
        },
    }


@router.get("/health/openai")
def openai_health_check() -> Dict[str, Any]:
    """Round-trip a tiny completion to verify the OpenAI credentials."""
    return get_stylist_chat().probe()


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Kubernetes-style readiness probe."""
    settings = get_settings()
    if not settings.catalog_dir.is_dir() and not settings.pexels_configured:
        return {"status": "not_ready", "reason": "no_photo_source"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Kubernetes-style liveness probe."""
    return {"status": "alive"}
