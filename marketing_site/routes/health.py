# marketing_site/routes/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from marketing_site import __version__
from marketing_site.core.config import settings
from marketing_site.core.logging import get_structlog_logger

logger = get_structlog_logger(__name__)

router = APIRouter(tags=["health"])

_started_at = time.monotonic()


class HealthCheckResponse(BaseModel):
    status: str
    service: str
    environment: str
    version: str
    timestamp: str
    uptime: float
    checks: Dict[str, Dict[str, str]]
    dependencies: List[str]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def check_email() -> Dict[str, str]:
    """The contact form cannot deliver anything without a provider key."""
    if settings.email_configured:
        return {
            "status": "healthy",
            "provider": "sendgrid",
            "timeout_seconds": str(settings.sendgrid_timeout_seconds),
        }
    return {
        "status": "unhealthy",
        "provider": "sendgrid",
        "error": "SENDGRID_API_KEY not configured",
    }


def check_rate_limiter(request: Request) -> Dict[str, str]:
    pipeline = getattr(request.app.state, "contact_pipeline", None)
    if pipeline is None:
        return {"status": "unavailable", "error": "contact pipeline not initialised"}
    limiter = pipeline.rate_limiter
    # Drop clients whose attempts have all left the window
    swept = limiter.sweep()
    return {
        "status": "healthy",
        "tracked_clients": str(len(limiter)),
        "swept_clients": str(swept),
        "limit": str(limiter.limit),
        "window_seconds": str(int(limiter.window)),
    }


@router.get("/health", response_model=HealthCheckResponse, status_code=status.HTTP_200_OK)
def health_check(request: Request):
    """Report configuration health of the contact pipeline."""
    checks = {
        "email": check_email(),
        "rate_limiter": check_rate_limiter(request),
    }

    overall_status = "healthy"
    if any(result.get("status") != "healthy" for result in checks.values()):
        overall_status = "degraded"

    dependencies = ["sendgrid"]
    if settings.sentry_dsn:
        dependencies.append("sentry")

    response = HealthCheckResponse(
        status=overall_status,
        service="marketing_site",
        environment=settings.environment,
        version=__version__,
        timestamp=_utcnow(),
        uptime=time.monotonic() - _started_at,
        checks=checks,
        dependencies=dependencies,
    )

    if overall_status == "healthy":
        logger.info("health.check", status=overall_status)
    else:
        logger.warning("health.check", status=overall_status, checks=checks)

    return response


@router.get("/health/live", status_code=status.HTTP_200_OK)
def liveness_probe():
    """Simple liveness probe for containers."""
    return {
        "status": "alive",
        "timestamp": _utcnow(),
    }
