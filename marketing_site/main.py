# marketing_site/main.py
from __future__ import annotations

import time
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from marketing_site import __version__
from marketing_site.core.config import Settings, settings
from marketing_site.core.exceptions import BaseAPIException
from marketing_site.core.logging import configure_structlog, get_structlog_logger
from marketing_site.middleware.logging import LoggingMiddleware
from marketing_site.middleware.request_id import RequestIdMiddleware
from marketing_site.routes import contact, health
from marketing_site.services.email_transport import SendGridTransport
from marketing_site.services.rate_limiter import SlidingWindowRateLimiter
from marketing_site.services.submission import SubmissionPipeline


def build_contact_pipeline(config: Settings) -> SubmissionPipeline:
    """Construct the process-wide limiter and the pipeline that owns it."""
    rate_limiter = SlidingWindowRateLimiter(
        limit=config.contact_rate_limit_requests,
        window=config.contact_rate_limit_window_seconds,
        max_keys=config.contact_rate_limit_max_keys,
    )
    return SubmissionPipeline.from_settings(
        config,
        rate_limiter=rate_limiter,
        transport=SendGridTransport.from_settings(config),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger = get_structlog_logger(__name__)

    logger.info("application.starting", environment=settings.environment)

    if not settings.email_configured:
        # Submissions will fail with 500 until a key is provided
        logger.warning("email.unconfigured", provider="sendgrid")

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            integrations=[
                FastApiIntegration(),
                StarletteIntegration(),
            ],
            traces_sample_rate=1.0 if settings.is_development else 0.1,
            send_default_pii=False,
        )
        logger.info("sentry.initialized")

    logger.info("application.started")
    yield

    logger.info("application.shutting_down")
    logger.info("application.shutdown_complete")


# Configure logging before creating app
configure_structlog()
logger = get_structlog_logger(__name__)

app = FastAPI(
    title="Marketing Site API",
    version=__version__,
    description="Contact and demo request handling for the marketing website",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
)
app.state.contact_pipeline = build_contact_pipeline(settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins(),
    allow_credentials=True,
    allow_methods=settings.methods(),
    allow_headers=settings.headers(),
    expose_headers=["X-Request-ID", "X-Response-Time", "Retry-After"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(LoggingMiddleware)
# Added last so it runs first and the request id is bound for the logging middleware
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(BaseAPIException)
async def api_exception_handler(request: Request, exc: BaseAPIException):
    """Handle custom API exceptions."""
    logger.warning(
        "api.exception",
        status_code=exc.status_code,
        code=exc.code,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    error_id = f"err_{int(time.time())}_{hash(str(exc)) % 10000:04d}"

    logger.error(
        "unhandled.exception",
        error_id=error_id,
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "internal_error",
            "message": "Internal server error",
            "details": {"error_id": error_id},
        },
        headers={"X-Error-ID": error_id},
    )


app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(contact.router, prefix=settings.api_prefix, tags=["contact"])

if not settings.is_testing:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Marketing Site API",
        "version": app.version,
        "environment": settings.environment,
        "docs": "/docs" if settings.is_development else None,
        "health": f"{settings.api_prefix}/health",
        "contact": f"{settings.api_prefix}/contact",
    }


logger.info("application.configured", environment=settings.environment)
