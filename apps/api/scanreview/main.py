"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import InterfaceError, OperationalError

from scanreview.api.v1.router import api_router
from scanreview.core.config import settings
from scanreview.core.exceptions import (
    NotFoundError,
    ScanReviewError,
    ShortCodeCollisionError,
    ValidationFailedError,
)
from scanreview.core.logging_config import (
    generate_request_id,
    request_id_var,
    setup_logging,
)
from scanreview.core.rate_limit import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging(debug=settings.debug)
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    logger.info("Environment: %s", settings.environment)
    logger.info("Public review base URL: %s", settings.public_base_url)
    yield
    logger.info("Shutting down...")


def _error_status(exc: ScanReviewError) -> int:
    if isinstance(exc, ValidationFailedError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ShortCodeCollisionError):
        return 409
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain and storage errors into JSON responses."""

    @app.exception_handler(ScanReviewError)
    async def domain_exception_handler(_request: Request, exc: ScanReviewError) -> JSONResponse:
        status_code = _error_status(exc)
        content: dict[str, Any] = {"error": exc.message}
        if isinstance(exc, ValidationFailedError):
            content["details"] = exc.details
        if status_code >= 500:
            logger.error("Unmapped domain error: %s", exc.message)
        elif status_code == 409:
            logger.warning("Batch rejected: %s", exc.message)
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def database_unavailable_handler(_request: Request, exc: Exception) -> JSONResponse:
        logger.error("Database unavailable: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"error": "Service temporarily unavailable"},
            headers={"Retry-After": "5"},
        )

    # Global exception handler to ensure CORS headers are present on 500 errors
    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Handle unhandled exceptions with proper JSON response."""
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Sentry/GlitchTip init (before middleware)
    if settings.sentry_dsn:
        import sentry_sdk

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_middleware(SlowAPIMiddleware)

    # Dashboard origins are listed explicitly. The review page is served from
    # printed-code URLs on the public base URL, which is included in allowed_origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Response:
        rid = request.headers.get("X-Request-ID") or generate_request_id()
        request_id_var.set(rid)
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    register_exception_handlers(app)

    # Redirect /docs to versioned docs URL
    @app.get("/docs", include_in_schema=False)
    async def docs_redirect() -> RedirectResponse:
        return RedirectResponse(url=f"{settings.api_v1_prefix}/docs")

    # Root endpoint
    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": f"{settings.api_v1_prefix}/docs",
            "health": f"{settings.api_v1_prefix}/health",
        }

    return app


app = create_app()
