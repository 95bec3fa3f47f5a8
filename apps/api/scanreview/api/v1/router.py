"""API v1 router combining all route modules."""

from typing import Any

from fastapi import APIRouter

from scanreview.api.v1 import analytics, codes, cta, health, public, reviews, submissions
from scanreview.schemas.common import ErrorResponse

# Bodies produced by the domain exception handlers in scanreview.main
PUBLIC_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    404: {"model": ErrorResponse, "description": "Link unavailable"},
    503: {"model": ErrorResponse, "description": "Store temporarily unavailable"},
}
TENANT_ERRORS: dict[int | str, dict[str, Any]] = {
    **PUBLIC_ERRORS,
    404: {"model": ErrorResponse, "description": "Not found for this tenant"},
    409: {"model": ErrorResponse, "description": "Short code allocation exhausted"},
}

api_router = APIRouter()

# Include health check routes (no prefix)
api_router.include_router(health.router)

# Public review page (no auth, rate limited per IP)
api_router.include_router(
    public.router,
    prefix="/r",
    tags=["public"],
    responses=PUBLIC_ERRORS,
)

api_router.include_router(
    reviews.router,
    prefix="/reviews",
    tags=["public"],
    responses=PUBLIC_ERRORS,
)

# CTA click tracking (fire-and-forget from the review page)
api_router.include_router(
    cta.router,
    prefix="/cta",
    tags=["public"],
    responses=PUBLIC_ERRORS,
)

# Code registry (requires auth)
api_router.include_router(
    codes.router,
    prefix="/codes",
    tags=["codes"],
    responses=TENANT_ERRORS,
)

# Click audit trail (requires auth)
api_router.include_router(
    submissions.router,
    prefix="/submissions",
    tags=["submissions"],
    responses=TENANT_ERRORS,
)

# Review analytics dashboard (requires auth)
api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["analytics"],
)
