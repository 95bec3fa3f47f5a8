"""Review analytics endpoints for the dashboard."""

from fastapi import APIRouter, Query

from scanreview.core.deps import CurrentTenant, DBSession
from scanreview.schemas.analytics import AnalyticsSummary, AnalyticsTrend
from scanreview.services.analytics_service import ReviewAnalyticsService

router = APIRouter()


@router.get("/summary", response_model=AnalyticsSummary)
async def analytics_summary(
    tenant: CurrentTenant,
    db: DBSession,
    days: int = Query(30, ge=1, le=365),
) -> AnalyticsSummary:
    """Get KPI summary statistics. Requires authentication."""
    service = ReviewAnalyticsService(db)
    return await service.get_summary(tenant.id, days)


@router.get("/trend", response_model=AnalyticsTrend)
async def analytics_trend(
    tenant: CurrentTenant,
    db: DBSession,
    days: int = Query(30, ge=1, le=365),
) -> AnalyticsTrend:
    """Get daily scan and submission counts for the trend chart. Requires authentication."""
    service = ReviewAnalyticsService(db)
    return await service.get_trend(tenant.id, days)
