"""Analytics Pydantic schemas for the tenant dashboard."""

from typing import Literal
from uuid import UUID

from scanreview.schemas.common import BaseSchema


class MetricValue(BaseSchema):
    """A KPI for the current window and its change versus the previous one."""

    value: float
    change: float  # percent


class RatingCount(BaseSchema):
    rating: int
    count: int


class AnalyticsSummary(BaseSchema):
    """KPI summary for a tenant over ``period_days``."""

    period_days: int
    total_scans: MetricValue
    total_submissions: MetricValue
    average_rating: MetricValue
    google_clickthrough_rate: MetricValue  # 0 - 100
    contact_rate: MetricValue  # 0 - 100
    rating_distribution: list[RatingCount]
    cta_clicks: dict[str, int]


class DailyCount(BaseSchema):
    """Single day count for trend data."""

    date: str  # YYYY-MM-DD
    count: int


class AnalyticsTrend(BaseSchema):
    """Zero-filled daily series for the trend chart."""

    period_days: int
    scans: list[DailyCount]
    submissions: list[DailyCount]


class TenantRanking(BaseSchema):
    """One tenant's activity in the window, for cross-tenant ranking."""

    tenant_id: UUID
    name: str
    submissions: MetricValue
    scans: MetricValue
    average_rating: float
    previous_average_rating: float
    positive_percentage: float  # 0 - 100
    trend: Literal["up", "down", "stable"]  # average rating vs previous window


class TenantBreakdown(BaseSchema):
    """Tenants ranked by submissions weighted by average rating."""

    period_days: int
    total_tenants: int
    active_tenants: int  # tenants with at least one submission in the window
    tenants: list[TenantRanking]
