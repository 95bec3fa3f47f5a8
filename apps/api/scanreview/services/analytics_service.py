"""Read-only aggregates over scans, submissions and CTA clicks."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Literal
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.core.config import settings
from scanreview.models.cta_click import CTAClick, CTAType
from scanreview.models.review_submission import ReviewSubmission
from scanreview.models.scan_event import ScanEvent
from scanreview.models.tenant import Tenant
from scanreview.schemas.analytics import (
    AnalyticsSummary,
    AnalyticsTrend,
    DailyCount,
    MetricValue,
    RatingCount,
    TenantBreakdown,
    TenantRanking,
)

logger = logging.getLogger(__name__)


def percentage_change(current: float, previous: float) -> float:
    """Percent change from ``previous`` to ``current``.

    A zero baseline gives 100 when there is any current activity, else 0.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round(((current - previous) / previous) * 100, 1)


@dataclass
class _SubmissionStats:
    total: int
    avg_rating: float
    google_rate: float
    contact_rate: float


@dataclass
class _TenantSubmissions:
    total: int
    avg_rating: float
    positive: int


class ReviewAnalyticsService:
    """Dashboard aggregates, per tenant and across tenants."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_summary(self, tenant_id: UUID, days: int = 30) -> AnalyticsSummary:
        """KPIs for the last ``days`` days compared with the ``days`` before."""
        now = datetime.now(UTC)
        start = now - timedelta(days=days)
        previous_start = start - timedelta(days=days)

        scans = await self._count_scans(tenant_id, start, None)
        previous_scans = await self._count_scans(tenant_id, previous_start, start)
        current = await self._submission_stats(tenant_id, start, None)
        previous = await self._submission_stats(tenant_id, previous_start, start)

        return AnalyticsSummary(
            period_days=days,
            total_scans=MetricValue(value=scans, change=percentage_change(scans, previous_scans)),
            total_submissions=MetricValue(
                value=current.total,
                change=percentage_change(current.total, previous.total),
            ),
            average_rating=MetricValue(
                value=round(current.avg_rating, 1),
                change=percentage_change(current.avg_rating, previous.avg_rating),
            ),
            google_clickthrough_rate=MetricValue(
                value=round(current.google_rate, 1),
                change=percentage_change(current.google_rate, previous.google_rate),
            ),
            contact_rate=MetricValue(
                value=round(current.contact_rate, 1),
                change=percentage_change(current.contact_rate, previous.contact_rate),
            ),
            rating_distribution=await self._rating_distribution(tenant_id, start),
            cta_clicks=await self._cta_click_counts(tenant_id, start),
        )

    async def get_trend(self, tenant_id: UUID, days: int = 30) -> AnalyticsTrend:
        """Daily scan and submission counts, one entry per day including today."""
        today = datetime.now(UTC).date()
        first_day = today - timedelta(days=days - 1)
        since = datetime.combine(first_day, time.min, tzinfo=UTC)
        day_keys = [str(first_day + timedelta(days=i)) for i in range(days)]

        scans = await self._daily_counts(ScanEvent, tenant_id, since)
        submissions = await self._daily_counts(ReviewSubmission, tenant_id, since)

        return AnalyticsTrend(
            period_days=days,
            scans=[DailyCount(date=day, count=scans.get(day, 0)) for day in day_keys],
            submissions=[DailyCount(date=day, count=submissions.get(day, 0)) for day in day_keys],
        )

    async def get_tenant_breakdown(self, days: int = 30, limit: int = 5) -> TenantBreakdown:
        """Rank active tenants by activity over the last ``days`` days.

        Each tenant is scored by ``submissions * average rating`` in the
        current window (ties broken by name). Submissions and scans carry
        their change versus the preceding window of equal length.

        Not scoped to a tenant: callers are platform operators.
        """
        now = datetime.now(UTC)
        start = now - timedelta(days=days)
        previous_start = start - timedelta(days=days)

        tenants = (
            await self.db.execute(select(Tenant).where(Tenant.is_active.is_(True)))
        ).scalars().all()
        current = await self._submissions_by_tenant(start, None)
        previous = await self._submissions_by_tenant(previous_start, start)
        scans = await self._scans_by_tenant(start, None)
        previous_scans = await self._scans_by_tenant(previous_start, start)

        empty = _TenantSubmissions(total=0, avg_rating=0.0, positive=0)
        rankings: list[tuple[float, TenantRanking]] = []
        for tenant in tenants:
            now_stats = current.get(tenant.id, empty)
            before = previous.get(tenant.id, empty)
            avg_rating = round(now_stats.avg_rating, 1)
            previous_avg = round(before.avg_rating, 1)
            ranking = TenantRanking(
                tenant_id=tenant.id,
                name=tenant.name,
                submissions=MetricValue(
                    value=now_stats.total,
                    change=percentage_change(now_stats.total, before.total),
                ),
                scans=MetricValue(
                    value=scans.get(tenant.id, 0),
                    change=percentage_change(
                        scans.get(tenant.id, 0), previous_scans.get(tenant.id, 0)
                    ),
                ),
                average_rating=avg_rating,
                previous_average_rating=previous_avg,
                positive_percentage=(
                    round(now_stats.positive / now_stats.total * 100, 1)
                    if now_stats.total > 0
                    else 0.0
                ),
                trend=_trend(avg_rating, previous_avg),
            )
            rankings.append((now_stats.total * now_stats.avg_rating, ranking))

        rankings.sort(key=lambda item: (-item[0], item[1].name))
        logger.info("Tenant breakdown: %d tenants over %d days", len(tenants), days)

        return TenantBreakdown(
            period_days=days,
            total_tenants=len(tenants),
            active_tenants=sum(1 for tenant in tenants if tenant.id in current),
            tenants=[ranking for _, ranking in rankings[:limit]],
        )

    async def _count_scans(
        self, tenant_id: UUID, since: datetime, until: datetime | None
    ) -> int:
        stmt = select(func.count()).select_from(ScanEvent).where(
            ScanEvent.tenant_id == tenant_id,
            ScanEvent.created_at >= since,
        )
        if until is not None:
            stmt = stmt.where(ScanEvent.created_at < until)
        return (await self.db.execute(stmt)).scalar() or 0

    async def _submission_stats(
        self, tenant_id: UUID, since: datetime, until: datetime | None
    ) -> _SubmissionStats:
        stmt = select(
            func.count().label("total"),
            func.avg(ReviewSubmission.rating).label("avg_rating"),
            func.count(case((ReviewSubmission.google_clicked.is_(True), 1), else_=None)).label(
                "google"
            ),
            func.count(case((ReviewSubmission.contact_clicked.is_(True), 1), else_=None)).label(
                "contact"
            ),
        ).where(
            ReviewSubmission.tenant_id == tenant_id,
            ReviewSubmission.created_at >= since,
        )
        if until is not None:
            stmt = stmt.where(ReviewSubmission.created_at < until)

        row = (await self.db.execute(stmt)).one()
        total = row.total or 0
        return _SubmissionStats(
            total=total,
            avg_rating=float(row.avg_rating or 0),
            google_rate=(row.google or 0) / total * 100 if total > 0 else 0.0,
            contact_rate=(row.contact or 0) / total * 100 if total > 0 else 0.0,
        )

    async def _submissions_by_tenant(
        self, since: datetime, until: datetime | None
    ) -> dict[UUID, _TenantSubmissions]:
        stmt = (
            select(
                ReviewSubmission.tenant_id,
                func.count().label("total"),
                func.avg(ReviewSubmission.rating).label("avg_rating"),
                func.count(
                    case(
                        (ReviewSubmission.rating >= settings.positive_rating_threshold, 1),
                        else_=None,
                    )
                ).label("positive"),
            )
            .where(ReviewSubmission.created_at >= since)
            .group_by(ReviewSubmission.tenant_id)
        )
        if until is not None:
            stmt = stmt.where(ReviewSubmission.created_at < until)

        return {
            row.tenant_id: _TenantSubmissions(
                total=row.total,
                avg_rating=float(row.avg_rating or 0),
                positive=row.positive or 0,
            )
            for row in (await self.db.execute(stmt)).all()
        }

    async def _scans_by_tenant(self, since: datetime, until: datetime | None) -> dict[UUID, int]:
        stmt = (
            select(ScanEvent.tenant_id, func.count().label("count"))
            .where(ScanEvent.created_at >= since)
            .group_by(ScanEvent.tenant_id)
        )
        if until is not None:
            stmt = stmt.where(ScanEvent.created_at < until)
        return {row.tenant_id: row.count for row in (await self.db.execute(stmt)).all()}

    async def _rating_distribution(self, tenant_id: UUID, since: datetime) -> list[RatingCount]:
        stmt = (
            select(ReviewSubmission.rating, func.count().label("count"))
            .where(
                ReviewSubmission.tenant_id == tenant_id,
                ReviewSubmission.created_at >= since,
            )
            .group_by(ReviewSubmission.rating)
        )
        counts = {row.rating: row.count for row in (await self.db.execute(stmt)).all()}
        return [RatingCount(rating=r, count=counts.get(r, 0)) for r in range(1, 6)]

    async def _cta_click_counts(self, tenant_id: UUID, since: datetime) -> dict[str, int]:
        stmt = (
            select(CTAClick.cta_type, func.count().label("count"))
            .join(ReviewSubmission, ReviewSubmission.id == CTAClick.submission_id)
            .where(
                ReviewSubmission.tenant_id == tenant_id,
                CTAClick.created_at >= since,
            )
            .group_by(CTAClick.cta_type)
        )
        counts = {row.cta_type: row.count for row in (await self.db.execute(stmt)).all()}
        return {t.value: counts.get(t, 0) for t in CTAType}

    async def _daily_counts(self, model: Any, tenant_id: UUID, since: datetime) -> dict[str, int]:
        day = func.date(model.created_at).label("day")
        stmt = (
            select(day, func.count().label("count"))
            .where(model.tenant_id == tenant_id, model.created_at >= since)
            .group_by(day)
            .order_by(day)
        )
        rows = (await self.db.execute(stmt)).all()
        return {_day_key(row.day): row.count for row in rows}


def _trend(current: float, previous: float) -> Literal["up", "down", "stable"]:
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "stable"


def _day_key(value: date | str) -> str:
    # Postgres returns a date, SQLite a 'YYYY-MM-DD' string
    return value.isoformat() if isinstance(value, date) else str(value)
