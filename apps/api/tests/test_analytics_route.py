"""Tests for the review analytics endpoints."""

from collections.abc import Callable
from typing import Any

from httpx import AsyncClient

from scanreview.models.issued_code import IssuedCode


class TestAnalyticsSummary:
    async def test_summary(
        self,
        client: AsyncClient,
        active_code: IssuedCode,
        scan_factory: Callable[..., Any],
        submission_factory: Callable[..., Any],
    ) -> None:
        await scan_factory(code=active_code)
        await submission_factory(code=active_code, rating=5, google_clicked=True)

        response = await client.get("/api/v1/analytics/summary", params={"days": 7})

        assert response.status_code == 200
        data = response.json()
        assert data["period_days"] == 7
        assert data["total_scans"] == {"value": 1, "change": 100.0}
        assert data["total_submissions"]["value"] == 1
        assert data["google_clickthrough_rate"]["value"] == 100.0
        assert len(data["rating_distribution"]) == 5

    async def test_days_out_of_range(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/analytics/summary", params={"days": 0})
        assert response.status_code == 422

    async def test_requires_auth(self, unauthed_client: AsyncClient) -> None:
        response = await unauthed_client.get("/api/v1/analytics/summary")
        assert response.status_code == 401


class TestAnalyticsTrend:
    async def test_trend(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/analytics/trend", params={"days": 14})

        assert response.status_code == 200
        data = response.json()
        assert len(data["scans"]) == 14
        assert len(data["submissions"]) == 14
        assert all(day["count"] == 0 for day in data["scans"])
