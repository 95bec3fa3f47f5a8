"""Tests for the public review flow endpoints.

Walks the path a customer takes: resolve the scanned code, record the scan,
submit a rating and click a CTA. No authentication is involved.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import patch

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.models.issued_code import IssuedCode
from scanreview.models.review_submission import ReviewSubmission
from scanreview.models.scan_event import ScanEvent
from scanreview.models.tenant import Tenant

NOT_FOUND_BODY = {"error": "Link unavailable"}


# ---------------------------------------------------------------------------
# GET /r/{short_code}
# ---------------------------------------------------------------------------


class TestResolveRoute:
    async def test_resolves_active_code(
        self, unauthed_client: AsyncClient, tenant: Tenant, active_code: IssuedCode
    ) -> None:
        response = await unauthed_client.get(f"/api/v1/r/{active_code.short_code}")

        assert response.status_code == 200
        data = response.json()
        assert data["code"]["id"] == str(active_code.id)
        assert data["code"]["label"] == active_code.label
        assert data["branding"]["name"] == tenant.name
        assert data["branding"]["review_url"].startswith(
            "https://search.google.com/local/writereview"
        )

    async def test_unknown_and_archived_are_indistinguishable(
        self, unauthed_client: AsyncClient, archived_code: IssuedCode
    ) -> None:
        unknown = await unauthed_client.get("/api/v1/r/ZZZZZZZZ")
        archived = await unauthed_client.get(f"/api/v1/r/{archived_code.short_code}")

        assert unknown.status_code == archived.status_code == 404
        assert unknown.json() == archived.json() == NOT_FOUND_BODY

    async def test_resolve_does_not_record_scan(
        self,
        unauthed_client: AsyncClient,
        db_session: AsyncSession,
        active_code: IssuedCode,
    ) -> None:
        await unauthed_client.get(f"/api/v1/r/{active_code.short_code}")
        await unauthed_client.get(f"/api/v1/r/{active_code.short_code}")

        scans = (await db_session.execute(select(func.count()).select_from(ScanEvent))).scalar()
        assert scans == 0

    async def test_database_outage_returns_503(
        self, unauthed_client: AsyncClient, active_code: IssuedCode
    ) -> None:
        with patch(
            "scanreview.api.v1.public.ResolverService.resolve",
            side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")),
        ):
            response = await unauthed_client.get(f"/api/v1/r/{active_code.short_code}")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"


# ---------------------------------------------------------------------------
# POST /r/{short_code}/scans
# ---------------------------------------------------------------------------


class TestScanRoute:
    async def test_records_scan_with_given_session(
        self,
        unauthed_client: AsyncClient,
        db_session: AsyncSession,
        active_code: IssuedCode,
    ) -> None:
        response = await unauthed_client.post(
            f"/api/v1/r/{active_code.short_code}/scans",
            json={"session_id": "browser-session-1"},
            headers={"X-Forwarded-For": "198.51.100.23, 10.0.0.1"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["session_id"] == "browser-session-1"

        scan = (await db_session.execute(select(ScanEvent))).scalar_one()
        assert str(scan.id) == data["scan_id"]
        assert scan.user_agent == "pytest-browser/1.0"
        assert "198.51.100.23" not in scan.ip_fingerprint

    async def test_generates_session_when_missing(
        self, unauthed_client: AsyncClient, active_code: IssuedCode
    ) -> None:
        response = await unauthed_client.post(
            f"/api/v1/r/{active_code.short_code}/scans", json={}
        )
        assert response.status_code == 201
        assert len(response.json()["session_id"]) == 32

    async def test_archived_code_is_not_recorded(
        self, unauthed_client: AsyncClient, archived_code: IssuedCode
    ) -> None:
        response = await unauthed_client.post(
            f"/api/v1/r/{archived_code.short_code}/scans", json={}
        )
        assert response.status_code == 404
        assert response.json() == NOT_FOUND_BODY


# ---------------------------------------------------------------------------
# POST /reviews
# ---------------------------------------------------------------------------


class TestReviewRoute:
    async def test_positive_review_after_scan(
        self, unauthed_client: AsyncClient, active_code: IssuedCode
    ) -> None:
        scan = await unauthed_client.post(
            f"/api/v1/r/{active_code.short_code}/scans", json={"session_id": "s-42"}
        )
        response = await unauthed_client.post(
            "/api/v1/reviews",
            json={
                "short_code": active_code.short_code,
                "session_id": "s-42",
                "rating": 5,
                "comment": "Wonderful",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["outcome"] == "positive"
        assert data["cta_options"] == ["google_copy", "google_direct"]
        assert data["session_id"] == "s-42"
        assert data["review_url"].endswith("placeid=ChIJN1t_tDeuEmsRUsoyG83frY4")
        assert data["submission"]["scan_id"] == scan.json()["scan_id"]
        assert data["submission"]["google_clicked"] is False
        assert data["submission"]["last_cta"] == "none"

    async def test_negative_review(
        self, unauthed_client: AsyncClient, active_code: IssuedCode
    ) -> None:
        response = await unauthed_client.post(
            "/api/v1/reviews",
            json={"short_code": active_code.short_code, "rating": 3},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["outcome"] == "negative"
        assert data["cta_options"] == ["contact_email", "contact_phone"]
        assert data["review_url"] is None
        assert data["submission"]["scan_id"] is None

    async def test_out_of_range_rating_returns_400_with_details(
        self,
        unauthed_client: AsyncClient,
        db_session: AsyncSession,
        active_code: IssuedCode,
    ) -> None:
        response = await unauthed_client.post(
            "/api/v1/reviews",
            json={"short_code": active_code.short_code, "rating": 6},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid rating",
            "details": ["rating must be between 1 and 5"],
        }
        count = (
            await db_session.execute(select(func.count()).select_from(ReviewSubmission))
        ).scalar()
        assert count == 0

    async def test_non_integer_rating_is_rejected(
        self, unauthed_client: AsyncClient, active_code: IssuedCode
    ) -> None:
        response = await unauthed_client.post(
            "/api/v1/reviews",
            json={"short_code": active_code.short_code, "rating": "5"},
        )
        assert response.status_code == 422

    async def test_archived_code(
        self, unauthed_client: AsyncClient, archived_code: IssuedCode
    ) -> None:
        response = await unauthed_client.post(
            "/api/v1/reviews",
            json={"short_code": archived_code.short_code, "rating": 5},
        )
        assert response.status_code == 404
        assert response.json() == NOT_FOUND_BODY


# ---------------------------------------------------------------------------
# POST /cta
# ---------------------------------------------------------------------------


class TestCTARoute:
    async def test_click_updates_submission(
        self,
        unauthed_client: AsyncClient,
        active_code: IssuedCode,
        submission_factory: Callable[..., Any],
    ) -> None:
        submission = await submission_factory(code=active_code, rating=5)

        first = await unauthed_client.post(
            "/api/v1/cta",
            json={"submission_id": str(submission.id), "cta_type": "google_copy"},
        )
        second = await unauthed_client.post(
            "/api/v1/cta",
            json={"submission_id": str(submission.id), "cta_type": "google_direct"},
        )

        assert first.status_code == 201
        assert second.status_code == 201
        data = second.json()
        assert data["cta_type"] == "google_direct"
        assert data["submission"]["google_clicked"] is True
        assert data["submission"]["contact_clicked"] is False
        assert data["submission"]["last_cta"] == "google_direct"
        assert first.json()["cta_click_id"] != data["cta_click_id"]

    async def test_unknown_cta_type(
        self,
        unauthed_client: AsyncClient,
        active_code: IssuedCode,
        submission_factory: Callable[..., Any],
    ) -> None:
        submission = await submission_factory(code=active_code)
        response = await unauthed_client.post(
            "/api/v1/cta",
            json={"submission_id": str(submission.id), "cta_type": "fax"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid CTA type"

    async def test_unknown_submission(self, unauthed_client: AsyncClient) -> None:
        response = await unauthed_client.post(
            "/api/v1/cta",
            json={
                "submission_id": "00000000-0000-0000-0000-000000000000",
                "cta_type": "contact_email",
            },
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Submission not found"}
