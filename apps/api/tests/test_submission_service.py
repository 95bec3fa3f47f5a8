"""Tests for the submission engine: rating validation, outcome, CTA menu, scan linking."""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.core.exceptions import NotFoundError, ValidationFailedError
from scanreview.models.cta_click import CTAType
from scanreview.models.issued_code import IssuedCode
from scanreview.models.review_submission import LastCTA
from scanreview.models.tenant import Tenant
from scanreview.schemas.reviews import Outcome
from scanreview.services.submission_service import (
    SubmissionService,
    cta_options,
    decide_outcome,
    normalize_comment,
    validate_rating,
)


class TestDecideOutcome:
    @pytest.mark.parametrize(
        ("rating", "expected"),
        [
            (1, Outcome.NEGATIVE),
            (2, Outcome.NEGATIVE),
            (3, Outcome.NEGATIVE),
            (4, Outcome.POSITIVE),
            (5, Outcome.POSITIVE),
        ],
    )
    def test_threshold(self, rating: int, expected: Outcome) -> None:
        assert decide_outcome(rating) == expected


class TestValidateRating:
    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_out_of_range(self, rating: int) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_rating(rating)
        assert exc_info.value.details == ["rating must be between 1 and 5"]

    @pytest.mark.parametrize("rating", [4.0, "4", True, None])
    def test_not_an_integer(self, rating: object) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_rating(rating)
        assert exc_info.value.details == ["rating must be an integer"]


class TestNormalizeComment:
    def test_blank_comment_becomes_none(self) -> None:
        assert normalize_comment("   ") is None
        assert normalize_comment(None) is None

    def test_strips_whitespace(self) -> None:
        assert normalize_comment("  great  ") == "great"

    def test_too_long(self) -> None:
        with pytest.raises(ValidationFailedError):
            normalize_comment("x" * 501)


class TestCTAOptions:
    async def test_positive_offers_review_platform(self, tenant: Tenant) -> None:
        assert cta_options(Outcome.POSITIVE, tenant) == [
            CTAType.GOOGLE_COPY,
            CTAType.GOOGLE_DIRECT,
        ]

    async def test_negative_offers_configured_contacts(self, tenant: Tenant) -> None:
        assert cta_options(Outcome.NEGATIVE, tenant) == [
            CTAType.CONTACT_EMAIL,
            CTAType.CONTACT_PHONE,
        ]

    async def test_nothing_configured(self, other_tenant: Tenant) -> None:
        assert cta_options(Outcome.POSITIVE, other_tenant) == []
        assert cta_options(Outcome.NEGATIVE, other_tenant) == []


class TestSubmit:
    async def test_positive_submission(
        self, db_session: AsyncSession, active_code: IssuedCode
    ) -> None:
        result = await SubmissionService(db_session).submit(
            code_id=active_code.id,
            session_id="s-1",
            rating=5,
            comment="Lovely",
        )

        submission = result.submission
        assert result.outcome == Outcome.POSITIVE
        assert CTAType.GOOGLE_DIRECT in result.cta_options
        assert submission.rating == 5
        assert submission.comment == "Lovely"
        assert submission.tenant_id == active_code.tenant_id
        assert submission.google_clicked is False
        assert submission.contact_clicked is False
        assert submission.last_cta == LastCTA.NONE
        assert submission.scan_id is None

    async def test_negative_submission(
        self, db_session: AsyncSession, active_code: IssuedCode
    ) -> None:
        result = await SubmissionService(db_session).submit(
            code_id=active_code.id, session_id=None, rating=2
        )
        assert result.outcome == Outcome.NEGATIVE
        assert result.cta_options == [CTAType.CONTACT_EMAIL, CTAType.CONTACT_PHONE]
        assert result.submission.comment is None

    async def test_links_most_recent_scan_of_session(
        self,
        db_session: AsyncSession,
        active_code: IssuedCode,
        scan_factory: Callable[..., Any],
    ) -> None:
        now = datetime.now(UTC)
        await scan_factory(code=active_code, session_id="s-1", created_at=now - timedelta(minutes=5))
        latest = await scan_factory(code=active_code, session_id="s-1", created_at=now)
        await scan_factory(code=active_code, session_id="someone-else")

        result = await SubmissionService(db_session).submit(
            code_id=active_code.id, session_id="s-1", rating=4
        )
        assert result.submission.scan_id == latest.id

    async def test_scan_of_other_code_is_not_linked(
        self,
        db_session: AsyncSession,
        tenant: Tenant,
        active_code: IssuedCode,
        code_factory: Callable[..., Any],
        scan_factory: Callable[..., Any],
    ) -> None:
        other_code = await code_factory(tenant_id=tenant.id, label="Table 02")
        await scan_factory(code=other_code, session_id="s-1")

        result = await SubmissionService(db_session).submit(
            code_id=active_code.id, session_id="s-1", rating=4
        )
        assert result.submission.scan_id is None

    @pytest.mark.parametrize("rating", [0, 6])
    async def test_invalid_rating_writes_nothing(
        self, db_session: AsyncSession, active_code: IssuedCode, rating: int
    ) -> None:
        with pytest.raises(ValidationFailedError):
            await SubmissionService(db_session).submit(
                code_id=active_code.id, session_id="s", rating=rating
            )

    async def test_archived_code_is_rejected(
        self, db_session: AsyncSession, archived_code: IssuedCode
    ) -> None:
        with pytest.raises(NotFoundError):
            await SubmissionService(db_session).submit(
                code_id=archived_code.id, session_id="s", rating=5
            )

    async def test_unknown_code_is_rejected(self, db_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await SubmissionService(db_session).submit(
                code_id=uuid.uuid4(), session_id="s", rating=5
            )
