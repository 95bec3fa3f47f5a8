"""Submission engine: validate a rating, persist it and decide the outcome."""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scanreview.core.config import settings
from scanreview.core.exceptions import NotFoundError, ValidationFailedError
from scanreview.models.cta_click import CTAType
from scanreview.models.issued_code import CodeStatus, IssuedCode
from scanreview.models.review_submission import LastCTA, ReviewSubmission
from scanreview.models.scan_event import ScanEvent
from scanreview.models.tenant import Tenant
from scanreview.schemas.reviews import Outcome

logger = logging.getLogger(__name__)


def decide_outcome(rating: int) -> Outcome:
    """The single branch point: high ratings go to the public review platform."""
    return Outcome.POSITIVE if rating >= settings.positive_rating_threshold else Outcome.NEGATIVE


def cta_options(outcome: Outcome, tenant: Tenant) -> list[CTAType]:
    """CTA menu for an outcome, limited to what the tenant has configured."""
    if outcome == Outcome.POSITIVE:
        if not tenant.google_place_id:
            return []
        return [CTAType.GOOGLE_COPY, CTAType.GOOGLE_DIRECT]

    options = []
    if tenant.contact_email:
        options.append(CTAType.CONTACT_EMAIL)
    if tenant.contact_phone:
        options.append(CTAType.CONTACT_PHONE)
    return options


def validate_rating(rating: object) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationFailedError("Invalid rating", ["rating must be an integer"])
    if not 1 <= rating <= 5:
        raise ValidationFailedError("Invalid rating", ["rating must be between 1 and 5"])
    return rating


def normalize_comment(comment: str | None) -> str | None:
    if comment is None:
        return None
    comment = comment.strip()
    if not comment:
        return None
    if len(comment) > settings.comment_max_length:
        raise ValidationFailedError(
            "Invalid comment",
            [f"comment must be at most {settings.comment_max_length} characters"],
        )
    return comment


@dataclass
class SubmissionResult:
    submission: ReviewSubmission
    outcome: Outcome
    cta_options: list[CTAType]


class SubmissionService:
    """Creates ReviewSubmission rows. Never fires CTA clicks itself."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def submit(
        self,
        code_id: UUID,
        session_id: str | None,
        rating: int,
        comment: str | None = None,
    ) -> SubmissionResult:
        """Validate and persist a submission, then return the branch decision.

        The scan is linked when the session has one recorded for this code;
        otherwise ``scan_id`` stays ``None``.

        Raises:
            ValidationFailedError: Rating outside 1-5, non-integer rating, comment too long.
            NotFoundError: Unknown or archived code.
        """
        rating = validate_rating(rating)
        comment = normalize_comment(comment)

        code = (
            await self.db.execute(
                select(IssuedCode)
                .options(selectinload(IssuedCode.tenant))
                .where(IssuedCode.id == code_id, IssuedCode.status == CodeStatus.ACTIVE)
            )
        ).scalar_one_or_none()
        if not code:
            raise NotFoundError("Code not found")

        scan_id = await self.find_scan_id(code.id, session_id) if session_id else None
        outcome = decide_outcome(rating)

        submission = ReviewSubmission(
            code_id=code.id,
            tenant_id=code.tenant_id,
            scan_id=scan_id,
            rating=rating,
            comment=comment,
            google_clicked=False,
            contact_clicked=False,
            last_cta=LastCTA.NONE,
        )
        self.db.add(submission)
        await self.db.commit()

        logger.info(
            "Submission created: id=%s code=%s rating=%d outcome=%s linked_scan=%s",
            submission.id,
            code.short_code,
            rating,
            outcome.value,
            scan_id is not None,
        )

        return SubmissionResult(
            submission=submission,
            outcome=outcome,
            cta_options=cta_options(outcome, code.tenant),
        )

    async def find_scan_id(self, code_id: UUID, session_id: str) -> UUID | None:
        """Most recent scan of ``code_id`` in ``session_id``, if any."""
        stmt = (
            select(ScanEvent.id)
            .where(ScanEvent.code_id == code_id, ScanEvent.session_id == session_id)
            .order_by(ScanEvent.created_at.desc())
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()
