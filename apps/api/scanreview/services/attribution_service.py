"""Attribution ledger: record CTA clicks and update the submission summary."""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.core.exceptions import NotFoundError, ValidationFailedError
from scanreview.models.base import utcnow
from scanreview.models.cta_click import CTAClick, CTAType
from scanreview.models.review_submission import LastCTA, ReviewSubmission

logger = logging.getLogger(__name__)

GOOGLE_CTAS = frozenset({CTAType.GOOGLE_COPY, CTAType.GOOGLE_DIRECT})
CONTACT_CTAS = frozenset({CTAType.CONTACT_EMAIL, CTAType.CONTACT_PHONE})


def parse_cta_type(value: CTAType | str) -> CTAType:
    try:
        return CTAType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in CTAType)
        raise ValidationFailedError(
            "Invalid CTA type", [f"cta_type must be one of: {allowed}"]
        ) from None


def cta_category(cta_type: CTAType) -> LastCTA:
    """Collapse a click type to the ``last_cta`` category. Email and phone are both ``contact``."""
    if cta_type in CONTACT_CTAS:
        return LastCTA.CONTACT
    return LastCTA(cta_type.value)


@dataclass
class AttributionResult:
    click: CTAClick
    submission: ReviewSubmission


class AttributionService:
    """Appends to ``cta_clicks`` and keeps the submission summary in step.

    ``last_cta`` is overwritten by every click (most recent wins); the full
    history stays in ``cta_clicks``.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def record_click(self, submission_id: UUID, cta_type: CTAType | str) -> AttributionResult:
        """Record one click.

        The summary update and the click insert share one transaction. The
        update is a single UPDATE statement that only ever sets flags to
        true, so concurrent clicks on the same submission serialize on the
        row lock and cannot lose a flag.

        Raises:
            ValidationFailedError: Unknown CTA type.
            NotFoundError: Unknown submission.
        """
        cta = parse_cta_type(cta_type)

        values: dict[str, object] = {"last_cta": cta_category(cta), "updated_at": utcnow()}
        if cta in GOOGLE_CTAS:
            values["google_clicked"] = True
        if cta in CONTACT_CTAS:
            values["contact_clicked"] = True

        try:
            updated = (
                await self.db.execute(
                    update(ReviewSubmission)
                    .where(ReviewSubmission.id == submission_id)
                    .values(**values)
                    .returning(ReviewSubmission.id)
                    .execution_options(synchronize_session=False)
                )
            ).scalar_one_or_none()
            if updated is None:
                raise NotFoundError("Submission not found")

            click = CTAClick(submission_id=submission_id, cta_type=cta)
            self.db.add(click)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        submission = (
            await self.db.execute(
                select(ReviewSubmission)
                .where(ReviewSubmission.id == submission_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()

        logger.info(
            "CTA click recorded: submission=%s cta=%s google=%s contact=%s",
            submission_id,
            cta.value,
            submission.google_clicked,
            submission.contact_clicked,
        )
        return AttributionResult(click=click, submission=submission)

    async def list_clicks(
        self, submission_id: UUID, tenant_id: UUID
    ) -> tuple[ReviewSubmission, list[CTAClick]]:
        """Audit trail for one of the tenant's submissions, oldest first.

        Raises:
            NotFoundError: Unknown submission, or one owned by another tenant.
        """
        submission = (
            await self.db.execute(
                select(ReviewSubmission).where(
                    ReviewSubmission.id == submission_id,
                    ReviewSubmission.tenant_id == tenant_id,
                )
            )
        ).scalar_one_or_none()
        if not submission:
            raise NotFoundError("Submission not found")

        stmt = (
            select(CTAClick)
            .where(CTAClick.submission_id == submission_id)
            .order_by(CTAClick.created_at)
        )
        return submission, list((await self.db.execute(stmt)).scalars().all())
