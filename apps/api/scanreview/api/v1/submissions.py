"""Submission audit endpoints for the tenant dashboard. All require authentication."""

from uuid import UUID

from fastapi import APIRouter

from scanreview.core.deps import CurrentTenant, DBSession
from scanreview.schemas.reviews import (
    CTAClickRecord,
    SubmissionClicksResponse,
    SubmissionResponse,
)
from scanreview.services.attribution_service import AttributionService

router = APIRouter()


@router.get(
    "/{submission_id}/clicks",
    response_model=SubmissionClicksResponse,
    summary="List CTA clicks for a submission",
    description="""
    Every click recorded for the submission, oldest first, next to the
    summary flags and `last_cta` derived from them.

    Submissions of other tenants are reported as not found.
    """,
)
async def list_submission_clicks(
    submission_id: UUID,
    tenant: CurrentTenant,
    db: DBSession,
) -> SubmissionClicksResponse:
    submission, clicks = await AttributionService(db).list_clicks(submission_id, tenant.id)
    return SubmissionClicksResponse(
        submission=SubmissionResponse.model_validate(submission),
        clicks=[
            CTAClickRecord(id=click.id, cta_type=click.cta_type, clicked_at=click.created_at)
            for click in clicks
        ],
    )
