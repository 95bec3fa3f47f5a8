"""Public review submission endpoint."""

from fastapi import APIRouter, Request, status

from scanreview.core.config import settings
from scanreview.core.deps import DBSession
from scanreview.core.exceptions import NotFoundError
from scanreview.core.rate_limit import limiter
from scanreview.core.security import generate_session_id
from scanreview.schemas.reviews import (
    Outcome,
    ReviewCreate,
    ReviewSubmitResponse,
    SubmissionResponse,
)
from scanreview.services.resolver import ResolverService, build_review_url
from scanreview.services.submission_service import SubmissionService

router = APIRouter()


@router.post(
    "",
    response_model=ReviewSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a rating",
    description="""
    Submit a 1-5 rating and an optional comment for a scanned code.

    The response carries the outcome (positive for 4-5, negative otherwise)
    and the CTA menu the page should show. Clicks on those CTAs are tracked
    separately via POST /cta.
    """,
)
@limiter.limit(settings.public_rate_limit)
async def submit_review(
    request: Request,  # noqa: ARG001 - required by slowapi
    payload: ReviewCreate,
    db: DBSession,
) -> ReviewSubmitResponse:
    """Submit a review for the code identified by ``short_code``."""
    code = await ResolverService(db).get_active_code(payload.short_code)
    if code is None:
        raise NotFoundError("Link unavailable")

    place_id = code.tenant.google_place_id
    session_id = payload.session_id or generate_session_id()
    result = await SubmissionService(db).submit(
        code_id=code.id,
        session_id=session_id,
        rating=payload.rating,
        comment=payload.comment,
    )

    return ReviewSubmitResponse(
        submission=SubmissionResponse.model_validate(result.submission),
        outcome=result.outcome,
        cta_options=[cta.value for cta in result.cta_options],
        session_id=session_id,
        review_url=(
            build_review_url(place_id) if result.outcome == Outcome.POSITIVE and place_id else None
        ),
    )
