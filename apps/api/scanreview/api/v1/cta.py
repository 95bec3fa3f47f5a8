"""Public CTA click tracking endpoint.

The review page calls this fire-and-forget after showing the outcome; the
page ignores failures so tracking can never block the user.
"""

from fastapi import APIRouter, Request, status

from scanreview.core.config import settings
from scanreview.core.deps import DBSession
from scanreview.core.rate_limit import limiter
from scanreview.schemas.reviews import CTAClickCreate, CTAClickResponse, SubmissionResponse
from scanreview.services.attribution_service import AttributionService

router = APIRouter()


@router.post(
    "",
    response_model=CTAClickResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Track a CTA click",
)
@limiter.limit(settings.public_rate_limit)
async def track_cta_click(
    request: Request,  # noqa: ARG001 - required by slowapi
    payload: CTAClickCreate,
    db: DBSession,
) -> CTAClickResponse:
    """Append a click to the audit trail and update the submission summary."""
    result = await AttributionService(db).record_click(payload.submission_id, payload.cta_type)
    return CTAClickResponse(
        cta_click_id=result.click.id,
        cta_type=result.click.cta_type,
        clicked_at=result.click.created_at,
        submission=SubmissionResponse.model_validate(result.submission),
    )
