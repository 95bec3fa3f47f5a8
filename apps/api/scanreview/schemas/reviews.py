"""Pydantic schemas for the public review flow: resolve, scan, submit, click."""

import enum
from datetime import datetime
from uuid import UUID

from pydantic import Field, StrictInt

from scanreview.models.cta_click import CTAType
from scanreview.models.review_submission import LastCTA
from scanreview.schemas.common import BaseSchema


class Outcome(str, enum.Enum):
    """Which track the review page shows after a submission."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


class BrandColors(BaseSchema):
    primary: str | None = None
    secondary: str | None = None
    accent: str | None = None


class Branding(BaseSchema):
    """Public tenant branding rendered on the review page."""

    name: str
    logo_url: str | None = None
    brand_colors: BrandColors | None = None
    review_platform_id: str | None = None
    review_url: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None


class ResolvedCode(BaseSchema):
    id: UUID
    short_code: str
    label: str
    location_id: UUID | None
    batch_id: str | None


class ResolveResponse(BaseSchema):
    """A live code and the branding of the tenant that owns it."""

    code: ResolvedCode
    branding: Branding


class ScanCreate(BaseSchema):
    """Request body for recording a scan.

    ``session_id`` is generated when omitted; ``user_agent`` falls back to the
    request header.
    """

    session_id: str | None = Field(default=None, min_length=1, max_length=128)
    user_agent: str | None = Field(default=None, max_length=1024)


class ScanResponse(BaseSchema):
    scan_id: UUID
    session_id: str


class ReviewCreate(BaseSchema):
    """Request body for submitting a rating.

    ``rating`` must be a JSON integer; the 1-5 range is checked by the
    submission service so the error carries details.
    """

    short_code: str = Field(..., min_length=1, max_length=32)
    session_id: str | None = Field(default=None, min_length=1, max_length=128)
    rating: StrictInt
    comment: str | None = None


class SubmissionResponse(BaseSchema):
    id: UUID
    code_id: UUID
    scan_id: UUID | None
    rating: int
    comment: str | None
    google_clicked: bool
    contact_clicked: bool
    last_cta: LastCTA
    created_at: datetime


class ReviewSubmitResponse(BaseSchema):
    """Submission plus the branch decision the page must render."""

    submission: SubmissionResponse
    outcome: Outcome
    cta_options: list[str]
    session_id: str
    review_url: str | None = None


class CTAClickCreate(BaseSchema):
    """Request body for a call-to-action click. ``cta_type`` is checked by the service."""

    submission_id: UUID
    cta_type: str = Field(..., min_length=1, max_length=32)


class CTAClickResponse(BaseSchema):
    cta_click_id: UUID
    cta_type: CTAType
    clicked_at: datetime
    submission: SubmissionResponse


class CTAClickRecord(BaseSchema):
    """One row of the click audit trail."""

    id: UUID
    cta_type: CTAType
    clicked_at: datetime


class SubmissionClicksResponse(BaseSchema):
    """A submission's summary next to the clicks it was derived from."""

    submission: SubmissionResponse
    clicks: list[CTAClickRecord]
