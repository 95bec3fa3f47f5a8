"""SQLAlchemy models."""

from scanreview.models.base import Base
from scanreview.models.cta_click import CTAClick, CTAType
from scanreview.models.issued_code import CodeStatus, IssuedCode
from scanreview.models.location import Location
from scanreview.models.review_submission import LastCTA, ReviewSubmission
from scanreview.models.scan_event import ScanEvent
from scanreview.models.tenant import Tenant

__all__ = [
    # Base
    "Base",
    # Tenants
    "Tenant",
    "Location",
    # Code registry
    "IssuedCode",
    "CodeStatus",
    # Review flow
    "ScanEvent",
    "ReviewSubmission",
    "LastCTA",
    "CTAClick",
    "CTAType",
]
