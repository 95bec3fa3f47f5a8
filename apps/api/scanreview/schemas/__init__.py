"""Pydantic schemas for API request/response validation."""

from scanreview.schemas.analytics import (
    AnalyticsSummary,
    AnalyticsTrend,
    DailyCount,
    MetricValue,
    RatingCount,
    TenantBreakdown,
    TenantRanking,
)
from scanreview.schemas.codes import (
    BatchCreate,
    BatchResponse,
    BatchSummary,
    CodeStatusUpdate,
    IssuedCodeArtifact,
    IssuedCodeResponse,
    LabelScheme,
)
from scanreview.schemas.common import (
    BaseSchema,
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
)
from scanreview.schemas.reviews import (
    Branding,
    BrandColors,
    CTAClickCreate,
    CTAClickRecord,
    CTAClickResponse,
    Outcome,
    ResolveResponse,
    ResolvedCode,
    ReviewCreate,
    ReviewSubmitResponse,
    ScanCreate,
    ScanResponse,
    SubmissionClicksResponse,
    SubmissionResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    # Codes
    "BatchCreate",
    "BatchResponse",
    "BatchSummary",
    "CodeStatusUpdate",
    "IssuedCodeArtifact",
    "IssuedCodeResponse",
    "LabelScheme",
    # Review flow
    "Branding",
    "BrandColors",
    "CTAClickCreate",
    "CTAClickRecord",
    "CTAClickResponse",
    "Outcome",
    "ResolveResponse",
    "ResolvedCode",
    "ReviewCreate",
    "ReviewSubmitResponse",
    "ScanCreate",
    "ScanResponse",
    "SubmissionClicksResponse",
    "SubmissionResponse",
    # Analytics
    "AnalyticsSummary",
    "AnalyticsTrend",
    "DailyCount",
    "MetricValue",
    "RatingCount",
    "TenantBreakdown",
    "TenantRanking",
]
