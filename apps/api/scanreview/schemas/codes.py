"""Pydantic schemas for code issuance and the code registry."""

import enum
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from scanreview.models.issued_code import CodeStatus
from scanreview.schemas.common import BaseSchema


class LabelScheme(str, enum.Enum):
    """How labels are built for a new batch.

    - sequential: ``Table 01``, ``Table 02``...
    - location: ``Main Street - Table 01``
    - tenant_timestamp: ``Gourmet Kitchen Table 01 (2026-10-17 14:05)``
    """

    SEQUENTIAL = "sequential"
    LOCATION = "location"
    TENANT_TIMESTAMP = "tenant_timestamp"


class BatchCreate(BaseSchema):
    """Request body for issuing a batch of codes."""

    count: int = Field(..., ge=1, le=100, description="Number of codes to issue")
    label_prefix: str = Field(..., min_length=1, max_length=100, description="Label prefix")
    label_scheme: LabelScheme = LabelScheme.SEQUENTIAL
    location_id: UUID | None = None
    batch_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_-]+$",
        description="Optional grouping key; generated when omitted",
    )


class IssuedCodeResponse(BaseSchema):
    """A code in the registry."""

    id: UUID
    short_code: str
    tenant_id: UUID
    location_id: UUID | None
    label: str
    batch_id: str | None
    status: CodeStatus
    created_at: datetime
    url: str


class IssuedCodeArtifact(IssuedCodeResponse):
    """A freshly issued code with its rendered image."""

    image_data_url: str


class BatchResponse(BaseSchema):
    """Response for a newly issued batch."""

    batch_id: str
    count: int
    codes: list[IssuedCodeArtifact]


class BatchSummary(BaseSchema):
    """One row of the batch listing."""

    batch_id: str
    created_at: datetime
    location_name: str | None
    total_codes: int
    active_codes: int
    total_scans: int


class CodeStatusUpdate(BaseSchema):
    """Request body for archiving or re-activating a code."""

    status: Literal["active", "archived"]
