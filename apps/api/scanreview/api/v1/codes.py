"""Code registry endpoints for the tenant dashboard. All require authentication."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from scanreview.core.deps import CurrentTenant, DBSession
from scanreview.models.issued_code import CodeStatus, IssuedCode
from scanreview.schemas.codes import (
    BatchCreate,
    BatchResponse,
    BatchSummary,
    CodeStatusUpdate,
    IssuedCodeArtifact,
    IssuedCodeResponse,
)
from scanreview.schemas.common import PaginatedResponse
from scanreview.services.artifact_service import build_code_url
from scanreview.services.code_registry import CodeRegistryService

router = APIRouter()


def _to_response(code: IssuedCode) -> IssuedCodeResponse:
    return IssuedCodeResponse(
        id=code.id,
        short_code=code.short_code,
        tenant_id=code.tenant_id,
        location_id=code.location_id,
        label=code.label,
        batch_id=code.batch_id,
        status=code.status,
        created_at=code.created_at,
        url=build_code_url(code.short_code),
    )


def _pages(total: int, page_size: int) -> int:
    return (total + page_size - 1) // page_size if total > 0 else 1


@router.post(
    "/batches",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue a batch of codes",
    description="""
    Generate `count` codes with unique short codes and write them in one
    transaction. Either the whole batch is issued or nothing is.

    Each code comes back with its public URL and a PNG data URL ready to print.
    """,
)
async def create_batch(
    payload: BatchCreate,
    tenant: CurrentTenant,
    db: DBSession,
) -> BatchResponse:
    """Issue a batch of codes for the authenticated tenant."""
    tenant_id = tenant.id
    batch = await CodeRegistryService(db).issue_batch(
        tenant_id=tenant_id,
        count=payload.count,
        label_prefix=payload.label_prefix,
        label_scheme=payload.label_scheme,
        location_id=payload.location_id,
        batch_id=payload.batch_id,
    )
    return BatchResponse(
        batch_id=batch.batch_id,
        count=len(batch.codes),
        codes=[
            IssuedCodeArtifact(
                **_to_response(item.code).model_dump(),
                image_data_url=item.image_data_url,
            )
            for item in batch.codes
        ],
    )


@router.get("/batches", response_model=PaginatedResponse[BatchSummary])
async def list_batches(
    tenant: CurrentTenant,
    db: DBSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
) -> PaginatedResponse[BatchSummary]:
    """List issued batches with code and scan totals, newest first."""
    items, total = await CodeRegistryService(db).list_batches(tenant.id, page, page_size)
    return PaginatedResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        pages=_pages(total, page_size),
    )


@router.get("", response_model=PaginatedResponse[IssuedCodeResponse])
async def list_codes(
    tenant: CurrentTenant,
    db: DBSession,
    status_filter: CodeStatus | None = Query(None, alias="status"),
    batch_id: str | None = Query(None, max_length=64),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[IssuedCodeResponse]:
    """List the tenant's codes, optionally filtered by status or batch."""
    codes, total = await CodeRegistryService(db).list_codes(
        tenant.id,
        status=status_filter,
        batch_id=batch_id,
        page=page,
        page_size=page_size,
    )
    return PaginatedResponse(
        items=[_to_response(code) for code in codes],
        total=total,
        page=page,
        page_size=page_size,
        pages=_pages(total, page_size),
    )


@router.patch("/{code_id}/status", response_model=IssuedCodeResponse)
async def update_code_status(
    code_id: UUID,
    payload: CodeStatusUpdate,
    tenant: CurrentTenant,
    db: DBSession,
) -> IssuedCodeResponse:
    """Archive or re-activate a code. Archived codes stop resolving immediately."""
    code = await CodeRegistryService(db).set_status(
        code_id, tenant.id, CodeStatus(payload.status)
    )
    return _to_response(code)


@router.get(
    "/{code_id}/artifact",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}, "image/svg+xml": {}}},
        404: {"description": "Unknown or archived code"},
    },
)
async def download_artifact(
    code_id: UUID,
    tenant: CurrentTenant,
    db: DBSession,
    fmt: Literal["png", "svg"] = Query("png", alias="format"),
) -> Response:
    """Regenerate and download the printable image for an active code."""
    content, media_type, code = await CodeRegistryService(db).render(code_id, tenant.id, fmt)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{code.short_code}.{fmt}"'},
    )
