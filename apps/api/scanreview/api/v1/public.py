"""Public endpoints hit by the review page when a code is scanned.

No authentication. Rate limited per client IP.
"""

from fastapi import APIRouter, Request, status

from scanreview.core.config import settings
from scanreview.core.deps import DBSession
from scanreview.core.exceptions import NotFoundError
from scanreview.core.rate_limit import get_client_ip, limiter
from scanreview.core.security import fingerprint_ip, generate_session_id
from scanreview.schemas.reviews import (
    ResolvedCode,
    ResolveResponse,
    ScanCreate,
    ScanResponse,
)
from scanreview.services.resolver import ResolverService
from scanreview.services.scan_service import ScanRecorder

router = APIRouter()

LINK_UNAVAILABLE = "Link unavailable"


@router.get(
    "/{short_code}",
    response_model=ResolveResponse,
    summary="Resolve a scanned code",
    description="Returns the code and its owner's branding. Unknown and archived codes "
    "both return the same 404 body.",
)
@limiter.limit(settings.public_rate_limit)
async def resolve_code(
    request: Request,  # noqa: ARG001 - required by slowapi
    short_code: str,
    db: DBSession,
) -> ResolveResponse:
    """Resolve a short code. Read-only: no scan is recorded here."""
    resolution = await ResolverService(db).resolve(short_code)
    if resolution is None:
        raise NotFoundError(LINK_UNAVAILABLE)

    return ResolveResponse(
        code=ResolvedCode.model_validate(resolution.code),
        branding=resolution.branding,
    )


@router.post(
    "/{short_code}/scans",
    response_model=ScanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a scan",
)
@limiter.limit(settings.public_rate_limit)
async def record_scan(
    request: Request,
    short_code: str,
    payload: ScanCreate,
    db: DBSession,
) -> ScanResponse:
    """Record that the review page for ``short_code`` was rendered.

    The client IP is hashed here; the recorder only ever sees the fingerprint.
    """
    code = await ResolverService(db).get_active_code(short_code)
    if code is None:
        raise NotFoundError(LINK_UNAVAILABLE)

    session_id = payload.session_id or generate_session_id()
    scan = await ScanRecorder(db).record_scan(
        code_id=code.id,
        session_id=session_id,
        ip_fingerprint=fingerprint_ip(get_client_ip(request)),
        user_agent=payload.user_agent or request.headers.get("user-agent"),
    )
    return ScanResponse(scan_id=scan.id, session_id=session_id)
