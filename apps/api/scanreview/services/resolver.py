"""Resolve a scanned short code to its live registry entry and tenant branding."""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scanreview.models.issued_code import CodeStatus, IssuedCode
from scanreview.models.tenant import Tenant
from scanreview.schemas.reviews import Branding, BrandColors

logger = logging.getLogger(__name__)

GOOGLE_WRITE_REVIEW_URL = "https://search.google.com/local/writereview"


def build_review_url(place_id: str, lang: str | None = None) -> str:
    """Deep link that opens the review dialog of a Google Business listing."""
    params = {"placeid": place_id}
    if lang:
        params["hl"] = lang
    return f"{GOOGLE_WRITE_REVIEW_URL}?{urlencode(params)}"


def get_branding(tenant: Tenant) -> Branding:
    """Public branding of a tenant, as rendered on the review page."""
    colors = tenant.brand_colors or {}
    return Branding(
        name=tenant.name,
        logo_url=tenant.logo_url,
        brand_colors=BrandColors(**colors) if colors else None,
        review_platform_id=tenant.google_place_id,
        review_url=build_review_url(tenant.google_place_id) if tenant.google_place_id else None,
        contact_email=tenant.contact_email,
        contact_phone=tenant.contact_phone,
    )


@dataclass
class Resolution:
    code: IssuedCode
    branding: Branding


class ResolverService:
    """Read-only lookup used when a code is scanned. Never writes."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def resolve(self, short_code: str) -> Resolution | None:
        """Return the live code and its owner's branding.

        Unknown codes, archived codes and codes of inactive tenants all give
        ``None``, so callers cannot tell them apart.
        """
        code = await self.get_active_code(short_code)
        if code is None:
            return None
        return Resolution(code=code, branding=get_branding(code.tenant))

    async def get_active_code(self, short_code: str) -> IssuedCode | None:
        stmt = (
            select(IssuedCode)
            .join(Tenant, Tenant.id == IssuedCode.tenant_id)
            .options(selectinload(IssuedCode.tenant))
            .where(
                IssuedCode.short_code == short_code,
                IssuedCode.status == CodeStatus.ACTIVE,
                Tenant.is_active.is_(True),
            )
        )
        code = (await self.db.execute(stmt)).scalar_one_or_none()
        if code is None:
            logger.info("Resolve miss for short code")
        return code
