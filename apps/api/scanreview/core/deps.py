"""Dependency injection for FastAPI routes."""

from collections.abc import AsyncGenerator
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Re-export auth dependencies for convenience
from scanreview.core.auth import CurrentUser, get_current_user
from scanreview.core.database import get_async_session
from scanreview.models.tenant import Tenant


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Alias for get_async_session so tests can override a single dependency."""
    async for session in get_async_session():
        yield session


# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


def get_user_tenant_id(user: dict[str, Any]) -> UUID:
    """Extract the tenant id from the authenticated user's JWT payload."""
    raw = user.get("tenant_id")
    try:
        return UUID(str(raw))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token does not carry a valid tenant_id",
        ) from None


async def get_current_tenant(
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> Tenant:
    """Load the tenant the caller is authenticated for."""
    tenant_id = get_user_tenant_id(user)
    tenant = (
        await db.execute(
            select(Tenant).where(Tenant.id == tenant_id, Tenant.is_active.is_(True))
        )
    ).scalar_one_or_none()

    if not tenant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found or inactive",
        )

    return tenant


CurrentTenant = Annotated[Tenant, Depends(get_current_tenant)]


__all__ = [
    "CurrentTenant",
    "CurrentUser",
    "DBSession",
    "get_current_tenant",
    "get_current_user",
    "get_db",
    "get_user_tenant_id",
]
