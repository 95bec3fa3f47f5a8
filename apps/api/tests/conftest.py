"""Pytest configuration and fixtures for the ScanReview API test suite.

Provides:
- Test database (SQLite file by default, any async URL via TEST_DATABASE_URL)
  with per-test table cleanup
- Mock authentication (JWT bypass carrying the test tenant id)
- Disabled rate limiting
- Model factory fixtures for Tenant, Location, IssuedCode, ScanEvent,
  ReviewSubmission and CTAClick
"""

import os
import tempfile
import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from scanreview.core.auth import get_current_user
from scanreview.core.database import get_async_session
from scanreview.core.deps import get_db
from scanreview.core.rate_limit import limiter
from scanreview.core.security import fingerprint_ip, generate_short_code
from scanreview.main import app
from scanreview.models import (
    CodeStatus,
    CTAClick,
    CTAType,
    IssuedCode,
    LastCTA,
    Location,
    ReviewSubmission,
    ScanEvent,
    Tenant,
)
from scanreview.models.base import Base

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TEST_USER_ID = "test-user-id"
TEST_USER_EMAIL = "owner@example.com"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False

# ---------------------------------------------------------------------------
# Session-scoped engine & table setup
# ---------------------------------------------------------------------------

_test_engine: Any = None
_test_session_factory: Any = None
_TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'scanreview_test.db')}",
)

# Models to clear after each test (reverse dependency order)
_MODELS_TO_CLEAR = [
    CTAClick,
    ReviewSubmission,
    ScanEvent,
    IssuedCode,
    Location,
    Tenant,
]


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def _create_tables() -> AsyncGenerator[None, None]:
    """Create all tables once per test session.

    Uses NullPool so every checkout opens a fresh connection bound to the
    running loop, which keeps the same engine usable from function-scoped
    tests.
    """
    global _test_engine, _test_session_factory  # noqa: PLW0603
    _test_engine = create_async_engine(
        _TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=NullPool,
    )
    _test_session_factory = async_sessionmaker(
        _test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await _test_engine.dispose()


# ---------------------------------------------------------------------------
# Per-test database session + cleanup
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def db_session(_create_tables: None) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for test setup (factory fixtures) and services.

    Cleanup is handled by the ``_cleanup_tables`` autouse fixture.
    """
    async with _test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def _cleanup_tables() -> AsyncGenerator[None, None]:
    """Delete all rows after each test to restore a clean state."""
    yield
    if _test_engine is not None:
        async with _test_engine.begin() as conn:
            for model in _MODELS_TO_CLEAR:
                await conn.execute(delete(model))


# ---------------------------------------------------------------------------
# Auth mock
# ---------------------------------------------------------------------------


@pytest.fixture
def auth_user(tenant: Tenant) -> dict[str, Any]:
    """Return the default authenticated test user payload (mimics decoded JWT)."""
    return {
        "sub": TEST_USER_ID,
        "email": TEST_USER_EMAIL,
        "tenant_id": str(tenant.id),
    }


def _override_session_dependencies() -> None:
    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with _test_session_factory() as s:
            yield s

    app.dependency_overrides[get_async_session] = _override_session
    app.dependency_overrides[get_db] = _override_session


# ---------------------------------------------------------------------------
# Authenticated client (overrides DB and Auth)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,  # noqa: ARG001  # Ensures _create_tables runs
    auth_user: dict[str, Any],
) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated async test client with all dependencies overridden."""

    async def _override_user() -> dict[str, Any]:
        return auth_user

    _override_session_dependencies()
    app.dependency_overrides[get_current_user] = _override_user

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Unauthenticated client (overrides DB only, no auth bypass)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def unauthed_client(
    db_session: AsyncSession,  # noqa: ARG001  # Ensures _create_tables runs
) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated async test client. Used for the public review flow."""
    _override_session_dependencies()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"User-Agent": "pytest-browser/1.0"},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Lightweight client (no DB, no auth, for stateless endpoint tests)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Model Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def tenant_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates Tenant instances in the test database."""

    async def _create(
        *,
        name: str = "The Gourmet Kitchen",
        google_place_id: str | None = "ChIJN1t_tDeuEmsRUsoyG83frY4",
        contact_email: str | None = "contact@gourmet.example",
        contact_phone: str | None = "+1 555 123 4567",
        logo_url: str | None = None,
        brand_colors: dict[str, Any] | None = None,
        is_active: bool = True,
    ) -> Tenant:
        tenant = Tenant(
            name=name,
            google_place_id=google_place_id,
            contact_email=contact_email,
            contact_phone=contact_phone,
            logo_url=logo_url,
            brand_colors=brand_colors or {},
            is_active=is_active,
        )
        db_session.add(tenant)
        await db_session.commit()
        await db_session.refresh(tenant)
        return tenant

    return _create


@pytest.fixture
def location_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates Location instances."""

    async def _create(
        *,
        tenant_id: UUID,
        name: str = "Main Street",
        address: str | None = "123 Main St",
    ) -> Location:
        location = Location(tenant_id=tenant_id, name=name, address=address)
        db_session.add(location)
        await db_session.commit()
        await db_session.refresh(location)
        return location

    return _create


@pytest.fixture
def code_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates IssuedCode instances directly (bypassing issuance)."""

    async def _create(
        *,
        tenant_id: UUID,
        short_code: str | None = None,
        label: str = "Table 01",
        batch_id: str | None = "batch-test",
        location_id: UUID | None = None,
        status: CodeStatus = CodeStatus.ACTIVE,
        created_at: datetime | None = None,
    ) -> IssuedCode:
        code = IssuedCode(
            tenant_id=tenant_id,
            short_code=short_code or generate_short_code(),
            label=label,
            batch_id=batch_id,
            location_id=location_id,
            status=status,
        )
        if created_at is not None:
            code.created_at = created_at
        db_session.add(code)
        await db_session.commit()
        await db_session.refresh(code)
        return code

    return _create


@pytest.fixture
def scan_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates ScanEvent instances."""

    async def _create(
        *,
        code: IssuedCode,
        session_id: str | None = None,
        ip: str = "203.0.113.5",
        user_agent: str | None = "pytest-browser/1.0",
        created_at: datetime | None = None,
    ) -> ScanEvent:
        scan = ScanEvent(
            code_id=code.id,
            tenant_id=code.tenant_id,
            session_id=session_id or str(uuid.uuid4()),
            ip_fingerprint=fingerprint_ip(ip),
            user_agent=user_agent,
        )
        if created_at is not None:
            scan.created_at = created_at
        db_session.add(scan)
        await db_session.commit()
        await db_session.refresh(scan)
        return scan

    return _create


@pytest.fixture
def submission_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates ReviewSubmission instances."""

    async def _create(
        *,
        code: IssuedCode,
        rating: int = 5,
        comment: str | None = None,
        scan_id: UUID | None = None,
        google_clicked: bool = False,
        contact_clicked: bool = False,
        last_cta: LastCTA = LastCTA.NONE,
        created_at: datetime | None = None,
    ) -> ReviewSubmission:
        submission = ReviewSubmission(
            code_id=code.id,
            tenant_id=code.tenant_id,
            scan_id=scan_id,
            rating=rating,
            comment=comment,
            google_clicked=google_clicked,
            contact_clicked=contact_clicked,
            last_cta=last_cta,
        )
        if created_at is not None:
            submission.created_at = created_at
        db_session.add(submission)
        await db_session.commit()
        await db_session.refresh(submission)
        return submission

    return _create


@pytest.fixture
def click_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates CTAClick rows without touching the submission summary."""

    async def _create(
        *,
        submission_id: UUID,
        cta_type: CTAType = CTAType.GOOGLE_COPY,
        created_at: datetime | None = None,
    ) -> CTAClick:
        click = CTAClick(submission_id=submission_id, cta_type=cta_type)
        if created_at is not None:
            click.created_at = created_at
        db_session.add(click)
        await db_session.commit()
        await db_session.refresh(click)
        return click

    return _create


# ---------------------------------------------------------------------------
# Default instances
# ---------------------------------------------------------------------------


@pytest.fixture
async def tenant(tenant_factory: Callable[..., Any]) -> Tenant:
    """A default tenant; the authenticated test user belongs to it."""
    return await tenant_factory()


@pytest.fixture
async def other_tenant(tenant_factory: Callable[..., Any]) -> Tenant:
    """A DIFFERENT tenant (for multi-tenancy tests)."""
    return await tenant_factory(
        name="Other Bistro",
        google_place_id=None,
        contact_email=None,
        contact_phone=None,
    )


@pytest.fixture
async def location(tenant: Tenant, location_factory: Callable[..., Any]) -> Location:
    return await location_factory(tenant_id=tenant.id)


@pytest.fixture
async def active_code(tenant: Tenant, code_factory: Callable[..., Any]) -> IssuedCode:
    """An active code owned by ``tenant``."""
    return await code_factory(tenant_id=tenant.id)


@pytest.fixture
async def archived_code(tenant: Tenant, code_factory: Callable[..., Any]) -> IssuedCode:
    return await code_factory(tenant_id=tenant.id, label="Table 99", status=CodeStatus.ARCHIVED)
