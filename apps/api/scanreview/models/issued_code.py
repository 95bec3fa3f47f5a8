"""IssuedCode model: one printed, scannable short code."""

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scanreview.models.base import Base

if TYPE_CHECKING:
    from scanreview.models.location import Location
    from scanreview.models.tenant import Tenant


class CodeStatus(str, enum.Enum):
    """Lifecycle of an issued code. Codes are archived, never deleted."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class IssuedCode(Base):
    """A short code owned by exactly one tenant for its whole lifetime.

    ``short_code`` is unique across all tenants: a scan arrives with no tenant
    context, so the code alone must identify the owner. The unique index is
    what enforces this; batch issuance treats violations as retryable.
    """

    __tablename__ = "issued_codes"
    __table_args__ = (Index("ix_issued_codes_tenant_batch", "tenant_id", "batch_id"),)

    short_code: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        index=True,
    )

    # Ownership (multi-tenancy)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
    )

    label: Mapped[str] = mapped_column(String(255), nullable=False)
    batch_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[CodeStatus] = mapped_column(
        Enum(
            CodeStatus,
            name="code_status",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=CodeStatus.ACTIVE,
        nullable=False,
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="codes")
    location: Mapped["Location | None"] = relationship("Location")

    @property
    def is_active(self) -> bool:
        return self.status == CodeStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<IssuedCode {self.short_code} ({self.status.value})>"
