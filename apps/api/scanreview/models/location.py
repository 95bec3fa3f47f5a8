"""Location model for tenants with several venues."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scanreview.models.base import Base

if TYPE_CHECKING:
    from scanreview.models.tenant import Tenant


class Location(Base):
    """A physical venue belonging to a tenant."""

    __tablename__ = "locations"

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="locations")

    def __repr__(self) -> str:
        return f"<Location {self.name}>"
