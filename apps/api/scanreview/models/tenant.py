"""Tenant model: the business that owns codes, scans and submissions."""

from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scanreview.models.base import Base, JSONType

if TYPE_CHECKING:
    from scanreview.models.issued_code import IssuedCode
    from scanreview.models.location import Location


class Tenant(Base):
    """A customer business (restaurant, salon, shop...).

    Tenant profiles are managed by the portal; this service only reads the
    public branding fields when resolving a scanned code.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Public branding
    logo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    brand_colors: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        default=dict,
        nullable=False,
    )

    # Positive track: review platform listing
    google_place_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Negative track: private contact channel
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    locations: Mapped[list["Location"]] = relationship(
        "Location",
        back_populates="tenant",
    )
    codes: Mapped[list["IssuedCode"]] = relationship(
        "IssuedCode",
        back_populates="tenant",
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.name}>"
