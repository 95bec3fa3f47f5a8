"""ReviewSubmission model: a rating (and optional comment) left after a scan."""

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Enum, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scanreview.models.base import Base

if TYPE_CHECKING:
    from scanreview.models.cta_click import CTAClick
    from scanreview.models.issued_code import IssuedCode


class LastCTA(str, enum.Enum):
    """Category of the most recent call-to-action clicked for a submission."""

    NONE = "none"
    GOOGLE_COPY = "google_copy"
    GOOGLE_DIRECT = "google_direct"
    CONTACT = "contact"


class ReviewSubmission(Base):
    """One feedback submission.

    ``google_clicked``/``contact_clicked`` only ever go from false to true.
    ``last_cta`` is a projection of the newest click in ``cta_clicks``; both
    are maintained by ``AttributionService`` in the same transaction as the
    click insert.
    """

    __tablename__ = "review_submissions"
    __table_args__ = (CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),)

    code_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("issued_codes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Soft link to the scan of the same session, when one was recorded
    scan_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("scan_events.id", ondelete="SET NULL"),
        nullable=True,
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Attribution summary
    google_clicked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    contact_clicked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_cta: Mapped[LastCTA] = mapped_column(
        Enum(
            LastCTA,
            name="last_cta",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=LastCTA.NONE,
        nullable=False,
    )

    # Relationships
    code: Mapped["IssuedCode"] = relationship("IssuedCode")
    clicks: Mapped[list["CTAClick"]] = relationship(
        "CTAClick",
        back_populates="submission",
        order_by="CTAClick.created_at",
    )

    def __repr__(self) -> str:
        return f"<ReviewSubmission rating={self.rating} last_cta={self.last_cta.value}>"
