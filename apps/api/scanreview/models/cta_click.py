"""CTAClick model: append-only audit trail of call-to-action clicks."""

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scanreview.models.base import Base

if TYPE_CHECKING:
    from scanreview.models.review_submission import ReviewSubmission


class CTAType(str, enum.Enum):
    """Calls to action offered after a submission."""

    GOOGLE_COPY = "google_copy"
    GOOGLE_DIRECT = "google_direct"
    CONTACT_EMAIL = "contact_email"
    CONTACT_PHONE = "contact_phone"


class CTAClick(Base):
    """Every click is kept, including repeats of the same type.

    Rows are never updated or deleted. ``created_at`` is the click time.
    """

    __tablename__ = "cta_clicks"

    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("review_submissions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    cta_type: Mapped[CTAType] = mapped_column(
        Enum(
            CTAType,
            name="cta_type",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )

    submission: Mapped["ReviewSubmission"] = relationship(
        "ReviewSubmission",
        back_populates="clicks",
    )

    def __repr__(self) -> str:
        return f"<CTAClick {self.cta_type.value} submission={self.submission_id}>"
