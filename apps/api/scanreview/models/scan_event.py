"""ScanEvent model: one visit to the review page."""

import uuid

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from scanreview.models.base import Base


class ScanEvent(Base):
    """Immutable record of a code being scanned and rendered.

    ``session_id`` is client-supplied and only used to correlate a scan with
    the submission and clicks that follow it. It is not a uniqueness key.
    """

    __tablename__ = "scan_events"
    __table_args__ = (Index("ix_scan_events_code_session", "code_id", "session_id"),)

    code_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("issued_codes.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Denormalized from the code at write time
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    session_id: Mapped[str] = mapped_column(String(128), nullable=False)

    # Keyed hash only, never the raw address
    ip_fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<ScanEvent code={self.code_id} session={self.session_id}>"
