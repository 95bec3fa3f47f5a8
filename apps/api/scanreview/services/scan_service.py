"""Record scan events."""

import ipaddress
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.core.exceptions import NotFoundError, ValidationFailedError
from scanreview.models.issued_code import IssuedCode
from scanreview.models.scan_event import ScanEvent

logger = logging.getLogger(__name__)

USER_AGENT_MAX_LENGTH = 512


def _looks_like_raw_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


class ScanRecorder:
    """Appends ScanEvent rows. Duplicate session ids are accepted."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def record_scan(
        self,
        code_id: UUID,
        session_id: str,
        ip_fingerprint: str,
        user_agent: str | None = None,
    ) -> ScanEvent:
        """Append one scan for ``code_id``.

        ``ip_fingerprint`` must already be a keyed hash (see
        ``scanreview.core.security.fingerprint_ip``).

        Raises:
            ValidationFailedError: Empty session id, or a raw IP passed as fingerprint.
            NotFoundError: Unknown code.
        """
        errors = []
        if not session_id or not session_id.strip():
            errors.append("session_id is required")
        if not ip_fingerprint or _looks_like_raw_ip(ip_fingerprint):
            errors.append("ip_fingerprint must be a one-way hash")
        if errors:
            raise ValidationFailedError("Validation failed", errors)

        code = (
            await self.db.execute(select(IssuedCode).where(IssuedCode.id == code_id))
        ).scalar_one_or_none()
        if not code:
            raise NotFoundError("Code not found")

        scan = ScanEvent(
            code_id=code.id,
            tenant_id=code.tenant_id,
            session_id=session_id,
            ip_fingerprint=ip_fingerprint,
            user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
        )
        self.db.add(scan)
        await self.db.commit()

        logger.debug("Scan recorded: id=%s code=%s", scan.id, code.short_code)
        return scan
