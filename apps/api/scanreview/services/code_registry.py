"""Code registry: batch issuance, listing, status changes and artifacts."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.core.config import settings
from scanreview.core.exceptions import (
    NotFoundError,
    ShortCodeCollisionError,
    ValidationFailedError,
)
from scanreview.core.security import generate_batch_id
from scanreview.models.issued_code import CodeStatus, IssuedCode
from scanreview.models.location import Location
from scanreview.models.scan_event import ScanEvent
from scanreview.models.tenant import Tenant
from scanreview.schemas.codes import BatchSummary, LabelScheme
from scanreview.services.artifact_service import (
    ArtifactFormat,
    build_code_url,
    render_artifact,
    render_png_data_url,
)
from scanreview.services.code_generator import (
    CodeCandidate,
    build_candidates,
    build_labels,
    draw_unique_codes,
    validate_candidates,
)

logger = logging.getLogger(__name__)


def _render_data_urls(urls: list[str]) -> list[str]:
    return [render_png_data_url(url) for url in urls]


@dataclass
class IssuedArtifact:
    """A persisted code plus its rendered image."""

    code: IssuedCode
    url: str
    image_data_url: str


@dataclass
class IssuedBatch:
    batch_id: str
    codes: list[IssuedArtifact]


class CodeRegistryService:
    """Issues codes in batches and manages their lifecycle for one tenant."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def issue_batch(
        self,
        tenant_id: UUID,
        count: int,
        label_prefix: str,
        label_scheme: LabelScheme = LabelScheme.SEQUENTIAL,
        location_id: UUID | None = None,
        batch_id: str | None = None,
    ) -> IssuedBatch:
        """Generate, validate and persist ``count`` codes sharing one batch id.

        The batch is written in a single transaction. A unique-constraint
        violation on ``short_code`` regenerates only the colliding codes and
        retries, up to ``settings.batch_insert_max_attempts`` times.

        Raises:
            ValidationFailedError: Bad count/prefix/scheme or a bad entry in the batch.
            NotFoundError: Unknown tenant, or a location of another tenant.
            ShortCodeCollisionError: Retry budget exhausted.
            IntegrityError: A constraint other than short code uniqueness failed.
        """
        if not 1 <= count <= settings.max_batch_size:
            raise ValidationFailedError(
                "Validation failed",
                [f"count must be between 1 and {settings.max_batch_size}"],
            )
        if not label_prefix or not label_prefix.strip():
            raise ValidationFailedError("Validation failed", ["Label prefix is required"])

        tenant = (
            await self.db.execute(
                select(Tenant).where(Tenant.id == tenant_id, Tenant.is_active.is_(True))
            )
        ).scalar_one_or_none()
        if not tenant:
            raise NotFoundError("Tenant not found")

        location: Location | None = None
        if location_id:
            location = (
                await self.db.execute(
                    select(Location).where(
                        Location.id == location_id,
                        Location.tenant_id == tenant_id,
                    )
                )
            ).scalar_one_or_none()
            if not location:
                raise NotFoundError("Location not found or does not belong to this tenant")

        if label_scheme == LabelScheme.LOCATION and location is None:
            raise ValidationFailedError(
                "Validation failed", ["The location label scheme requires a location_id"]
            )

        labels = build_labels(
            label_prefix,
            count,
            label_scheme,
            location_name=location.name if location else None,
            tenant_name=tenant.name,
            issued_at=datetime.now(UTC),
        )
        batch_id = batch_id or generate_batch_id()
        candidates = build_candidates(draw_unique_codes(count), labels)

        rows = await self._insert_with_retry(tenant_id, location_id, batch_id, candidates)

        logger.info(
            "Issued batch: batch_id=%s tenant=%s count=%d scheme=%s",
            batch_id,
            tenant_id,
            len(rows),
            label_scheme.value,
        )

        urls = [build_code_url(row.short_code) for row in rows]
        # PNG encoding runs in a worker thread
        images = await asyncio.to_thread(_render_data_urls, urls)

        return IssuedBatch(
            batch_id=batch_id,
            codes=[
                IssuedArtifact(code=row, url=url, image_data_url=image)
                for row, url, image in zip(rows, urls, images, strict=True)
            ],
        )

    async def _insert_with_retry(
        self,
        tenant_id: UUID,
        location_id: UUID | None,
        batch_id: str,
        candidates: list[CodeCandidate],
    ) -> list[IssuedCode]:
        max_attempts = settings.batch_insert_max_attempts

        for attempt in range(1, max_attempts + 1):
            errors = validate_candidates(candidates)
            if errors:
                raise ValidationFailedError("Code batch validation failed", errors)

            rows = [
                IssuedCode(
                    tenant_id=tenant_id,
                    location_id=location_id,
                    label=candidate.label,
                    short_code=candidate.short_code,
                    batch_id=batch_id,
                    status=CodeStatus.ACTIVE,
                )
                for candidate in candidates
            ]
            self.db.add_all(rows)
            try:
                await self.db.commit()
                return rows
            except IntegrityError as exc:
                await self.db.rollback()
                integrity_error = exc

            short_codes = [c.short_code for c in candidates]
            taken = await self._existing_short_codes(short_codes)
            if not taken:
                # Some other constraint failed, such as a location removed mid-request
                logger.error("Batch %s failed on a non-collision constraint", batch_id)
                raise integrity_error

            logger.warning(
                "Short code collision on batch %s (attempt %d/%d): %d taken",
                batch_id,
                attempt,
                max_attempts,
                len(taken),
            )

            replacements = iter(draw_unique_codes(len(taken), exclude=set(short_codes) | taken))
            for candidate in candidates:
                if candidate.short_code in taken:
                    candidate.short_code = next(replacements)
                    candidate.url = build_code_url(candidate.short_code)

        logger.error("Giving up on batch %s after %d attempts", batch_id, max_attempts)
        raise ShortCodeCollisionError(max_attempts)

    async def _existing_short_codes(self, short_codes: list[str]) -> set[str]:
        result = await self.db.execute(
            select(IssuedCode.short_code).where(IssuedCode.short_code.in_(short_codes))
        )
        return set(result.scalars().all())

    async def get_code(self, code_id: UUID, tenant_id: UUID) -> IssuedCode:
        """Get a code owned by ``tenant_id``. Other tenants' codes are reported as missing."""
        code = (
            await self.db.execute(
                select(IssuedCode).where(
                    IssuedCode.id == code_id,
                    IssuedCode.tenant_id == tenant_id,
                )
            )
        ).scalar_one_or_none()
        if not code:
            raise NotFoundError("Code not found")
        return code

    async def set_status(self, code_id: UUID, tenant_id: UUID, status: CodeStatus) -> IssuedCode:
        """Archive or re-activate a code. Codes are never deleted."""
        code = await self.get_code(code_id, tenant_id)
        if code.status != status:
            previous = code.status
            code.status = status
            await self.db.commit()
            await self.db.refresh(code)
            logger.info(
                "Code status changed: code=%s %s -> %s",
                code.short_code,
                previous.value,
                status.value,
            )
        return code

    async def render(
        self, code_id: UUID, tenant_id: UUID, fmt: ArtifactFormat
    ) -> tuple[bytes, str, IssuedCode]:
        """Regenerate the artifact of an active code.

        Returns:
            Tuple of (content, media_type, code).
        """
        code = await self.get_code(code_id, tenant_id)
        if not code.is_active:
            raise NotFoundError("Code not found")
        content, media_type = await asyncio.to_thread(render_artifact, code.short_code, fmt)
        return content, media_type, code

    async def list_codes(
        self,
        tenant_id: UUID,
        status: CodeStatus | None = None,
        batch_id: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[IssuedCode], int]:
        """Get a page of the tenant's codes, newest first."""
        filters = [IssuedCode.tenant_id == tenant_id]
        if status is not None:
            filters.append(IssuedCode.status == status)
        if batch_id is not None:
            filters.append(IssuedCode.batch_id == batch_id)

        count_stmt = select(func.count()).select_from(IssuedCode).where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(IssuedCode)
            .where(*filters)
            .order_by(IssuedCode.created_at.desc(), IssuedCode.label)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def list_batches(
        self,
        tenant_id: UUID,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[BatchSummary], int]:
        """Get a page of batch summaries with code and scan totals."""
        filters = [IssuedCode.tenant_id == tenant_id, IssuedCode.batch_id.is_not(None)]

        count_stmt = select(func.count(func.distinct(IssuedCode.batch_id))).where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(
                IssuedCode.batch_id,
                func.min(IssuedCode.created_at).label("created_at"),
                func.max(Location.name).label("location_name"),
                func.count(IssuedCode.id).label("total_codes"),
                func.count(case((IssuedCode.status == CodeStatus.ACTIVE, 1), else_=None)).label(
                    "active_codes"
                ),
            )
            .outerjoin(Location, Location.id == IssuedCode.location_id)
            .where(*filters)
            .group_by(IssuedCode.batch_id)
            .order_by(func.min(IssuedCode.created_at).desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = (await self.db.execute(stmt)).all()

        batch_ids = [row.batch_id for row in rows]
        scans: dict[str, int] = {}
        if batch_ids:
            scan_stmt = (
                select(IssuedCode.batch_id, func.count(ScanEvent.id).label("scans"))
                .join(ScanEvent, ScanEvent.code_id == IssuedCode.id)
                .where(IssuedCode.tenant_id == tenant_id, IssuedCode.batch_id.in_(batch_ids))
                .group_by(IssuedCode.batch_id)
            )
            scans = {row.batch_id: row.scans for row in (await self.db.execute(scan_stmt)).all()}

        items = [
            BatchSummary(
                batch_id=row.batch_id,
                created_at=row.created_at,
                location_name=row.location_name,
                total_codes=row.total_codes,
                active_codes=row.active_codes,
                total_scans=scans.get(row.batch_id, 0),
            )
            for row in rows
        ]
        return items, total
