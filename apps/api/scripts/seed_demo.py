"""Seed script for local development of the review flow.

Creates a demo tenant with one location, issues a batch of codes through the
code registry, and records a handful of scans, submissions and CTA clicks so
the analytics dashboard has something to show.

Usage:
    cd apps/api && uv run python -m scripts.seed_demo
"""

import asyncio
import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from scanreview.core.database import async_session_maker
from scanreview.core.security import fingerprint_ip, generate_session_id
from scanreview.models.cta_click import CTAType
from scanreview.models.location import Location
from scanreview.models.tenant import Tenant
from scanreview.schemas.codes import LabelScheme
from scanreview.services.artifact_service import build_code_url
from scanreview.services.attribution_service import AttributionService
from scanreview.services.code_registry import CodeRegistryService, IssuedBatch
from scanreview.services.scan_service import ScanRecorder
from scanreview.services.submission_service import SubmissionService

# Fixed UUIDs for easy reference
TENANT_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000001")
OTHER_TENANT_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000002")
LOCATION_ID = uuid.UUID("bbbbbbbb-0000-0000-0000-000000000001")

BATCH_ID = "demo-batch-001"

# (rating, comment, clicks)
SAMPLE_REVIEWS: list[tuple[int, str | None, list[CTAType]]] = [
    (
        5,
        "Absolutely amazing experience! The food was incredible.",
        [CTAType.GOOGLE_COPY, CTAType.GOOGLE_DIRECT],
    ),
    (5, "Best restaurant in town! Will definitely come back.", [CTAType.GOOGLE_DIRECT]),
    (4, "Great food, lovely atmosphere. Just a bit noisy.", []),
    (3, "Good but not exceptional. Expected more for the price.", [CTAType.CONTACT_EMAIL]),
    (2, None, [CTAType.CONTACT_PHONE]),
    (5, "Perfect evening!", [CTAType.GOOGLE_COPY]),
]

DEMO_USER_AGENT = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"


async def cleanup(session: AsyncSession) -> None:
    """Delete previous seed data in reverse dependency order."""
    params = {"t1": str(TENANT_ID), "t2": str(OTHER_TENANT_ID)}
    await session.execute(
        text(
            "DELETE FROM cta_clicks WHERE submission_id IN "
            "(SELECT id FROM review_submissions WHERE tenant_id IN (:t1, :t2))"
        ),
        params,
    )
    for table in ["review_submissions", "scan_events", "issued_codes", "locations"]:
        await session.execute(
            text(f"DELETE FROM {table} WHERE tenant_id IN (:t1, :t2)"),
            params,
        )
    await session.execute(text("DELETE FROM tenants WHERE id IN (:t1, :t2)"), params)
    await session.commit()


async def seed(session: AsyncSession) -> IssuedBatch:
    await cleanup(session)

    # ── Tenant 1 (demo restaurant) ──────────────────────────────────────
    session.add(
        Tenant(
            id=TENANT_ID,
            name="The Gourmet Kitchen",
            logo_url="https://images.unsplash.com/photo-1517248135467-4c7edcad34c4",
            brand_colors={"primary": "#007AFF", "secondary": "#34C759", "accent": "#FF9500"},
            google_place_id="ChIJN1t_tDeuEmsRUsoyG83frY4",
            contact_email="contact@gourmetkitchen.com",
            contact_phone="+1 (555) 123-4567",
            is_active=True,
        )
    )

    # ── Tenant 2 (cross-tenant testing, no contact channels) ────────────
    session.add(
        Tenant(
            id=OTHER_TENANT_ID,
            name="Other Bistro",
            brand_colors={},
            is_active=True,
        )
    )
    session.add(
        Location(
            id=LOCATION_ID,
            tenant_id=TENANT_ID,
            name="Main Street",
            address="123 Main St, San Francisco",
        )
    )
    await session.commit()

    # ── Codes ───────────────────────────────────────────────────────────
    batch = await CodeRegistryService(session).issue_batch(
        tenant_id=TENANT_ID,
        count=4,
        label_prefix="Table",
        label_scheme=LabelScheme.LOCATION,
        location_id=LOCATION_ID,
        batch_id=BATCH_ID,
    )
    demo_code = batch.codes[0].code

    # ── Scans, submissions and clicks ───────────────────────────────────
    scans = ScanRecorder(session)
    submissions = SubmissionService(session)
    attribution = AttributionService(session)
    for index, (rating, comment, clicks) in enumerate(SAMPLE_REVIEWS):
        session_id = generate_session_id()
        await scans.record_scan(
            code_id=demo_code.id,
            session_id=session_id,
            ip_fingerprint=fingerprint_ip(f"203.0.113.{index + 10}"),
            user_agent=DEMO_USER_AGENT,
        )
        result = await submissions.submit(
            code_id=demo_code.id,
            session_id=session_id,
            rating=rating,
            comment=comment,
        )
        for cta in clicks:
            await attribution.record_click(result.submission.id, cta)

    # A scan that never turned into a submission
    await scans.record_scan(
        code_id=batch.codes[1].code.id,
        session_id=generate_session_id(),
        ip_fingerprint=fingerprint_ip("198.51.100.7"),
        user_agent=DEMO_USER_AGENT,
    )

    return batch


async def main() -> None:
    async with async_session_maker() as session:
        batch = await seed(session)

    print("=" * 60)
    print("  Demo seed data created successfully!")
    print("=" * 60)
    print()
    print(f"  Tenant ID (primary): {TENANT_ID}")
    print(f"  Tenant ID (other):   {OTHER_TENANT_ID}")
    print(f"  Location ID:         {LOCATION_ID}")
    print()
    print(f"  Batch {batch.batch_id}:")
    for item in batch.codes:
        print(f"    {item.code.label:<28} {build_code_url(item.code.short_code)}")
    print()
    print(f"  Submissions: {len(SAMPLE_REVIEWS)} on {batch.codes[0].code.short_code}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
