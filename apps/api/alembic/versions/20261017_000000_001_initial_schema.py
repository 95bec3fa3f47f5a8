"""Initial schema: tenants, locations, issued codes, scans, submissions, clicks.

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _id() -> sa.Column:
    return sa.Column("id", sa.UUID(), nullable=False, server_default=sa.text("uuid_generate_v4()"))


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # Create enum types
    op.execute("CREATE TYPE code_status AS ENUM ('active', 'archived')")
    op.execute(
        "CREATE TYPE last_cta AS ENUM ('none', 'google_copy', 'google_direct', 'contact')"
    )
    op.execute(
        "CREATE TYPE cta_type AS ENUM "
        "('google_copy', 'google_direct', 'contact_email', 'contact_phone')"
    )

    # Create tenants table
    op.create_table(
        "tenants",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("logo_url", sa.String(1024), nullable=True),
        sa.Column("brand_colors", postgresql.JSONB(), nullable=False, server_default="{}"),
        sa.Column("google_place_id", sa.String(255), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tenants")),
    )

    # Create locations table
    op.create_table(
        "locations",
        _id(),
        sa.Column("tenant_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name=op.f("fk_locations_tenant_id_tenants"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_locations")),
    )
    op.create_index(op.f("ix_locations_tenant_id"), "locations", ["tenant_id"], unique=False)

    # Create issued_codes table
    op.create_table(
        "issued_codes",
        _id(),
        sa.Column("short_code", sa.String(32), nullable=False),
        sa.Column("tenant_id", sa.UUID(), nullable=False),
        sa.Column("location_id", sa.UUID(), nullable=True),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("batch_id", sa.String(64), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM("active", "archived", name="code_status", create_type=False),
            nullable=False,
            server_default="active",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name=op.f("fk_issued_codes_tenant_id_tenants"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["location_id"],
            ["locations.id"],
            name=op.f("fk_issued_codes_location_id_locations"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_issued_codes")),
    )
    op.create_index(
        op.f("ix_issued_codes_short_code"), "issued_codes", ["short_code"], unique=True
    )
    op.create_index(op.f("ix_issued_codes_tenant_id"), "issued_codes", ["tenant_id"], unique=False)
    op.create_index(
        "ix_issued_codes_tenant_batch", "issued_codes", ["tenant_id", "batch_id"], unique=False
    )

    # Create scan_events table
    op.create_table(
        "scan_events",
        _id(),
        sa.Column("code_id", sa.UUID(), nullable=False),
        sa.Column("tenant_id", sa.UUID(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("ip_fingerprint", sa.String(64), nullable=False),
        sa.Column("user_agent", sa.String(512), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["code_id"],
            ["issued_codes.id"],
            name=op.f("fk_scan_events_code_id_issued_codes"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name=op.f("fk_scan_events_tenant_id_tenants"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_scan_events")),
    )
    op.create_index(op.f("ix_scan_events_tenant_id"), "scan_events", ["tenant_id"], unique=False)
    op.create_index(
        "ix_scan_events_code_session", "scan_events", ["code_id", "session_id"], unique=False
    )

    # Create review_submissions table
    op.create_table(
        "review_submissions",
        _id(),
        sa.Column("code_id", sa.UUID(), nullable=False),
        sa.Column("tenant_id", sa.UUID(), nullable=False),
        sa.Column("scan_id", sa.UUID(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("google_clicked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("contact_clicked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "last_cta",
            postgresql.ENUM(
                "none", "google_copy", "google_direct", "contact",
                name="last_cta",
                create_type=False,
            ),
            nullable=False,
            server_default="none",
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "rating >= 1 AND rating <= 5",
            name=op.f("ck_review_submissions_rating_range"),
        ),
        sa.ForeignKeyConstraint(
            ["code_id"],
            ["issued_codes.id"],
            name=op.f("fk_review_submissions_code_id_issued_codes"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["tenant_id"],
            ["tenants.id"],
            name=op.f("fk_review_submissions_tenant_id_tenants"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["scan_id"],
            ["scan_events.id"],
            name=op.f("fk_review_submissions_scan_id_scan_events"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_review_submissions")),
    )
    op.create_index(
        op.f("ix_review_submissions_code_id"), "review_submissions", ["code_id"], unique=False
    )
    op.create_index(
        op.f("ix_review_submissions_tenant_id"), "review_submissions", ["tenant_id"], unique=False
    )

    # Create cta_clicks table
    op.create_table(
        "cta_clicks",
        _id(),
        sa.Column("submission_id", sa.UUID(), nullable=False),
        sa.Column(
            "cta_type",
            postgresql.ENUM(
                "google_copy", "google_direct", "contact_email", "contact_phone",
                name="cta_type",
                create_type=False,
            ),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["submission_id"],
            ["review_submissions.id"],
            name=op.f("fk_cta_clicks_submission_id_review_submissions"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_cta_clicks")),
    )
    op.create_index(
        op.f("ix_cta_clicks_submission_id"), "cta_clicks", ["submission_id"], unique=False
    )


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table("cta_clicks")
    op.drop_table("review_submissions")
    op.drop_table("scan_events")
    op.drop_table("issued_codes")
    op.drop_table("locations")
    op.drop_table("tenants")

    # Drop enum types
    op.execute("DROP TYPE IF EXISTS cta_type")
    op.execute("DROP TYPE IF EXISTS last_cta")
    op.execute("DROP TYPE IF EXISTS code_status")
