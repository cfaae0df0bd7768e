"""baseline: badges and api_keys

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-18

Certificate records (with cached raster renderings per outlook) and
hashed API keys.
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_baseline"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Certificate records - commit_id is the public identifier
    op.create_table(
        "badges",
        sa.Column("commit_id", sa.String(255), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "valid",
                "expired",
                "revoked",
                name="badge_status",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("issuer", sa.String(255), nullable=False),
        sa.Column("issue_date", sa.String(10), nullable=False),
        sa.Column("software_name", sa.String(255), nullable=False),
        sa.Column("software_version", sa.String(100), nullable=False),
        sa.Column("software_url", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("expiry_date", sa.String(10), nullable=True),
        sa.Column("issuer_url", sa.Text(), nullable=True),
        sa.Column("custom_config", sa.Text(), nullable=True),
        sa.Column("last_review", sa.String(10), nullable=True),
        sa.Column("covered_version", sa.String(100), nullable=True),
        sa.Column("repository_link", sa.Text(), nullable=True),
        sa.Column("public_note", sa.Text(), nullable=True),
        sa.Column("internal_note", sa.Text(), nullable=True),
        sa.Column("contact_details", sa.Text(), nullable=True),
        sa.Column("certificate_name", sa.String(255), nullable=True),
        sa.Column("specialty_domain", sa.String(255), nullable=True),
        sa.Column("software_sc_id", sa.String(255), nullable=True),
        sa.Column("software_sc_url", sa.Text(), nullable=True),
        # Default (no-override) raster renderings, cleared on every edit
        sa.Column("badge_png_content", sa.LargeBinary(), nullable=True),
        sa.Column("badge_jpg_content", sa.LargeBinary(), nullable=True),
        sa.Column("certificate_png_content", sa.LargeBinary(), nullable=True),
        sa.Column("certificate_jpg_content", sa.LargeBinary(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("commit_id"),
    )

    # API keys - only the sha256 of the raw key is stored
    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("key_hash", sa.String(64), nullable=False),
        sa.Column("key_prefix", sa.String(16), nullable=False),
        sa.Column("can_read", sa.Boolean(), nullable=False),
        sa.Column("can_write", sa.Boolean(), nullable=False),
        sa.Column("can_delete", sa.Boolean(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "active",
                "revoked",
                name="api_key_status",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_api_keys_key_hash", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_table("badges")
