"""
Initial schema: Create the blogs table.

Revision ID: 0001
Revises:
Create Date: 2026-10-19

This migration creates the blog store:
- blogs: Blog posts with JSONB banner/images/tags, unique slug and
  visibility check
- GIN indexes for tag containment and English full-text search
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# Revision identifiers, used by Alembic
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

SEARCH_DOCUMENT = (
    "coalesce(title, '') || ' ' || coalesce(subtitle, '') || ' ' || coalesce(body, '')"
)


def upgrade() -> None:
    """Apply schema changes for this revision."""
    op.create_table(
        "blogs",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("subtitle", sa.String(length=300), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("read_time", sa.Integer(), nullable=False),
        sa.Column("author", sa.String(length=100), nullable=False),
        sa.Column("visibility", sa.String(length=10), nullable=False),
        sa.Column("banner", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "images",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column(
            "tags",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "visibility IN ('public', 'private', 'draft')",
            name="ck_blogs_visibility",
        ),
    )
    op.create_index("ix_blogs_slug", "blogs", ["slug"], unique=True)
    op.create_index("ix_blogs_visibility", "blogs", ["visibility"], unique=False)
    op.create_index("ix_blogs_date", "blogs", ["date"], unique=False)
    op.create_index("ix_blogs_tags_gin", "blogs", ["tags"], unique=False, postgresql_using="gin")
    op.create_index(
        "ix_blogs_search_gin",
        "blogs",
        [sa.text(f"to_tsvector('english', {SEARCH_DOCUMENT})")],
        unique=False,
        postgresql_using="gin",
    )


def downgrade() -> None:
    """Revert schema changes for this revision."""
    op.drop_index("ix_blogs_search_gin", table_name="blogs")
    op.drop_index("ix_blogs_tags_gin", table_name="blogs")
    op.drop_index("ix_blogs_date", table_name="blogs")
    op.drop_index("ix_blogs_visibility", table_name="blogs")
    op.drop_index("ix_blogs_slug", table_name="blogs")
    op.drop_table("blogs")
