"""Blog database model using SQLModel."""

from datetime import UTC, datetime
from typing import Any, cast
from uuid import UUID, uuid4

from pydantic import ConfigDict
from sqlalchemy import CheckConstraint, DateTime, Index, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from app.configs.settings import MAX_SUBTITLE_LENGTH, MAX_TITLE_LENGTH, settings

# Must stay identical to the search predicate in BlogRepository.find
SEARCH_DOCUMENT = (
    "coalesce(title, '') || ' ' || coalesce(subtitle, '') || ' ' || coalesce(body, '')"
)
VISIBILITIES = ("public", "private", "draft")


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class BlogDB(SQLModel, table=True):
    """
    Blog database model for PostgreSQL.

    ``banner`` and ``images`` are JSONB so that every entry keeps its own
    shape: a bare URL string or a ``{"publicId", "url"}`` object.
    """

    __tablename__ = cast("declared_attr[str]", "blogs")

    __table_args__ = (
        Index("ix_blogs_tags_gin", "tags", postgresql_using="gin"),
        CheckConstraint(
            f"visibility IN {VISIBILITIES!r}",
            name="ck_blogs_visibility",
        ),
        Index(
            "ix_blogs_search_gin",
            text(f"to_tsvector('english', {SEARCH_DOCUMENT})"),
            postgresql_using="gin",
        ),
    )

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="Blog ID",
    )

    title: str = Field(
        sa_column=Column(String(MAX_TITLE_LENGTH), nullable=False),
        description="Blog title",
    )
    subtitle: str | None = Field(
        default=None,
        sa_column=Column(String(MAX_SUBTITLE_LENGTH)),
        description="Blog subtitle",
    )
    body: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Blog body",
    )
    slug: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True),
        description="URL-friendly slug derived from the title (unique)",
    )
    read_time: int = Field(
        default=0,
        nullable=False,
        description="Estimated reading time in minutes",
    )
    author: str = Field(
        default_factory=lambda: settings.DEFAULT_AUTHOR,
        sa_column=Column(String(100), nullable=False),
        description="Author display name",
    )
    visibility: str = Field(
        default="draft",
        sa_column=Column(String(10), nullable=False, index=True),
        description="Blog visibility (public, private, draft)",
    )

    banner: Any = Field(
        default=None,
        sa_column=Column(JSONB),
        description="Banner image: URL string or {publicId, url}",
    )
    images: list[Any] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default=text("'[]'::jsonb")),
        description="Gallery images: URL strings or {publicId, url}",
    )
    tags: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default=text("'[]'::jsonb")),
        description="Lowercase tags",
    )

    date: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Publication date",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Creation timestamp",
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
        description="Last update timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "title": "Getting Started with FastAPI",
                "slug": "getting-started-with-fastapi",
                "body": "FastAPI is a modern web framework...",
                "banner": {
                    "publicId": "blog-images/blog_1718000000000_cover",
                    "url": "https://res.cloudinary.com/demo/image/upload/blog-images/cover.jpg",
                },
                "images": [],
                "tags": ["python", "fastapi"],
                "visibility": "draft",
                "read_time": 1,
            },
        },
    )
