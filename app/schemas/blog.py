"""
Blog request and response schemas.

Scalar fields are validated by :class:`BlogFields` (create) and
:class:`BlogPatch` (update). Once the banner and gallery inputs have been
resolved to :data:`~app.schemas.media.ImageRef` values they are combined
into :class:`BlogCreate` / :class:`BlogUpdate` and handed to the
repository. :class:`BlogResponse` is the camelCase view returned to
clients.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from starlette.datastructures import UploadFile

from app.configs.settings import MAX_SUBTITLE_LENGTH, MAX_TITLE_LENGTH
from app.schemas.media import ImageRef
from app.utils.helpers import normalize_tags

Visibility = Literal["public", "private", "draft"]

Title = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_TITLE_LENGTH),
]
Subtitle = Annotated[str, StringConstraints(strip_whitespace=True, max_length=MAX_SUBTITLE_LENGTH)]
Body = Annotated[str, StringConstraints(min_length=1)]


class BlogFields(BaseModel):
    """Scalar fields accepted when creating a blog."""

    model_config = ConfigDict(populate_by_name=True)

    title: Title = Field(
        description="Blog title",
        examples=["Getting Started with FastAPI"],
    )
    subtitle: Subtitle | None = Field(default=None, description="Optional subtitle")
    body: Body = Field(description="Blog body (free text)")
    tags: list[str] = Field(
        default_factory=list,
        description="Tags, lowercased and de-duplicated",
        examples=[["python", "fastapi"]],
    )
    visibility: Visibility = Field(default="draft", description="Blog visibility")
    date: datetime | None = Field(default=None, description="Publication date, defaults to now")

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str]:
        """Accept a comma separated string or a list and normalize it."""
        return normalize_tags(v)


class BlogPatch(BaseModel):
    """Scalar fields accepted when updating a blog (all optional)."""

    model_config = ConfigDict(populate_by_name=True)

    title: Title | None = None
    subtitle: Subtitle | None = None
    body: Body | None = None
    tags: list[str] | None = None
    visibility: Visibility | None = None
    date: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str] | None:
        return None if v is None else normalize_tags(v)


class BlogCreate(BlogFields):
    """A fully resolved blog draft, ready to be inserted."""

    banner: ImageRef
    images: list[ImageRef] = Field(default_factory=list)


class BlogUpdate(BlogPatch):
    """A resolved patch; unset fields are left untouched."""

    banner: ImageRef | None = None
    images: list[ImageRef] | None = None


class BlogResponse(BaseModel):
    """Blog as returned to API clients."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: UUID
    title: str
    subtitle: str | None = None
    body: str
    banner: ImageRef | None = None
    images: list[ImageRef] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    visibility: Visibility
    slug: str
    read_time: int = Field(alias="readTime")
    author: str
    date: datetime
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


type ImageInput = UploadFile | ImageRef


@dataclass
class BlogPayload:
    """
    Raw create/update input, parsed from JSON or multipart form data.

    ``banner`` and ``images`` are ``None`` when the client did not send
    them, which for updates means "leave unchanged".

    Attributes:
        fields: Scalar fields as submitted.
        banner: Uploaded file, URL string or hosted image.
        images: Uploaded files, URL strings and hosted images, in order.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    banner: ImageInput | None = None
    images: list[ImageInput] | None = None
