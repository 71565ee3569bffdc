"""
Image reference and media store result schemas.

A blog's ``banner`` and ``images`` entries are :data:`ImageRef` values:
either a bare URL string (an image that was never registered with the
media store) or a :class:`HostedImage` carrying the store's ``publicId``.
Raw JSON is turned into one of the two variants once, by
:func:`to_image_ref`, and every other layer works with the typed union.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class HostedImage(BaseModel):
    """An image registered with the media store."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    public_id: str = Field(
        alias="publicId",
        min_length=1,
        description="Media store identifier",
        examples=["blog-images/blog_1718000000000_cover"],
    )
    url: str = Field(
        description="Delivery URL",
        examples=["https://res.cloudinary.com/demo/image/upload/v1/blog-images/cover.jpg"],
    )


type ImageRef = HostedImage | str


def to_image_ref(value: Any) -> ImageRef:
    """
    Resolve a stored or submitted image value into an :data:`ImageRef`.

    Args:
        value: A URL string, a ``{publicId, url}`` mapping or a HostedImage.

    Returns:
        ImageRef: The typed variant.

    Raises:
        ValueError: If the value is neither a string nor a valid mapping.
    """
    if isinstance(value, HostedImage | str):
        return value
    if isinstance(value, dict):
        return HostedImage.model_validate(value)
    msg = f"Unsupported image reference: {value!r}"
    raise ValueError(msg)


def public_id_of(ref: ImageRef | None) -> str | None:
    """Return the media store id of a reference, ``None`` for bare URLs."""
    return ref.public_id if isinstance(ref, HostedImage) else None


def dump_image_ref(ref: ImageRef) -> dict[str, str] | str:
    """Serialize a reference to its JSON column form."""
    if isinstance(ref, HostedImage):
        return ref.model_dump(by_alias=True)
    return ref


class UploadedImage(BaseModel):
    """Result of a successful media store upload."""

    model_config = ConfigDict(populate_by_name=True)

    public_id: str = Field(alias="publicId")
    url: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    size: int | None = Field(default=None, description="Size in bytes")

    def as_hosted(self) -> HostedImage:
        """Reduce to the ``{publicId, url}`` pair persisted on a blog."""
        return HostedImage(public_id=self.public_id, url=self.url)


class DeleteResult(BaseModel):
    success: bool
    result: str


class BulkDeleteResult(BaseModel):
    """Outcome of a bulk delete; ``partial`` means some ids were not removed."""

    model_config = ConfigDict(populate_by_name=True)

    deleted: dict[str, str] = Field(default_factory=dict)
    deleted_counts: dict[str, Any] = Field(default_factory=dict, alias="deletedCounts")
    partial: bool = False


class FailedUpload(BaseModel):
    filename: str | None
    error: str


class MultiUploadResult(BaseModel):
    """Aggregated outcome of uploading several files concurrently."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    uploaded: list[UploadedImage] = Field(default_factory=list)
    failed: list[FailedUpload] = Field(default_factory=list)
    total: int = 0
    success_count: int = Field(default=0, alias="successCount")
    failure_count: int = Field(default=0, alias="failureCount")


class UploadSummary(BaseModel):
    """Image upload outcome attached to create and update responses."""

    model_config = ConfigDict(populate_by_name=True)

    success_count: int = Field(default=0, alias="successCount")
    failure_count: int = Field(default=0, alias="failureCount")
    failed: list[FailedUpload] = Field(default_factory=list)


class UrlUploadRequest(BaseModel):
    """Body of ``POST /api/blogs/upload/url``."""

    model_config = ConfigDict(populate_by_name=True)

    url: HttpUrl = Field(description="Image URL to host")
    public_id: str | None = Field(default=None, alias="publicId")


class ImageDetails(BaseModel):
    """Metadata reported by the media store for one image."""

    model_config = ConfigDict(populate_by_name=True)

    public_id: str = Field(alias="publicId")
    url: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    size: int | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
