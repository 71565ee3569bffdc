"""
Blog service.

Orchestrates the blog repository and the media service for every blog
operation. Image handling across the database and the media store is
best-effort and never rolled back:

- on update, superseded images are deleted first, then replacements are
  resolved; each step's failure is logged and the update continues;
- on delete, every known image is removed with one bulk call and the
  record is deleted whatever the outcome of that call.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import partial
from logging import getLogger
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.configs import file_logger
from app.errors import NotFoundError, ValidationError
from app.errors.validation import format_errors
from app.models.blog import BlogDB
from app.repositories.blog import BlogFilters, BlogRepository, derive_slug
from app.schemas.blog import BlogCreate, BlogFields, BlogPatch, BlogPayload, BlogUpdate, ImageInput
from app.schemas.envelope import Pagination
from app.schemas.media import (
    FailedUpload,
    HostedImage,
    ImageRef,
    UploadSummary,
    public_id_of,
    to_image_ref,
)
from app.services.media import MediaService, describe

logger = file_logger(getLogger(__name__))

REQUIRED_FIELDS_MESSAGE = "Title, banner, and body are required"

type IdExtractor = Callable[[ImageInput], str | None]


def _unique(ids: Iterable[str | None]) -> list[str]:
    return list(dict.fromkeys(i for i in ids if i))


def stored_refs(blog: BlogDB) -> tuple[ImageRef | None, list[ImageRef]]:
    """Banner and gallery of a stored blog as typed references."""
    banner = to_image_ref(blog.banner) if blog.banner else None
    return banner, [to_image_ref(image) for image in blog.images or []]


def hosted_by_url(*refs: ImageRef | None) -> dict[str, HostedImage]:
    """Hosted references keyed by their delivery URL."""
    return {ref.url: ref for ref in refs if isinstance(ref, HostedImage)}


def image_public_ids(blog: BlogDB) -> list[str]:
    """Every media store id referenced by a blog, banner first, without duplicates."""
    banner, images = stored_refs(blog)
    return _unique([public_id_of(banner), *(public_id_of(image) for image in images)])


@dataclass(frozen=True)
class ImageReconciliation:
    """
    Plan for replacing a blog's images during an update.

    The plan is computed without side effects. Executing it deletes
    ``superseded`` first and then resolves ``banner`` and ``images``.

    Attributes:
        superseded: Media store ids that no input re-uses any more.
        banner: Replacement banner input, ``None`` to keep the current one.
        images: Replacement gallery inputs, ``None`` to keep the current ones.
    """

    superseded: list[str]
    banner: ImageInput | None = None
    images: list[ImageInput] | None = None

    @classmethod
    def plan(
        cls,
        current_banner: ImageRef | None,
        current_images: list[ImageRef],
        payload: BlogPayload,
        extract_id: IdExtractor,
    ) -> "ImageReconciliation":
        """
        Work out which stored images a payload supersedes.

        An old id is superseded when its field is being replaced and
        neither the new inputs nor the untouched field still reference it.

        Args:
            current_banner: Banner currently stored on the blog.
            current_images: Gallery currently stored on the blog.
            payload: Incoming update.
            extract_id: Returns the media store id an input already refers
                to (hosted images and on-domain URLs), ``None`` otherwise.

        Returns:
            ImageReconciliation: The plan to execute.
        """
        replace_banner = payload.banner is not None
        replace_images = payload.images is not None
        new_inputs = ([payload.banner] if payload.banner is not None else []) + (payload.images or [])

        retained = {extract_id(item) for item in new_inputs}
        if not replace_banner:
            retained.add(public_id_of(current_banner))
        if not replace_images:
            retained.update(public_id_of(image) for image in current_images)

        candidates: list[str | None] = []
        if replace_banner:
            candidates.append(public_id_of(current_banner))
        if replace_images:
            candidates.extend(public_id_of(image) for image in current_images)

        return cls(
            superseded=_unique(c for c in candidates if c not in retained),
            banner=payload.banner,
            images=payload.images,
        )


def _validate[ModelT: BaseModel](model: type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = format_errors([dict(error) for error in e.errors()], request_errors=False)
        detail = "; ".join(f"{error['field']}: {error['message']}" for error in errors)
        raise ValidationError(detail=detail, errors=errors) from e


def _parse_id(blog_id: str) -> UUID:
    try:
        return UUID(blog_id)
    except ValueError as e:
        raise NotFoundError from e


class BlogService:
    """
    Blog operations over an injected repository and media service.

    Attributes:
        repo: Blog persistence.
        media: Image validation, upload and deletion.
    """

    def __init__(self, repo: BlogRepository, media: MediaService) -> None:
        self.repo = repo
        self.media = media

    def _existing_id(
        self,
        item: ImageInput,
        known: Mapping[str, HostedImage] | None = None,
    ) -> str | None:
        if isinstance(item, HostedImage):
            return item.public_id
        # Stored ids may carry a folder prefix the URL does not reveal
        if known and isinstance(item, str) and item in known:
            return known[item].public_id
        if isinstance(item, str) and self.media.storage.is_hosted_url(item):
            return self.media.storage.extract_public_id(item)
        return None

    async def list_blogs(
        self,
        filters: BlogFilters,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[BlogDB], Pagination]:
        """
        One page of blogs matching the filters, newest first.

        Returns:
            tuple[list[BlogDB], Pagination]: Blogs and ``{current, pages, total}``
        """
        blogs, total = await self.repo.find(filters, page=page, limit=limit)
        return blogs, Pagination.build(page, limit, total)

    async def list_by_tag(
        self,
        tag: str,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[BlogDB], Pagination]:
        """Public blogs carrying ``tag``."""
        filters = BlogFilters(visibility="public", tags=[tag.strip().lower()])
        return await self.list_blogs(filters, page=page, limit=limit)

    async def get_blog(self, id_or_slug: str) -> BlogDB:
        """
        Fetch a blog by id, falling back to its slug.

        Raises:
            NotFoundError: If no blog matches
        """
        if blog := await self.repo.find_one(id_or_slug):
            return blog
        raise NotFoundError

    async def get_by_slug(self, slug: str) -> BlogDB:
        """
        Fetch a blog by slug only.

        Raises:
            NotFoundError: If no blog has this slug
        """
        if blog := await self.repo.get_by_slug(slug):
            return blog
        raise NotFoundError

    async def create(self, payload: BlogPayload) -> tuple[BlogDB, UploadSummary]:
        """
        Create a blog, uploading or re-hosting its images first.

        The banner must resolve; gallery failures are reported in the
        returned summary and the blog is created with the images that did
        resolve.

        Args:
            payload: Parsed request input

        Returns:
            tuple[BlogDB, UploadSummary]: The new blog and the gallery outcome

        Raises:
            ValidationError: If required fields are missing or invalid, or the slug is taken
            UploadError: If the banner cannot be stored
            MediaLimitExceededError: If too many gallery images were sent
        """
        fields = payload.fields
        if not fields.get("title") or not fields.get("body") or payload.banner is None:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        blog_fields = _validate(BlogFields, fields)
        # Checked before any upload so a taken slug leaves nothing behind
        await self.repo.ensure_slug_available(derive_slug(blog_fields.title))
        self.media.check_count(len(payload.images or []))

        banner = await self.media.resolve(payload.banner)
        images, summary = await self.media.resolve_many(payload.images or [])

        blog = await self.repo.insert(
            BlogCreate(**blog_fields.model_dump(), banner=banner, images=images),
        )
        logger.info(
            f"Created blog {blog.id} ({blog.slug}) with {summary.success_count} images, "
            f"{summary.failure_count} failed",
        )
        return blog, summary

    async def _delete_superseded(self, blog_id: UUID, public_ids: list[str]) -> None:
        if not public_ids:
            return
        try:
            result = await self.media.storage.delete_many(public_ids)
        except Exception as e:
            logger.warning(f"Could not delete superseded images {public_ids} of blog {blog_id}: {e}")
            return
        if result.partial:
            logger.warning(f"Superseded images of blog {blog_id} only partially deleted: {result.deleted}")

    async def update(self, blog_id: str, payload: BlogPayload) -> tuple[BlogDB, UploadSummary]:
        """
        Patch a blog and reconcile its images.

        Superseded images are deleted before replacements are resolved.
        A URL matching an image already on the blog keeps that stored
        reference and its ``publicId``.
        Neither deletion nor upload failures abort the update: a failed
        banner leaves the stored banner in place, failed gallery items are
        dropped, and both are reported in the returned summary.

        Args:
            blog_id: Blog UUID
            payload: Parsed request input; absent fields are left unchanged

        Returns:
            tuple[BlogDB, UploadSummary]: The updated blog and the upload outcome

        Raises:
            NotFoundError: If the blog does not exist
            ValidationError: If a field is invalid or the new slug is taken
            MediaLimitExceededError: If too many gallery images were sent
        """
        record_id = _parse_id(blog_id)
        blog = await self.repo.get_by_id(record_id)
        if not blog:
            raise NotFoundError

        patch = _validate(BlogPatch, payload.fields)
        if patch.title is not None:
            await self.repo.ensure_slug_available(derive_slug(patch.title), exclude_id=record_id)
        if payload.images is not None:
            self.media.check_count(len(payload.images))

        current_banner, current_images = stored_refs(blog)
        known = hosted_by_url(current_banner, *current_images)
        plan = ImageReconciliation.plan(
            current_banner,
            current_images,
            payload,
            partial(self._existing_id, known=known),
        )

        await self._delete_superseded(record_id, plan.superseded)

        failed: list[FailedUpload] = []
        resolved = 0
        banner: ImageRef | None = None
        if plan.banner is not None:
            try:
                banner = await self.media.resolve(plan.banner, known)
                resolved += 1
            except Exception as e:
                logger.warning(f"Banner replacement failed for blog {record_id}: {e}")
                failed.append(FailedUpload(filename=describe(plan.banner), error=str(e)))

        images: list[ImageRef] | None = None
        if plan.images is not None:
            images, gallery = await self.media.resolve_many(plan.images, known)
            resolved += gallery.success_count
            failed.extend(gallery.failed)

        update = BlogUpdate(**patch.model_dump(exclude_unset=True), banner=banner, images=images)
        updated = await self.repo.update(record_id, update)
        if not updated:
            raise NotFoundError

        summary = UploadSummary(success_count=resolved, failure_count=len(failed), failed=failed)
        logger.info(f"Updated blog {record_id}, removed {len(plan.superseded)} superseded images")
        return updated, summary

    async def delete(self, blog_id: str) -> BlogDB:
        """
        Delete a blog and, best-effort, every image it references.

        One bulk delete is issued for all known ids (none when the blog has
        no hosted images). The record is removed whatever its outcome.

        Args:
            blog_id: Blog UUID

        Returns:
            BlogDB: The deleted blog

        Raises:
            NotFoundError: If the blog does not exist
        """
        record_id = _parse_id(blog_id)
        blog = await self.repo.get_by_id(record_id)
        if not blog:
            raise NotFoundError

        public_ids = image_public_ids(blog)
        if public_ids:
            try:
                result = await self.media.storage.delete_many(public_ids)
            except Exception as e:
                logger.error(f"Failed to delete images {public_ids} of blog {record_id}: {e}")
            else:
                if result.partial:
                    logger.warning(f"Images of blog {record_id} only partially deleted: {result.deleted}")

        deleted = await self.repo.delete(record_id)
        if not deleted:
            raise NotFoundError
        logger.info(f"Deleted blog {record_id} and {len(public_ids)} images")
        return deleted
