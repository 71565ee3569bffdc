# app/dependencies/dependencies.py

"""Application dependencies: services, query objects and request payload parsing."""

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Query, Request
from orjson import JSONDecodeError
from orjson import loads as orjson_loads
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData, UploadFile

from app.db import get_session
from app.errors import ValidationError
from app.repositories import BlogRepository
from app.schemas.blog import BlogPayload, ImageInput, Visibility
from app.schemas.media import to_image_ref
from app.services import BlogService, MediaService
from app.services.storage import StorageService, get_storage_service
from app.utils.helpers import normalize_tags

SCALAR_FIELDS = ("title", "subtitle", "body", "date", "visibility")
# Fields a blank form value resets rather than ignores
CLEARABLE_FORM_FIELDS = ("subtitle",)
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def get_blog_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BlogRepository:
    """Repository bound to the request's database session."""
    return BlogRepository(session)


BlogRepoDep = Annotated[BlogRepository, Depends(get_blog_repository)]
StorageDep = Annotated[StorageService, Depends(get_storage_service)]


def get_media_service(storage: StorageDep) -> MediaService:
    return MediaService(storage)


MediaDep = Annotated[MediaService, Depends(get_media_service)]


def get_blog_service(repo: BlogRepoDep, media: MediaDep) -> BlogService:
    """
    Dependency to build the BlogService.

    Parameters
    ----------
    repo : BlogRepository
        Repository bound to the request session.
    media : MediaService
        Media service over the shared media store.

    Returns
    -------
    BlogService
        Service instance for the current request.
    """
    return BlogService(repo, media)


BlogServiceDep = Annotated[BlogService, Depends(get_blog_service)]


@dataclass(frozen=True)
class BlogListQuery:
    """
    Query container for blog listing and filters.

    Parameters
    ----------
    page : int
        1-based page number.
    limit : int
        Page size.
    visibility : Visibility | None
        Optional exact visibility filter.
    tags : list[str]
        Tags parsed from a comma-separated string.
    search : str | None
        Optional full-text query.
    """

    page: int = 1
    limit: int = 10
    visibility: Visibility | None = None
    tags: tuple[str, ...] = ()
    search: str | None = None


def get_blog_list_query(
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Blogs per page")] = 10,
    visibility: Annotated[
        Visibility | None,
        Query(description="Optional visibility filter"),
    ] = None,
    tags: Annotated[
        str | None,
        Query(description="Comma-separated tags; matches blogs with any of them"),
    ] = None,
    search: Annotated[str | None, Query(description="Full-text search query")] = None,
) -> BlogListQuery:
    """
    Dependency to construct `BlogListQuery` from query parameters.

    Returns
    -------
    BlogListQuery
        Aggregated query parameters object.
    """
    return BlogListQuery(
        page=page,
        limit=limit,
        visibility=visibility,
        tags=tuple(normalize_tags(tags)),
        search=search.strip() if search and search.strip() else None,
    )


BlogListQueryDep = Annotated[BlogListQuery, Depends(get_blog_list_query)]


@dataclass(frozen=True)
class PaginationQuery:
    page: int = 1
    limit: int = 10


def get_pagination_query(
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Blogs per page")] = 10,
) -> PaginationQuery:
    return PaginationQuery(page=page, limit=limit)


PaginationDep = Annotated[PaginationQuery, Depends(get_pagination_query)]


def _form_image(value: UploadFile | str) -> ImageInput | None:
    """A form value as an image input; empty file parts and blank strings are absent."""
    if isinstance(value, UploadFile):
        return value if value.filename else None
    return value.strip() or None


def _json_image(value: Any) -> ImageInput | None:
    if value is None or value == "":
        return None
    try:
        return to_image_ref(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _payload_from_form(form: FormData) -> BlogPayload:
    fields: dict[str, Any] = {
        name: value
        for name in SCALAR_FIELDS
        if isinstance(value := form.get(name), str) and value != ""
    }
    fields.update({name: None for name in CLEARABLE_FORM_FIELDS if form.get(name) == ""})
    if "tags" in form:
        fields["tags"] = [tag for tag in form.getlist("tags") if isinstance(tag, str)]

    banner = _form_image(form["banner"]) if "banner" in form else None

    images: list[ImageInput] | None = None
    if "images" in form:
        # empty file parts and blank strings alone mean no gallery was sent
        images = [item for value in form.getlist("images") if (item := _form_image(value))] or None

    return BlogPayload(fields=fields, banner=banner, images=images)


def _payload_from_json(body: Any) -> BlogPayload:
    if not isinstance(body, dict):
        msg = "Request body must be a JSON object"
        raise ValidationError(msg)

    fields = {name: body[name] for name in (*SCALAR_FIELDS, "tags") if name in body}
    banner = _json_image(body.get("banner"))

    images: list[ImageInput] | None = None
    if (raw_images := body.get("images")) is not None:
        if not isinstance(raw_images, list):
            raw_images = [raw_images]
        images = [item for value in raw_images if (item := _json_image(value)) is not None]

    return BlogPayload(fields=fields, banner=banner, images=images)


async def read_blog_payload(request: Request) -> BlogPayload:
    """
    Parse a create or update request body.

    Multipart and urlencoded bodies may carry ``banner`` as a file or a
    URL and ``images`` as repeated files and/or URLs. JSON bodies carry
    URLs or ``{publicId, url}`` objects.

    Parameters
    ----------
    request : Request
        Incoming request.

    Returns
    -------
    BlogPayload
        Scalar fields plus unresolved image inputs.

    Raises
    ------
    ValidationError
        If the body cannot be parsed.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        return _payload_from_form(await request.form())

    raw = await request.body()
    if not raw:
        return BlogPayload()
    try:
        body = orjson_loads(raw)
    except JSONDecodeError as e:
        msg = "Request body is not valid JSON"
        raise ValidationError(msg) from e
    return _payload_from_json(body)


BlogPayloadDep = Annotated[BlogPayload, Depends(read_blog_payload)]
