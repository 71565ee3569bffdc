# app/routes/blog.py

"""
Blog Routes.

Provides CRUD endpoints and listing/search for blogs. Every endpoint
answers with the standard envelope ``{success, message?, data?, error?,
pagination?, uploads?}``.

Summary
-------
Endpoints include:
  - List blogs (visibility, tags, full-text search, pagination)
  - List public blogs by tag
  - Get blog by slug
  - Get blog by id or slug
  - Create blog (JSON or multipart with ``banner``/``images``)
  - Update blog (JSON or multipart), reconciling stored images
  - Delete blog, cascading to its stored images

Dependencies
------------
  - `BlogServiceDep`: Blog service bound to the request session and the shared media store.
  - `BlogPayloadDep`: Create/update body parsed from JSON or form data.
"""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from app.decorators import envelope_errors
from app.dependencies import BlogListQueryDep, BlogPayloadDep, BlogServiceDep, PaginationDep
from app.models import BlogDB
from app.repositories import BlogFilters
from app.schemas.blog import BlogResponse
from app.schemas.envelope import Envelope, respond

router = APIRouter(prefix="/api/blogs", tags=["📝 Blogs"])

BLOG_EXAMPLE: dict[str, Any] = {
    "id": "123e4567-e89b-12d3-a456-426614174000",
    "title": "Getting Started with FastAPI",
    "subtitle": "Build a typed API in minutes",
    "body": "FastAPI is a modern, fast web framework...",
    "banner": {
        "publicId": "blog-images/blog_1718000000000_cover",
        "url": "https://res.cloudinary.com/demo/image/upload/v1/blog-images/blog_1718000000000_cover.jpg",
    },
    "images": [],
    "tags": ["python", "fastapi"],
    "visibility": "public",
    "slug": "getting-started-with-fastapi",
    "readTime": 3,
    "author": "Muheet Bharti",
    "date": "2025-01-01T00:00:00Z",
    "createdAt": "2025-01-01T00:00:00Z",
    "updatedAt": None,
}

NOT_FOUND_RESPONSE: dict[int | str, dict[str, Any]] = {
    404: {
        "description": "Blog not found",
        "content": {"application/json": {"example": {"success": False, "message": "Blog not found"}}},
    },
}

SERVER_ERROR_RESPONSE: dict[int | str, dict[str, Any]] = {
    500: {
        "description": "Unexpected failure",
        "content": {
            "application/json": {
                "example": {"success": False, "message": "Server error", "error": "connection refused"},
            },
        },
    },
}

BLOG_BODY_DOC: dict[str, Any] = {
    "requestBody": {
        "content": {
            "application/json": {
                "example": {
                    "title": "Getting Started with FastAPI",
                    "body": "FastAPI is a modern, fast web framework...",
                    "banner": "https://example.com/cover.jpg",
                    "images": [
                        {"publicId": "blog_1718000000000_diagram", "url": "https://res.cloudinary.com/demo/image/upload/blog_1718000000000_diagram.png"},
                    ],
                    "tags": "python, fastapi",
                    "visibility": "public",
                },
            },
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "subtitle": {"type": "string"},
                        "body": {"type": "string"},
                        "tags": {"type": "string", "description": "Comma-separated or repeated"},
                        "visibility": {"type": "string", "enum": ["public", "private", "draft"]},
                        "date": {"type": "string", "format": "date-time"},
                        "banner": {"type": "string", "format": "binary", "description": "File or URL"},
                        "images": {
                            "type": "array",
                            "items": {"type": "string", "format": "binary"},
                            "description": "Files and/or URLs",
                        },
                    },
                },
            },
        },
    },
}


def to_response(blogs: list[BlogDB]) -> list[BlogResponse]:
    return [BlogResponse.model_validate(blog) for blog in blogs]


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="List blogs",
    description="List blogs newest first, filtered by visibility, tags (any match) and full-text search.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": [BLOG_EXAMPLE],
                        "pagination": {"current": 1, "pages": 1, "total": 1},
                    },
                },
            },
        },
        **SERVER_ERROR_RESPONSE,
    },
    operation_id="blogs_list",
)
@envelope_errors("Error fetching blogs")
async def list_blogs(query: BlogListQueryDep, service: BlogServiceDep) -> ORJSONResponse:
    """
    List blogs with filters and pagination.

    Parameters
    ----------
    query : BlogListQuery
        Page, limit and filters.
    service : BlogService
        Blog service dependency.

    Returns
    -------
    ORJSONResponse
        Envelope with ``data`` and ``pagination``.
    """
    filters = BlogFilters(visibility=query.visibility, tags=list(query.tags), search=query.search)
    blogs, pagination = await service.list_blogs(filters, page=query.page, limit=query.limit)
    return respond(data=to_response(blogs), pagination=pagination)


@router.get(
    "/tag/{tag}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="List public blogs by tag",
    description="Public blogs carrying the tag, newest first.",
    responses=SERVER_ERROR_RESPONSE,
    operation_id="blogs_list_by_tag",
)
@envelope_errors("Error fetching blogs by tag")
async def list_blogs_by_tag(
    tag: str,
    pagination: PaginationDep,
    service: BlogServiceDep,
) -> ORJSONResponse:
    """
    List public blogs for one tag.

    Parameters
    ----------
    tag : str
        Tag, matched case-insensitively.
    pagination : PaginationQuery
        Page and limit.
    service : BlogService
        Blog service dependency.

    Returns
    -------
    ORJSONResponse
        Envelope with ``data`` and ``pagination``.
    """
    blogs, page_info = await service.list_by_tag(tag, page=pagination.page, limit=pagination.limit)
    return respond(data=to_response(blogs), pagination=page_info)


@router.get(
    "/slug/{slug}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Get blog by slug",
    responses={
        200: {"content": {"application/json": {"example": {"success": True, "data": BLOG_EXAMPLE}}}},
        **NOT_FOUND_RESPONSE,
        **SERVER_ERROR_RESPONSE,
    },
    operation_id="blogs_get_by_slug",
)
@envelope_errors("Error fetching blog")
async def get_blog_by_slug(slug: str, service: BlogServiceDep) -> ORJSONResponse:
    blog = await service.get_by_slug(slug)
    return respond(data=BlogResponse.model_validate(blog))


@router.get(
    "/{blog_id}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Get blog by id or slug",
    description="Looks the blog up by UUID first, then by slug.",
    responses={
        200: {"content": {"application/json": {"example": {"success": True, "data": BLOG_EXAMPLE}}}},
        **NOT_FOUND_RESPONSE,
        **SERVER_ERROR_RESPONSE,
    },
    operation_id="blogs_get",
)
@envelope_errors("Error fetching blog")
async def get_blog(blog_id: str, service: BlogServiceDep) -> ORJSONResponse:
    """
    Get a blog by UUID, falling back to slug.

    Parameters
    ----------
    blog_id : str
        Blog UUID or slug.
    service : BlogService
        Blog service dependency.

    Returns
    -------
    ORJSONResponse
        Envelope with the blog as ``data``.
    """
    blog = await service.get_blog(blog_id)
    return respond(data=BlogResponse.model_validate(blog))


@router.post(
    "",
    response_class=ORJSONResponse,
    response_model=Envelope,
    status_code=HTTP_201_CREATED,
    summary="Create a blog",
    description=(
        "Create a blog from JSON or multipart form data. ``banner`` and ``images`` accept "
        "uploaded files, external URLs (re-hosted) or media store URLs (kept as-is). "
        "Gallery failures do not block creation and are reported under ``uploads``."
    ),
    responses={
        201: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Blog created successfully",
                        "data": BLOG_EXAMPLE,
                        "uploads": {"successCount": 0, "failureCount": 0, "failed": []},
                    },
                },
            },
        },
        400: {
            "description": "Missing fields, invalid image or duplicate slug",
            "content": {
                "application/json": {
                    "example": {"success": False, "message": "Title, banner, and body are required"},
                },
            },
        },
        **SERVER_ERROR_RESPONSE,
    },
    openapi_extra=BLOG_BODY_DOC,
    operation_id="blogs_create",
)
@envelope_errors("Error creating blog")
async def create_blog(payload: BlogPayloadDep, service: BlogServiceDep) -> ORJSONResponse:
    """
    Create a blog, resolving its banner and gallery images.

    Parameters
    ----------
    payload : BlogPayload
        Parsed request body.
    service : BlogService
        Blog service dependency.

    Returns
    -------
    ORJSONResponse
        201 envelope with the blog under ``data``. Gallery outcomes are
        reported next to it under ``uploads`` as
        ``{successCount, failureCount, failed}``, so a partial failure
        (e.g. 3 of 5 images stored) reads ``uploads.successCount == 3``.
    """
    blog, uploads = await service.create(payload)
    return respond(
        HTTP_201_CREATED,
        message="Blog created successfully",
        data=BlogResponse.model_validate(blog),
        uploads=uploads,
    )


@router.put(
    "/{blog_id}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Update a blog",
    description=(
        "Patch a blog. A new banner or gallery replaces the stored one and superseded images "
        "are deleted from the media store first. Image failures are logged and reported under "
        "``uploads`` without aborting the update."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Blog updated successfully",
                        "data": BLOG_EXAMPLE,
                        "uploads": {"successCount": 1, "failureCount": 0, "failed": []},
                    },
                },
            },
        },
        **NOT_FOUND_RESPONSE,
        **SERVER_ERROR_RESPONSE,
    },
    openapi_extra=BLOG_BODY_DOC,
    operation_id="blogs_update",
)
@envelope_errors("Error updating blog")
async def update_blog(
    blog_id: str,
    payload: BlogPayloadDep,
    service: BlogServiceDep,
) -> ORJSONResponse:
    """
    Update a blog and reconcile its images.

    Parameters
    ----------
    blog_id : str
        Blog UUID.
    payload : BlogPayload
        Parsed request body; absent fields are left unchanged.
    service : BlogService
        Blog service dependency.

    Returns
    -------
    ORJSONResponse
        Envelope with the updated blog under ``data``. Banner and gallery
        outcomes are reported under ``uploads`` as
        ``{successCount, failureCount, failed}``.
    """
    blog, uploads = await service.update(blog_id, payload)
    return respond(
        message="Blog updated successfully",
        data=BlogResponse.model_validate(blog),
        uploads=uploads,
    )


@router.delete(
    "/{blog_id}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Delete a blog",
    description="Delete a blog and, best-effort, every media store image it references.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"success": True, "message": "Blog deleted successfully"},
                },
            },
        },
        **NOT_FOUND_RESPONSE,
        **SERVER_ERROR_RESPONSE,
    },
    operation_id="blogs_delete",
)
@envelope_errors("Error deleting blog")
async def delete_blog(blog_id: str, service: BlogServiceDep) -> ORJSONResponse:
    await service.delete(blog_id)
    return respond(message="Blog deleted successfully")
