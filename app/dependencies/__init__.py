# app/dependencies/__init__.py

from app.dependencies.dependencies import (
    BlogListQuery,
    BlogListQueryDep,
    BlogPayloadDep,
    BlogRepoDep,
    BlogServiceDep,
    MediaDep,
    PaginationDep,
    PaginationQuery,
    StorageDep,
    get_blog_repository,
    get_blog_service,
    get_media_service,
    read_blog_payload,
)

__all__ = [
    "BlogListQuery",
    "BlogListQueryDep",
    "BlogPayloadDep",
    "BlogRepoDep",
    "BlogServiceDep",
    "MediaDep",
    "PaginationDep",
    "PaginationQuery",
    "StorageDep",
    "get_blog_repository",
    "get_blog_service",
    "get_media_service",
    "read_blog_payload",
]
