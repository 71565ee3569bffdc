"""
Storage services package.

This package provides the media store backend for blog images.
"""

from functools import cache

from app.services.storage.base import StorageService
from app.services.storage.cloudinary_storage import CloudinaryStorage


@cache
def get_storage_service() -> StorageService:
    """
    Get the process-wide media store.

    The Cloudinary client is configured once and shared by all requests.

    Returns:
        StorageService: Configured storage service instance
    """
    return CloudinaryStorage()


__all__ = [
    "CloudinaryStorage",
    "StorageService",
    "get_storage_service",
]
