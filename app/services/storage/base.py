"""
Base storage protocol for media store operations.

This module defines the interface the rest of the application relies on
when talking to the hosted image store, so that services receive the
store as an injected dependency and tests can substitute a double.
"""

from abc import abstractmethod
from typing import Any, Protocol

from app.schemas.media import BulkDeleteResult, DeleteResult, ImageDetails, UploadedImage


class StorageService(Protocol):
    """
    Protocol defining the interface for media store backends.

    Every call is a network round-trip. Nothing is retried or cached: a
    failure surfaces immediately to the caller.
    """

    @abstractmethod
    async def upload_from_bytes(
        self,
        file_data: bytes,
        content_type: str,
        filename: str | None = None,
    ) -> UploadedImage:
        """
        Upload raw image bytes.

        Args:
            file_data: Raw image bytes
            content_type: MIME type of the image
            filename: Original filename, used to name the stored asset

        Returns:
            UploadedImage: The stored asset
        """
        ...

    @abstractmethod
    async def upload_from_url(
        self,
        url: str,
        public_id: str | None = None,
        **options: Any,
    ) -> UploadedImage:
        """
        Re-host an externally referenced image.

        Callers check :meth:`is_hosted_url` first; URLs already on the
        store's own domain must not be uploaded again.
        """
        ...

    @abstractmethod
    async def delete_one(self, public_id: str) -> DeleteResult:
        """Delete one asset; an already missing asset counts as success."""
        ...

    @abstractmethod
    async def delete_many(self, public_ids: list[str]) -> BulkDeleteResult:
        """Delete several assets; partial failures are reported, not rolled back."""
        ...

    @abstractmethod
    async def get_image_details(self, public_id: str) -> ImageDetails:
        """Fetch metadata for one asset."""
        ...

    @abstractmethod
    def extract_public_id(self, url: str) -> str | None:
        """Recover the asset id from one of the store's own URLs."""
        ...

    @abstractmethod
    def is_hosted_url(self, url: str) -> bool:
        """Whether the URL already points at the store's own domain."""
        ...

    @abstractmethod
    def responsive_urls(self, public_id: str) -> dict[str, str]:
        """Delivery URLs for the standard responsive sizes."""
        ...
