"""
Cloudinary storage implementation.

This module provides the Cloudinary-backed media store used for blog
banners and gallery images. Offers automatic optimization, CDN delivery
and on-the-fly transformations.
"""

from asyncio import get_event_loop
from base64 import b64encode
from functools import partial
from logging import getLogger
from pathlib import PurePath
from re import compile as re_compile
from time import time
from typing import Any

from cloudinary import config
from cloudinary.api import delete_resources, resource
from cloudinary.exceptions import Error as CloudinaryError
from cloudinary.uploader import destroy, upload
from cloudinary.utils import cloudinary_url

from app.configs import file_logger
from app.configs.settings import Settings, settings
from app.errors import StorageError
from app.schemas.media import BulkDeleteResult, DeleteResult, ImageDetails, UploadedImage

logger = file_logger(getLogger(__name__))

PUBLIC_ID_PATTERN = re_compile(r"/([^/]+)\.[^/]+$")

# Bounded to 1200x800, never upscaled
UPLOAD_TRANSFORMATION: dict[str, Any] = {
    "width": 1200,
    "height": 800,
    "crop": "limit",
    "quality": "auto:good",
    "fetch_format": "auto",
}

RESPONSIVE_SIZES: dict[str, dict[str, Any]] = {
    "thumbnail": {"width": 150, "height": 150, "crop": "thumb"},
    "small": {"width": 400, "height": 300},
    "medium": {"width": 800, "height": 600},
    "large": {"width": 1200, "height": 800},
}

DELETED_STATES = frozenset({"ok", "not found"})


def _timestamp_ms() -> int:
    return int(time() * 1000)


def _to_uploaded(result: dict[str, Any]) -> UploadedImage:
    return UploadedImage(
        public_id=result["public_id"],
        url=result["secure_url"],
        width=result.get("width"),
        height=result.get("height"),
        format=result.get("format"),
        size=result.get("bytes"),
    )


class CloudinaryStorage:
    """
    Cloudinary storage implementation.

    Every blocking SDK call runs in the default executor so the event loop
    is never blocked. No call is retried.
    """

    def __init__(self, app_settings: Settings = settings) -> None:
        """Initialize Cloudinary with configured credentials."""
        self.settings = app_settings
        secret = app_settings.CLOUDINARY_API_SECRET
        config(
            cloud_name=app_settings.CLOUDINARY_CLOUD_NAME,
            api_key=app_settings.CLOUDINARY_API_KEY,
            api_secret=secret.get_secret_value() if secret else None,
            secure=True,
        )
        self.folder = app_settings.MEDIA_FOLDER
        self.domain = app_settings.MEDIA_STORE_DOMAIN

    def validate_config(self) -> list[str]:
        """
        Names of the Cloudinary credentials that are missing.

        Returns:
            list[str]: Empty when the store is fully configured
        """
        return self.settings.missing_cloudinary_settings()

    def _upload_options(self, public_id: str, **overrides: Any) -> dict[str, Any]:
        options: dict[str, Any] = {
            "folder": self.folder,
            "public_id": public_id,
            "resource_type": "image",
            "transformation": [dict(UPLOAD_TRANSFORMATION)],
        }
        options.update(overrides)
        return options

    async def _upload(self, source: str, options: dict[str, Any]) -> UploadedImage:
        loop = get_event_loop()
        try:
            result = await loop.run_in_executor(None, partial(upload, source, **options))
        except (CloudinaryError, OSError) as e:
            logger.exception(f"Cloudinary upload failed for {options.get('public_id')}")
            msg = f"Image upload failed: {e}"
            raise StorageError(msg) from e
        return _to_uploaded(result)

    async def upload_from_bytes(
        self,
        file_data: bytes,
        content_type: str,
        filename: str | None = None,
    ) -> UploadedImage:
        """
        Upload raw image bytes to Cloudinary.

        The bytes are sent as a base64 data URI and stored as
        ``blog_<epoch-ms>_<filename stem>`` in the media folder.

        Args:
            file_data: Raw image bytes
            content_type: MIME type of the image
            filename: Original filename (``image`` when missing)

        Returns:
            UploadedImage: The stored asset

        Raises:
            StorageError: If Cloudinary rejects the upload
        """
        stem = PurePath(filename).stem if filename else ""
        public_id = f"blog_{_timestamp_ms()}_{stem or 'image'}"
        data_uri = f"data:{content_type};base64,{b64encode(file_data).decode()}"

        uploaded = await self._upload(data_uri, self._upload_options(public_id))
        logger.info(f"Uploaded image {uploaded.public_id} ({len(file_data)} bytes)")
        return uploaded

    async def upload_from_url(
        self,
        url: str,
        public_id: str | None = None,
        **options: Any,
    ) -> UploadedImage:
        """
        Let Cloudinary fetch and host a remote image.

        Args:
            url: Remote image URL
            public_id: Asset id, defaults to ``blog_<epoch-ms>_url_upload``
            **options: Extra upload options overriding the defaults

        Returns:
            UploadedImage: The stored asset

        Raises:
            StorageError: If Cloudinary cannot fetch or store the image
        """
        asset_id = public_id or f"blog_{_timestamp_ms()}_url_upload"
        uploaded = await self._upload(url, self._upload_options(asset_id, **options))
        logger.info(f"Re-hosted {url} as {uploaded.public_id}")
        return uploaded

    async def delete_one(self, public_id: str) -> DeleteResult:
        """
        Delete one image.

        Args:
            public_id: Cloudinary public id

        Returns:
            DeleteResult: ``success`` when Cloudinary answers ``ok`` or ``not found``

        Raises:
            StorageError: If the API call itself fails
        """
        loop = get_event_loop()
        try:
            result = await loop.run_in_executor(None, partial(destroy, public_id))
        except (CloudinaryError, OSError) as e:
            logger.exception(f"Cloudinary delete failed for {public_id}")
            msg = f"Image deletion failed: {e}"
            raise StorageError(msg) from e

        outcome = result.get("result", "error")
        return DeleteResult(success=outcome in DELETED_STATES, result=outcome)

    async def delete_many(self, public_ids: list[str]) -> BulkDeleteResult:
        """
        Delete several images with one API call.

        Args:
            public_ids: Cloudinary public ids

        Returns:
            BulkDeleteResult: Per-id outcome; ``partial`` is set when some
            ids were not removed. Successful deletions are never undone.

        Raises:
            StorageError: If the API call itself fails
        """
        loop = get_event_loop()
        try:
            result = await loop.run_in_executor(None, partial(delete_resources, public_ids))
        except (CloudinaryError, OSError) as e:
            logger.exception(f"Cloudinary bulk delete failed for {public_ids}")
            msg = f"Image deletion failed: {e}"
            raise StorageError(msg) from e

        deleted: dict[str, str] = result.get("deleted", {})
        partial_failure = bool(result.get("partial")) or any(
            state not in {"deleted", "not_found"} for state in deleted.values()
        )
        if partial_failure:
            logger.warning(f"Bulk delete was partial: {deleted}")
        return BulkDeleteResult(
            deleted=deleted,
            deleted_counts=result.get("deleted_counts", {}),
            partial=partial_failure,
        )

    async def get_image_details(self, public_id: str) -> ImageDetails:
        """
        Fetch metadata for one image.

        Raises:
            StorageError: If the image does not exist or the call fails
        """
        loop = get_event_loop()
        try:
            result = await loop.run_in_executor(None, partial(resource, public_id))
        except (CloudinaryError, OSError) as e:
            msg = f"Failed to get image details: {e}"
            raise StorageError(msg) from e

        return ImageDetails(
            public_id=result["public_id"],
            url=result["secure_url"],
            width=result.get("width"),
            height=result.get("height"),
            format=result.get("format"),
            size=result.get("bytes"),
            created_at=result.get("created_at"),
        )

    def extract_public_id(self, url: str) -> str | None:
        """
        Last path segment of a Cloudinary URL, without its extension.

        Examples:
            >>> storage.extract_public_id("https://res.cloudinary.com/x/image/upload/v1/a/b.jpg")
            'b'
        """
        matched = PUBLIC_ID_PATTERN.search(url)
        return matched.group(1) if matched else None

    def is_hosted_url(self, url: str) -> bool:
        return self.domain in url

    def transform_url(
        self,
        public_id: str,
        width: int = 800,
        height: int = 600,
        crop: str = "limit",
        quality: str = "auto:good",
        fetch_format: str = "auto",
        **options: Any,
    ) -> str:
        """
        Build a delivery URL with an on-the-fly transformation.

        No network call is made; Cloudinary applies the transformation
        when the URL is first requested.
        """
        url, _ = cloudinary_url(
            public_id,
            width=width,
            height=height,
            crop=crop,
            quality=quality,
            fetch_format=fetch_format,
            secure=True,
            **options,
        )
        return url

    def responsive_urls(self, public_id: str) -> dict[str, str]:
        """
        Delivery URLs for thumbnail, small, medium, large and original sizes.

        Args:
            public_id: Cloudinary public id

        Returns:
            dict[str, str]: Size name to URL
        """
        urls = {name: self.transform_url(public_id, **size) for name, size in RESPONSIVE_SIZES.items()}
        urls["original"], _ = cloudinary_url(public_id, secure=True)
        return urls
