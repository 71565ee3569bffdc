"""
Media upload service.

This module validates incoming blog images and resolves every banner or
gallery input into an :data:`~app.schemas.media.ImageRef`, following one
of three paths:

1. an uploaded file is validated and uploaded to the media store;
2. a URL already on the media store's domain is kept as-is, with its
   ``publicId`` recovered from the URL (no network call);
3. any other URL is re-hosted by the media store.
"""

from asyncio import gather
from collections.abc import Mapping, Sequence
from io import BytesIO
from logging import getLogger

from starlette.datastructures import UploadFile
from PIL import Image

from app.configs import file_logger
from app.configs.settings import Settings, settings
from app.errors.upload import (
    ImageTooLargeError,
    InvalidImageError,
    MediaLimitExceededError,
    UnsupportedImageTypeError,
    UploadError,
)
from app.schemas.blog import ImageInput
from app.schemas.media import (
    FailedUpload,
    HostedImage,
    ImageRef,
    MultiUploadResult,
    UploadedImage,
    UploadSummary,
)
from app.services.storage import StorageService

logger = file_logger(getLogger(__name__))


def describe(item: ImageInput) -> str | None:
    """Human readable name of an image input, used in failure reports."""
    if isinstance(item, UploadFile):
        return item.filename
    if isinstance(item, HostedImage):
        return item.public_id
    return item


class MediaService:
    """
    Service for validating and storing blog images.

    Handles image validation and delegates storage operations to the
    injected media store.
    """

    def __init__(self, storage: StorageService, app_settings: Settings = settings) -> None:
        """
        Initialize the media service.

        Args:
            storage: Media store backend.
            app_settings: Source of the upload limits.
        """
        self.storage = storage
        self.image_max_size_mb = app_settings.MEDIA_IMAGE_MAX_SIZE_MB
        self.image_max_size_bytes = app_settings.MEDIA_IMAGE_MAX_SIZE_MB * 1024 * 1024
        self.image_allowed_types = app_settings.MEDIA_IMAGE_ALLOWED_TYPES
        self.image_max_count = app_settings.MEDIA_IMAGE_MAX_COUNT

    def _validate_image_type(self, content_type: str | None) -> None:
        if not content_type or content_type not in self.image_allowed_types:
            raise UnsupportedImageTypeError(
                content_type=content_type or "unknown",
                allowed_types=self.image_allowed_types,
            )

    def _validate_image_size(self, file_data: bytes) -> None:
        actual_size = len(file_data)
        if actual_size > self.image_max_size_bytes:
            raise ImageTooLargeError(
                max_size_mb=self.image_max_size_mb,
                actual_size_mb=actual_size / (1024 * 1024),
            )

    def _validate_image_content(self, file_data: bytes) -> None:
        """Validate that the bytes decode as an image."""
        try:
            with Image.open(BytesIO(file_data)) as img:
                img.verify()
        except Exception as e:
            mssg = f"Invalid or corrupted image file: {e!s}"
            raise InvalidImageError(mssg) from e

    def check_count(self, count: int) -> None:
        """Raise MediaLimitExceededError when more than the allowed number of images is sent."""
        if count > self.image_max_count:
            raise MediaLimitExceededError(media_type="image", max_count=self.image_max_count)

    async def upload_image(self, file: UploadFile) -> UploadedImage:
        """
        Validate and upload one image file.

        Args:
            file: Uploaded file

        Returns:
            UploadedImage: The stored asset

        Raises:
            UnsupportedImageTypeError: If the MIME type is not an accepted image type
            ImageTooLargeError: If the file exceeds the size limit
            InvalidImageError: If the bytes are not a decodable image
            StorageError: If the media store rejects the upload
        """
        self._validate_image_type(file.content_type)
        file_data = await file.read()
        self._validate_image_size(file_data)
        self._validate_image_content(file_data)

        return await self.storage.upload_from_bytes(
            file_data,
            content_type=file.content_type or "image/jpeg",
            filename=file.filename,
        )

    async def upload_images(self, files: Sequence[UploadFile]) -> MultiUploadResult:
        """
        Upload several files concurrently, aggregating failures.

        Args:
            files: Uploaded files (at most ``MEDIA_IMAGE_MAX_COUNT``)

        Returns:
            MultiUploadResult: Uploaded assets and per-file failures

        Raises:
            MediaLimitExceededError: If too many files were sent
        """
        self.check_count(len(files))
        results = await gather(*(self.upload_image(file) for file in files), return_exceptions=True)

        uploaded: list[UploadedImage] = []
        failed: list[FailedUpload] = []
        for file, result in zip(files, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Failed to upload {file.filename}: {result}")
                failed.append(FailedUpload(filename=file.filename, error=str(result)))
            else:
                uploaded.append(result)

        return MultiUploadResult(
            success=not failed,
            uploaded=uploaded,
            failed=failed,
            total=len(files),
            success_count=len(uploaded),
            failure_count=len(failed),
        )

    def hosted_ref(self, url: str) -> ImageRef:
        """
        Reference for a URL already on the media store's domain.

        Falls back to the bare URL when no ``publicId`` can be recovered.
        """
        public_id = self.storage.extract_public_id(url)
        return HostedImage(public_id=public_id, url=url) if public_id else url

    async def import_url(self, url: str, public_id: str | None = None) -> UploadedImage:
        """
        Host a remote image, or describe one that is already hosted.

        Args:
            url: Image URL
            public_id: Asset id for a re-hosted image

        Returns:
            UploadedImage: The hosted asset

        Raises:
            UploadError: If an on-domain URL carries no recognizable id
            StorageError: If the media store cannot fetch the image
        """
        if self.storage.is_hosted_url(url):
            extracted = self.storage.extract_public_id(url)
            if not extracted:
                msg = "Could not determine the image id from the URL"
                raise UploadError(msg)
            return UploadedImage(public_id=extracted, url=url)
        return await self.storage.upload_from_url(url, public_id=public_id)

    async def resolve(
        self,
        item: ImageInput,
        known: Mapping[str, HostedImage] | None = None,
    ) -> ImageRef:
        """
        Resolve one banner or gallery input into a stored reference.

        A URL found in ``known`` resolves to that reference, keeping the
        ``publicId`` the media store originally returned for it.

        Args:
            item: Uploaded file, URL string or hosted image
            known: Hosted images already stored on the blog, keyed by URL

        Returns:
            ImageRef: Reference to persist on the blog
        """
        if isinstance(item, UploadFile):
            return (await self.upload_image(item)).as_hosted()
        if isinstance(item, HostedImage):
            return item
        if known and item in known:
            return known[item]
        if self.storage.is_hosted_url(item):
            return self.hosted_ref(item)
        return (await self.storage.upload_from_url(item)).as_hosted()

    async def resolve_many(
        self,
        items: Sequence[ImageInput],
        known: Mapping[str, HostedImage] | None = None,
    ) -> tuple[list[ImageRef], UploadSummary]:
        """
        Resolve gallery inputs concurrently, keeping successes in order.

        A failing item is logged and reported in the summary; it never
        aborts the others.

        Args:
            items: Gallery inputs (at most ``MEDIA_IMAGE_MAX_COUNT``)
            known: Hosted images already stored on the blog, keyed by URL

        Returns:
            tuple[list[ImageRef], UploadSummary]: Resolved references and the outcome summary

        Raises:
            MediaLimitExceededError: If too many images were sent
        """
        self.check_count(len(items))
        results = await gather(*(self.resolve(item, known) for item in items), return_exceptions=True)

        refs: list[ImageRef] = []
        failed: list[FailedUpload] = []
        for item, result in zip(items, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Failed to resolve image {describe(item)}: {result}")
                failed.append(FailedUpload(filename=describe(item), error=str(result)))
            else:
                refs.append(result)

        summary = UploadSummary(success_count=len(refs), failure_count=len(failed), failed=failed)
        return refs, summary
