"""
Upload-related error classes.

This module defines custom exceptions for image upload operations,
including image validation and media store errors. All of them surface
as 400 responses.
"""

from starlette.status import HTTP_400_BAD_REQUEST

from app.errors.base import BaseAppError, create_exception_handler
from app.monitoring import get_logger

logger = get_logger(__name__)


class UploadError(BaseAppError):
    """Base exception for upload-related errors."""

    def __init__(
        self,
        detail: str = "We couldn't upload your file. Please try again.",
        status_code: int = HTTP_400_BAD_REQUEST,
    ) -> None:
        super().__init__(detail=detail, status_code=status_code)


class ImageTooLargeError(UploadError):
    """Exception raised when uploaded image exceeds size limit."""

    def __init__(
        self,
        max_size_mb: int = 10,
        actual_size_mb: float | None = None,
    ) -> None:
        detail = f"Your image is too large. Please use an image smaller than {max_size_mb}MB."
        if actual_size_mb is not None:
            detail += f" Your file is {actual_size_mb:.1f}MB."
        super().__init__(detail=detail)
        self.max_size_mb = max_size_mb
        self.actual_size_mb = actual_size_mb


class UnsupportedImageTypeError(UploadError):
    """Exception raised when uploaded image type is not supported."""

    def __init__(
        self,
        content_type: str | None,
        allowed_types: list[str] | None = None,
    ) -> None:
        allowed = allowed_types or ["image/jpeg", "image/png", "image/gif", "image/webp"]
        detail = "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed."
        super().__init__(detail=detail)
        self.content_type = content_type
        self.allowed_types = allowed


class InvalidImageError(UploadError):
    """Exception raised when uploaded file is not a valid image."""

    def __init__(
        self,
        detail: str = "This file doesn't appear to be a valid image. Please try a different file.",
    ) -> None:
        super().__init__(detail=detail)


class StorageError(UploadError):
    """Exception raised when a media store call fails."""

    def __init__(self, detail: str = "Image upload failed") -> None:
        super().__init__(detail=detail)


class MediaLimitExceededError(UploadError):
    """Exception raised when too many files are sent in one request."""

    def __init__(
        self,
        media_type: str = "image",
        max_count: int = 10,
    ) -> None:
        detail = f"You can upload at most {max_count} {media_type} files at once."
        super().__init__(detail=detail)
        self.media_type = media_type
        self.max_count = max_count


upload_exception_handler = create_exception_handler(logger)
