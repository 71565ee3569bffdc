from app.errors.base import (
    BaseAppError,
    ConfigurationError,
    InternalError,
    create_exception_handler,
    error_content,
)
from app.errors.database import (
    DatabaseConnectionError,
    DatabaseError,
    DuplicateEntryError,
    NotFoundError,
    database_exception_handler,
)
from app.errors.upload import (
    ImageTooLargeError,
    InvalidImageError,
    MediaLimitExceededError,
    StorageError,
    UnsupportedImageTypeError,
    UploadError,
    upload_exception_handler,
)
from app.errors.validation import ValidationError, validation_exception_handler

__all__ = [
    "BaseAppError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "DatabaseError",
    "DuplicateEntryError",
    "ImageTooLargeError",
    "InternalError",
    "InvalidImageError",
    "MediaLimitExceededError",
    "NotFoundError",
    "StorageError",
    "UnsupportedImageTypeError",
    "UploadError",
    "ValidationError",
    "create_exception_handler",
    "database_exception_handler",
    "error_content",
    "upload_exception_handler",
    "validation_exception_handler",
]
