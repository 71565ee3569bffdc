from app.schemas.blog import (
    BlogCreate,
    BlogFields,
    BlogPatch,
    BlogPayload,
    BlogResponse,
    BlogUpdate,
    ImageInput,
    Visibility,
)
from app.schemas.envelope import Envelope, Pagination, envelope, respond
from app.schemas.media import (
    BulkDeleteResult,
    DeleteResult,
    FailedUpload,
    HostedImage,
    ImageDetails,
    ImageRef,
    MultiUploadResult,
    UploadedImage,
    UploadSummary,
    UrlUploadRequest,
)

__all__ = [
    "BlogCreate",
    "BlogFields",
    "BlogPatch",
    "BlogPayload",
    "BlogResponse",
    "BlogUpdate",
    "BulkDeleteResult",
    "DeleteResult",
    "Envelope",
    "FailedUpload",
    "HostedImage",
    "ImageDetails",
    "ImageInput",
    "ImageRef",
    "MultiUploadResult",
    "Pagination",
    "UploadSummary",
    "UploadedImage",
    "UrlUploadRequest",
    "Visibility",
    "envelope",
    "respond",
]
