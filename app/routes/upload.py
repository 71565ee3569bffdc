# app/routes/upload.py

"""
Image Upload Routes.

Direct media store operations used by the admin dashboard's editor,
mounted under the blog prefix so they share its CORS policy.

Summary
-------
Endpoints include:
  - Upload a single image (field ``image``)
  - Upload up to ``MEDIA_IMAGE_MAX_COUNT`` images (field ``images``)
  - Host an image from a URL
  - Get an image's details and responsive delivery URLs
  - Delete an image by ``publicId``

Every failure is answered with a 400 envelope, except unexpected errors
which are 500.
"""

from typing import Annotated, Any

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED, HTTP_400_BAD_REQUEST

from app.decorators import envelope_errors
from app.dependencies import MediaDep
from app.errors import StorageError, UploadError
from app.schemas.envelope import Envelope, respond
from app.schemas.media import UrlUploadRequest

router = APIRouter(prefix="/api/blogs", tags=["🖼️ Images"])

UPLOADED_EXAMPLE: dict[str, Any] = {
    "publicId": "blog-images/blog_1718000000000_cover",
    "url": "https://res.cloudinary.com/demo/image/upload/v1/blog-images/blog_1718000000000_cover.jpg",
    "width": 1200,
    "height": 800,
    "format": "jpg",
    "size": 183422,
}

UPLOAD_FAILED_RESPONSE: dict[int | str, dict[str, Any]] = {
    400: {
        "description": "Invalid image or media store failure",
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "message": "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.",
                },
            },
        },
    },
}


@router.post(
    "/upload-image",
    response_class=ORJSONResponse,
    response_model=Envelope,
    status_code=HTTP_201_CREATED,
    summary="Upload an image",
    responses={
        201: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Image uploaded successfully",
                        "data": UPLOADED_EXAMPLE,
                    },
                },
            },
        },
        **UPLOAD_FAILED_RESPONSE,
    },
    operation_id="images_upload",
)
@envelope_errors("Error uploading image")
async def upload_image(
    image: Annotated[UploadFile, File(description="JPEG, PNG, GIF or WebP image")],
    media: MediaDep,
) -> ORJSONResponse:
    """
    Validate and upload one image.

    Parameters
    ----------
    image : UploadFile
        Image file.
    media : MediaService
        Media service dependency.

    Returns
    -------
    ORJSONResponse
        201 envelope with the stored asset.
    """
    uploaded = await media.upload_image(image)
    return respond(HTTP_201_CREATED, message="Image uploaded successfully", data=uploaded)


@router.post(
    "/upload/multiple",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Upload several images",
    description=(
        "Uploads every file concurrently. Answers 200 when at least one file was stored, "
        "with per-file failures listed in ``data.failed``; 400 when every file failed."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "2 of 3 images uploaded",
                        "data": {
                            "success": False,
                            "uploaded": [UPLOADED_EXAMPLE],
                            "failed": [{"filename": "notes.txt", "error": "Invalid file type."}],
                            "total": 3,
                            "successCount": 2,
                            "failureCount": 1,
                        },
                    },
                },
            },
        },
        **UPLOAD_FAILED_RESPONSE,
    },
    operation_id="images_upload_multiple",
)
@envelope_errors("Error uploading images")
async def upload_multiple_images(
    images: Annotated[list[UploadFile], File(description="Up to 10 images")],
    media: MediaDep,
) -> ORJSONResponse:
    """
    Upload several images, reporting failures per file.

    Parameters
    ----------
    images : list[UploadFile]
        Image files.
    media : MediaService
        Media service dependency.

    Returns
    -------
    ORJSONResponse
        Envelope with the aggregated ``MultiUploadResult``.
    """
    result = await media.upload_images(images)
    if not result.success_count:
        return respond(
            HTTP_400_BAD_REQUEST,
            success=False,
            message="No images were uploaded",
            data=result,
        )
    return respond(
        message=f"{result.success_count} of {result.total} images uploaded",
        data=result,
    )


@router.post(
    "/upload/url",
    response_class=ORJSONResponse,
    response_model=Envelope,
    status_code=HTTP_201_CREATED,
    summary="Host an image from a URL",
    description=(
        "External URLs are fetched and stored by the media store. URLs already on the media "
        "store's domain are returned as-is with their ``publicId``."
    ),
    responses={
        201: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Image uploaded successfully",
                        "data": UPLOADED_EXAMPLE,
                    },
                },
            },
        },
        **UPLOAD_FAILED_RESPONSE,
    },
    operation_id="images_upload_url",
)
@envelope_errors("Error uploading image from URL")
async def upload_image_from_url(body: UrlUploadRequest, media: MediaDep) -> ORJSONResponse:
    """
    Host a remote image.

    Parameters
    ----------
    body : UrlUploadRequest
        Image URL and optional ``publicId``.
    media : MediaService
        Media service dependency.

    Returns
    -------
    ORJSONResponse
        201 envelope with the hosted asset.
    """
    uploaded = await media.import_url(str(body.url), public_id=body.public_id)
    return respond(HTTP_201_CREATED, message="Image uploaded successfully", data=uploaded)


@router.get(
    "/image/{public_id:path}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Get image details",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "details": {**UPLOADED_EXAMPLE, "createdAt": "2025-01-01T00:00:00Z"},
                            "urls": {
                                "thumbnail": "https://res.cloudinary.com/demo/image/upload/c_thumb,h_150,w_150/cover",
                                "original": "https://res.cloudinary.com/demo/image/upload/cover",
                            },
                        },
                    },
                },
            },
        },
        **UPLOAD_FAILED_RESPONSE,
    },
    operation_id="images_get",
)
@envelope_errors("Error fetching image")
async def get_image(public_id: str, media: MediaDep) -> ORJSONResponse:
    details = await media.storage.get_image_details(public_id)
    urls = media.storage.responsive_urls(public_id)
    return respond(data={"details": details.model_dump(by_alias=True), "urls": urls})


@router.delete(
    "/image/{public_id:path}",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Delete an image",
    description="Deletes one image from the media store. An already missing image counts as deleted.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Image deleted successfully",
                        "data": {"success": True, "result": "ok"},
                    },
                },
            },
        },
        **UPLOAD_FAILED_RESPONSE,
    },
    operation_id="images_delete",
)
@envelope_errors("Error deleting image")
async def delete_image(public_id: str, media: MediaDep) -> ORJSONResponse:
    """
    Delete one image by ``publicId``.

    Parameters
    ----------
    public_id : str
        Media store id; may contain folder segments.
    media : MediaService
        Media service dependency.

    Returns
    -------
    ORJSONResponse
        Envelope with the media store's answer.

    Raises
    ------
    UploadError
        If the media store refuses the deletion.
    """
    if not public_id.strip():
        msg = "Public ID is required"
        raise UploadError(msg)

    result = await media.storage.delete_one(public_id)
    if not result.success:
        msg = f"Image deletion failed: {result.result}"
        raise StorageError(msg)
    return respond(message="Image deleted successfully", data=result)
