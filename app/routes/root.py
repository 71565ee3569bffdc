# app/routes/root.py

"""Service info and health endpoints."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

from app.configs import settings
from app.schemas.envelope import Envelope, respond
from app.utils.helpers import today_str

router = APIRouter(tags=["🏠 Root"])

ROOT_EXAMPLE: dict[str, Any] = {
    "success": True,
    "message": "Blog CMS Backend API",
    "data": {"status": "Running", "version": "1.0.0"},
}


@router.get(
    "/",
    response_class=ORJSONResponse,
    response_model=Envelope,
    summary="Root access",
    responses={200: {"content": {"application/json": {"example": ROOT_EXAMPLE}}}},
    operation_id="root_access",
)
async def root() -> ORJSONResponse:
    """
    Root endpoint.

    Returns
    -------
    ORJSONResponse
        Service name, running status and version.

    Examples
    --------
    Request
        GET /
    Response
        200 OK
        {"success": true, "message": "Blog CMS Backend API", "data": {"status": "Running", "version": "1.0.0"}}
    """
    return respond(
        message=settings.APP_NAME,
        data={"status": "Running", "version": settings.APP_VERSION},
    )


@router.get(
    "/health",
    response_class=ORJSONResponse,
    response_model=Envelope,
    tags=["🩺 Health"],
    summary="Health check endpoint",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "status": "ok",
                            "version": "1.0.0",
                            "environment": "development",
                            "timestamp": "2025-01-01 00:00:00",
                            "services": {"database": "configured", "media_store": "configured"},
                        },
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
async def health_check() -> ORJSONResponse:
    """
    Health check endpoint with configuration status.

    Returns
    -------
    ORJSONResponse
        ``status`` is ``degraded`` when a required setting is missing;
        the missing names are listed under ``missing``.
    """
    missing_media = settings.missing_cloudinary_settings()
    services = {
        "database": "configured" if settings.DATABASE_URL else "not_configured",
        "media_store": "not_configured" if missing_media else "configured",
    }
    missing = settings.missing_required()

    data: dict[str, Any] = {
        "status": "degraded" if missing else "ok",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": today_str(),
        "services": services,
    }
    if missing:
        data["missing"] = missing
    return respond(data=data)
