from collections.abc import Awaitable, Callable
from logging import Logger

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from app.utils.helpers import host


class BaseAppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        detail: str = "Internal Server Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        return self.detail


class InternalError(BaseAppError):
    """Any failure that is not a validation, lookup or upload problem."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(detail, HTTP_500_INTERNAL_SERVER_ERROR)


class ConfigurationError(BaseAppError):
    """Raised at startup when required settings are missing."""

    def __init__(
        self,
        detail: str = "Invalid application configuration",
        missing: list[str] | None = None,
    ) -> None:
        if missing:
            detail = f"{detail}: missing {', '.join(missing)}"
        super().__init__(detail, HTTP_500_INTERNAL_SERVER_ERROR)
        self.missing = missing or []


def error_content(exc: BaseAppError, message: str | None = None) -> dict[str, object]:
    """
    Build the failure envelope for an application error.

    Client errors carry their detail as ``message``. Server errors keep the
    generic ``message`` and expose the underlying detail under ``error``.

    Args:
        exc: The application error.
        message: Operation specific message used for server errors.

    Returns:
        dict[str, object]: ``{"success": False, "message": ..., "error"?: ...}``
    """
    if exc.status_code < HTTP_500_INTERNAL_SERVER_ERROR:
        return {"success": False, "message": exc.detail}
    return {"success": False, "message": message or "Server error", "error": exc.detail}


def create_exception_handler(
    logger: Logger,
) -> Callable[[Request, Exception], Awaitable[ORJSONResponse]]:
    """
    Create a standardized exception handler for the application.

    Args:
        logger: Logger instance to use for logging exceptions.

    Returns:
        A callable exception handler.
    """

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        app_error = exc if isinstance(exc, BaseAppError) else InternalError(str(exc))
        logger.warning(
            f"{app_error.detail} for ip: {host(request)} for endpoint {request.url.path}",
        )
        return ORJSONResponse(
            content=error_content(app_error),
            status_code=app_error.status_code,
        )

    return handler
