from collections.abc import Awaitable, Callable
from functools import wraps
from logging import getLogger
from typing import ParamSpec

from fastapi.responses import ORJSONResponse

from app.configs import file_logger
from app.errors import BaseAppError, InternalError, error_content

logger = file_logger(getLogger(__name__))

P = ParamSpec("P")


def envelope_errors(
    message: str,
) -> Callable[[Callable[P, Awaitable[ORJSONResponse]]], Callable[P, Awaitable[ORJSONResponse]]]:
    """
    Convert every exception escaping a route into a failure envelope.

    Application errors keep their status code. Anything else becomes a
    500 whose ``error`` carries the underlying message.

    Args:
        message: Message used for server errors, e.g. "Error creating blog".

    Returns:
        Decorated route that always answers with an envelope.

    Example:
        @envelope_errors("Error fetching blogs")
        async def list_blogs(...) -> ORJSONResponse:
            ...
    """

    def decorator(
        func: Callable[P, Awaitable[ORJSONResponse]],
    ) -> Callable[P, Awaitable[ORJSONResponse]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> ORJSONResponse:
            try:
                return await func(*args, **kwargs)
            except BaseAppError as e:
                if e.status_code >= 500:
                    logger.exception(f"{message}: {e.detail}")
                else:
                    logger.warning(f"{message}: {e.detail}")
                return ORJSONResponse(content=error_content(e, message), status_code=e.status_code)
            except Exception as e:
                logger.exception(message)
                error = InternalError(str(e))
                return ORJSONResponse(content=error_content(error, message), status_code=error.status_code)

        return wrapper

    return decorator
