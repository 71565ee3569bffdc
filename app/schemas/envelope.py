"""Response envelope shared by every endpoint."""

from math import ceil
from typing import Any

from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.status import HTTP_200_OK


class Pagination(BaseModel):
    current: int = Field(ge=1, description="Current page")
    pages: int = Field(ge=0, description="Total number of pages")
    total: int = Field(ge=0, description="Total number of matching blogs")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        """Pagination block for ``total`` records split into pages of ``limit``."""
        return cls(current=page, pages=ceil(total / limit) if limit else 0, total=total)


class Envelope(BaseModel):
    """
    Documented shape of every JSON response.

    ``success`` is always present. Failures carry ``message`` and, for
    server errors, the underlying ``error`` text.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str | None = None
    data: Any | None = None
    error: str | None = None
    pagination: Pagination | None = None
    uploads: Any | None = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def envelope(
    *,
    success: bool = True,
    message: str | None = None,
    data: Any = None,
    error: str | None = None,
    pagination: Pagination | None = None,
    uploads: Any = None,
) -> dict[str, Any]:
    """Build an envelope dict, omitting keys that were not given."""
    content: dict[str, Any] = {"success": success}
    optional = {
        "message": message,
        "data": data,
        "error": error,
        "pagination": pagination,
        "uploads": uploads,
    }
    content.update({key: _jsonable(value) for key, value in optional.items() if value is not None})
    return content


def respond(status_code: int = HTTP_200_OK, **fields: Any) -> ORJSONResponse:
    """
    Render an envelope as an ORJSON response.

    Examples:
        >>> respond(201, message="Blog created successfully", data=blog)
    """
    return ORJSONResponse(content=envelope(**fields), status_code=status_code)
