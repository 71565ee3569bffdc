# tests/services/conftest.py
"""Pytest fixtures for services tests."""

from collections.abc import Callable
from io import BytesIO
from unittest.mock import MagicMock

import pytest
from starlette.datastructures import Headers, UploadFile

from app.services.media import MediaService

type UploadFactory = Callable[..., UploadFile]


@pytest.fixture
def make_upload(valid_jpeg_bytes: bytes) -> UploadFactory:
    """Build real UploadFile objects, JPEG by default."""

    def factory(
        filename: str = "photo.jpg",
        data: bytes | None = None,
        content_type: str = "image/jpeg",
    ) -> UploadFile:
        return UploadFile(
            file=BytesIO(valid_jpeg_bytes if data is None else data),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )

    return factory


@pytest.fixture
def media_service(mock_storage: MagicMock) -> MediaService:
    return MediaService(mock_storage)
