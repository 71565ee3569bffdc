# tests/routes/conftest.py
"""Pytest fixtures for route tests."""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.dependencies import get_blog_repository
from app.main import app
from app.services.storage import get_storage_service


@pytest.fixture
async def client(blog_repo, mock_storage: MagicMock) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client with the in-memory repository and the media store double."""
    app.dependency_overrides[get_blog_repository] = lambda: blog_repo
    app.dependency_overrides[get_storage_service] = lambda: mock_storage
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app),
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
