"""Repository layer for database operations."""

from app.repositories.blog import BlogFilters, BlogRepository

__all__ = ["BlogFilters", "BlogRepository"]
