from collections.abc import Iterable, MutableMapping
from datetime import datetime
from math import ceil
from re import compile as re_compile
from typing import Any

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from starlette.routing import BaseRoute, Match, Route

from app.configs.settings import WORDS_PER_MINUTE

_NON_SLUG_CHARS = re_compile(r"[^a-z0-9\s]")
_WHITESPACE = re_compile(r"\s+")


def host(request: Request) -> str:
    """Return the host IP address."""
    return request.client.host if request.client else "unknown"


def today_str() -> str:
    """Return the current local time as a string."""
    return datetime.now(datetime.now().astimezone().tzinfo).strftime(
        "%Y-%m-%d %H:%M:%S",
    )


def get_summary(request: Request) -> str | None:
    """Extract route summary from request."""

    scope: MutableMapping[str, Any] = request.scope
    app: FastAPI = scope["app"]
    routes: list[BaseRoute] = app.routes

    summary = None
    for route in routes:
        is_api_route = type(route) is APIRoute
        is_route = type(route) is Route
        if is_api_route and route.matches(scope)[0] == Match.FULL:
            summary = route.summary
            break
        if is_route and route.matches(scope)[0] == Match.FULL:
            summary = route.name
            break

    return summary


def slugify(title: str) -> str:
    """
    Derive a URL-safe slug from a title.

    The title is lowercased, every character outside ``[a-z0-9]`` and
    whitespace is dropped, whitespace runs become a single ``-`` and
    leading or trailing hyphens are stripped.

    Args:
        title: Blog title.

    Returns:
        str: The slug, possibly empty when the title has no usable characters.

    Examples:
        >>> slugify("Hello, World! 2024")
        'hello-world-2024'
    """
    cleaned = _NON_SLUG_CHARS.sub("", title.lower())
    return _WHITESPACE.sub("-", cleaned.strip()).strip("-")


def count_words(text: str) -> int:
    """Count whitespace separated words."""
    return len(text.split())


def calculate_read_time(body: str) -> int:
    """
    Estimated reading time in whole minutes.

    Args:
        body: Blog body text.

    Returns:
        int: ``ceil(words / 200)``, so an empty body reads in 0 minutes.
    """
    return ceil(count_words(body) / WORDS_PER_MINUTE)


def normalize_tags(tags: Iterable[str] | str | None) -> list[str]:
    """
    Normalize a tag collection.

    Each tag is trimmed and lowercased, empty tags are dropped and
    duplicates removed keeping first occurrence order. A single string is
    treated as a comma separated list.

    Examples:
        >>> normalize_tags(" Python, fastapi ,python,")
        ['python', 'fastapi']
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")

    seen: dict[str, None] = {}
    for tag in tags:
        for part in str(tag).split(","):
            if cleaned := part.strip().lower():
                seen.setdefault(cleaned, None)
    return list(seen)
