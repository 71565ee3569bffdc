"""Utility helper functions."""

from app.utils.helpers import (
    calculate_read_time,
    count_words,
    get_summary,
    normalize_tags,
    slugify,
    today_str,
)

__all__ = [
    "calculate_read_time",
    "count_words",
    "get_summary",
    "normalize_tags",
    "slugify",
    "today_str",
]
