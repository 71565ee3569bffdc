"""Database engine and session helpers."""

from app.db.database import (
    check_connection,
    close_db,
    get_engine,
    get_session,
    get_session_maker,
)

__all__ = [
    "check_connection",
    "close_db",
    "get_engine",
    "get_session",
    "get_session_maker",
]
