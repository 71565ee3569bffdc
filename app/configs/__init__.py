from app.configs.settings import (
    MAX_SUBTITLE_LENGTH,
    MAX_TITLE_LENGTH,
    WORDS_PER_MINUTE,
    Settings,
    file_logger,
    settings,
)

__all__ = [
    "MAX_SUBTITLE_LENGTH",
    "MAX_TITLE_LENGTH",
    "WORDS_PER_MINUTE",
    "Settings",
    "file_logger",
    "settings",
]
