"""Application settings and configuration constants.

This module contains application settings, constants, and configuration
values for the blog CMS backend application.
"""

from functools import cache
from logging import INFO, Handler, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings.main import BaseSettings, SettingsConfigDict
from pythonjsonlogger.json import JsonFormatter

ENV_FILE = Path(__file__).parent.parent.parent / ".env"

# --- Constants ---
WORDS_PER_MINUTE = 200
MAX_TITLE_LENGTH = 200
MAX_SUBTITLE_LENGTH = 300


class Settings(BaseSettings):
    """Application settings with validation and default values."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Blog CMS Backend API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"  # noqa: S104
    PORT: int = 5000

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE: str = "logs/app.log"

    # Database Configuration
    DATABASE_URL: str | None = None
    DATABASE_ECHO: bool = False
    POOL_SIZE: int = 5
    MAX_OVERFLOW: int = 10
    POOL_TIMEOUT: int = 30  # seconds
    POOL_RECYCLE: int = 1800  # seconds

    # CORS origins
    CLIENT_ADMIN_URL: str | None = None
    CLIENT_WEBSITE_URL: str | None = None

    # Cloudinary Configuration
    CLOUDINARY_CLOUD_NAME: str | None = None
    CLOUDINARY_API_KEY: str | None = None
    CLOUDINARY_API_SECRET: SecretStr | None = None

    # Media Configuration
    MEDIA_FOLDER: str = "blog-images"
    MEDIA_STORE_DOMAIN: str = "cloudinary.com"
    MEDIA_IMAGE_MAX_SIZE_MB: int = 10
    MEDIA_IMAGE_MAX_COUNT: int = 10
    MEDIA_IMAGE_ALLOWED_TYPES: list[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
    ]

    # Blog defaults
    DEFAULT_AUTHOR: str = "Muheet Bharti"

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_database_url(cls, value: str | None) -> str | None:
        """Rewrite provider-style URLs to the asyncpg driver form."""
        if not value:
            return None
        if value.startswith("postgres://"):
            value = value.replace("postgres://", "postgresql://", 1)
        if value.startswith("postgresql://"):
            value = value.replace("postgresql://", "postgresql+asyncpg://", 1)
        return value

    @property
    def cors_origins(self) -> list[str]:
        """Allowed browser origins (admin dashboard and public website)."""
        return [url for url in (self.CLIENT_ADMIN_URL, self.CLIENT_WEBSITE_URL) if url]

    def missing_cloudinary_settings(self) -> list[str]:
        """Names of the Cloudinary credentials that are not set."""
        required = {
            "CLOUDINARY_CLOUD_NAME": self.CLOUDINARY_CLOUD_NAME,
            "CLOUDINARY_API_KEY": self.CLOUDINARY_API_KEY,
            "CLOUDINARY_API_SECRET": self.CLOUDINARY_API_SECRET,
        }
        return [name for name, value in required.items() if not value]

    def missing_required(self) -> list[str]:
        """Names of every setting the service cannot start without."""
        missing = [] if self.DATABASE_URL else ["DATABASE_URL"]
        return missing + self.missing_cloudinary_settings()


settings = Settings()


@cache
def _file_handler() -> Handler:
    log_file = Path(settings.LOG_FILE).with_suffix(".json")
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
    handler.setLevel(INFO)
    handler.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    return handler


def file_logger(logger: Logger) -> Logger:
    """
    Attach the shared rotating JSON file handler to a logger.

    Records go to ``LOG_FILE`` with a ``.json`` suffix, next to the text
    log written by the root handler.

    Does nothing unless ``LOG_TO_FILE`` is enabled. The handler is created
    once and shared, so every module writes to the same rotating file.

    Args:
        logger: Logger to configure.

    Returns:
        Logger: The same logger, for chaining at module level.
    """
    if settings.LOG_TO_FILE:
        handler = _file_handler()
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger
