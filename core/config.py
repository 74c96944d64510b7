"""Search curator configuration and environment setup.

Settings are read from environment variables (and a ``.env`` file in the
working directory). Job runs need the App Search connection; the
Elasticsearch URL is only needed by the crawled-document purge.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class ConfigurationError(Exception):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        self.message = message
        self.fields = fields or []
        super().__init__(message)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App Search
    elastic_url: str
    elastic_app_engine: str
    elastic_admin_username: str
    elastic_admin_password: str

    # Engine backing index, used by the crawled-document purge
    elasticsearch_url: Optional[str] = None

    # Purge
    purge_check_interval_in_days: int = Field(7, ge=1)
    purge_crawled_documents_dry_run: bool = False

    # Runtime
    curator_mode: str = "prod"
    curator_log_dir: Path = Path("logs")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: A required variable is missing or malformed
    """
    try:
        return Settings()
    except ValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        names = ", ".join(field.upper() for field in fields)
        raise ConfigurationError(f"Invalid or missing settings: {names}", fields=fields) from e


def is_dev_mode() -> bool:
    """Check if running in development mode.

    Returns:
        True if CURATOR_MODE is set to 'dev', False otherwise.
    """
    return os.getenv("CURATOR_MODE", "prod").lower() == "dev"


def configure_logging(
    log_dir: Optional[Path] = None,
    console: bool = True,
) -> None:
    """Install the console and per-module log handlers on the root logger.

    Dev mode logs at DEBUG, otherwise INFO. The log directory defaults to
    CURATOR_LOG_DIR (``logs``).

    Args:
        log_dir: Directory for log files
        console: Also log to stderr
    """
    from core.logging import install_handlers

    directory = log_dir or Path(os.getenv("CURATOR_LOG_DIR", "logs"))
    level = logging.DEBUG if is_dev_mode() else logging.INFO
    install_handlers(directory, level=level, console=console)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
