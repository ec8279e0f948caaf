"""Application configuration.

Settings are read from ``THREADSTORE_*`` environment variables, with a ``.env``
file in the working directory loaded first when present.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_TRUTHY = ("true", "1", "yes")


class Settings(BaseModel):
    """Runtime settings for the threadstore service.

    Attributes:
        database_url: Async SQLAlchemy URL (aiosqlite or asyncpg driver)
        database_echo: Whether SQLAlchemy logs every statement
        log_level: Root logging level
        json_logs: Render logs as JSON instead of console output
        user_header: Header carrying the authenticated user id from the auth proxy
    """

    database_url: str = Field(default="sqlite+aiosqlite:///./threadstore.db")
    database_echo: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)
    user_header: str = Field(default="X-User-ID", min_length=1)

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize the log level and reject unknown names.

        Raises:
            ValueError: If the level is not a standard logging level
        """
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level


def load_settings_from_env() -> Settings:
    """Load settings from environment variables.

    Reads:
    - THREADSTORE_DATABASE_URL
    - THREADSTORE_DATABASE_ECHO (true/false)
    - THREADSTORE_LOG_LEVEL
    - THREADSTORE_JSON_LOGS (true/false)
    - THREADSTORE_USER_HEADER

    Returns:
        Settings with environment overrides applied over the defaults

    Example:
        >>> os.environ["THREADSTORE_LOG_LEVEL"] = "debug"
        >>> load_settings_from_env().log_level
        'DEBUG'
    """
    load_dotenv()

    defaults = Settings()
    return Settings(
        database_url=os.getenv("THREADSTORE_DATABASE_URL", defaults.database_url),
        database_echo=os.getenv("THREADSTORE_DATABASE_ECHO", "false").lower() in _TRUTHY,
        log_level=os.getenv("THREADSTORE_LOG_LEVEL", defaults.log_level),
        json_logs=os.getenv("THREADSTORE_JSON_LOGS", "true").lower() in _TRUTHY,
        user_header=os.getenv("THREADSTORE_USER_HEADER", defaults.user_header),
    )
