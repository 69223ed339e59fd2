# bookshelf/config.py
"""
Environment-driven settings for the bookshelf application.

Values are read from environment variables (case-insensitive) or from a
``.env`` file in the working directory. ``get_settings()`` is cached so
the whole process shares a single ``Settings`` instance; tests build
their own instance and hand it to ``create_app()`` instead.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite:///./library.db"
    database_echo: bool = False

    # Signs the session cookie that carries each client's search filter
    secret_key: str = "bookshelf-dev-secret"

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"

    # Dev server (python -m bookshelf)
    host: str = "127.0.0.1"
    port: int = 3000

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
