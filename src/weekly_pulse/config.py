# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads database, storage backend and logging settings from environment and .env file.

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage backend: relational database or process-local memory
    storage_backend: Literal["postgres", "memory"] = "postgres"

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "weekly_leadership_updates"
    db_user: str = "postgres"
    db_password: SecretStr | None = None
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10
    db_url: str | None = None  # Full URL override, e.g. sqlite+aiosqlite:///pulse.db

    @property
    def database_url(self) -> str:
        """Build async database connection URL."""
        if self.db_url:
            return self.db_url
        password = self.db_password.get_secret_value() if self.db_password else ""
        return f"postgresql+asyncpg://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def uses_sqlite(self) -> bool:
        """True when the configured database is SQLite (no connection pool sizing)."""
        return self.database_url.startswith("sqlite")

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    """
    return Settings()
