from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Leavedesk settings, read from ``LEAVEDESK_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="LEAVEDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leavedesk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Database
    database_url: str = "postgresql+asyncpg://leavedesk:leavedesk@db:5432/leavedesk"
    db_pool_size: int = Field(default=5, ge=1)
    db_echo: bool = False

    # Leave rules applied when a department does not set its own.
    default_max_consecutive_days: int = Field(default=15, ge=1)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next ``get_settings()`` re-reads the environment."""
    global _settings
    _settings = None
