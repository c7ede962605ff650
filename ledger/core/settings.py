"""Configuration and environment settings for the Ledger API."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the Ledger API."""

    database_url: str = "sqlite:///./ledger.db"
    jwt_secret: str = "change-me-in-production-with-a-long-secret"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 30
    default_page_size: int = 20
    max_page_size: int = 100
    summary_window_months: int = 6
    summary_category_limit: int = 10
    log_level: str = "INFO"
    log_file: str | None = None
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide application settings."""
    return Settings()
