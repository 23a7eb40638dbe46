"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    storage_bucket: str = "dissertation-files"
    file_fetch_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def public_file_prefix(settings: Settings) -> str:
    """Return the URL prefix shared by every public object in the bucket."""
    base_url = settings.supabase_url.rstrip("/")
    return f"{base_url}/storage/v1/object/public/{settings.storage_bucket}/"
