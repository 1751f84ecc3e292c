"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    productinfo_base_url: str = "https://fic.colruytgroup.com/productinfo/en/algc"
    request_delay_seconds: float = 1.0
    request_timeout_seconds: float = 15.0
    page_idle_timeout_seconds: float = 120.0
    cache_ttl_seconds: int = 86400
    cache_key_prefix: str = "cache_"
    storage_backend: Literal["memory", "file", "supabase"] = "memory"
    storage_path: str = "nutrition_cache.json"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
