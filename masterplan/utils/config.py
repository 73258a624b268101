"""Application configuration."""
from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = Field(
        default="sqlite+pysqlite:///./masterplan.db",
        validation_alias=AliasChoices("DATABASE_URL"),
    )
    storage_base_url: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("STORAGE_BASE_URL", "SUPABASE_URL"),
    )
    storage_bucket: str = "images"
    output_dir: str = "outputs"
    route_prefix: str = "/p"
    root_breadcrumb_label: str = "Mapa Principal"
    http_timeout_seconds: float = 30.0
    prefetch_delay_seconds: float = 0.5
    dim_opacity: float = 0.3
    background_opacity: float = 0.6
    accessible_regions: bool = True
    leaf_click_policy: Literal["panel", "navigate"] = "panel"


settings = Settings()
