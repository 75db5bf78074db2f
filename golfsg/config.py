"""Configuration helpers for the strokes-gained service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    smoothing_window_s: float = Field(default=5.0, gt=0)
    rounds_dir: str = "data/sg_rounds"
    require_api_key: bool = False
    api_keys: str = ""

    model_config = SettingsConfigDict(
        env_prefix="GOLFSG_", env_file=".env", extra="ignore"
    )

    @property
    def allowed_api_keys(self) -> set[str]:
        return {key.strip() for key in self.api_keys.split(",") if key.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
