from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, SecretStr


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Settings(BaseModel):
    # Recommendation defaults
    window_days: int = Field(
        default_factory=lambda: int(os.getenv("RECOMMENDER_WINDOW_DAYS", "7")), ge=1
    )
    min_participants: int = Field(
        default_factory=lambda: int(os.getenv("RECOMMENDER_MIN_PARTICIPANTS", "2")), ge=1
    )

    # Pagination
    default_page_size: int = Field(
        default_factory=lambda: int(os.getenv("RECOMMENDER_DEFAULT_PAGE_SIZE", "10")), ge=1
    )
    max_page_size: int = Field(
        default_factory=lambda: int(os.getenv("RECOMMENDER_MAX_PAGE_SIZE", "100")), ge=1
    )

    # Logging
    log_level: str = Field(
        default_factory=lambda: os.getenv("RECOMMENDER_LOG_LEVEL", "INFO").upper()
    )

    # Demo catalog
    cache_file: str = Field(
        default_factory=lambda: os.getenv("RECOMMENDER_CACHE_FILE", "debug_data.json")
    )
    use_cache: bool = Field(default_factory=lambda: _env_flag("RECOMMENDER_USE_CACHE", "true"))
    google_api_key: Optional[SecretStr] = Field(
        default_factory=lambda: SecretStr(os.environ["GOOGLE_API_KEY"])
        if os.getenv("GOOGLE_API_KEY")
        else None
    )


def get_settings() -> Settings:
    # Module-level singleton, evaluated once per process
    global _SETTINGS_SINGLETON
    try:
        return _SETTINGS_SINGLETON
    except NameError:
        _SETTINGS_SINGLETON = Settings()  # type: ignore[reportPrivateUsage]
        return _SETTINGS_SINGLETON
