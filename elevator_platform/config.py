"""
Configuration for the elevator platform client.

Settings are read, in priority order, from constructor arguments, environment
variables prefixed with ``ELEVATOR_PLATFORM_``, a ``.env`` file and an
optional ``config.yaml`` in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple, Type

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .io_paths import CONFIG_YAML, ENV_FILE, LOGS_DIR


class Settings(BaseSettings):
    """Environment-backed settings for the Streamlit client."""

    model_config = SettingsConfigDict(
        env_prefix="ELEVATOR_PLATFORM_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        yaml_file=str(CONFIG_YAML),
        extra="ignore",
    )

    # Backend (Supabase-style auth + REST + storage)
    backend_url: str = Field(default="http://localhost:54321")
    backend_anon_key: str = Field(default="")
    request_timeout: float = Field(default=10.0, gt=0)

    # Public URL of this app, used for e-mail redirect links
    site_url: str = Field(default="http://localhost:8501")

    # Client-side caching and session policy
    elevator_cache_ttl_seconds: float = Field(default=120.0, gt=0)
    session_expiry_margin_seconds: float = Field(default=60.0, ge=0)
    resume_idle_seconds: float = Field(default=300.0, gt=0)

    max_avatar_bytes: int = Field(default=2 * 1024 * 1024, gt=0)
    avatar_bucket: str = Field(default="avatars")

    log_dir: str = Field(default=str(LOGS_DIR))
    debug: bool = Field(default=False)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
