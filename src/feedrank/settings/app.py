"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    config_path: Path | None = Field(
        default=None, validation_alias="FEEDRANK_CONFIG_PATH"
    )
    log_level: str = Field(default="INFO", validation_alias="FEEDRANK_LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="FEEDRANK_LOG_JSON")


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
