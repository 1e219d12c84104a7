"""Configuration management for sidecar-sync."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sidecar_sync.models import InvocationMode


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    ``SHELL`` and ``HOME`` are read under their usual names; everything
    specific to this package carries a ``SIDECAR_SYNC_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # User environment
    shell: str | None = Field(default=None, description="Preferred interactive shell")
    home: str | None = Field(default=None, description="Current user's home directory")

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")
    app_version: str | None = Field(
        default=None,
        validation_alias="sidecar_sync_app_version",
        description="Version of the running desktop application",
    )
    app_executable: Path | None = Field(
        default=None,
        validation_alias="sidecar_sync_app_executable",
        description="Path to the application executable the sidecar is bundled with",
    )

    # Process invocation
    command_timeout: float | None = Field(
        default=None,
        gt=0,
        validation_alias="sidecar_sync_command_timeout",
        description="Timeout in seconds for each sidecar/installer process (unset = wait forever)",
    )
    invocation_mode: InvocationMode | None = Field(
        default=None,
        validation_alias="sidecar_sync_invocation_mode",
        description="Force direct or shell-wrapped invocation instead of probing the platform",
    )
    temp_dir: Path | None = Field(
        default=None,
        validation_alias="sidecar_sync_temp_dir",
        description="Directory the installer script is written to",
    )

    @field_validator("shell", "home", mode="before")
    @classmethod
    def empty_as_unset(cls, v: str | None) -> str | None:
        """Treat an empty variable the same as an unset one."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_development(self) -> bool:
        """Check if running as a debug (development) build."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
