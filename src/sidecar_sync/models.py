"""Data models for sidecar invocation and configuration."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Ports are reported as unsigned 32-bit integers by the sidecar
MAX_PORT_VALUE = 2**32 - 1


class InvocationMode(StrEnum):
    """How a target executable is launched."""

    DIRECT = "direct"  # exec the target with its arguments
    SHELL_WRAPPED = "shell-wrapped"  # run through an interactive login shell


class ServerConfig(BaseModel):
    """The ``server`` section of the sidecar's configuration."""

    model_config = ConfigDict(extra="ignore")

    hostname: str | None = Field(
        default=None, strict=True, description="Host the sidecar server binds to"
    )
    port: int | None = Field(
        default=None,
        strict=True,
        ge=0,
        le=MAX_PORT_VALUE,
        description="Port the sidecar server listens on",
    )


class SidecarConfig(BaseModel):
    """Configuration reported by ``opencode-cli debug config``.

    Only the fields used for decision-making are modelled; everything else
    in the sidecar's output is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    server: ServerConfig | None = Field(default=None, description="Server settings")

    def server_url(self) -> str | None:
        """Return ``http://host:port`` when both hostname and port are set."""
        if self.server is None or self.server.hostname is None or self.server.port is None:
            return None
        return f"http://{self.server.hostname}:{self.server.port}"
