"""Application handle passed to the installer and sync policy."""

from __future__ import annotations

import sys
import tempfile
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path

from sidecar_sync import __version__
from sidecar_sync.config import Settings, get_settings
from sidecar_sync.constants import WINDOWS_PLATFORMS
from sidecar_sync.models import InvocationMode
from sidecar_sync.paths import get_cli_install_path, get_sidecar_path
from sidecar_sync.shell import detect_invocation_mode, get_user_shell


def load_install_script() -> bytes:
    """Return the installer script shipped as package data."""
    return resources.files("sidecar_sync").joinpath("data/install").read_bytes()


@dataclass
class SidecarApp:
    """Everything the sidecar components need to know about the running app.

    Environment-derived values are resolved once here and handed to each
    component explicitly, so nothing below reads the process environment.
    """

    version: str
    executable: Path
    home: str | None = None
    shell: str | None = None
    debug_build: bool = False
    mode: InvocationMode = field(default_factory=detect_invocation_mode)
    platform: str = field(default_factory=lambda: sys.platform)
    temp_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    timeout: float | None = None
    install_script: bytes = field(default_factory=load_install_script, repr=False)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> SidecarApp:
        settings = settings or get_settings()
        return cls(
            version=settings.app_version or __version__,
            executable=settings.app_executable or Path(sys.executable),
            home=settings.home,
            shell=settings.shell,
            debug_build=settings.is_development,
            mode=settings.invocation_mode or detect_invocation_mode(),
            temp_dir=settings.temp_dir or Path(tempfile.gettempdir()),
            timeout=settings.command_timeout,
        )

    @property
    def is_unix(self) -> bool:
        return self.platform not in WINDOWS_PLATFORMS

    @property
    def user_shell(self) -> str:
        return get_user_shell(self.shell)

    @property
    def sidecar_path(self) -> Path:
        """The ``opencode-cli`` binary bundled with this app."""
        return get_sidecar_path(self.executable, platform=self.platform)

    @property
    def install_path(self) -> Path | None:
        """Where a standalone copy of the CLI lives, if HOME is known."""
        return get_cli_install_path(self.home)
