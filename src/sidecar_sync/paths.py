"""Filesystem locations of the bundled and the installed sidecar."""

from __future__ import annotations

import sys
from pathlib import Path

from sidecar_sync.constants import (
    CLI_BINARY_NAME,
    CLI_INSTALL_DIR,
    SIDECAR_BINARY_NAME,
    WINDOWS_PLATFORMS,
)


def get_cli_install_path(home: Path | str | None) -> Path | None:
    """Return ``<home>/.opencode/bin/opencode``, or None when *home* is unset."""
    if home is None or not str(home):
        return None
    return Path(home) / CLI_INSTALL_DIR / CLI_BINARY_NAME


def is_cli_installed(home: Path | str | None) -> bool:
    """Check whether a standalone copy of the CLI exists right now."""
    path = get_cli_install_path(home)
    return path is not None and path.exists()


def get_sidecar_path(executable: Path | str, platform: str | None = None) -> Path:
    """Return the sidecar bundled next to the application *executable*.

    Symlinks are resolved first so a linked launcher still finds the
    binary inside the real bundle.
    """
    platform = sys.platform if platform is None else platform
    name = SIDECAR_BINARY_NAME
    if platform in WINDOWS_PLATFORMS:
        name += ".exe"
    return Path(executable).resolve().parent / name
