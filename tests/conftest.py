"""Shared fixtures for sidecar-sync tests."""

from __future__ import annotations

import stat
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog

from sidecar_sync.app import SidecarApp
from sidecar_sync.config import get_settings
from sidecar_sync.models import InvocationMode


ScriptFactory = Callable[[Path, str], Path]


@pytest.fixture(autouse=True)
def captured_logs() -> Iterator[list[dict]]:
    """Capture structlog events instead of printing them."""
    with structlog.testing.capture_logs() as logs:
        yield logs


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_script() -> ScriptFactory:
    """Write an executable ``/bin/sh`` script with the given body."""

    def _make(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def bundle(tmp_path: Path, make_script: ScriptFactory) -> Path:
    """An application bundle directory holding the app and its sidecar."""
    bundle_dir = tmp_path / "bundle"
    make_script(bundle_dir / "desktop-app", "exit 0")
    make_script(bundle_dir / "opencode-cli", 'echo "opencode-cli $*"')
    return bundle_dir


@pytest.fixture
def make_app(home: Path, bundle: Path, tmp_path: Path) -> Callable[..., SidecarApp]:
    """Build a SidecarApp wired to temp directories.

    The default installer script exits 0 without output.
    """
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()

    def _make(**overrides: object) -> SidecarApp:
        values: dict[str, object] = {
            "version": "1.0.0",
            "executable": bundle / "desktop-app",
            "home": str(home),
            "shell": "/bin/sh",
            "debug_build": False,
            "mode": InvocationMode.SHELL_WRAPPED,
            "platform": "linux",
            "temp_dir": temp_dir,
            "install_script": b"#!/bin/sh\nexit 0\n",
        }
        values.update(overrides)
        return SidecarApp(**values)  # type: ignore[arg-type]

    return _make
