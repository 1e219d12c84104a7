"""Installs the bundled sidecar as a standalone CLI.

The installer script ships inside the package; it is written to the temp
directory, run against the bundled binary, and removed again whatever the
outcome.
"""

from __future__ import annotations

import os
from pathlib import Path

from sidecar_sync.app import SidecarApp
from sidecar_sync.constants import (
    INSTALL_BINARY_FLAG,
    INSTALL_SCRIPT_MODE,
    INSTALL_SCRIPT_NAME,
    STDERR_EXCERPT_LENGTH,
)
from sidecar_sync.errors import ErrorKind, SidecarError
from sidecar_sync.logging import get_logger
from sidecar_sync.models import InvocationMode
from sidecar_sync.shell import create_command, run_command

log = get_logger("sidecar_sync.installer")


def _write_script(app: SidecarApp) -> Path:
    script = app.temp_dir / INSTALL_SCRIPT_NAME
    try:
        script.write_bytes(app.install_script)
    except OSError as exc:
        _remove_script(script)
        raise SidecarError(
            ErrorKind.ENVIRONMENT,
            f"Failed to write install script: {exc}",
            path=script,
        ) from exc

    if app.is_unix:
        try:
            os.chmod(script, INSTALL_SCRIPT_MODE)
        except OSError as exc:
            _remove_script(script)
            raise SidecarError(
                ErrorKind.ENVIRONMENT,
                f"Failed to set script permissions: {exc}",
                path=script,
            ) from exc
    return script


def _remove_script(script: Path) -> None:
    try:
        script.unlink(missing_ok=True)
    except OSError as exc:
        log.warning("cli_install_script_cleanup_failed", path=str(script), error=str(exc))


def install_cli(app: SidecarApp) -> str:
    """Install the bundled sidecar to the standalone CLI location.

    Returns the install path. Raises ``SidecarError`` when the platform is
    unsupported, the bundled binary is missing, or the installer fails.
    """
    if not app.is_unix:
        raise SidecarError(
            ErrorKind.UNSUPPORTED_PLATFORM,
            "CLI installation is only supported on macOS & Linux",
        )

    sidecar = app.sidecar_path
    if not sidecar.exists():
        raise SidecarError(ErrorKind.NOT_FOUND, "Sidecar binary not found", path=sidecar)

    script = _write_script(app)
    # Executed directly, never through the login shell
    command = create_command(
        script, [INSTALL_BINARY_FLAG, str(sidecar)], mode=InvocationMode.DIRECT
    )
    # The script installs under HOME, which must agree with install_path
    env = dict(os.environ)
    if app.home is not None:
        env["HOME"] = app.home

    log.info("cli_install_started", sidecar=str(sidecar))
    try:
        result = run_command(command, timeout=app.timeout, env=env)
    finally:
        _remove_script(script)

    if result.returncode != 0:
        log.warning(
            "cli_install_failed",
            returncode=result.returncode,
            stderr=result.stderr[:STDERR_EXCERPT_LENGTH],
        )
        raise SidecarError(
            ErrorKind.NONZERO_EXIT,
            f"Install script failed: {result.stderr}",
            path=script,
            returncode=result.returncode,
            stderr=result.stderr,
        )

    install_path = app.install_path
    if install_path is None:
        raise SidecarError(ErrorKind.ENVIRONMENT, "Could not determine install path")

    log.info("cli_installed", path=str(install_path))
    return str(install_path)
