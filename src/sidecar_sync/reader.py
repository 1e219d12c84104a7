"""Reads the bundled sidecar's configuration via ``debug config``."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from sidecar_sync.constants import CONFIG_COMMAND
from sidecar_sync.errors import SidecarError
from sidecar_sync.logging import get_logger
from sidecar_sync.models import InvocationMode, SidecarConfig
from sidecar_sync.shell import create_command, run_command

log = get_logger("sidecar_sync.reader")


def get_config(
    sidecar_path: Path | str,
    *,
    mode: InvocationMode | None = None,
    shell: str | None = None,
    timeout: float | None = None,
) -> SidecarConfig | None:
    """Ask the sidecar for its configuration.

    Returns None whenever the configuration cannot be obtained: the process
    did not start or finish, exited nonzero, or printed something that is
    not a valid configuration document. The configuration is advisory, so
    none of these are errors for the caller.
    """
    command = create_command(sidecar_path, CONFIG_COMMAND, mode=mode, shell=shell)
    try:
        result = run_command(command, timeout=timeout)
    except SidecarError as exc:
        log.debug("sidecar_config_unavailable", kind=exc.kind.value, error=str(exc))
        return None

    if result.returncode != 0:
        log.debug("sidecar_config_unavailable", returncode=result.returncode)
        return None

    try:
        return SidecarConfig.model_validate_json(result.stdout)
    except ValidationError as exc:
        log.debug("sidecar_config_invalid", errors=exc.error_count())
        return None
