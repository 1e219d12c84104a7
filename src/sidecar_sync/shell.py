"""Shell resolution and process invocation for the sidecar.

On Unix the sidecar is launched through an interactive login shell so the
user's profile (PATH, version managers, aliases) is loaded before it runs;
the sidecar in turn spawns tools it expects to find on that PATH. Windows
has no such layer and the target is executed directly.
"""

from __future__ import annotations

import shlex
import subprocess  # nosec B404
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from sidecar_sync.constants import DEFAULT_SHELL, STDERR_EXCERPT_LENGTH, WINDOWS_PLATFORMS
from sidecar_sync.errors import ErrorKind, SidecarError
from sidecar_sync.logging import get_logger
from sidecar_sync.models import InvocationMode

log = get_logger("sidecar_sync.shell")


def detect_invocation_mode(platform: str | None = None) -> InvocationMode:
    """Pick the invocation mode for *platform* (defaults to the running one)."""
    platform = sys.platform if platform is None else platform
    if platform in WINDOWS_PLATFORMS:
        return InvocationMode.DIRECT
    return InvocationMode.SHELL_WRAPPED


def get_user_shell(shell: str | None = None) -> str:
    """Return the user's preferred shell, or ``/bin/sh`` when none is set."""
    return shell or DEFAULT_SHELL


@dataclass(frozen=True)
class ShellCommand:
    """A ready-to-run command for a target executable."""

    executable: Path
    args: tuple[str, ...] = ()
    mode: InvocationMode = InvocationMode.DIRECT
    shell: str = DEFAULT_SHELL
    shell_flags: tuple[str, ...] = field(default=("-i", "-l"))

    @property
    def argv(self) -> list[str]:
        """Full argument vector to hand to ``subprocess``.

        Shell-wrapped commands become
        ``<shell> -i -l -c '<target>' "$@" -- <args...>``: ``--`` fills ``$0``
        and every following argument reaches the target as one token.
        """
        if self.mode is InvocationMode.DIRECT:
            return [str(self.executable), *self.args]
        script = f'{shlex.quote(str(self.executable))} "$@"'
        return [self.shell, *self.shell_flags, "-c", script, "--", *self.args]


def create_command(
    target: Path | str,
    args: Sequence[str] = (),
    *,
    mode: InvocationMode | None = None,
    shell: str | None = None,
) -> ShellCommand:
    """Build a platform-correct command that runs *target* with *args*."""
    return ShellCommand(
        executable=Path(target),
        args=tuple(str(a) for a in args),
        mode=mode or detect_invocation_mode(),
        shell=get_user_shell(shell),
    )


def run_command(
    command: ShellCommand,
    *,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *command* to completion and capture its output.

    A nonzero exit is returned to the caller. Failing to start the process
    raises ``SidecarError(SPAWN)`` and an expired *timeout* raises
    ``SidecarError(TIMEOUT)``; ``timeout=None`` waits indefinitely.
    """
    argv = command.argv
    try:
        result = subprocess.run(  # nosec B603 - argv is built by create_command
            argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            env=dict(env) if env is not None else None,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        log.warning("sidecar_cmd_timeout", executable=str(command.executable), timeout=timeout)
        raise SidecarError(
            ErrorKind.TIMEOUT,
            f"{command.executable} did not finish within {timeout}s",
            path=command.executable,
        ) from exc
    except OSError as exc:
        log.warning("sidecar_cmd_spawn_failed", executable=argv[0], error=str(exc))
        raise SidecarError(
            ErrorKind.SPAWN,
            f"Failed to run {argv[0]}: {exc}",
            path=argv[0],
        ) from exc

    if result.returncode != 0:
        log.debug(
            "sidecar_cmd_failed",
            executable=str(command.executable),
            returncode=result.returncode,
            stderr=result.stderr[:STDERR_EXCERPT_LENGTH],
        )
    return result
