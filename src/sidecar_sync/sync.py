"""Keeps an installed standalone CLI in step with the desktop app.

Runs once at startup in release builds. Nothing happens unless the user
already installed the CLI; an existing install is only replaced when it is
older than the app, so a newer CLI the user installed by hand survives.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from sidecar_sync.app import SidecarApp
from sidecar_sync.constants import VERSION_FLAG
from sidecar_sync.errors import ErrorKind, SidecarError
from sidecar_sync.installer import install_cli
from sidecar_sync.logging import get_logger
from sidecar_sync.models import InvocationMode
from sidecar_sync.paths import is_cli_installed
from sidecar_sync.shell import create_command, run_command
from sidecar_sync.version import SemanticVersion, VersionParseError

log = get_logger("sidecar_sync.sync")


class SyncAction(StrEnum):
    """What the sync policy decided to do."""

    SKIP = "skip"
    INSTALL = "install"


class SkipReason(StrEnum):
    """Why an installed CLI was left alone."""

    DEBUG_BUILD = "debug-build"
    NOT_INSTALLED = "not-installed"
    UP_TO_DATE = "up-to-date"


@dataclass(frozen=True)
class SyncDecision:
    """Outcome of comparing the installed CLI against the app."""

    action: SyncAction
    reason: SkipReason | None = None
    installed_version: str | None = None
    app_version: str | None = None

    @classmethod
    def skip(cls, reason: SkipReason, **versions: str | None) -> SyncDecision:
        return cls(action=SyncAction.SKIP, reason=reason, **versions)

    @property
    def should_install(self) -> bool:
        return self.action is SyncAction.INSTALL

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "reason": self.reason.value if self.reason else None,
            "installed_version": self.installed_version,
            "app_version": self.app_version,
        }


def get_installed_version(app: SidecarApp) -> SemanticVersion:
    """Run the installed CLI with ``--version`` and parse what it prints."""
    cli_path = app.install_path
    if cli_path is None:
        raise SidecarError(ErrorKind.ENVIRONMENT, "Could not determine CLI install path")

    command = create_command(cli_path, [VERSION_FLAG], mode=InvocationMode.DIRECT)
    result = run_command(command, timeout=app.timeout)
    if result.returncode != 0:
        raise SidecarError(
            ErrorKind.NONZERO_EXIT,
            "Failed to get CLI version",
            path=cli_path,
            returncode=result.returncode,
            stderr=result.stderr,
        )

    version_str = result.stdout.strip()
    try:
        return SemanticVersion.parse(version_str)
    except VersionParseError as exc:
        raise SidecarError(
            ErrorKind.MALFORMED_OUTPUT,
            f"Failed to parse CLI version '{version_str}': {exc}",
            path=cli_path,
        ) from exc


def decide(app: SidecarApp) -> SyncDecision:
    """Work out whether the installed CLI needs replacing, without installing."""
    if app.debug_build:
        log.info("cli_sync_skipped", reason=SkipReason.DEBUG_BUILD.value)
        return SyncDecision.skip(SkipReason.DEBUG_BUILD, app_version=app.version)

    if not is_cli_installed(app.home):
        log.info("cli_sync_skipped", reason=SkipReason.NOT_INSTALLED.value)
        return SyncDecision.skip(SkipReason.NOT_INSTALLED, app_version=app.version)

    cli_version = get_installed_version(app)
    try:
        app_version = SemanticVersion.parse(app.version)
    except VersionParseError as exc:
        raise SidecarError(
            ErrorKind.MALFORMED_OUTPUT,
            f"Failed to parse app version '{app.version}': {exc}",
        ) from exc

    if cli_version >= app_version:
        log.info(
            "cli_sync_skipped",
            reason=SkipReason.UP_TO_DATE.value,
            cli_version=str(cli_version),
            app_version=str(app_version),
        )
        return SyncDecision.skip(
            SkipReason.UP_TO_DATE,
            installed_version=str(cli_version),
            app_version=str(app_version),
        )

    log.info("cli_outdated", cli_version=str(cli_version), app_version=str(app_version))
    return SyncDecision(
        action=SyncAction.INSTALL,
        installed_version=str(cli_version),
        app_version=str(app_version),
    )


def sync(app: SidecarApp) -> SyncDecision:
    """Replace the installed CLI if it is older than the app.

    Returns the decision taken. Failures to read the installed version or to
    run the installer propagate as ``SidecarError``.
    """
    decision = decide(app)
    if not decision.should_install:
        return decision

    install_cli(app)
    log.info("cli_synced", version=decision.app_version)
    return decision


def sync_on_startup(app: SidecarApp) -> SyncDecision | None:
    """Run ``sync`` without letting a failure block application startup."""
    try:
        return sync(app)
    except SidecarError as exc:
        log.warning("cli_sync_failed", kind=exc.kind.value, error=str(exc))
        return None
