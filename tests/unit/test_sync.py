"""Unit tests for the version sync policy."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from sidecar_sync.errors import ErrorKind, SidecarError
from sidecar_sync.sync import (
    SkipReason,
    SyncAction,
    SyncDecision,
    decide,
    get_installed_version,
    sync,
    sync_on_startup,
)
from sidecar_sync.version import SemanticVersion

unix_only = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def install_cli_stub(home: Path, make_script):
    """Write an installed CLI that prints the given version output."""

    def _install(body: str) -> Path:
        return make_script(home / ".opencode" / "bin" / "opencode", body)

    return _install


@pytest.fixture
def recording_installer(tmp_path: Path) -> tuple[bytes, Path]:
    """An installer script that records each run."""
    marker = tmp_path / "installer-ran"
    script = f'#!/bin/sh\necho ran >> "{marker}"\n'.encode()
    return script, marker


# ---------------------------------------------------------------------------
# Skip paths
# ---------------------------------------------------------------------------


class TestSkip:
    """Decisions that leave the installed CLI alone."""

    def test_debug_build_skips(self, make_app) -> None:
        app = make_app(debug_build=True)
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(app)
        assert decision.action is SyncAction.SKIP
        assert decision.reason is SkipReason.DEBUG_BUILD
        mock_install.assert_not_called()

    @unix_only
    def test_debug_build_skips_even_when_outdated(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo 0.0.1")
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(make_app(debug_build=True))
        assert decision.reason is SkipReason.DEBUG_BUILD
        mock_install.assert_not_called()

    def test_not_installed_skips(self, make_app) -> None:
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(make_app())
        assert decision == SyncDecision.skip(SkipReason.NOT_INSTALLED, app_version="1.0.0")
        mock_install.assert_not_called()

    def test_unset_home_counts_as_not_installed(self, make_app) -> None:
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(make_app(home=None))
        assert decision.reason is SkipReason.NOT_INSTALLED
        mock_install.assert_not_called()

    @unix_only
    def test_equal_version_is_up_to_date(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo 1.0.0")
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(make_app(version="1.0.0"))
        assert decision.reason is SkipReason.UP_TO_DATE
        assert decision.installed_version == "1.0.0"
        mock_install.assert_not_called()

    @unix_only
    def test_newer_installed_is_up_to_date(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo 2.3.0")
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(make_app(version="1.0.0"))
        assert decision.reason is SkipReason.UP_TO_DATE
        mock_install.assert_not_called()

    @unix_only
    def test_version_output_is_trimmed(self, make_app, install_cli_stub) -> None:
        install_cli_stub("printf '  1.0.0 \\n\\n'")
        assert decide(make_app(version="1.0.0")).reason is SkipReason.UP_TO_DATE


# ---------------------------------------------------------------------------
# Install path
# ---------------------------------------------------------------------------


@unix_only
class TestInstall:
    """Decisions that replace the installed CLI."""

    def test_older_installed_version_installs(
        self, make_app, install_cli_stub, recording_installer
    ) -> None:
        install_cli_stub("echo 0.9.0")
        script, marker = recording_installer
        decision = sync(make_app(version="1.0.0", install_script=script))

        assert decision.action is SyncAction.INSTALL
        assert decision.installed_version == "0.9.0"
        assert decision.app_version == "1.0.0"
        assert marker.read_text() == "ran\n"

    def test_installer_failure_propagates(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo 0.9.0")
        app = make_app(install_script=b"#!/bin/sh\necho nope >&2\nexit 1\n")
        with pytest.raises(SidecarError) as exc_info:
            sync(app)
        assert exc_info.value.kind is ErrorKind.NONZERO_EXIT

    def test_decide_does_not_install(
        self, make_app, install_cli_stub, recording_installer
    ) -> None:
        install_cli_stub("echo 0.9.0")
        script, marker = recording_installer
        decision = decide(make_app(install_script=script))
        assert decision.should_install is True
        assert not marker.exists()

    @pytest.mark.parametrize(
        ("installed", "app_version", "expect_install"),
        [
            ("0.9.0", "1.0.0", True),
            ("1.0.0", "1.0.0", False),
            ("1.0.1", "1.0.0", False),
            ("1.2.0-beta", "1.2.0", True),
            ("1.2.0", "1.2.0-beta", False),
            ("1.2.0-beta.2", "1.2.0-beta.11", True),
            ("1.2.0-rc.1", "1.2.0-beta.11", False),
            ("1.9.0", "1.10.0", True),
            ("1.0.0+build.9", "1.0.0", False),
        ],
    )
    def test_installs_iff_older(
        self,
        make_app,
        install_cli_stub,
        installed: str,
        app_version: str,
        expect_install: bool,
    ) -> None:
        install_cli_stub(f"echo {installed}")
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            decision = sync(make_app(version=app_version))
        assert decision.should_install is expect_install
        assert mock_install.called is expect_install


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@unix_only
class TestFailures:
    """Failures reading the installed version."""

    def test_garbage_version_fails_without_install(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo garbage")
        with patch("sidecar_sync.sync.install_cli") as mock_install:
            with pytest.raises(SidecarError) as exc_info:
                sync(make_app())
        assert exc_info.value.kind is ErrorKind.MALFORMED_OUTPUT
        assert "Failed to parse CLI version 'garbage'" in str(exc_info.value)
        mock_install.assert_not_called()

    def test_nonzero_version_exit_fails(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo broken >&2\nexit 4")
        with pytest.raises(SidecarError) as exc_info:
            sync(make_app())
        err = exc_info.value
        assert err.kind is ErrorKind.NONZERO_EXIT
        assert err.returncode == 4
        assert str(err) == "Failed to get CLI version"

    def test_unrunnable_installed_binary_fails(self, make_app, home: Path) -> None:
        binary = home / ".opencode" / "bin" / "opencode"
        binary.parent.mkdir(parents=True)
        binary.write_text("not executable")
        with pytest.raises(SidecarError) as exc_info:
            sync(make_app())
        assert exc_info.value.kind is ErrorKind.SPAWN

    def test_runs_installed_binary_directly(self, make_app, install_cli_stub) -> None:
        install_cli_stub('[ "$#" -eq 1 ] && [ "$1" = "--version" ] && echo 1.0.0')
        assert get_installed_version(make_app()) == SemanticVersion(1, 0, 0)

    def test_invalid_app_version(self, make_app, install_cli_stub) -> None:
        install_cli_stub("echo 1.0.0")
        with pytest.raises(SidecarError) as exc_info:
            decide(make_app(version="dev"))
        assert exc_info.value.kind is ErrorKind.MALFORMED_OUTPUT


class TestGetInstalledVersion:
    """Tests for get_installed_version without a home directory."""

    def test_unset_home(self, make_app) -> None:
        with pytest.raises(SidecarError) as exc_info:
            get_installed_version(make_app(home=None))
        assert exc_info.value.kind is ErrorKind.ENVIRONMENT


class TestSyncOnStartup:
    """Tests for the non-blocking startup wrapper."""

    def test_returns_decision(self, make_app) -> None:
        decision = sync_on_startup(make_app(debug_build=True))
        assert decision is not None
        assert decision.reason is SkipReason.DEBUG_BUILD

    def test_swallows_and_logs_errors(self, make_app, captured_logs) -> None:
        error = SidecarError(ErrorKind.MALFORMED_OUTPUT, "Failed to parse CLI version")
        with patch("sidecar_sync.sync.sync", side_effect=error):
            assert sync_on_startup(make_app()) is None
        failed = [e for e in captured_logs if e["event"] == "cli_sync_failed"]
        assert failed and failed[0]["kind"] == "malformed_output"


class TestSyncDecision:
    """Tests for SyncDecision."""

    def test_to_dict(self) -> None:
        decision = SyncDecision(
            action=SyncAction.INSTALL, installed_version="0.9.0", app_version="1.0.0"
        )
        assert decision.to_dict() == {
            "action": "install",
            "reason": None,
            "installed_version": "0.9.0",
            "app_version": "1.0.0",
        }

    def test_skip_to_dict(self) -> None:
        decision = SyncDecision.skip(SkipReason.NOT_INSTALLED)
        assert decision.to_dict()["reason"] == "not-installed"
        assert decision.should_install is False
