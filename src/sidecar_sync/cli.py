"""Command-line entry point for sidecar-sync."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from pydantic import ValidationError

from sidecar_sync import __version__
from sidecar_sync.app import SidecarApp
from sidecar_sync.errors import SidecarError
from sidecar_sync.installer import install_cli
from sidecar_sync.logging import get_logger, setup_logging
from sidecar_sync.paths import is_cli_installed
from sidecar_sync.reader import get_config
from sidecar_sync.sync import decide, sync

log = get_logger("sidecar_sync.cli")


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _cmd_sync(app: SidecarApp, args: argparse.Namespace) -> int:
    decision = sync(app)
    _print_json(decision.to_dict())
    return 0


def _cmd_check(app: SidecarApp, args: argparse.Namespace) -> int:
    _print_json(decide(app).to_dict())
    return 0


def _cmd_install(app: SidecarApp, args: argparse.Namespace) -> int:
    print(install_cli(app))
    return 0


def _cmd_config(app: SidecarApp, args: argparse.Namespace) -> int:
    config = get_config(app.sidecar_path, mode=app.mode, shell=app.shell, timeout=app.timeout)
    _print_json(config.model_dump() if config is not None else None)
    return 0


def _cmd_paths(app: SidecarApp, args: argparse.Namespace) -> int:
    install_path = app.install_path
    _print_json(
        {
            "sidecar_path": str(app.sidecar_path),
            "install_path": str(install_path) if install_path is not None else None,
            "installed": is_cli_installed(app.home),
            "shell": app.user_shell,
            "mode": app.mode.value,
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sidecar-sync",
        description="Manage the opencode CLI bundled with the desktop app",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sync", help="Replace the installed CLI if it is older than the app").set_defaults(
        handler=_cmd_sync
    )
    sub.add_parser("check", help="Show what sync would do without installing").set_defaults(
        handler=_cmd_check
    )
    sub.add_parser("install", help="Install the bundled CLI to ~/.opencode/bin").set_defaults(
        handler=_cmd_install
    )
    sub.add_parser("config", help="Print the bundled sidecar's configuration").set_defaults(
        handler=_cmd_config
    )
    sub.add_parser("paths", help="Print sidecar and install locations").set_defaults(
        handler=_cmd_paths
    )
    return parser


def main(argv: list[str] | None = None, app: SidecarApp | None = None) -> int:
    """Run the CLI and return its exit status."""
    args = build_parser().parse_args(argv)
    try:
        setup_logging()
        app = app or SidecarApp.from_settings()
    except ValidationError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    try:
        return int(args.handler(app, args))
    except SidecarError as exc:
        log.error("sidecar_command_failed", command=args.command, kind=exc.kind.value)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
