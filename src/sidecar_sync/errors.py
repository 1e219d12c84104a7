"""Error taxonomy for sidecar management.

Every failure the installer and sync policy report is a ``SidecarError``
whose ``kind`` lets callers branch without parsing the message text.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from sidecar_sync.constants import STDERR_EXCERPT_LENGTH


class ErrorKind(StrEnum):
    """Categories of sidecar failures."""

    ENVIRONMENT = "environment"  # HOME unset, temp dir not writable, ...
    NOT_FOUND = "not_found"  # bundled sidecar missing
    SPAWN = "spawn"  # executable missing or not runnable
    NONZERO_EXIT = "nonzero_exit"
    MALFORMED_OUTPUT = "malformed_output"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    TIMEOUT = "timeout"


class SidecarError(Exception):
    """A failure locating, running, or installing the sidecar CLI."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        path: Path | str | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.path = Path(path) if path is not None else None
        self.returncode = returncode
        self.stderr = stderr[:STDERR_EXCERPT_LENGTH] if stderr is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "path": str(self.path) if self.path is not None else None,
            "returncode": self.returncode,
            "stderr": self.stderr,
        }
