"""Semantic version parsing and precedence.

Versions follow semver 2.0.0: ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``.
A pre-release sorts below its release and build metadata never affects
ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

_SEMVER_RE = re.compile(
    r"(?P<major>0|[1-9][0-9]*)\.(?P<minor>0|[1-9][0-9]*)\.(?P<patch>0|[1-9][0-9]*)"
    r"(?:-(?P<pre>(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)


class VersionParseError(ValueError):
    """Raised when a string is not a valid semantic version."""


def _prerelease_key(identifier: str) -> tuple[int, int | str]:
    # Numeric identifiers sort before alphanumeric ones
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


@total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """A parsed semantic version with semver precedence ordering."""

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=())

    @classmethod
    def parse(cls, version_str: str) -> SemanticVersion:
        """Parse *version_str*, raising ``VersionParseError`` if invalid."""
        m = _SEMVER_RE.fullmatch(version_str)
        if m is None:
            raise VersionParseError(f"Invalid semantic version: {version_str!r}")
        pre = m.group("pre")
        build = m.group("build")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            pre=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    def _precedence(self) -> tuple[int, int, int, int, tuple[tuple[int, int | str], ...]]:
        # A release (no pre-release) outranks every pre-release of itself
        return (
            self.major,
            self.minor,
            self.patch,
            0 if self.pre else 1,
            tuple(_prerelease_key(i) for i in self.pre),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text
