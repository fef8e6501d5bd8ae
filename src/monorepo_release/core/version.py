"""Semantic version parsing, ordering and bumping."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import total_ordering

from monorepo_release.exceptions import InvalidVersionError

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class BumpType(StrEnum):
    """Semantic version bump levels."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


def _prerelease_key(prerelease: str | None) -> tuple:
    # A release sorts after all of its pre-releases
    if prerelease is None:
        return (1,)
    parts = []
    for identifier in prerelease.split("."):
        if identifier.isdigit():
            parts.append((0, int(identifier), ""))
        else:
            parts.append((1, 0, identifier))
    return (0, tuple(parts))


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version (``major.minor.patch[-prerelease][+build]``).

    Ordering follows SemVer precedence; build metadata is ignored when
    comparing.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string. A leading ``v`` is accepted.

        Raises:
            InvalidVersionError: If ``value`` is not a semantic version
        """
        match = _SEMVER_RE.match(value.strip())
        if match is None:
            raise InvalidVersionError(f"Invalid semantic version: {value!r}")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def release(self) -> Version:
        """This version without pre-release and build metadata."""
        return Version(self.major, self.minor, self.patch)

    def bump(self, bump_type: BumpType) -> Version:
        """Increment the version.

        A pre-release graduates to its release when that already satisfies
        the requested level (``1.0.0-rc.1`` bumped as major is ``1.0.0``).
        The result never carries pre-release or build metadata.
        """
        if bump_type == BumpType.NONE:
            return self
        if bump_type == BumpType.MAJOR:
            if self.is_prerelease and self.minor == 0 and self.patch == 0:
                return self.release
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            if self.is_prerelease and self.patch == 0:
                return self.release
            return Version(self.major, self.minor + 1, 0)
        if self.is_prerelease:
            return self.release
        return Version(self.major, self.minor, self.patch + 1)

    def _key(self) -> tuple:
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version
