"""Package model shared by the inventory and the release engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Package:
    """A publishable workspace package.

    Attributes:
        name: Unique package name
        directory: POSIX path of the package relative to the repository root
        version: Current version string from the manifest
        dependencies: Names of direct dependencies
        manifest: Path of the manifest file (package.json or pyproject.toml)
    """

    name: str
    directory: str
    version: str
    dependencies: frozenset[str] = field(default_factory=frozenset)
    manifest: Path | None = None
