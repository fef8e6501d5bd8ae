"""package.json reading and version updates."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from monorepo_release.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

DEPENDENCY_FIELDS = ("dependencies", "peerDependencies", "optionalDependencies")


def read_package_json(path: Path) -> dict[str, Any]:
    """Read a package.json file.

    Raises:
        ProjectError: If the file is missing or not a JSON object
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ProjectError(f"package.json not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ProjectError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProjectError(f"Expected a JSON object in {path}")
    return data


def get_dependency_names(data: dict[str, Any]) -> frozenset[str]:
    names: set[str] = set()
    for key in DEPENDENCY_FIELDS:
        names.update(data.get(key) or {})
    return frozenset(names)


def is_private(data: dict[str, Any]) -> bool:
    return bool(data.get("private", False))


def update_package_json_version(path: Path, new_version: str) -> Path:
    """Write a new version into package.json, keeping key order.

    Raises:
        VersionNotFoundError: If the manifest has no version field
    """
    data = read_package_json(path)
    if "version" not in data:
        raise VersionNotFoundError(f"No version field in {path}")
    data["version"] = new_version
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
