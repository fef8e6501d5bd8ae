"""pyproject.toml reading and version updates.

Reading goes through tomllib. Writing preserves formatting and comments
by using regex-based replacement rather than full TOML parsing and
rewriting.
"""

from __future__ import annotations

import re
import tomllib
from typing import TYPE_CHECKING, Any

from monorepo_release.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

PRIVATE_CLASSIFIER = "Private :: Do Not Upload"

_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)")
_VERSION_LINE_RE = r'^(version\s*=\s*)["\'][^"\']+["\']'


def normalize_name(name: str) -> str:
    """Normalize a distribution name (PEP 503)."""
    return re.sub(r"[-_.]+", "-", name).lower()


def read_pyproject(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ProjectError: If the file is missing or not valid TOML
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ProjectError(f"pyproject.toml not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ProjectError(f"Invalid TOML in {path}: {e}") from e


def _project_table(data: dict[str, Any]) -> dict[str, Any]:
    # PEP 621 first, then Poetry
    project = data.get("project")
    if isinstance(project, dict) and project.get("name"):
        return project
    poetry = data.get("tool", {}).get("poetry")
    if isinstance(poetry, dict):
        return poetry
    return project or {}


def get_project_name(data: dict[str, Any]) -> str | None:
    return _project_table(data).get("name")


def get_project_version(data: dict[str, Any]) -> str | None:
    return _project_table(data).get("version")


def is_private(data: dict[str, Any]) -> bool:
    return PRIVATE_CLASSIFIER in _project_table(data).get("classifiers", [])


def get_dependency_names(data: dict[str, Any]) -> frozenset[str]:
    """Return the normalized names of the declared runtime dependencies."""
    project = data.get("project", {})
    names = set()
    for requirement in project.get("dependencies", []):
        match = _REQUIREMENT_NAME_RE.match(requirement)
        if match:
            names.add(normalize_name(match.group(1)))
    poetry_deps = data.get("tool", {}).get("poetry", {}).get("dependencies", {})
    names.update(normalize_name(name) for name in poetry_deps if name != "python")
    return frozenset(names)


def update_pyproject_version(path: Path, new_version: str) -> Path:
    """Update the version in pyproject.toml.

    Only the ``version`` key of the ``[project]`` table (or, failing that,
    ``[tool.poetry]``) is rewritten; everything else is left untouched.

    Raises:
        VersionNotFoundError: If no version key can be found
    """
    content = path.read_text(encoding="utf-8")

    def replace_in_section(match: re.Match[str]) -> str:
        return re.sub(
            _VERSION_LINE_RE,
            rf'\g<1>"{new_version}"',
            match.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for section in (r"\[project\]", r"\[tool\.poetry\]"):
        # The whole section up to the next table header or EOF
        pattern = rf"^{section}[ \t]*$.*?(?=^\[|\Z)"
        section_match = re.search(pattern, content, flags=re.MULTILINE | re.DOTALL)
        if section_match is None:
            continue
        if re.search(_VERSION_LINE_RE, section_match.group(0), flags=re.MULTILINE) is None:
            continue
        new_content = re.sub(
            pattern,
            replace_in_section,
            content,
            count=1,
            flags=re.MULTILINE | re.DOTALL,
        )
        path.write_text(new_content, encoding="utf-8")
        return path

    raise VersionNotFoundError(
        f"Could not find version to update in {path}. "
        "Expected [project].version or [tool.poetry].version."
    )
