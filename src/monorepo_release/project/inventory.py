"""Workspace package discovery.

Every immediate sub-directory of a configured workspace directory holding
a ``package.json`` or a ``pyproject.toml`` is a package. Private packages
are never released and are left out, as are packages whose version is not
a semantic version.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from monorepo_release.core.version import Version
from monorepo_release.exceptions import InvalidVersionError, ProjectError, VersionNotFoundError
from monorepo_release.logging import get_logger
from monorepo_release.project import package_json, pyproject
from monorepo_release.project.models import Package

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"


def _read_package(root: Path, package_dir: Path) -> Package | None:
    directory = package_dir.relative_to(root).as_posix()

    manifest = package_dir / PACKAGE_JSON
    if manifest.is_file():
        data = package_json.read_package_json(manifest)
        if package_json.is_private(data):
            logger.debug("Skipping private package in %s", directory)
            return None
        name, version = data.get("name"), data.get("version")
        dependencies = package_json.get_dependency_names(data)
    else:
        manifest = package_dir / PYPROJECT_TOML
        if not manifest.is_file():
            return None
        data = pyproject.read_pyproject(manifest)
        if pyproject.is_private(data):
            logger.debug("Skipping private package in %s", directory)
            return None
        name, version = pyproject.get_project_name(data), pyproject.get_project_version(data)
        name = pyproject.normalize_name(name) if name else None
        dependencies = pyproject.get_dependency_names(data)

    if not name:
        raise ProjectError(f"No package name in {manifest}")
    if not version:
        raise VersionNotFoundError(f"No version in {manifest}")
    try:
        Version.parse(str(version))
    except InvalidVersionError as e:
        raise ProjectError(f"{e} in {manifest}") from e

    return Package(
        name=name,
        directory=directory,
        version=str(version),
        dependencies=dependencies - {name},
        manifest=manifest,
    )


def discover_packages(root: Path, directories: Iterable[str]) -> list[Package]:
    """Find the publishable packages of a monorepo.

    Manifests that cannot be read are logged and skipped.

    Args:
        root: Repository root
        directories: Workspace directories relative to ``root``

    Returns:
        Packages sorted by name

    Raises:
        ProjectError: If two packages share a name
    """
    root = root.resolve()
    packages: dict[str, Package] = {}

    for workspace_dir in directories:
        workspace_path = root / workspace_dir
        if not workspace_path.is_dir():
            logger.warning("Workspace directory %s does not exist", workspace_dir)
            continue
        for package_dir in sorted(p for p in workspace_path.iterdir() if p.is_dir()):
            try:
                package = _read_package(root, package_dir)
            except ProjectError as e:
                logger.error("Could not read package in %s: %s", package_dir, e)
                continue
            if package is None:
                continue
            if package.name in packages:
                raise ProjectError(
                    f"Duplicate package name {package.name!r} in "
                    f"{packages[package.name].directory} and {package.directory}"
                )
            packages[package.name] = package

    return sorted(packages.values(), key=lambda p: p.name)


def update_package_version(package: Package, new_version: str) -> Path:
    """Write a new version into the package's manifest.

    Raises:
        ProjectError: If the package has no known manifest
    """
    if package.manifest is None:
        raise ProjectError(f"No manifest known for package {package.name}")
    if package.manifest.name == PACKAGE_JSON:
        return package_json.update_package_json_version(package.manifest, new_version)
    return pyproject.update_pyproject_version(package.manifest, new_version)
