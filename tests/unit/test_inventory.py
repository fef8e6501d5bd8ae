"""Tests for workspace package discovery and manifest updates."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from monorepo_release.exceptions import ProjectError, VersionNotFoundError
from monorepo_release.project import Package, discover_packages, update_package_version
from monorepo_release.project.package_json import get_dependency_names, read_package_json
from monorepo_release.project.pyproject import (
    get_dependency_names as get_pyproject_dependency_names,
)
from monorepo_release.project.pyproject import (
    is_private,
    normalize_name,
    read_pyproject,
    update_pyproject_version,
)

if TYPE_CHECKING:
    from pathlib import Path


PYPROJECT = """\
[build-system]
requires = ["hatchling"]

[project]
name = "Acme_Utils"
version = "0.2.0"  # keep in sync
dependencies = [
    "requests>=2.31",
    "acme.core ; python_version >= '3.11'",
]

[tool.ruff]
version = "not-this-one"
"""


class TestDiscoverPackages:
    """Tests for discover_packages()."""

    def test_npm_packages(self, temp_monorepo: Path):
        """Packages are found, private ones skipped, sorted by name."""
        packages = discover_packages(temp_monorepo, ["packages"])

        assert [p.name for p in packages] == ["@acme/core", "@acme/react"]
        core, react = packages
        assert core.directory == "packages/core"
        assert core.version == "1.0.0"
        assert core.dependencies == frozenset({"lodash"})
        assert react.dependencies == frozenset({"@acme/core", "react"})
        assert react.manifest == temp_monorepo.resolve() / "packages" / "react" / "package.json"

    def test_python_package(self, tmp_path: Path):
        """pyproject.toml packages are found with normalized names."""
        lib = tmp_path / "libs" / "utils"
        lib.mkdir(parents=True)
        (lib / "pyproject.toml").write_text(PYPROJECT)

        packages = discover_packages(tmp_path, ["libs"])

        assert packages == [
            Package(
                name="acme-utils",
                directory="libs/utils",
                version="0.2.0",
                dependencies=frozenset({"requests", "acme-core"}),
                manifest=tmp_path.resolve() / "libs" / "utils" / "pyproject.toml",
            )
        ]

    def test_missing_workspace_directory(self, tmp_path: Path):
        """A configured directory that does not exist is skipped."""
        assert discover_packages(tmp_path, ["packages"]) == []

    def test_directories_without_manifest_ignored(self, temp_monorepo: Path):
        (temp_monorepo / "packages" / "assets").mkdir()

        names = [p.name for p in discover_packages(temp_monorepo, ["packages"])]

        assert names == ["@acme/core", "@acme/react"]

    def test_unreadable_manifest_skipped(self, temp_monorepo: Path):
        """A broken manifest is logged and skipped."""
        broken = temp_monorepo / "packages" / "broken"
        broken.mkdir()
        (broken / "package.json").write_text("{not json")

        names = [p.name for p in discover_packages(temp_monorepo, ["packages"])]

        assert "broken" not in names
        assert len(names) == 2

    def test_missing_version_skipped(self, temp_monorepo: Path, package_json):
        package_json(temp_monorepo / "packages" / "nover", name="nover")

        names = [p.name for p in discover_packages(temp_monorepo, ["packages"])]

        assert "nover" not in names

    def test_non_semver_version_skipped(self, temp_monorepo: Path):
        """A package whose version is not a semantic version is left out."""
        tool = temp_monorepo / "packages" / "tool"
        tool.mkdir()
        (tool / "pyproject.toml").write_text('[project]\nname = "tool"\nversion = "1.0"\n')

        names = [p.name for p in discover_packages(temp_monorepo, ["packages"])]

        assert names == ["@acme/core", "@acme/react"]

    def test_duplicate_names(self, temp_monorepo: Path, package_json):
        """Two packages with the same name are an error."""
        package_json(temp_monorepo / "packages" / "core2", name="@acme/core", version="2.0.0")

        with pytest.raises(ProjectError, match="Duplicate package name"):
            discover_packages(temp_monorepo, ["packages"])

    def test_self_dependency_dropped(self, tmp_path: Path, package_json):
        package_json(
            tmp_path / "packages" / "a",
            name="a",
            version="1.0.0",
            dependencies={"a": "*"},
        )

        (package,) = discover_packages(tmp_path, ["packages"])

        assert package.dependencies == frozenset()


class TestPackageJson:
    """Tests for package.json helpers."""

    def test_dependency_fields(self):
        """Runtime, peer and optional dependencies count; dev dependencies don't."""
        data = {
            "dependencies": {"a": "1"},
            "peerDependencies": {"b": "1"},
            "optionalDependencies": {"c": "1"},
            "devDependencies": {"d": "1"},
        }

        assert get_dependency_names(data) == frozenset({"a", "b", "c"})

    def test_read_non_object(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("[1, 2]")

        with pytest.raises(ProjectError):
            read_package_json(path)

    def test_read_missing(self, tmp_path: Path):
        with pytest.raises(ProjectError, match="not found"):
            read_package_json(tmp_path / "package.json")


class TestPyproject:
    """Tests for pyproject.toml helpers."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("Acme_Utils", "acme-utils"), ("a.b-c", "a-b-c"), ("simple", "simple")],
    )
    def test_normalize_name(self, name: str, expected: str):
        assert normalize_name(name) == expected

    def test_private_classifier(self):
        data = {"project": {"name": "x", "classifiers": ["Private :: Do Not Upload"]}}

        assert is_private(data) is True
        assert is_private({"project": {"name": "x"}}) is False

    def test_poetry_dependencies(self):
        data = {"tool": {"poetry": {"dependencies": {"python": "^3.11", "Click": "^8"}}}}

        assert get_pyproject_dependency_names(data) == frozenset({"click"})

    def test_read_invalid(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\n")

        with pytest.raises(ProjectError, match="Invalid TOML"):
            read_pyproject(path)


class TestUpdateVersion:
    """Tests for writing new versions into manifests."""

    def test_package_json(self, temp_monorepo: Path):
        """Only the version changes; key order is kept."""
        core = discover_packages(temp_monorepo, ["packages"])[0]

        update_package_version(core, "1.1.0")

        data = json.loads(core.manifest.read_text())
        assert data["version"] == "1.1.0"
        assert list(data) == ["name", "version", "dependencies"]

    def test_pyproject_preserves_formatting(self, tmp_path: Path):
        """Comments and other tables are left alone."""
        path = tmp_path / "pyproject.toml"
        path.write_text(PYPROJECT)

        update_pyproject_version(path, "0.3.0")

        content = path.read_text()
        assert 'version = "0.3.0"  # keep in sync' in content
        assert 'version = "not-this-one"' in content

    def test_pyproject_poetry(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool.poetry]\nname = "x"\nversion = "1.0.0"\n')

        update_pyproject_version(path, "1.0.1")

        assert 'version = "1.0.1"' in path.read_text()

    def test_pyproject_without_version(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n')

        with pytest.raises(VersionNotFoundError):
            update_pyproject_version(path, "1.0.0")

    def test_package_json_without_version(self, tmp_path: Path, package_json):
        path = package_json(tmp_path, name="x")

        with pytest.raises(VersionNotFoundError):
            update_package_version(Package("x", ".", "0.0.0", manifest=path), "1.0.0")

    def test_no_manifest(self):
        with pytest.raises(ProjectError, match="No manifest"):
            update_package_version(Package("x", "packages/x", "1.0.0"), "1.0.1")
