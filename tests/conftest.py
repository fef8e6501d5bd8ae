"""Shared test fixtures."""

from __future__ import annotations

import itertools
import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from monorepo_release.config.models import MonorepoReleaseConfig
from monorepo_release.project.models import Package
from monorepo_release.vcs.git import Commit

CommitFactory = Callable[..., Commit]

_BASE_DATE = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def make_commit() -> CommitFactory:
    """Factory for raw commits with unique shas and increasing dates."""
    counter = itertools.count(1)

    def factory(subject: str, body: str = "", sha: str | None = None) -> Commit:
        n = next(counter)
        sha = sha or f"{n:07x}"
        return Commit(
            sha=sha,
            short_sha=sha[:7],
            subject=subject,
            body=body,
            date=_BASE_DATE + timedelta(hours=n),
        )

    return factory


@pytest.fixture
def config() -> MonorepoReleaseConfig:
    return MonorepoReleaseConfig()


@pytest.fixture
def feat_commit(make_commit: CommitFactory) -> Commit:
    return make_commit("feat: add user authentication", sha="feat123")


@pytest.fixture
def fix_commit(make_commit: CommitFactory) -> Commit:
    return make_commit("fix(core): handle empty input", sha="fix4567")


@pytest.fixture
def breaking_commit(make_commit: CommitFactory) -> Commit:
    return make_commit(
        "feat(api): new request format",
        body="Rework the client.\n\nBREAKING CHANGE: request() now takes a dict",
        sha="brk8901",
    )


@pytest.fixture
def sample_commits(make_commit: CommitFactory) -> list[Commit]:
    """Mixed commits, newest first."""
    return [
        make_commit("feat(ui): add dark mode"),
        make_commit("fix: correct typo in error message"),
        make_commit("docs: update readme"),
        make_commit("chore: bump dev dependencies"),
        make_commit("feat: new api", body="BREAKING CHANGE: old api removed"),
        make_commit("Merge branch 'main' into feature"),
    ]


@pytest.fixture
def packages() -> list[Package]:
    """pkg-a <- pkg-b <- pkg-c, plus an unrelated pkg-d."""
    return [
        Package(name="pkg-a", directory="packages/pkg-a", version="1.2.3"),
        Package(
            name="pkg-b",
            directory="packages/pkg-b",
            version="0.3.0",
            dependencies=frozenset({"pkg-a"}),
        ),
        Package(
            name="pkg-c",
            directory="packages/pkg-c",
            version="2.0.0",
            dependencies=frozenset({"pkg-b"}),
        ),
        Package(name="pkg-d", directory="packages/pkg-d", version="0.1.0"),
    ]


def write_package_json(directory: Path, **data: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


@pytest.fixture
def temp_monorepo(tmp_path: Path) -> Path:
    """A monorepo root with a root pyproject.toml and three npm packages."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "my-monorepo"
version = "0.0.0"

[tool.monorepo-release]
release_branches = ["main", "next"]

[tool.monorepo-release.packages]
directories = ["packages"]
ignore = ["internal-docs"]
"""
    )
    packages_dir = tmp_path / "packages"
    write_package_json(
        packages_dir / "core",
        name="@acme/core",
        version="1.0.0",
        dependencies={"lodash": "^4.0.0"},
    )
    write_package_json(
        packages_dir / "react",
        name="@acme/react",
        version="0.4.0",
        dependencies={"@acme/core": "workspace:*"},
        peerDependencies={"react": ">=18"},
    )
    write_package_json(
        packages_dir / "playground",
        name="playground",
        version="0.0.1",
        private=True,
    )
    return tmp_path


@pytest.fixture
def package_json() -> Callable[..., Path]:
    """Writer for package.json files: ``package_json(directory, **fields)``."""
    return write_package_json
