"""Configuration models.

All models are frozen: the configuration is built once at start-up and
handed explicitly to every component that needs it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_RELEASE_COMMIT_MESSAGE = "chore(release): bump package version(s) [skip ci]"
DEFAULT_BREAKING_MARKER = "BREAKING CHANGE:"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PackagesConfig(_FrozenModel):
    """Where packages live and which ones are never released."""

    directories: list[str] = Field(default_factory=lambda: ["packages"])
    ignore: list[str] = Field(default_factory=list)

    @field_validator("directories")
    @classmethod
    def _strip_slashes(cls, value: list[str]) -> list[str]:
        return [d.strip().rstrip("/") for d in value if d.strip()]


class CommitsConfig(_FrozenModel):
    """How commits are classified."""

    release_types: list[str] = Field(default_factory=lambda: ["feat", "fix"])
    breaking_marker: str = DEFAULT_BREAKING_MARKER
    release_commit_message: str = DEFAULT_RELEASE_COMMIT_MESSAGE

    @field_validator("breaking_marker", "release_commit_message")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ChangelogConfig(_FrozenModel):
    """Per-package CHANGELOG.md files."""

    enabled: bool = False
    path: Path = Path("CHANGELOG.md")


class PublishConfig(_FrozenModel):
    """Registry publishing."""

    enabled: bool = True
    tool: Literal["pnpm", "npm", "uv"] = "pnpm"
    build_command: str | None = None
    access: Literal["public", "restricted"] = "public"
    token_env: str = "NPM_TOKEN"


class GitHubConfig(_FrozenModel):
    """GitHub releases and the identity of the release commit."""

    create_releases: bool = True
    token_env: str = "GITHUB_TOKEN"
    git_user_name: str = "GitHub Actions"
    git_user_email: str = "actions@github.com"


class MonorepoReleaseConfig(_FrozenModel):
    """Root configuration, read from ``[tool.monorepo-release]``."""

    release_branches: list[str] = Field(default_factory=lambda: ["main"])
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    # Runtime switches, resolved from flags and environment
    dry_run: bool = True
    verbose: bool = False
    no_verify: bool = False

    @property
    def ignored_packages(self) -> frozenset[str]:
        return frozenset(self.packages.ignore)

    @property
    def release_types(self) -> frozenset[str]:
        return frozenset(self.commits.release_types)
