"""Exception hierarchy for monorepo-release.

Every error raised on purpose derives from :class:`MonorepoReleaseError`,
so the CLI can turn them into a clean message and exit code 1.
"""

from __future__ import annotations


class MonorepoReleaseError(Exception):
    """Base class for all monorepo-release errors."""


# Configuration


class ConfigError(MonorepoReleaseError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """Configuration values are invalid."""


# Projects and versions


class ProjectError(MonorepoReleaseError):
    """A package manifest could not be read or written."""


class VersionNotFoundError(ProjectError):
    """A manifest has no version field."""


class InvalidVersionError(MonorepoReleaseError):
    """A version string is not a valid semantic version."""


# Git


class GitError(MonorepoReleaseError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base


class NoTagFoundError(GitError):
    """The repository has no tag to compute a commit range from."""


# Publishing


class PublishError(MonorepoReleaseError):
    """Publishing a package failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base
