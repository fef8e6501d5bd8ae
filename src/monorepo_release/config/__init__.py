"""Configuration management for monorepo-release."""

from __future__ import annotations

from monorepo_release.config.loader import apply_environment, load_config
from monorepo_release.config.models import (
    ChangelogConfig,
    CommitsConfig,
    GitHubConfig,
    MonorepoReleaseConfig,
    PackagesConfig,
    PublishConfig,
)

__all__ = [
    "ChangelogConfig",
    "CommitsConfig",
    "GitHubConfig",
    "MonorepoReleaseConfig",
    "PackagesConfig",
    "PublishConfig",
    "apply_environment",
    "load_config",
]
