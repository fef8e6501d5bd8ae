"""Core business logic for monorepo-release.

This module contains the fundamental building blocks:
- Semantic version parsing and bumping
- Conventional commit parsing
- Attribution of commits to packages and the dependency graph
- The release decision engine
- Changelog rendering
"""

from __future__ import annotations

from monorepo_release.core.changelog import prepend_changelog_file, render_changelog, sort_by_scope
from monorepo_release.core.commits import (
    ParsedCommit,
    format_commit_for_changelog,
    is_release_commit,
    is_release_type,
    parse_commits,
)
from monorepo_release.core.engine import (
    GroupedCommits,
    PackageToRelease,
    ReleasePlan,
    decide,
    determine_bump,
    determine_dependent_bump,
)
from monorepo_release.core.graph import DependencyGraph
from monorepo_release.core.version import BumpType, Version

__all__ = [
    # Version
    "BumpType",
    # Graph
    "DependencyGraph",
    # Engine
    "GroupedCommits",
    "PackageToRelease",
    # Commits
    "ParsedCommit",
    "ReleasePlan",
    "Version",
    "decide",
    "determine_bump",
    "determine_dependent_bump",
    "format_commit_for_changelog",
    "is_release_commit",
    "is_release_type",
    "parse_commits",
    # Changelog
    "prepend_changelog_file",
    "render_changelog",
    "sort_by_scope",
]
