"""Release analysis: collect repository state and run the decision engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from monorepo_release.core.attribution import attribute
from monorepo_release.core.engine import decide
from monorepo_release.core.graph import DependencyGraph
from monorepo_release.logging import get_logger
from monorepo_release.project import discover_packages

if TYPE_CHECKING:
    from monorepo_release.config.models import MonorepoReleaseConfig
    from monorepo_release.core.engine import ReleasePlan
    from monorepo_release.project.models import Package
    from monorepo_release.vcs.git import GitRepository

logger = get_logger(__name__)


class ChangedFilesCache:
    """Remembers the changed files of each commit so git is asked only once."""

    def __init__(self, repo: GitRepository) -> None:
        self._repo = repo
        self._files: dict[str, list[str]] = {}

    def __call__(self, sha: str) -> list[str]:
        if sha not in self._files:
            self._files[sha] = self._repo.get_changed_files(sha)
        return self._files[sha]


def analyze(
    repo: GitRepository,
    config: MonorepoReleaseConfig,
    packages: list[Package] | None = None,
) -> ReleasePlan:
    """Decide which packages to release since the latest tag.

    Args:
        repo: Git repository at the monorepo root
        config: Configuration
        packages: Publishable packages (discovered from the workspace when omitted)

    Returns:
        The release plan, empty when there is nothing to release

    Raises:
        NoTagFoundError: If the repository has no tag yet
    """
    if packages is None:
        packages = discover_packages(repo.path, config.packages.directories)
    logger.info("%d publishable package(s) found", len(packages))
    logger.debug("Packages: %s", ", ".join(f"{p.name}@{p.version}" for p in packages))

    logger.info("Identifying latest tag...")
    latest_tag = repo.get_latest_tag()
    logger.info("Latest tag identified: %s", latest_tag)

    commits = repo.get_commits_since_tag(latest_tag)
    logger.info("%d commits found since %s", len(commits), latest_tag)
    logger.debug(
        "Analyzing the following commits:\n%s", "\n".join(f"  {c.subject}" for c in commits)
    )

    changed_files = ChangedFilesCache(repo)
    touching = sum(1 for c in commits if attribute(changed_files(c.short), packages))
    logger.info("%d commits touched package code", touching)

    plan = decide(
        commits,
        packages,
        changed_files,
        config,
        graph=DependencyGraph.from_packages(packages),
    )
    for entry in plan:
        logger.debug(
            "%s %s -> %s (%s): %s",
            entry.name,
            entry.old_version,
            entry.new_version,
            entry.bump,
            entry.commits.summary(),
        )
    return plan
