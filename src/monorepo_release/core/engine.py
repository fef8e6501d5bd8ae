"""Release decision engine.

Turns the commits since the last release into a release plan: which
packages to release, at which version, and with which changelog entries.

The whole decision is one sequential fold over the commit list:

1. Group the commits touching each package into features, bugfixes,
   other and breaking notes.
2. Decide the bump level of every package with a release-triggering
   commit.
3. Cascade a release to every package depending on a released package.
4. Merge entries reaching the same package (highest version wins,
   commit buckets are concatenated).
5. Drop ignored packages and order the rest for publishing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from monorepo_release.core.attribution import attribute
from monorepo_release.core.commits import (
    ParsedCommit,
    is_release_commit,
    is_release_type,
    parse_commits,
)
from monorepo_release.core.graph import DependencyGraph
from monorepo_release.core.version import BumpType, Version
from monorepo_release.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from monorepo_release.config.models import MonorepoReleaseConfig
    from monorepo_release.project.models import Package
    from monorepo_release.vcs.git import Commit

logger = get_logger(__name__)

FEATURE_TYPE = "feat"
DEPENDENCY_UPDATE_TYPE = "chore"


def _union(first: list[ParsedCommit], second: list[ParsedCommit]) -> list[ParsedCommit]:
    return [*first, *(c for c in second if c not in first)]


@dataclass
class GroupedCommits:
    """Commits attributed to one package, by changelog section.

    ``breaking`` holds copies of feature commits whose body is the text
    following the breaking-change marker; the commits themselves stay in
    ``features``. Mutable while commits are being grouped, then only
    combined through :meth:`merge`.
    """

    current_version: Version
    dependents: frozenset[str] = frozenset()
    features: list[ParsedCommit] = field(default_factory=list)
    bugfixes: list[ParsedCommit] = field(default_factory=list)
    other: list[ParsedCommit] = field(default_factory=list)
    breaking: list[ParsedCommit] = field(default_factory=list)
    needs_release: bool = False

    def merge(self, other: GroupedCommits) -> GroupedCommits:
        """Union the buckets of two groups for the same package, in order."""
        return replace(
            self,
            current_version=min(self.current_version, other.current_version),
            dependents=self.dependents | other.dependents,
            features=_union(self.features, other.features),
            bugfixes=_union(self.bugfixes, other.bugfixes),
            other=_union(self.other, other.other),
            breaking=_union(self.breaking, other.breaking),
            needs_release=self.needs_release or other.needs_release,
        )

    @property
    def triggering(self) -> list[ParsedCommit]:
        return [*self.features, *self.bugfixes]

    def summary(self) -> str:
        return (
            f"{len(self.features)} feature(s), {len(self.bugfixes)} bugfix(es), "
            f"{len(self.other)} other(s) and {len(self.breaking)} breaking change(s)"
        )


@dataclass(frozen=True)
class PackageToRelease:
    """One entry of the release plan."""

    name: str
    old_version: Version
    new_version: Version
    directory: str
    bump: BumpType
    commits: GroupedCommits

    @property
    def tag(self) -> str:
        return f"{self.name}@{self.new_version}"

    def merge(self, other: PackageToRelease) -> PackageToRelease:
        """Combine two candidate entries for the same package.

        The higher new version wins; commit buckets are unioned.
        """
        winner = other if other.new_version > self.new_version else self
        return replace(
            winner,
            old_version=min(self.old_version, other.old_version),
            commits=self.commits.merge(other.commits),
        )


ReleasePlan = list[PackageToRelease]


def determine_bump(grouped: GroupedCommits) -> BumpType:
    """Bump level for a package from its own commits.

    Breaking changes bump major, except before 1.0.0 where minor is the
    ceiling. Features bump minor, anything else patch.
    """
    if grouped.breaking:
        if grouped.current_version.major == 0:
            return BumpType.MINOR
        return BumpType.MAJOR
    if grouped.features:
        return BumpType.MINOR
    return BumpType.PATCH


def determine_dependent_bump(upstream: GroupedCommits) -> BumpType:
    """Bump level for a package depending on a released upstream package.

    An upstream breaking change is always a major bump for dependents,
    whatever their own version.
    """
    if upstream.breaking:
        return BumpType.MAJOR
    if upstream.features:
        return BumpType.MINOR
    return BumpType.PATCH


def group_commits(
    commits: Sequence[ParsedCommit],
    packages: Sequence[Package],
    changed_files: Callable[[str], Sequence[str]],
    graph: DependencyGraph,
    config: MonorepoReleaseConfig,
) -> dict[str, GroupedCommits]:
    """Group commits per package they touch, newest first.

    Returns:
        Groups keyed by package name, in order of first appearance
    """
    groups: dict[str, GroupedCommits] = {}
    for commit in commits:
        touched = attribute(changed_files(commit.short_sha), packages)
        if not touched:
            continue
        logger.debug(
            "%s %s touches %s",
            commit.short_sha,
            commit.subject,
            ", ".join(pkg.name for pkg in touched),
        )
        for pkg in touched:
            grouped = groups.get(pkg.name)
            if grouped is None:
                grouped = GroupedCommits(
                    current_version=Version.parse(pkg.version),
                    dependents=graph.dependents_of(pkg.name),
                )
                groups[pkg.name] = grouped

            if not is_release_type(commit, config):
                grouped.other.append(commit)
                continue

            if commit.commit_type == FEATURE_TYPE:
                grouped.features.append(commit)
                if commit.is_breaking:
                    grouped.breaking.append(commit.as_breaking_note())
            else:
                grouped.bugfixes.append(commit)
            grouped.needs_release = True

    return groups


def _dependency_update_entry(upstream: PackageToRelease, version: Version) -> ParsedCommit:
    latest = max(upstream.commits.triggering, key=lambda c: c.date)
    description = f"update dependency {upstream.name} to {version}"
    return replace(
        latest,
        commit_type=DEPENDENCY_UPDATE_TYPE,
        subject=f"{DEPENDENCY_UPDATE_TYPE}({upstream.name}): {description}",
        body=description,
        description=description,
        is_breaking=False,
        breaking_body=None,
        scope=upstream.name,
    )


def released_versions(
    direct: Sequence[PackageToRelease],
    packages_by_name: dict[str, Package],
) -> dict[str, Version]:
    """Final new version of every package the plan will release.

    The highest candidate wins, whether it comes from the package's own
    commits or from any of the packages it depends on.
    """
    versions: dict[str, Version] = {}

    def offer(name: str, version: Version) -> None:
        if name not in versions or version > versions[name]:
            versions[name] = version

    for entry in direct:
        offer(entry.name, entry.new_version)
        bump = determine_dependent_bump(entry.commits)
        for name in entry.commits.dependents:
            dependent = packages_by_name.get(name)
            if dependent is not None:
                offer(name, Version.parse(dependent.version).bump(bump))
    return versions


def cascade_to_dependents(
    upstream: PackageToRelease,
    packages_by_name: dict[str, Package],
    groups: dict[str, GroupedCommits],
    graph: DependencyGraph,
    upstream_version: Version | None = None,
) -> list[PackageToRelease]:
    """Release entries for every package depending on ``upstream``.

    Each dependent gets one synthesized dependency-update entry in its
    ``other`` bucket, plus its own non-triggering commits if it has any.

    Args:
        upstream: Direct release entry of the upstream package
        packages_by_name: Inventory by package name
        groups: Grouped commits of every touched package
        graph: Dependency graph
        upstream_version: Version named in the dependency-update entry,
            the upstream's final version once all entries are merged
            (defaults to ``upstream.new_version``)
    """
    bump = determine_dependent_bump(upstream.commits)
    entry = _dependency_update_entry(upstream, upstream_version or upstream.new_version)
    cascaded = []
    for name in sorted(upstream.commits.dependents):
        dependent = packages_by_name.get(name)
        if dependent is None:
            continue
        old_version = Version.parse(dependent.version)
        own = groups.get(name)
        grouped = GroupedCommits(
            current_version=old_version,
            dependents=graph.dependents_of(name),
            other=[*(own.other if own else []), entry],
            needs_release=True,
        )
        cascaded.append(
            PackageToRelease(
                name=name,
                old_version=old_version,
                new_version=old_version.bump(bump),
                directory=dependent.directory,
                bump=bump,
                commits=grouped,
            )
        )
    return cascaded


def merge_plan_entry(plan: dict[str, PackageToRelease], entry: PackageToRelease) -> None:
    """Add ``entry`` to ``plan``, merging with an existing entry of the same name."""
    existing = plan.get(entry.name)
    plan[entry.name] = entry if existing is None else existing.merge(entry)


def decide(
    commits: Sequence[Commit],
    packages: Sequence[Package],
    changed_files: Callable[[str], Sequence[str]],
    config: MonorepoReleaseConfig,
    graph: DependencyGraph | None = None,
) -> ReleasePlan:
    """Compute the release plan for the commits since the last release.

    Args:
        commits: Raw commits, newest first
        packages: Publishable packages
        changed_files: Returns the files changed by a commit, given its short sha
        config: Configuration
        graph: Dependency graph (built from ``packages`` when omitted)

    Returns:
        Packages to release, dependencies before dependents. Empty when
        the newest commit is a release commit or nothing needs a release.
    """
    if not commits:
        return []

    if is_release_commit(commits[0], config):
        logger.info("Already released, nothing to do")
        return []

    graph = graph or DependencyGraph.from_packages(packages)
    packages_by_name = {pkg.name: pkg for pkg in packages}

    parsed = parse_commits(commits, config)
    groups = group_commits(parsed, packages, changed_files, graph, config)

    need_release = [name for name, grouped in groups.items() if grouped.needs_release]
    if not need_release:
        logger.info("No packages need a new release")
        return []
    logger.info("%d new release(s) needed: %s", len(need_release), ", ".join(need_release))

    plan: dict[str, PackageToRelease] = {}
    direct = []
    for name in need_release:
        grouped = groups[name]
        bump = determine_bump(grouped)
        entry = PackageToRelease(
            name=name,
            old_version=grouped.current_version,
            new_version=grouped.current_version.bump(bump),
            directory=packages_by_name[name].directory,
            bump=bump,
            commits=grouped,
        )
        direct.append(entry)
        merge_plan_entry(plan, entry)

    versions = released_versions(direct, packages_by_name)
    for entry in direct:
        cascaded = cascade_to_dependents(
            entry, packages_by_name, groups, graph, upstream_version=versions[entry.name]
        )
        for dependent in cascaded:
            logger.debug("%s is released because it depends on %s", dependent.name, entry.name)
            merge_plan_entry(plan, dependent)

    ignored = config.ignored_packages
    for name in [name for name in plan if name in ignored]:
        logger.info("Ignoring package %s", name)
        del plan[name]

    return [plan[name] for name in graph.publish_order(plan)]
