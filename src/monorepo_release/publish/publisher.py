"""Publishing a release plan.

Writes the new versions, publishes every package with its package
manager, commits, tags and creates GitHub releases. In dry-run mode only
the package managers' own dry runs are executed and nothing is written
or pushed.
"""

from __future__ import annotations

import shlex
import subprocess
from typing import TYPE_CHECKING

from monorepo_release.core.changelog import prepend_changelog_file, render_changelog
from monorepo_release.exceptions import PublishError
from monorepo_release.logging import get_logger
from monorepo_release.project import update_package_version

if TYPE_CHECKING:
    from pathlib import Path

    from monorepo_release.config.models import MonorepoReleaseConfig
    from monorepo_release.core.engine import PackageToRelease, ReleasePlan
    from monorepo_release.project.models import Package
    from monorepo_release.vcs.git import GitRepository

logger = get_logger(__name__)

NPM_REGISTRY = "https://registry.npmjs.org"


def _run(args: list[str], cwd: Path) -> str:
    logger.debug("Running %s in %s", " ".join(args), cwd)
    try:
        result = subprocess.run(args, capture_output=True, text=True, check=True, cwd=cwd)
    except subprocess.CalledProcessError as e:
        raise PublishError(
            f"{' '.join(args)} failed with exit code {e.returncode}", stderr=e.stderr
        ) from e
    except FileNotFoundError as e:
        raise PublishError(f"{args[0]} not found") from e
    return result.stdout


def publish_commands(config: MonorepoReleaseConfig) -> list[list[str]]:
    """Commands publishing one package, run in the package directory."""
    publish = config.publish
    if publish.tool == "uv":
        commands = [["uv", "build"]]
        if not config.dry_run:
            commands.append(["uv", "publish"])
        return commands

    command = [publish.tool, "publish", "--access", publish.access, f"--registry={NPM_REGISTRY}"]
    if publish.tool == "pnpm":
        command.append("--no-git-checks")
    if config.dry_run:
        command.append("--dry-run")
    return [command]


def _write_npmrc(package_dir: Path, token_env: str) -> None:
    registry = NPM_REGISTRY.removeprefix("https:")
    token_line = f"{registry}/:_authToken=${{{token_env}}}\n"
    (package_dir / ".npmrc").write_text(token_line, encoding="utf-8")


def publish_package(
    entry: PackageToRelease,
    package: Package,
    repo: GitRepository,
    config: MonorepoReleaseConfig,
) -> None:
    """Write the new version of one package and publish it."""
    package_dir = repo.path / entry.directory
    if config.dry_run:
        logger.info(
            "Dry run, %s would have been released with version %s",
            entry.name,
            entry.new_version,
        )
    else:
        logger.info("Writing version %s for package %s", entry.new_version, entry.name)
        update_package_version(package, str(entry.new_version))

    if not config.publish.enabled:
        logger.info("Publishing disabled, skipping %s", entry.name)
        return

    if config.publish.tool in ("pnpm", "npm") and not config.dry_run:
        _write_npmrc(package_dir, config.publish.token_env)
    for command in publish_commands(config):
        _run(command, package_dir)


def publish(
    plan: ReleasePlan,
    packages: list[Package],
    repo: GitRepository,
    config: MonorepoReleaseConfig,
) -> None:
    """Publish every package of the plan, in plan order.

    Raises:
        PublishError: If a build or publish command fails
        GitError: If committing, tagging or pushing fails
    """
    if not plan:
        logger.info("Nothing to publish")
        return

    by_name = {pkg.name: pkg for pkg in packages}
    dry_run = config.dry_run

    if config.publish.build_command:
        _run(shlex.split(config.publish.build_command), repo.path)

    for entry in plan:
        publish_package(entry, by_name[entry.name], repo, config)

    changelogs = {entry.name: render_changelog(entry.commits) for entry in plan}

    if config.changelog.enabled and not dry_run:
        for entry in plan:
            prepend_changelog_file(
                repo.path / entry.directory / config.changelog.path,
                entry.new_version,
                changelogs[entry.name],
            )

    if dry_run:
        logger.info("Dry run, skip release commit")
    else:
        logger.info("Committing")
        repo.configure_user(config.github.git_user_name, config.github.git_user_email)
        repo.commit_all(config.commits.release_commit_message)

    for entry in plan:
        logger.info("%s %s -> %s", entry.name, entry.old_version, entry.new_version)
        logger.debug("Changelog generated for %s:\n%s", entry.name, changelogs[entry.name])
        if dry_run:
            logger.info("Dry run, skip git tag/release notes for %s", entry.name)
            continue
        logger.info("Creating git tag %s", entry.tag)
        repo.create_tag(entry.tag)
        repo.push(tags=True)
        if config.github.create_releases:
            logger.info("Creating GitHub release notes")
            notes = changelogs[entry.name]
            _run(["gh", "release", "create", entry.tag, "--notes", notes], repo.path)

    logger.info("Pushing commits")
    repo.push(dry_run=dry_run)
