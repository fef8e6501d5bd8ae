"""Pre-flight checks run before anything is published."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from monorepo_release.exceptions import PublishError
from monorepo_release.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from monorepo_release.config.models import MonorepoReleaseConfig

logger = get_logger(__name__)


def should_skip(config: MonorepoReleaseConfig, environ: Mapping[str, str] | None = None) -> bool:
    """Whether this CI run is on a branch that does not release.

    Outside CI releases are never skipped.
    """
    env = os.environ if environ is None else environ
    if not env.get("CI"):
        return False

    branch = env.get("GITHUB_REF_NAME")
    if branch and branch in config.release_branches:
        return False

    logger.info("Skipping release for branch %r", branch)
    logger.info(
        "Releases are only triggered for the following branches: %s",
        ", ".join(config.release_branches),
    )
    return True


def verify_tokens(config: MonorepoReleaseConfig, environ: Mapping[str, str] | None = None) -> None:
    """Check that the publishing credentials are available.

    Raises:
        PublishError: If a required token variable is not set
    """
    if config.dry_run:
        logger.debug("Dry run, skipping token validation")
        return
    if config.no_verify:
        logger.info("--no-verify or NO_VERIFY set, skipping token validation")
        return

    env = os.environ if environ is None else environ
    required = []
    if config.publish.enabled and config.publish.tool in ("pnpm", "npm"):
        required.append(config.publish.token_env)
    if config.github.create_releases:
        required.append(config.github.token_env)

    missing = [name for name in required if not env.get(name)]
    if missing:
        raise PublishError(f"{', '.join(missing)} is not set")
