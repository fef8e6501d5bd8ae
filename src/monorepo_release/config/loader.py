"""Configuration loading from pyproject.toml and the environment."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from monorepo_release.config.models import MonorepoReleaseConfig
from monorepo_release.exceptions import ConfigNotFoundError, ConfigValidationError
from monorepo_release.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

TOOL_KEY = "monorepo-release"

logger = get_logger(__name__)


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml by walking up from ``start``.

    Args:
        start: Directory to start from (defaults to the current directory)

    Returns:
        Path to the nearest pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_tool_config(pyproject: Mapping[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.monorepo-release]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> MonorepoReleaseConfig:
    """Load configuration for the repository at ``path``.

    A pyproject.toml without a ``[tool.monorepo-release]`` table yields the
    defaults.

    Raises:
        ConfigNotFoundError: If no pyproject.toml can be found
        ConfigValidationError: If the configuration is invalid
    """
    pyproject_path = find_pyproject_toml(path)
    data = extract_tool_config(load_pyproject_toml(pyproject_path))
    logger.debug("Loaded configuration from %s: %s", pyproject_path, data)
    try:
        return MonorepoReleaseConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {pyproject_path}:\n{e}") from e


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return bool(environ.get(name, "").strip())


def apply_environment(
    config: MonorepoReleaseConfig,
    environ: Mapping[str, str] | None = None,
    *,
    execute: bool | None = None,
    verbose: bool = False,
    no_verify: bool = False,
) -> MonorepoReleaseConfig:
    """Resolve the runtime switches from CLI flags and environment variables.

    Without an explicit ``execute`` flag, releases only run for real in CI.
    ``DRY_RUN`` always wins.

    Args:
        config: Loaded configuration
        environ: Environment (defaults to ``os.environ``)
        execute: ``--execute`` (True), ``--dry-run`` (False) or not given (None)
        verbose: ``--verbose`` flag
        no_verify: ``--no-verify`` flag

    Returns:
        A new configuration with ``dry_run``, ``verbose`` and ``no_verify`` set
    """
    env = os.environ if environ is None else environ
    if execute is None:
        execute = _env_flag(env, "CI")
    dry_run = not execute or _env_flag(env, "DRY_RUN")
    return config.model_copy(
        update={
            "dry_run": dry_run,
            "verbose": verbose or _env_flag(env, "VERBOSE"),
            "no_verify": no_verify or _env_flag(env, "NO_VERIFY"),
        }
    )
