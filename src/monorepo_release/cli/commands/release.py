"""Implementation of the 'release' command.

The release command analyzes the commits since the latest tag and
publishes every package that needs a new version.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from monorepo_release.cli.commands.plan import print_plan
from monorepo_release.config import apply_environment, load_config
from monorepo_release.core.analyze import analyze
from monorepo_release.exceptions import MonorepoReleaseError
from monorepo_release.logging import configure_logging
from monorepo_release.project import discover_packages
from monorepo_release.publish import publish, should_skip, verify_tokens
from monorepo_release.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_release(
    path: str | None,
    execute: bool | None,
    no_verify: bool,
    verbose: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to the monorepo root
        execute: Publish for real (True), dry run (False) or decide from CI (None)
        no_verify: Skip token verification
        verbose: Enable debug output
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        config = apply_environment(
            load_config(project_path),
            execute=execute,
            verbose=verbose,
            no_verify=no_verify,
        )
    except MonorepoReleaseError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    configure_logging(config.verbose, log_console=console)

    if config.dry_run:
        console.print("[bold green]Performing dry run, no packages will be released![/]\n")
    else:
        console.print("[bold green]Let's release some packages![/]\n")

    # Only release from the configured branches in CI
    if should_skip(config):
        return

    try:
        verify_tokens(config)
        repo = GitRepository(project_path)
        packages = discover_packages(repo.path, config.packages.directories)
        plan = analyze(repo, config, packages)
    except MonorepoReleaseError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not plan:
        console.print("[yellow]No packages need a new release. Nothing to do.[/]")
        return

    print_plan(plan, console)

    try:
        publish(plan, packages, repo, config)
    except MonorepoReleaseError as e:
        err_console.print(f"[red]Error publishing:[/] {e}")
        raise SystemExit(1) from e

    if config.dry_run:
        console.print("\n[dim]Run with [cyan]--execute[/] to publish these releases.[/]")
        return

    released = "\n".join(f"  • [cyan]{entry.tag}[/]" for entry in plan)
    console.print(
        Panel(
            f"[green]Released {len(plan)} package(s):[/]\n\n{released}",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )
