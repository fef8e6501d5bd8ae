"""Implementation of the 'plan' command.

The plan command shows what would be released without changing anything.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from monorepo_release.config import apply_environment, load_config
from monorepo_release.core.analyze import analyze
from monorepo_release.core.changelog import render_changelog
from monorepo_release.exceptions import MonorepoReleaseError
from monorepo_release.logging import configure_logging
from monorepo_release.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from monorepo_release.core.engine import ReleasePlan


def print_plan(plan: ReleasePlan, console: Console, *, changelogs: bool = False) -> None:
    """Print the release plan as a table, optionally with changelogs."""
    table = Table(title="Release plan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("Bump")
    table.add_column("Changes", style="dim")
    for index, entry in enumerate(plan, start=1):
        table.add_row(
            str(index),
            entry.name,
            f"{entry.old_version} → [green]{entry.new_version}[/]",
            str(entry.bump),
            entry.commits.summary(),
        )
    console.print(table)

    if not changelogs:
        return
    for entry in plan:
        body = render_changelog(entry.commits)
        console.print(
            Panel(
                Markdown(body) if body else "[dim]No changes listed[/]",
                title=f"[cyan]{entry.tag}[/]",
                border_style="cyan",
            )
        )


def run_plan(path: str | None, verbose: bool, console: Console, err_console: Console) -> None:
    """Run the plan command.

    Args:
        path: Optional path to the monorepo root
        verbose: Enable debug output
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = apply_environment(load_config(project_path), execute=False, verbose=verbose)
        configure_logging(config.verbose, log_console=err_console)
        plan = analyze(GitRepository(project_path), config)
    except MonorepoReleaseError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not plan:
        console.print("[yellow]No packages need a new release.[/]")
        return

    print_plan(plan, console, changelogs=True)
