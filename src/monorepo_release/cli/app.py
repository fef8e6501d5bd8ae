"""Command line interface."""

from __future__ import annotations

from typing import Annotated

import typer

from monorepo_release import __version__
from monorepo_release.cli.commands.plan import run_plan
from monorepo_release.cli.commands.release import run_release
from monorepo_release.logging import console, err_console

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release the packages of a monorepo from its conventional commits.",
)

PathArgument = Annotated[
    str | None,
    typer.Argument(help="Monorepo root (defaults to the current directory)"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug output.")]


@app.command()
def plan(path: PathArgument = None, verbose: VerboseOption = False) -> None:
    """Show which packages would be released, with their changelogs."""
    run_plan(path, verbose, console, err_console)


@app.command()
def release(
    path: PathArgument = None,
    execute: Annotated[
        bool | None,
        typer.Option(
            "--execute/--dry-run",
            help="Publish for real or only simulate. Defaults to publishing in CI only.",
            show_default=False,
        ),
    ] = None,
    no_verify: Annotated[
        bool, typer.Option("--no-verify", help="Skip registry and GitHub token checks.")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Release every package changed since the latest tag."""
    run_release(path, execute, no_verify, verbose, console, err_console)


@app.callback(invoke_without_command=True)
def _main(
    version: Annotated[bool, typer.Option("--version", help="Show version and exit.")] = False,
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
