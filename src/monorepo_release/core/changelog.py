"""Changelog rendering.

Turns a package's grouped commits into the markdown body used for GitHub
release notes and, optionally, the package's CHANGELOG.md.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from monorepo_release.core.commits import format_commit_for_changelog

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from monorepo_release.core.commits import ParsedCommit
    from monorepo_release.core.engine import GroupedCommits
    from monorepo_release.core.version import Version


def _sort_key(commit: ParsedCommit) -> tuple[int, str, str]:
    if commit.scope:
        return (0, commit.scope.casefold(), commit.scope)
    return (1, commit.body.casefold(), commit.body)


def sort_by_scope(commits: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    """Sort commits for display.

    Scoped commits come first, alphabetically by scope. Unscoped commits
    follow, alphabetically by body.
    """
    return sorted(commits, key=_sort_key)


def _list_group(heading: str, commits: list[ParsedCommit]) -> str:
    if not commits:
        return ""
    lines = [f"  - {format_commit_for_changelog(c)}" for c in sort_by_scope(commits)]
    return f"## {heading}\n\n" + "\n".join(lines)


def render_changelog(grouped: GroupedCommits) -> str:
    """Render the changelog body of one package.

    Sections appear in the order Features, Bugfixes, Other, BREAKING
    CHANGES; empty sections are left out. Breaking-change bodies are listed
    verbatim in the order they were found.

    Args:
        grouped: The package's grouped commits

    Returns:
        Changelog text, empty when there is nothing to list
    """
    sections = [
        _list_group("Features", grouped.features),
        _list_group("Bugfixes", grouped.bugfixes),
        _list_group("Other", grouped.other),
    ]
    if grouped.breaking:
        notes = "\n".join(f"  - {c.body}" for c in grouped.breaking)
        sections.append(f"## BREAKING CHANGES\n\n{notes}")
    return "\n\n".join(s for s in sections if s)


def prepend_changelog_file(path: Path, version: Version, body: str) -> Path:
    """Insert a release section at the top of a CHANGELOG.md file.

    The file is created when it does not exist yet.

    Args:
        path: Changelog file
        version: Released version
        body: Output of :func:`render_changelog`

    Returns:
        The changelog path
    """
    heading = f"## {version} ({datetime.now(UTC).strftime('%Y-%m-%d')})"
    # Shift the body's headings one level down under the version heading
    body = "\n".join(f"#{line}" if line.startswith("## ") else line for line in body.splitlines())
    section = f"{heading}\n\n{body}\n" if body else f"{heading}\n"

    if path.exists():
        existing = path.read_text(encoding="utf-8")
        content = section + "\n" + existing
    else:
        content = section
    path.write_text(content, encoding="utf-8")
    return path
