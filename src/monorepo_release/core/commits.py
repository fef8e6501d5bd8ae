"""Conventional commit parsing and classification.

Parses commit subjects following the Conventional Commits convention
(``type(scope)!: description``) and decides which commits can trigger
a release.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from monorepo_release.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from monorepo_release.config.models import MonorepoReleaseConfig
    from monorepo_release.vcs.git import Commit

logger = get_logger(__name__)

CONVENTIONAL_COMMIT_RE = re.compile(
    r"^(?P<type>[\w-]+)(?:\((?P<scope>[^()\r\n]*)\))?(?P<bang>!)?: (?P<description>\S.*)$"
)


def split_breaking_body(body: str, marker: str) -> str | None:
    """Return the text after the first breaking-change marker, stripped.

    Returns None when the marker does not occur in ``body``.
    """
    if marker not in body:
        return None
    _, _, remainder = body.partition(marker)
    return remainder.strip()


@dataclass(frozen=True)
class ParsedCommit:
    """A commit classified as a conventional commit.

    ``breaking_body`` holds the text following the breaking-change marker;
    ``is_breaking`` is set whenever the marker occurs in the body.
    """

    sha: str
    short_sha: str
    subject: str
    body: str
    date: datetime
    commit_type: str | None
    scope: str | None
    description: str
    is_breaking: bool = False
    breaking_body: str | None = None
    is_conventional: bool = True

    @classmethod
    def from_commit(cls, commit: Commit, breaking_marker: str) -> ParsedCommit:
        """Parse a raw commit.

        Args:
            commit: Raw commit from git
            breaking_marker: Marker string announcing a breaking change in the body

        Returns:
            The parsed commit; ``is_conventional`` is False when the subject
            does not follow the convention
        """
        breaking_body = split_breaking_body(commit.body, breaking_marker)
        match = CONVENTIONAL_COMMIT_RE.match(commit.subject.strip())
        if match is None:
            return cls(
                sha=commit.sha,
                short_sha=commit.short,
                subject=commit.subject,
                body=commit.body,
                date=commit.date,
                commit_type=None,
                scope=None,
                description=commit.subject.strip(),
                is_breaking=breaking_body is not None,
                breaking_body=breaking_body,
                is_conventional=False,
            )

        scope = (match.group("scope") or "").strip() or None
        return cls(
            sha=commit.sha,
            short_sha=commit.short,
            subject=commit.subject,
            body=commit.body,
            date=commit.date,
            commit_type=match.group("type"),
            scope=scope,
            description=match.group("description").strip(),
            is_breaking=breaking_body is not None,
            breaking_body=breaking_body,
        )

    def as_breaking_note(self) -> ParsedCommit:
        """Copy of this commit whose body is the breaking-change text."""
        return replace(self, body=self.breaking_body or "")


def parse_commits(commits: Iterable[Commit], config: MonorepoReleaseConfig) -> list[ParsedCommit]:
    """Parse commits, dropping those that are not conventional commits.

    Order is preserved (newest first, as returned by git).
    """
    parsed = []
    for commit in commits:
        pc = ParsedCommit.from_commit(commit, config.commits.breaking_marker)
        if not pc.is_conventional:
            logger.debug("Skipping non-conventional commit %s: %s", commit.short, commit.subject)
            continue
        parsed.append(pc)
    return parsed


def is_release_type(commit: ParsedCommit, config: MonorepoReleaseConfig) -> bool:
    """Whether the commit type can trigger a release (case-sensitive)."""
    return commit.commit_type is not None and commit.commit_type in config.release_types


def is_release_commit(commit: Commit, config: MonorepoReleaseConfig) -> bool:
    """Whether the commit is a release commit made by this tool."""
    return commit.subject.strip() == config.commits.release_commit_message


def format_commit_for_changelog(commit: ParsedCommit) -> str:
    """Format a commit as a changelog line (without the list marker)."""
    if commit.scope:
        return f"**{commit.scope}**: {commit.description} ({commit.short_sha})"
    return commit.description
