"""Git operations via the git command line."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from monorepo_release.exceptions import GitError, NoTagFoundError
from monorepo_release.logging import get_logger

logger = get_logger(__name__)

# Field and record separators for `git log --format`
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%h", "%s", "%b", "%cI"]) + _RECORD_SEP


@dataclass(frozen=True)
class Commit:
    """A raw commit as returned by ``git log``."""

    sha: str
    subject: str
    body: str
    date: datetime
    short_sha: str = ""

    @property
    def short(self) -> str:
        return self.short_sha or self.sha[:7]


def parse_log_output(output: str) -> list[Commit]:
    """Parse ``git log`` output produced with the internal format string."""
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        sha, short_sha, subject, body, date = record.split(_FIELD_SEP)
        commits.append(
            Commit(
                sha=sha,
                short_sha=short_sha,
                subject=subject,
                body=body.strip(),
                date=datetime.fromisoformat(date.strip()),
            )
        )
    return commits


class GitRepository:
    """A git working copy."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or Path.cwd()).resolve()
        if not self.path.is_dir():
            raise GitError(f"Not a directory: {self.path}")

    def _run(self, *args: str, check: bool = True) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=check,
                cwd=self.path,
            )
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}", stderr=e.stderr
            ) from e
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        return result.stdout

    def get_latest_tag(self) -> str:
        """Return the most recent tag reachable from HEAD.

        Raises:
            NoTagFoundError: If the repository has no tag yet
        """
        try:
            return self._run("describe", "--tags", "--abbrev=0").strip()
        except GitError as e:
            raise NoTagFoundError(
                "No tag found. Create an initial tag before the first release.",
                stderr=e.stderr,
            ) from e

    def get_commits_since_tag(self, tag: str | None) -> list[Commit]:
        """Return the commits after ``tag`` up to HEAD, newest first."""
        rev_range = f"{tag}..HEAD" if tag else "HEAD"
        output = self._run("log", f"--format={_LOG_FORMAT}", rev_range)
        return parse_log_output(output)

    def get_changed_files(self, sha: str) -> list[str]:
        """Return the paths a commit changed relative to its parent."""
        output = self._run("diff-tree", "--no-commit-id", "--name-only", "-r", sha)
        return [line for line in output.strip().splitlines() if line]

    def configure_user(self, name: str, email: str) -> None:
        self._run("config", "--local", "user.name", name)
        self._run("config", "--local", "user.email", email)

    def commit_all(self, message: str) -> None:
        self._run("add", "-A")
        self._run("commit", "-m", message)

    def create_tag(self, tag: str) -> None:
        self._run("tag", tag)

    def push(self, *, tags: bool = False, dry_run: bool = False) -> None:
        args = ["push"]
        if tags:
            args.append("--tags")
        if dry_run:
            args.append("--dry-run")
        self._run(*args)
