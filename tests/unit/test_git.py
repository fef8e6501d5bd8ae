"""Tests for git operations."""

from __future__ import annotations

import subprocess
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from monorepo_release.exceptions import GitError, NoTagFoundError
from monorepo_release.vcs.git import Commit, GitRepository, parse_log_output

if TYPE_CHECKING:
    from pathlib import Path

FS = "\x1f"
RS = "\x1e"


def log_record(sha: str, subject: str, body: str = "", date: str = "2024-03-01T10:00:00+00:00"):
    return FS.join([sha, sha[:7], subject, body, date]) + RS


@pytest.fixture
def repo(tmp_path: Path) -> GitRepository:
    return GitRepository(tmp_path)


class TestCommit:
    """Tests for the Commit model."""

    def test_short_defaults_to_sha_prefix(self):
        commit = Commit(sha="0123456789", subject="x", body="", date=datetime.now(UTC))

        assert commit.short == "0123456"


class TestParseLogOutput:
    """Tests for parse_log_output()."""

    def test_parse_records(self):
        """Records keep git's order and multi-line bodies survive."""
        output = (
            log_record("a" * 40, "feat: second", "line 1\nline 2\n")
            + "\n"
            + log_record("b" * 40, "fix: first", date="2024-02-01T10:00:00+02:00")
            + "\n"
        )

        commits = parse_log_output(output)

        assert [c.subject for c in commits] == ["feat: second", "fix: first"]
        assert commits[0].short == "aaaaaaa"
        assert commits[0].body == "line 1\nline 2"
        assert commits[1].body == ""
        assert commits[1].date == datetime(2024, 2, 1, 10, tzinfo=timezone(timedelta(hours=2)))

    def test_empty_output(self):
        assert parse_log_output("") == []


class TestGitRepository:
    """Tests for GitRepository with a mocked git executable."""

    def test_not_a_directory(self, tmp_path: Path):
        with pytest.raises(GitError, match="Not a directory"):
            GitRepository(tmp_path / "missing")

    def test_get_latest_tag(self, repo: GitRepository):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(stdout="pkg-a@1.2.3\n", returncode=0)

            assert repo.get_latest_tag() == "pkg-a@1.2.3"

            args = mock_run.call_args[0][0]
            assert args == ["git", "describe", "--tags", "--abbrev=0"]
            assert mock_run.call_args[1]["cwd"] == repo.path

    def test_no_tag(self, repo: GitRepository):
        """A repository without tags raises NoTagFoundError."""
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.CalledProcessError(
                128, "git", stderr="fatal: No names found, cannot describe anything."
            )

            with pytest.raises(NoTagFoundError) as exc_info:
                repo.get_latest_tag()

        assert "No names found" in str(exc_info.value)

    def test_get_commits_since_tag(self, repo: GitRepository):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(stdout=log_record("c" * 40, "fix: x"), returncode=0)

            commits = repo.get_commits_since_tag("v1.0.0")

            args = mock_run.call_args[0][0]
            assert args[:2] == ["git", "log"]
            assert args[-1] == "v1.0.0..HEAD"
            assert [c.sha for c in commits] == ["c" * 40]

    def test_get_commits_without_tag(self, repo: GitRepository):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(stdout="", returncode=0)

            assert repo.get_commits_since_tag(None) == []
            assert mock_run.call_args[0][0][-1] == "HEAD"

    def test_get_changed_files(self, repo: GitRepository):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(
                stdout="packages/a/index.js\n\npackages/b/package.json\n", returncode=0
            )

            files = repo.get_changed_files("abc1234")

            assert files == ["packages/a/index.js", "packages/b/package.json"]
            assert mock_run.call_args[0][0][-1] == "abc1234"

    def test_push_dry_run(self, repo: GitRepository):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(stdout="", returncode=0)

            repo.push(tags=True, dry_run=True)

            assert mock_run.call_args[0][0] == ["git", "push", "--tags", "--dry-run"]

    def test_commit_all(self, repo: GitRepository):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(stdout="", returncode=0)

            repo.commit_all("chore(release): bump")

            calls = [c[0][0] for c in mock_run.call_args_list]
            assert calls == [["git", "add", "-A"], ["git", "commit", "-m", "chore(release): bump"]]

    def test_command_failure(self, repo: GitRepository):
        """Failed commands raise GitError with git's stderr."""
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.CalledProcessError(1, "git", stderr="boom")

            with pytest.raises(GitError, match="boom"):
                repo.create_tag("a@1.0.0")

    def test_git_not_installed(self, repo: GitRepository):
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(GitError, match="not found"):
                repo.create_tag("a@1.0.0")
