"""Version control access."""

from __future__ import annotations

from monorepo_release.vcs.git import Commit, GitRepository

__all__ = ["Commit", "GitRepository"]
