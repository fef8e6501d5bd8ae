"""Publishing of release plans."""

from __future__ import annotations

from monorepo_release.publish.guards import should_skip, verify_tokens
from monorepo_release.publish.publisher import publish

__all__ = ["publish", "should_skip", "verify_tokens"]
