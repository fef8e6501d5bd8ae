"""monorepo-release: conventional-commit driven releases for monorepos."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
