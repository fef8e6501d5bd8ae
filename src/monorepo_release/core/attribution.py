"""Attribution of changed files to the packages that own them."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from monorepo_release.project.models import Package


def _normalize(path: str) -> str:
    return str(PurePosixPath(path.replace("\\", "/").strip()))


def owns_path(directory: str, path: str) -> bool:
    """Whether ``path`` is the package directory or lies below it.

    A path-separator boundary is required after the directory, so
    ``packages/pkg`` does not own ``packages/pkg-extra/index.js``.
    """
    directory = _normalize(directory)
    path = _normalize(path)
    if directory in ("", "."):
        return False
    return path == directory or path.startswith(f"{directory}/")


def attribute(changed_files: Iterable[str], packages: Sequence[Package]) -> list[Package]:
    """Return the packages owning at least one of the changed files.

    Packages come back in inventory order.
    """
    files = [f for f in changed_files if f.strip()]
    return [pkg for pkg in packages if any(owns_path(pkg.directory, f) for f in files)]
