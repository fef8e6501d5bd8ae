"""Dependency graph between workspace packages."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import TYPE_CHECKING

from monorepo_release.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from monorepo_release.project.models import Package

logger = get_logger(__name__)


class DependencyGraph:
    """Direct dependency edges between known packages.

    Edges to packages outside the workspace are dropped.
    """

    def __init__(self, dependencies: Mapping[str, Iterable[str]]) -> None:
        names = set(dependencies)
        self._dependencies: dict[str, frozenset[str]] = {
            name: frozenset(dep for dep in deps if dep in names and dep != name)
            for name, deps in dependencies.items()
        }
        self._dependents: dict[str, set[str]] = defaultdict(set)
        for name, deps in self._dependencies.items():
            for dep in deps:
                self._dependents[dep].add(name)

    @classmethod
    def from_packages(cls, packages: Iterable[Package]) -> DependencyGraph:
        return cls({pkg.name: pkg.dependencies for pkg in packages})

    def dependencies_of(self, name: str) -> frozenset[str]:
        """Direct dependencies of ``name`` within the workspace."""
        return self._dependencies.get(name, frozenset())

    def dependents_of(self, name: str) -> frozenset[str]:
        """All packages depending on ``name``, directly or transitively."""
        seen: set[str] = set()
        queue = deque(self._dependents.get(name, ()))
        while queue:
            current = queue.popleft()
            if current in seen or current == name:
                continue
            seen.add(current)
            queue.extend(self._dependents.get(current, ()))
        return frozenset(seen)

    def publish_order(self, names: Iterable[str]) -> list[str]:
        """Order ``names`` so that dependencies come before their dependents.

        Only dependencies inside ``names`` are taken into account. Ties keep
        the input order. On a cycle the remaining names are appended in
        input order.
        """
        ordered_input = list(dict.fromkeys(names))
        selected = set(ordered_input)
        pending = {name: set(self.dependencies_of(name)) & selected for name in ordered_input}

        result: list[str] = []
        while pending:
            ready = [name for name in ordered_input if name in pending and not pending[name]]
            if not ready:
                cycle = [name for name in ordered_input if name in pending]
                logger.warning("Dependency cycle between %s, keeping their order", ", ".join(cycle))
                result.extend(cycle)
                break
            for name in ready:
                result.append(name)
                del pending[name]
            for deps in pending.values():
                deps.difference_update(ready)
        return result
