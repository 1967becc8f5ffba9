"""Dependency resolution and final ordering.

Roots are expanded depth-first through ``dependencies``: a name is appended
only after all of its dependencies, so the traversal order already satisfies
every kept edge. Missing targets and cycle-closing edges are dropped with a
diagnostic; already-activated dependencies count as satisfied and are never
emitted again.

Two final orderings are supported:

``priority``
    Stable sort of the whole resolved set by priority. Dependency precedence
    survives only when catalog priorities agree with the dependency edges;
    violations are reported as ``DEPENDENCY_PRIORITY_INVERSION``.
``topological``
    Priority decides only among names whose dependencies are already placed,
    so dependencies always precede their dependents.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from typing import Literal

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.skills.catalog import Catalog
from skillgate.skills.models import DEFAULT_PRIORITY, Diagnostic

LOGGER = logging.getLogger(__name__)

OrderingMode = Literal["priority", "topological"]


@dataclass
class DependencyResolution:
    order: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    # name -> dependencies that are part of ``order`` (cycle edges removed)
    edges: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class DependencyResolver:
    def __init__(
        self,
        ordering: OrderingMode = "priority",
        default_priority: int = DEFAULT_PRIORITY,
    ) -> None:
        self.ordering = ordering
        self.default_priority = default_priority

    def resolve(
        self,
        roots: Sequence[str],
        activated: Collection[str],
        catalog: Catalog,
    ) -> DependencyResolution:
        """Expand ``roots`` into a dependency-closed, ordered sequence.

        Args:
            roots: Admitted names followed by affinity additions.
            activated: Names already activated in this conversation.
            catalog: Catalog supplying dependencies and priorities.

        Returns:
            Resolution whose ``order`` never contains an activated name.
        """
        resolution = DependencyResolution()
        resolved: list[str] = []
        resolved_set: set[str] = set()
        visiting: list[str] = []

        def visit(name: str, parent: str | None) -> bool:
            if name in resolved_set:
                return True
            if name in activated:
                # Emitted in an earlier turn: satisfied, not re-emitted.
                return False
            if name in visiting:
                cycle = [*visiting[visiting.index(name) :], name]
                resolution.diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.DEPENDENCY_CYCLE,
                        message=f"Circular dependency {' -> '.join(cycle)}; dropped edge {parent} -> {name}",
                        subject=name,
                    )
                )
                return False
            rule = catalog.get(name)
            if rule is None:
                if parent is not None:
                    resolution.diagnostics.append(
                        Diagnostic(
                            code=DiagnosticCode.DEPENDENCY_MISSING,
                            message=f"Skill '{parent}' requires unknown skill '{name}'",
                            subject=parent,
                        )
                    )
                return False

            visiting.append(name)
            kept: list[str] = []
            for dependency in rule.dependencies:
                if visit(dependency, name):
                    kept.append(dependency)
            visiting.pop()

            resolved.append(name)
            resolved_set.add(name)
            resolution.edges[name] = kept
            return True

        for root in dict.fromkeys(roots):
            visit(root, None)

        root_set = set(roots)
        resolution.added = [name for name in resolved if name not in root_set]

        if self.ordering == "topological":
            resolution.order = self._topological_order(resolved, resolution.edges, catalog)
        else:
            resolution.order = sorted(resolved, key=lambda n: self._priority(n, catalog))
            resolution.diagnostics.extend(self._inversions(resolution.order, resolution.edges))

        for diagnostic in resolution.diagnostics:
            LOGGER.warning(diagnostic.message)
        return resolution

    def _priority(self, name: str, catalog: Catalog) -> int:
        return catalog.priority_of(name, self.default_priority)

    def _topological_order(
        self,
        resolved: list[str],
        edges: dict[str, list[str]],
        catalog: Catalog,
    ) -> list[str]:
        position = {name: index for index, name in enumerate(resolved)}
        waiting = {name: len(edges.get(name, [])) for name in resolved}
        dependents: dict[str, list[str]] = {name: [] for name in resolved}
        for name, deps in edges.items():
            for dep in deps:
                dependents[dep].append(name)

        ready = [
            (self._priority(name, catalog), position[name], name)
            for name in resolved
            if waiting[name] == 0
        ]
        heapq.heapify(ready)

        order: list[str] = []
        while ready:
            _, _, name = heapq.heappop(ready)
            order.append(name)
            for dependent in dependents[name]:
                waiting[dependent] -= 1
                if waiting[dependent] == 0:
                    heapq.heappush(
                        ready, (self._priority(dependent, catalog), position[dependent], dependent)
                    )
        return order

    @staticmethod
    def _inversions(order: list[str], edges: dict[str, list[str]]) -> list[Diagnostic]:
        index = {name: i for i, name in enumerate(order)}
        found: list[Diagnostic] = []
        for name in order:
            for dep in edges.get(name, []):
                if index[dep] > index[name]:
                    found.append(
                        Diagnostic(
                            code=DiagnosticCode.DEPENDENCY_PRIORITY_INVERSION,
                            message=f"Dependency '{dep}' is ordered after its dependent '{name}'",
                            subject=name,
                        )
                    )
        return found


__all__ = ["DependencyResolution", "DependencyResolver", "OrderingMode"]
