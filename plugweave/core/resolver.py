"""Dependency resolver: orders plugins so dependencies come first."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from plugweave.exceptions import (
    CircularDependencyError,
    DuplicateNameError,
    MissingDependencyError,
)

if TYPE_CHECKING:
    from plugweave.plugins.base import Dependency, Plugin

logger = structlog.get_logger()


class _Mark(Enum):
    ON_STACK = "on_stack"
    DONE = "done"


def resolve_order(plugins: Iterable[Plugin]) -> list[Plugin]:
    """Return *plugins* in an order where every dependency precedes its dependents.

    Depth-first with an explicit stack of ``(plugin, dependency iterator)``
    frames. Independent plugins keep their input order. Absent optional
    dependencies are skipped with a warning.

    Raises ``MissingDependencyError`` for an absent required dependency and
    ``CircularDependencyError`` (carrying the cycle path) for a cycle.
    """
    by_name: dict[str, Plugin] = {}
    for plugin in plugins:
        if plugin.meta.name in by_name:
            raise DuplicateNameError(plugin.meta.name)
        by_name[plugin.meta.name] = plugin

    marks: dict[str, _Mark] = {}
    order: list[Plugin] = []

    for root in by_name.values():
        if root.meta.name in marks:
            continue

        marks[root.meta.name] = _Mark.ON_STACK
        stack: list[tuple[Plugin, Iterator[Dependency]]] = [
            (root, iter(root.meta.depends_on))
        ]
        while stack:
            plugin, deps = stack[-1]
            dep = next(deps, None)

            if dep is None:
                stack.pop()
                marks[plugin.meta.name] = _Mark.DONE
                order.append(plugin)
                continue

            target = by_name.get(dep.name)
            if target is None:
                if dep.optional:
                    logger.warning(
                        "dependency_optional_missing",
                        plugin=plugin.meta.name,
                        dependency=dep.name,
                    )
                    continue
                logger.error(
                    "dependency_missing", plugin=plugin.meta.name, dependency=dep.name
                )
                raise MissingDependencyError(plugin.meta.name, dep.name)

            mark = marks.get(dep.name)
            if mark is _Mark.ON_STACK:
                path = (*(p.meta.name for p, _ in stack), dep.name)
                logger.error("dependency_cycle", path=list(path))
                raise CircularDependencyError(path)
            if mark is _Mark.DONE:
                continue

            marks[dep.name] = _Mark.ON_STACK
            stack.append((target, iter(target.meta.depends_on)))

    logger.debug("plugins_ordered", order=[p.meta.name for p in order])
    return order
