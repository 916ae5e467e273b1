"""Plugin registry: registers, orders, initializes and finalizes plugins.

One registry drives one run: ``EMPTY → REGISTERING → ORDERING →
INITIALIZING → FINALIZING → DONE``, strictly forward. Errors raised by
plugin hooks or bus listeners are logged and propagate unchanged. Nothing
is retried or rolled back, so a failed run can leave some plugins
initialized.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from plugweave.core.events import (
    CORE_INITIALIZED,
    CORE_INITIALIZING,
    CORE_REGISTERED,
    FINALIZED,
    INITIALIZED,
    INITIALIZING,
    REGISTERED,
    REGISTERING,
    EventBus,
    plugin_event,
)
from plugweave.core.resolver import resolve_order
from plugweave.core.table import PluginTable
from plugweave.exceptions import DuplicateNameError, LifecycleError

if TYPE_CHECKING:
    from plugweave.plugins.base import Plugin

logger = structlog.get_logger()


class Phase(Enum):
    EMPTY = "empty"
    REGISTERING = "registering"
    ORDERING = "ordering"
    INITIALIZING = "initializing"
    FINALIZING = "finalizing"
    DONE = "done"


async def _call_hook(plugin: Plugin, hook_name: str, *args: object) -> str | None:
    hook = getattr(plugin, hook_name, None)
    if hook is None:
        return None
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class PluginRegistry:
    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}
        self._table = PluginTable(self._plugins)
        self._bus = EventBus(self._table)
        self._order: tuple[Plugin, ...] = ()
        self._phase = Phase.EMPTY
        self._phase_complete = True

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def table(self) -> PluginTable:
        return self._table

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def order(self) -> tuple[Plugin, ...]:
        return self._order

    @property
    def plugins(self) -> list[Plugin]:
        return list(self._plugins.values())

    def get(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    async def run(self, plugins: Iterable[Plugin]) -> None:
        """Register, order, initialize and finalize *plugins*."""
        await self.register_all(plugins)
        self.resolve()
        await self.init_all()
        await self.finalize_all()
        logger.info("plugins_started", order=[p.meta.name for p in self._order])

    async def register_all(self, plugins: Iterable[Plugin]) -> None:
        plugins = list(plugins)
        self._enter(Phase.REGISTERING, after=Phase.EMPTY)

        # All names are checked before any register hook runs.
        seen: set[str] = set()
        for plugin in plugins:
            name = plugin.meta.name
            if name in seen:
                logger.error("plugin_duplicate", name=name)
                raise DuplicateNameError(name)
            seen.add(name)

        for plugin in plugins:
            await self._register(plugin)

        self._bus.emit(CORE_REGISTERED)
        self._phase_complete = True

    def resolve(self) -> tuple[Plugin, ...]:
        self._enter(Phase.ORDERING, after=Phase.REGISTERING)
        self._order = tuple(resolve_order(self._plugins.values()))
        self._phase_complete = True
        return self._order

    async def init_all(self) -> None:
        self._enter(Phase.INITIALIZING, after=Phase.ORDERING)
        self._bus.emit(CORE_INITIALIZING)

        for plugin in self._order:
            if getattr(plugin, "initialize", None) is None:
                continue
            name = plugin.meta.name
            self._bus.emit(plugin_event(name, INITIALIZING))
            try:
                message = await _call_hook(plugin, "initialize")
            except Exception as e:
                logger.error("plugin_init_failed", name=name, error=str(e))
                raise
            logger.info("plugin_initialized", name=name)
            if message:
                logger.info("plugin_message", name=name, message=message)
            self._bus.emit(plugin_event(name, INITIALIZED))

        self._phase_complete = True

    async def finalize_all(self) -> None:
        self._enter(Phase.FINALIZING, after=Phase.INITIALIZING)

        for plugin in reversed(self._order):
            if getattr(plugin, "finalize", None) is None:
                continue
            name = plugin.meta.name
            try:
                message = await _call_hook(plugin, "finalize")
            except Exception as e:
                logger.error("plugin_finalize_failed", name=name, error=str(e))
                raise
            logger.info("plugin_finalized", name=name)
            if message:
                logger.info("plugin_message", name=name, message=message)
            self._bus.emit(plugin_event(name, FINALIZED))

        self._bus.emit(CORE_INITIALIZED)
        self._phase_complete = True
        self._enter(Phase.DONE, after=Phase.FINALIZING)

    async def _register(self, plugin: Plugin) -> None:
        name = plugin.meta.name
        self._bus.emit(plugin_event(name, REGISTERING))
        self._plugins[name] = plugin
        try:
            await _call_hook(plugin, "register", self._bus)
        except Exception as e:
            logger.error("plugin_register_failed", name=name, error=str(e))
            raise
        logger.info(
            "plugin_registered",
            name=name,
            version=plugin.meta.version,
            depends_on=[d.name for d in plugin.meta.depends_on],
        )
        self._bus.emit(plugin_event(name, REGISTERED))

    def _enter(self, phase: Phase, *, after: Phase) -> None:
        if self._phase is not after or not self._phase_complete:
            state = "complete" if self._phase_complete else "incomplete"
            raise LifecycleError(
                f"Cannot enter {phase.value} phase from {state} {self._phase.value} phase"
            )
        self._phase = phase
        self._phase_complete = phase is Phase.DONE
        logger.info("phase_entered", phase=phase.value)
