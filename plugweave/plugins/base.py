"""Plugin protocol for plugweave.

A plugin is any object with a ``meta: PluginMeta`` attribute. The lifecycle
hooks are all optional and may be plain functions or coroutine functions:

``register(bus)``
    Called once while the plugin is registered. Subscribe to events here.
``initialize()``
    Called in dependency order, after every dependency's ``initialize``
    has completed.
``finalize()``
    Called once all plugins are initialized, in reverse dependency order.

``initialize`` and ``finalize`` may return a status string, which is logged.
Plugins that share state with others set ``exports``; listeners read it
through ``PluginTable.exports(name, type)``.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator

HookResult = Awaitable[str | None] | str | None


class Dependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    optional: bool = False


class PluginMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str = "0.0.0"
    description: str = ""
    depends_on: tuple[Dependency, ...] = ()

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("plugin name must not be empty")
        return v

    @field_validator("depends_on", mode="before")
    @classmethod
    def parse_depends_on(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str | Dependency | dict):
            v = [v]
        try:
            items = list(v)
        except TypeError:
            raise ValueError(
                f"depends_on must be a list of dependencies, got {type(v).__name__}"
            ) from None
        return [Dependency(name=d) if isinstance(d, str) else d for d in items]

    @field_validator("depends_on")
    @classmethod
    def dedupe_depends_on(cls, v: tuple[Dependency, ...]) -> tuple[Dependency, ...]:
        seen: set[str] = set()
        unique = []
        for dep in v:
            if dep.name not in seen:
                seen.add(dep.name)
                unique.append(dep)
        return tuple(unique)


@runtime_checkable
class Plugin(Protocol):
    meta: PluginMeta
