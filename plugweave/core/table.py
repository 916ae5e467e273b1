"""Read-only view of the registered plugins, handed to event listeners."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, TypeVar

from plugweave.exceptions import PluginExportError, PluginNotFoundError

if TYPE_CHECKING:
    from plugweave.plugins.base import Plugin

T = TypeVar("T")


class PluginTable(Mapping[str, "Plugin"]):
    """Live, read-only mapping of plugin name to plugin.

    Wraps the coordinator's own dict, so plugins registered after a
    listener subscribed are visible to it when it fires.
    """

    def __init__(self, plugins: dict[str, Plugin] | None = None) -> None:
        self._plugins: dict[str, Plugin] = plugins if plugins is not None else {}

    def __getitem__(self, name: str) -> Plugin:
        return self._plugins[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def __repr__(self) -> str:
        return f"PluginTable({list(self._plugins)!r})"

    def require(self, name: str) -> Plugin:
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginNotFoundError(name) from None

    def exports(self, name: str, expected: type[T]) -> T:
        """Return the ``exports`` of plugin *name*, checked against *expected*.

        Raises ``PluginNotFoundError`` if *name* is not registered and
        ``PluginExportError`` if the exports are not an instance of
        *expected*.
        """
        value = getattr(self.require(name), "exports", None)
        if not isinstance(value, expected):
            raise PluginExportError(name, expected, value)
        return value
