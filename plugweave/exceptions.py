"""Shared exception types for plugweave."""

from __future__ import annotations


class PlugweaveError(Exception):
    """Base exception for all plugweave errors."""


class ConfigError(PlugweaveError):
    """Configuration or plugin manifest is invalid."""


class PluginError(PlugweaveError):
    """Plugin lifecycle error."""


class DuplicateNameError(PluginError):
    """Two plugins in one run share a name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Plugin already registered: {name}")


class LifecycleError(PluginError):
    """A lifecycle phase was entered out of order or twice."""


class PluginLoadError(PluginError):
    """A plugin import path could not be loaded."""


class PluginNotFoundError(PluginError):
    """No plugin with the requested name is in the table."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Plugin is not registered: {name}")


class PluginExportError(PluginError):
    """A plugin's exports are not of the requested type."""

    def __init__(self, name: str, expected: type, actual: object) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Plugin {name} exports {type(actual).__name__}, "
            f"expected {expected.__name__}"
        )


class DependencyError(PlugweaveError):
    """Plugin dependencies cannot be ordered."""


class MissingDependencyError(DependencyError):
    """A required dependency is not among the supplied plugins."""

    def __init__(self, plugin: str, dependency: str) -> None:
        self.plugin = plugin
        self.dependency = dependency
        super().__init__(
            f"Plugin {plugin} requires {dependency}, which is not registered"
        )


class CircularDependencyError(DependencyError):
    """Plugin dependencies form a cycle."""

    def __init__(self, path: tuple[str, ...]) -> None:
        self.path = path
        super().__init__(f"Circular dependency: {' -> '.join(path)}")


class ConditionError(PlugweaveError):
    """An event subscription is malformed."""


class InvalidConditionError(ConditionError):
    """A known condition kind was given the wrong set of events."""


class UnknownConditionError(ConditionError):
    """The condition kind is not single, any or all."""
