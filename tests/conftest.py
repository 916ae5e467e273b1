"""Shared fixtures and stub plugins for testing."""

from __future__ import annotations

import os

import pytest

from plugweave.core.config import PlugweaveConfig
from plugweave.core.events import EventBus
from plugweave.plugins.base import PluginMeta
from plugweave.plugins.registry import PluginRegistry


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(PlugweaveConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("PLUGWEAVE_"):
            monkeypatch.delenv(key, raising=False)


class RecordingPlugin:
    """Plugin whose hooks append ``"<stage>:<name>"`` to a shared journal."""

    def __init__(
        self,
        name: str,
        journal: list[str],
        depends_on: list | tuple = (),
        *,
        exports: object = None,
    ) -> None:
        self.meta = PluginMeta(name=name, version="1.0.0", depends_on=depends_on)
        self.exports = exports
        self._journal = journal

    def register(self, bus: EventBus) -> None:
        self._journal.append(f"register:{self.meta.name}")

    async def initialize(self) -> None:
        self._journal.append(f"init:{self.meta.name}")

    async def finalize(self) -> None:
        self._journal.append(f"finalize:{self.meta.name}")


class BarePlugin:
    """Plugin with no hooks at all."""

    def __init__(self, name: str, depends_on: list | tuple = ()) -> None:
        self.meta = PluginMeta(name=name, depends_on=depends_on)


@pytest.fixture
def journal() -> list[str]:
    return []


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def registry():
    return PluginRegistry()


@pytest.fixture
def make_plugin(journal):
    """Build a ``RecordingPlugin`` that writes to the test's journal."""

    def _make(name: str, depends_on: list | tuple = (), **kwargs) -> RecordingPlugin:
        return RecordingPlugin(name, journal, depends_on, **kwargs)

    return _make


@pytest.fixture
def make_bare_plugin():
    return BarePlugin
