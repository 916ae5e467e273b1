"""Tests for the plugin table and its typed accessor."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from plugweave.core.table import PluginTable
from plugweave.exceptions import PluginError, PluginExportError, PluginNotFoundError


@dataclass
class DatabaseHandle:
    url: str


@pytest.fixture
def table(make_plugin):
    return PluginTable(
        {
            "database": make_plugin("database", exports=DatabaseHandle("sqlite://")),
            "bare": make_plugin("bare"),
        }
    )


class TestPluginTable:
    def test_mapping_access(self, table):
        assert table["database"].meta.name == "database"
        assert "bare" in table
        assert len(table) == 2
        assert list(table) == ["database", "bare"]

    def test_read_only(self, table):
        with pytest.raises(TypeError):
            table["new"] = object()

    def test_require_unknown(self, table):
        with pytest.raises(PluginNotFoundError, match="ghost"):
            table.require("ghost")

    def test_exports_typed(self, table):
        handle = table.exports("database", DatabaseHandle)
        assert handle.url == "sqlite://"

    def test_exports_wrong_type(self, table):
        with pytest.raises(PluginExportError) as exc_info:
            table.exports("database", str)
        assert exc_info.value.expected is str
        assert isinstance(exc_info.value, PluginError)

    def test_exports_none_rejected(self, table):
        with pytest.raises(PluginExportError, match="NoneType"):
            table.exports("bare", DatabaseHandle)

    def test_exports_unknown_plugin(self, table):
        with pytest.raises(PluginNotFoundError):
            table.exports("ghost", DatabaseHandle)

    def test_live_view(self):
        backing = {}
        table = PluginTable(backing)
        backing["later"] = object()
        assert "later" in table

    def test_default_empty(self):
        assert len(PluginTable()) == 0
