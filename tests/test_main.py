"""Tests for plugweave.main — CLI entry point logic."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from plugweave.exceptions import MissingDependencyError, PluginLoadError
from plugweave.main import main, run
from plugweave.plugins.base import PluginMeta
from plugweave.plugins.registry import Phase


@pytest.fixture
def mock_registry():
    registry = MagicMock()
    registry.run = AsyncMock()
    registry.phase = Phase.DONE
    plugin = MagicMock()
    plugin.meta = PluginMeta(name="config")
    registry.order = (plugin,)
    return registry


class TestMain:
    @pytest.mark.asyncio
    async def test_config_error_exits(self):
        bad_config = ValueError("bad config")
        with patch("plugweave.main.PlugweaveConfig", side_effect=bad_config):
            with pytest.raises(SystemExit) as exc_info:
                await main()
            assert exc_info.value.code == 1

    @pytest.mark.asyncio
    async def test_successful_startup(self, mock_registry, capsys):
        with (
            patch("plugweave.main.PlugweaveConfig"),
            patch("plugweave.main.build_registry", return_value=(mock_registry, ["p"])),
        ):
            await main()

        mock_registry.run.assert_awaited_once_with(["p"])
        assert "1 plugins: config" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_load_error_exits(self, capsys):
        with (
            patch("plugweave.main.PlugweaveConfig"),
            patch("plugweave.main.build_registry", side_effect=PluginLoadError("nope")),
        ):
            with pytest.raises(SystemExit) as exc_info:
                await main()

        assert exc_info.value.code == 1
        assert "Plugin loading failed: nope" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_startup_error_exits(self, mock_registry, capsys):
        mock_registry.run.side_effect = MissingDependencyError("api", "database")
        mock_registry.phase = Phase.ORDERING
        with (
            patch("plugweave.main.PlugweaveConfig"),
            patch("plugweave.main.build_registry", return_value=(mock_registry, [])),
        ):
            with pytest.raises(SystemExit) as exc_info:
                await main()

        assert exc_info.value.code == 1
        assert "api requires database" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_hook_error_propagates(self, mock_registry):
        mock_registry.run.side_effect = RuntimeError("hook failed")
        with (
            patch("plugweave.main.PlugweaveConfig"),
            patch("plugweave.main.build_registry", return_value=(mock_registry, [])),
        ):
            with pytest.raises(RuntimeError, match="hook failed"):
                await main()


class TestRun:
    def test_run_calls_asyncio_run(self):
        with patch("plugweave.main.asyncio.run") as mock_run:
            run()
        mock_run.assert_called_once()
        # Close the coroutine handed to the mock so it is not reported as never awaited.
        mock_run.call_args.args[0].close()
