"""CLI entry point for plugweave."""

import asyncio
import sys

import structlog

from plugweave.app import build_registry
from plugweave.core.config import PlugweaveConfig
from plugweave.exceptions import PlugweaveError

logger = structlog.get_logger()


async def main() -> None:
    try:
        config = PlugweaveConfig()
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print(
            "Set PLUGWEAVE_PLUGINS or PLUGWEAVE_MANIFEST, or create a .env file.",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        registry, plugins = build_registry(config)
    except PlugweaveError as e:
        print(f"Plugin loading failed: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        await registry.run(plugins)
    except PlugweaveError as e:
        logger.error("startup_failed", phase=registry.phase.value, error=str(e))
        print(f"Startup failed: {e}", file=sys.stderr)
        sys.exit(1)

    names = ", ".join(p.meta.name for p in registry.order)
    print(f"plugweave ready — {len(registry.order)} plugins: {names}")


def run() -> None:
    asyncio.run(main())
