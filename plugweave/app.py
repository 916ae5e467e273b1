"""Bootstrap: configures logging and builds a registry from configuration."""

from __future__ import annotations

import logging
import logging.handlers
import sys
from typing import TYPE_CHECKING

import structlog

from plugweave.core.config import PlugweaveConfig
from plugweave.plugins.loader import load_plugins
from plugweave.plugins.registry import PluginRegistry

if TYPE_CHECKING:
    from plugweave.plugins.base import Plugin

logger = structlog.get_logger()


def configure_logging(config: PlugweaveConfig) -> None:
    """Route structlog through the stdlib root logger.

    Console output is always on, colored only on a terminal. With
    ``config.log_dir`` set, JSON lines also go to a rotating
    ``plugweave.log`` there. Events below ``config.log_level`` (the bus
    logs every emit at debug) are dropped before they are formatted, and
    each event carries the emitting module as ``logger``.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        )
    )
    root_logger.addHandler(console_handler)

    if config.log_dir is not None:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_dir / "plugweave.log",
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_registry(
    config: PlugweaveConfig | None = None,
    plugins: list[Plugin] | None = None,
) -> tuple[PluginRegistry, list[Plugin]]:
    """Return a fresh registry and the plugins it should run.

    Configured plugins come first, followed by *plugins*.
    """
    if config is None:
        config = PlugweaveConfig()

    configure_logging(config)

    loaded = load_plugins(config)
    loaded.extend(plugins or [])

    logger.info(
        "registry_built",
        plugin_count=len(loaded),
        manifest=str(config.manifest) if config.manifest else None,
        log_level=config.log_level,
    )
    return PluginRegistry(), loaded
