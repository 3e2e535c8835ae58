"""
Logging configuration.

The packaged YAML config (`src/proxitour/config/logging.yaml`) is applied with
the level taken from settings (`PROXITOUR_LOG_LEVEL` overrides it).
"""

from __future__ import annotations

import copy
import logging.config

from proxitour.config.settings import get_logging_config, get_settings


def configure_logging() -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = get_settings()
    # The loaded config is cached; dictConfig gets its own copy.
    config = copy.deepcopy(get_logging_config())

    level = settings.app.log_level.upper()
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
