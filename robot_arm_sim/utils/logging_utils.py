"""
Logging configuration for robot_arm_sim entry points.

The library modules only create module-level loggers; handlers are
installed by whoever runs the simulator (``run_arm.py`` or an embedding
application) through :func:`setup_logging`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(config: Dict[str, Any], service_name: Optional[str]) -> int:
    """Pick the log level for *service_name*, falling back to the global one.

    Args:
        config: Logging configuration dictionary.
        service_name: Optional key of a per-service sub-section.

    Returns:
        A ``logging`` level constant.

    Raises:
        ValueError: If the configured level name is unknown.
    """
    if service_name and isinstance(config.get(service_name), dict):
        level_name = config[service_name].get("level", config.get("level", "INFO"))
    else:
        level_name = config.get("level", "INFO")
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{level_name}'")
    return level


def setup_logging(config: Dict[str, Any] | None = None, service_name: Optional[str] = None) -> None:
    """Configure the root logger with a console handler and optional file output.

    Args:
        config: Logging configuration dict with keys:
            - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            - <service_name>: Per-service config dict with 'level' key (optional)
            - file_output: Optional file path for file logging
        service_name: Optional service name to read service-specific config.
    """
    config = config or {}
    level = _resolve_level(config, service_name)
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_output = config.get("file_output")
    if file_output:
        file_handler = logging.FileHandler(file_output)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Set specific logger levels to reduce noise
    logging.getLogger("asyncio").setLevel(logging.WARNING)
