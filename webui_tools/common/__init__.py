"""
================================================================================
Web UI Tools Common Utilities
================================================================================

This module provides shared configuration management and logging setup for
the UI test-support layer.

Exports:
    - ConfigLoader: Singleton configuration manager
    - get_config: Convenience function to get configuration values
    - init_logger: Function to initialize loguru logger with standard settings

Usage:
    from webui_tools.common import get_config, init_logger

    init_logger()
    timeout = get_config("wait.timeout", 25.0)

================================================================================
"""

import os
import sys

from loguru import logger

from .config_loader import ConfigLoader, ConfigurationError, get_config


# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: str = None,
    format_string: str = None,
    log_file: str = None
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to.

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="logs/ui.log")
    """
    global _logger_initialized

    if _logger_initialized:
        return

    logger.remove()

    level = (level or get_config("logging.level", "INFO")).upper()
    format_string = format_string or get_config(
        "logging.format",
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{thread.name}</cyan> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    log_file = log_file or get_config("logging.file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug("Logger initialized successfully")


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "get_config",
    "init_logger",
]
