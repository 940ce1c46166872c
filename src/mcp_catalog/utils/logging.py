"""Logging helpers for mcp-catalog."""

import logging
import sys
from typing import Any, TextIO

ROOT_LOGGER_NAME = "mcp-catalog"


def setup_logging(
    level: int = logging.WARNING, stream: TextIO | None = None
) -> logging.Logger:
    """Configure the package root logger.

    MCP servers speaking stdio must keep stdout free of log output, so the
    handler writes to stderr unless another stream is given.

    Args:
        level: Logging level for the package loggers
        stream: Output stream (defaults to sys.stderr)

    Returns:
        The configured package root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def log_config_param(
    logger: logging.Logger, section: str, param: str, value: Any
) -> None:
    """Log a single configuration value at debug level."""
    logger.debug(f"{section} config: {param}={value!r}")
