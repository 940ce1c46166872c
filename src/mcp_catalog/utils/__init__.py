"""Utility helpers for mcp-catalog."""

from .logging import log_config_param, setup_logging
from .patterns import matches_filter, normalize_patterns

__all__ = [
    "log_config_param",
    "matches_filter",
    "normalize_patterns",
    "setup_logging",
]
