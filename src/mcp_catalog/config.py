"""Configuration for tool discovery.

Defaults can be overridden through environment variables, see
:func:`get_config_from_env`.
"""

import logging
import os
from dataclasses import dataclass

from mcp_catalog.utils.logging import log_config_param

logger = logging.getLogger("mcp-catalog.config")

# Weight of the BM25 signal in the hybrid score; TF-IDF gets the rest.
DEFAULT_HYBRID_ALPHA = 0.2
DEFAULT_SEARCH_LIMIT = 5
DEFAULT_MIN_SCORE = 0.3


@dataclass(frozen=True)
class DiscoveryConfig:
    """Configuration for the hybrid tool search.

    Attributes:
        hybrid_alpha: Weight of the BM25 signal in [0, 1] (default 0.2)
        default_limit: Results returned when a search gives no limit (default 5)
        default_min_score: Threshold used when a search gives none (default 0.3)
        bm25_k1: BM25 term frequency saturation (default 1.5)
        bm25_b: BM25 document length normalization (default 0.75)
    """

    hybrid_alpha: float = DEFAULT_HYBRID_ALPHA
    default_limit: int = DEFAULT_SEARCH_LIMIT
    default_min_score: float = DEFAULT_MIN_SCORE
    bm25_k1: float = 1.5
    bm25_b: float = 0.75

    def __post_init__(self) -> None:
        if not 0.0 <= self.hybrid_alpha <= 1.0:
            raise ValueError(
                f"hybrid_alpha must be between 0 and 1, got {self.hybrid_alpha}"
            )
        if not 0.0 <= self.default_min_score <= 1.0:
            raise ValueError(
                f"default_min_score must be between 0 and 1, got {self.default_min_score}"
            )
        if self.default_limit < 0:
            raise ValueError(f"default_limit must be >= 0, got {self.default_limit}")


def get_config_from_env() -> DiscoveryConfig:
    """Load discovery configuration from environment variables.

    Invalid values are logged and replaced with the default.

    Returns:
        DiscoveryConfig with values from environment or defaults.

    Environment Variables:
        TOOL_DISCOVERY_HYBRID_ALPHA: BM25 weight in [0, 1] (default 0.2)
        TOOL_DISCOVERY_DEFAULT_LIMIT: Default result limit (default 5)
        TOOL_DISCOVERY_MIN_SCORE: Default minimum score in [0, 1] (default 0.3)
        TOOL_DISCOVERY_BM25_K1: BM25 k1 parameter (default 1.5)
        TOOL_DISCOVERY_BM25_B: BM25 b parameter (default 0.75)
    """

    def get_float(
        key: str, default: float, low: float | None = None, high: float | None = None
    ) -> float:
        """Get float value from environment, bounded to [low, high]."""
        raw = os.getenv(key)
        if not raw:
            return default
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"Invalid float value for {key}: {raw}, using default")
            return default
        if (low is not None and value < low) or (high is not None and value > high):
            logger.warning(
                f"Out of range value for {key}: {raw}, using default {default}"
            )
            return default
        return value

    def get_int(key: str, default: int) -> int:
        """Get non-negative int value from environment."""
        raw = os.getenv(key)
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Invalid int value for {key}: {raw}, using default")
            return default
        if value < 0:
            logger.warning(f"Negative value for {key}: {raw}, using default {default}")
            return default
        return value

    config = DiscoveryConfig(
        hybrid_alpha=get_float(
            "TOOL_DISCOVERY_HYBRID_ALPHA", DEFAULT_HYBRID_ALPHA, 0.0, 1.0
        ),
        default_limit=get_int("TOOL_DISCOVERY_DEFAULT_LIMIT", DEFAULT_SEARCH_LIMIT),
        default_min_score=get_float(
            "TOOL_DISCOVERY_MIN_SCORE", DEFAULT_MIN_SCORE, 0.0, 1.0
        ),
        bm25_k1=get_float("TOOL_DISCOVERY_BM25_K1", 1.5, 0.0),
        bm25_b=get_float("TOOL_DISCOVERY_BM25_B", 0.75, 0.0, 1.0),
    )

    for field_name in (
        "hybrid_alpha",
        "default_limit",
        "default_min_score",
        "bm25_k1",
        "bm25_b",
    ):
        log_config_param(logger, "discovery", field_name, getattr(config, field_name))

    return config
