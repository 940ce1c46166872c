"""Unit tests for discovery configuration."""

import logging

import pytest

from mcp_catalog.config import (
    DEFAULT_HYBRID_ALPHA,
    DEFAULT_MIN_SCORE,
    DEFAULT_SEARCH_LIMIT,
    DiscoveryConfig,
    get_config_from_env,
)

ENV_VARS = (
    "TOOL_DISCOVERY_HYBRID_ALPHA",
    "TOOL_DISCOVERY_DEFAULT_LIMIT",
    "TOOL_DISCOVERY_MIN_SCORE",
    "TOOL_DISCOVERY_BM25_K1",
    "TOOL_DISCOVERY_BM25_B",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove discovery settings from the environment."""
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)


class TestDiscoveryConfig:
    """Tests for DiscoveryConfig."""

    def test_defaults(self):
        config = DiscoveryConfig()
        assert config.hybrid_alpha == DEFAULT_HYBRID_ALPHA == 0.2
        assert config.default_limit == DEFAULT_SEARCH_LIMIT == 5
        assert config.default_min_score == DEFAULT_MIN_SCORE == 0.3
        assert config.bm25_k1 == 1.5
        assert config.bm25_b == 0.75

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"hybrid_alpha": -0.1},
            {"hybrid_alpha": 1.1},
            {"default_min_score": 2.0},
            {"default_limit": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            DiscoveryConfig(**kwargs)

    def test_frozen(self):
        config = DiscoveryConfig()
        with pytest.raises(AttributeError):
            config.hybrid_alpha = 0.5  # type: ignore[misc]


class TestGetConfigFromEnv:
    """Tests for loading configuration from environment variables."""

    def test_defaults_without_env(self):
        assert get_config_from_env() == DiscoveryConfig()

    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("TOOL_DISCOVERY_HYBRID_ALPHA", "0.5")
        monkeypatch.setenv("TOOL_DISCOVERY_DEFAULT_LIMIT", "10")
        monkeypatch.setenv("TOOL_DISCOVERY_MIN_SCORE", "0.1")
        monkeypatch.setenv("TOOL_DISCOVERY_BM25_K1", "1.2")
        monkeypatch.setenv("TOOL_DISCOVERY_BM25_B", "0.6")

        config = get_config_from_env()
        assert config == DiscoveryConfig(
            hybrid_alpha=0.5,
            default_limit=10,
            default_min_score=0.1,
            bm25_k1=1.2,
            bm25_b=0.6,
        )

    def test_invalid_float_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("TOOL_DISCOVERY_HYBRID_ALPHA", "heavy")
        with caplog.at_level(logging.WARNING, logger="mcp-catalog.config"):
            config = get_config_from_env()
        assert config.hybrid_alpha == DEFAULT_HYBRID_ALPHA
        assert "Invalid float value for TOOL_DISCOVERY_HYBRID_ALPHA" in caplog.text

    def test_out_of_range_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("TOOL_DISCOVERY_MIN_SCORE", "1.5")
        with caplog.at_level(logging.WARNING, logger="mcp-catalog.config"):
            config = get_config_from_env()
        assert config.default_min_score == DEFAULT_MIN_SCORE
        assert "Out of range value" in caplog.text

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("TOOL_DISCOVERY_DEFAULT_LIMIT", "ten")
        assert get_config_from_env().default_limit == DEFAULT_SEARCH_LIMIT

    def test_negative_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("TOOL_DISCOVERY_DEFAULT_LIMIT", "-3")
        assert get_config_from_env().default_limit == DEFAULT_SEARCH_LIMIT

    def test_empty_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("TOOL_DISCOVERY_BM25_K1", "")
        assert get_config_from_env().bm25_k1 == 1.5
