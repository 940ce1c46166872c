"""Unit tests for logging helpers."""

import io
import logging

from mcp_catalog.utils.logging import ROOT_LOGGER_NAME, log_config_param, setup_logging


class TestSetupLogging:
    """Tests for setup_logging."""

    def teardown_method(self):
        """Restore the package logger."""
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def test_configures_root_logger(self):
        logger = setup_logging(logging.DEBUG, io.StringIO())
        assert logger.name == "mcp-catalog"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_replaces_existing_handlers(self):
        setup_logging(stream=io.StringIO())
        logger = setup_logging(stream=io.StringIO())
        assert len(logger.handlers) == 1

    def test_child_loggers_write_to_stream(self):
        stream = io.StringIO()
        setup_logging(logging.INFO, stream)
        logging.getLogger("mcp-catalog.discovery").info("index built")
        output = stream.getvalue()
        assert "mcp-catalog.discovery - INFO - index built" in output

    def test_level_filters_messages(self):
        stream = io.StringIO()
        setup_logging(logging.WARNING, stream)
        logging.getLogger("mcp-catalog.meta").info("hidden")
        assert stream.getvalue() == ""


class TestLogConfigParam:
    """Tests for log_config_param."""

    def test_logs_at_debug(self, caplog):
        logger = logging.getLogger("test.config")
        with caplog.at_level(logging.DEBUG, logger="test.config"):
            log_config_param(logger, "discovery", "hybrid_alpha", 0.2)
        assert "discovery config: hybrid_alpha=0.2" in caplog.text
