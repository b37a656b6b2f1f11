"""
Tests for core/logging_config.py.

Tests cover:
- Level names from dashboard.toml
- Handlers shared by the roadsafety and dash_app namespaces
- Re-initialisation not stacking handlers
- Config-driven setup and the verbose override
"""

import logging

import pytest

from config import LoggingConfig
from core.logging_config import (
    APP_LOGGER_NAMESPACES,
    ROOT_LOGGER_NAME,
    get_logger,
    resolve_level,
    setup_logging,
    setup_logging_from_config,
)


@pytest.fixture(autouse=True)
def restore_loggers():
    """Detach and close whatever handlers a test installed."""
    yield
    for namespace in APP_LOGGER_NAMESPACES:
        logger = logging.getLogger(namespace)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
    logging.getLogger("urllib3").setLevel(logging.NOTSET)


class TestResolveLevel:
    @pytest.mark.parametrize("value,expected", [
        ("debug", logging.DEBUG),
        (" WARNING ", logging.WARNING),
        (logging.ERROR, logging.ERROR),
    ])
    def test_names_and_constants(self, value, expected):
        assert resolve_level(value) == expected

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            resolve_level("LOUD")


class TestSetupLogging:
    """Test handler installation."""

    def test_namespaces_share_handlers(self):
        setup_logging(level="INFO")
        app_handlers = logging.getLogger(ROOT_LOGGER_NAME).handlers
        callback_handlers = logging.getLogger("dash_app").handlers
        assert len(app_handlers) == 1
        assert app_handlers == callback_handlers

    def test_callback_messages_reach_log_file(self, temp_dir):
        setup_logging(level=logging.INFO, log_dir=temp_dir, console=False, file_logging=True)

        get_logger("data_processing.loader").info("Loaded tests extract")
        logging.getLogger("dash_app.callbacks.chart").error("Render failed for testing-total")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        log_files = list(temp_dir.glob("roadsafety_*.log"))
        assert len(log_files) == 1
        text = log_files[0].read_text(encoding="utf-8")
        assert "roadsafety.data_processing.loader: Loaded tests extract" in text
        assert "dash_app.callbacks.chart: Render failed for testing-total" in text

    def test_reinitialising_does_not_stack_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1
        assert len(logging.getLogger("dash_app").handlers) == 1

    def test_urllib3_quiet_unless_debugging(self):
        setup_logging(level=logging.INFO)
        assert logging.getLogger("urllib3").level == logging.WARNING
        setup_logging(level=logging.DEBUG)
        assert logging.getLogger("urllib3").level == logging.DEBUG


class TestSetupFromConfig:
    def test_level_from_config(self, temp_dir):
        logger = setup_logging_from_config(LoggingConfig(level="warning", directory=str(temp_dir)))
        assert logger.level == logging.WARNING
        assert logging.getLogger("dash_app").level == logging.WARNING

    def test_verbose_forces_debug(self, temp_dir):
        logger = setup_logging_from_config(
            LoggingConfig(level="ERROR", directory=str(temp_dir)), verbose=True
        )
        assert logger.level == logging.DEBUG

    def test_file_logging_uses_configured_directory(self, temp_dir):
        log_dir = temp_dir / "logs"
        setup_logging_from_config(
            LoggingConfig(file_logging=True, directory=str(log_dir)), console=False
        )
        assert len(list(log_dir.glob("*.log"))) == 1


class TestGetLogger:
    def test_namespaced(self):
        assert get_logger("visualization.pipeline").name == "roadsafety.visualization.pipeline"

    def test_already_namespaced(self):
        assert get_logger("roadsafety.cli").name == "roadsafety.cli"
