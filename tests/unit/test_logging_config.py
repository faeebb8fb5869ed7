"""Tests for logging configuration."""

import logging

import pytest


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("answer_client").setLevel(logging.NOTSET)


class TestConfigureLogging:
    def test_level_override(self, restore_root_logger):
        from answer_client.logging_config import configure_logging

        configure_logging("DEBUG")

        [handler] = logging.getLogger().handlers
        assert handler.level == logging.DEBUG
        assert logging.getLogger("answer_client").level == logging.DEBUG

    def test_noisy_loggers_suppressed(self, restore_root_logger):
        from answer_client.logging_config import configure_logging

        configure_logging("DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.ERROR

    def test_debug_setting_forces_debug(self, test_settings, monkeypatch, restore_root_logger):
        from answer_client import logging_config

        settings = test_settings.model_copy(update={"debug": True, "log_level": "WARNING"})
        monkeypatch.setattr(logging_config, "get_settings", lambda: settings)

        logging_config.configure_logging()

        assert logging.getLogger("answer_client").level == logging.DEBUG

    def test_log_level_setting_used_without_debug(
        self, test_settings, monkeypatch, restore_root_logger
    ):
        from answer_client import logging_config

        settings = test_settings.model_copy(update={"debug": False, "log_level": "WARNING"})
        monkeypatch.setattr(logging_config, "get_settings", lambda: settings)

        logging_config.configure_logging()

        assert logging.getLogger("answer_client").level == logging.WARNING
