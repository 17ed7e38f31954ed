"""Tests for structlog configuration."""

import pytest
import structlog

from scd_store.config.settings import Settings
from scd_store.observability.logging import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_dev_uses_console_renderer(self):
        configure_logging(Settings(_env_file=None, ENVIRONMENT="dev"))

        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)
        assert isinstance(config["logger_factory"], structlog.PrintLoggerFactory)

    def test_prod_uses_json_renderer(self):
        configure_logging(Settings(_env_file=None, ENVIRONMENT="prod"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_level_filtering(self, capsys):
        configure_logging(Settings(
            _env_file=None, ENVIRONMENT="prod", LOG_LEVEL="WARNING",
        ))
        log = structlog.get_logger("scd_store.test")

        log.info("hidden")
        log.warning("shown", table="user_scds")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert '"event": "shown"' in out
        assert '"table": "user_scds"' in out
