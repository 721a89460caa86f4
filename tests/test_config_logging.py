"""Tests for settings and logging configuration."""

import json
import logging
import sys

import pytest

from finflow.config import DEFAULT_DB_PATH, load_settings
from finflow.logging_config import JSONFormatter, get_logger, setup_logging

ENV_VARS = [
    "FINFLOW_DB_PATH",
    "FINFLOW_LOG_LEVEL",
    "FINFLOW_LOG_FILE",
    "FINFLOW_SCHEDULE_HOUR",
    "FINFLOW_SCHEDULE_MINUTE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = load_settings()
        assert settings.database_path == str(DEFAULT_DB_PATH)
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert (settings.schedule_hour, settings.schedule_minute) == (5, 0)

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FINFLOW_DB_PATH", str(tmp_path / "money.db"))
        monkeypatch.setenv("FINFLOW_LOG_LEVEL", "debug")
        monkeypatch.setenv("FINFLOW_LOG_FILE", str(tmp_path / "finflow.log"))
        monkeypatch.setenv("FINFLOW_SCHEDULE_HOUR", "23")
        monkeypatch.setenv("FINFLOW_SCHEDULE_MINUTE", "45")

        settings = load_settings()
        assert settings.database_path == str(tmp_path / "money.db")
        assert settings.log_level == "DEBUG"
        assert settings.log_file == str(tmp_path / "finflow.log")
        assert (settings.schedule_hour, settings.schedule_minute) == (23, 45)

    @pytest.mark.parametrize(
        "name, value",
        [
            ("FINFLOW_SCHEDULE_HOUR", "24"),
            ("FINFLOW_SCHEDULE_HOUR", "five"),
            ("FINFLOW_SCHEDULE_MINUTE", "-1"),
        ],
    )
    def test_invalid_schedule(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError, match=name):
            load_settings()


class TestJSONFormatter:
    def make_record(self, exc_info=None):
        return logging.LogRecord(
            name="finflow.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Posted %s",
            args=("rent",),
            exc_info=exc_info,
        )

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(self.make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "finflow.test"
        assert data["message"] == "Posted rent"
        assert data["line"] == 10
        assert "timestamp" in data
        assert "extra" not in data

    def test_extra_fields(self):
        record = self.make_record()
        record.payment_id = 7
        data = json.loads(JSONFormatter().format(record))
        assert data["extra"] == {"payment_id": 7}

    def test_exception_info(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = self.make_record(exc_info=sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert data["exception"]["type"] == "RuntimeError"
        assert data["exception"]["message"] == "boom"
        assert "Traceback" in data["exception"]["traceback"]


class TestSetupLogging:
    def test_console_and_file_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "finflow.log"
        logger = setup_logging("DEBUG", str(log_file), console_level="WARNING")

        assert logger.name == "finflow"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert logger.handlers[0].level == logging.WARNING

        get_logger("finflow.domain.recurring").info("Posted", extra={"payment_id": 3})
        for handler in logger.handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        posted = [line for line in lines if line["message"] == "Posted"]
        assert posted[0]["extra"] == {"payment_id": 3}

    def test_repeated_setup_replaces_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1


def test_get_logger_namespaces_names():
    assert get_logger("finflow.cache").name == "finflow.cache"
    assert get_logger("finflow").name == "finflow"
    assert get_logger("plugins.x").name == "finflow.plugins.x"
