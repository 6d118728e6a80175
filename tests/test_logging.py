"""Tests for logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from docstore_qa.config import Environment, Settings
from docstore_qa.logging_config import (
    NOISY_LOGGERS,
    DevFormatter,
    JSONFormatter,
    get_logger,
    setup_logging,
)


def _record(
    msg: str,
    level: int = logging.INFO,
    name: str = "docstore_qa.retrieval.engine",
    exc_info: object = None,
    **extra: object,
) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="/app/docstore_qa/retrieval/engine.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,  # type: ignore[arg-type]
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_basic_fields(self) -> None:
        """Level, logger, message and timestamp are present."""
        data = json.loads(JSONFormatter().format(_record("Indexed 2 documents")))

        assert data["level"] == "INFO"
        assert data["logger"] == "docstore_qa.retrieval.engine"
        assert data["message"] == "Indexed 2 documents"
        assert "timestamp" in data

    def test_file_location(self) -> None:
        """Log includes file and line information."""
        data = json.loads(JSONFormatter().format(_record("x", level=logging.ERROR)))

        assert data["file"] == "/app/docstore_qa/retrieval/engine.py:42"

    def test_exception(self) -> None:
        """Exception info is included in output."""
        try:
            raise ConnectionError("qdrant unreachable")
        except ConnectionError:
            exc_info = sys.exc_info()

        data = json.loads(
            JSONFormatter().format(_record("Retrieval failed", exc_info=exc_info))
        )

        assert "ConnectionError" in data["exception"]

    def test_extra_context(self) -> None:
        """Values passed through extra= land under context."""
        record = _record("Indexed documents", source_collection="employees", points=2)

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"source_collection": "employees", "points": 2}

    def test_no_context_without_extra(self) -> None:
        """Plain records carry no context key."""
        data = json.loads(JSONFormatter().format(_record("Plain")))

        assert "context" not in data

    def test_unserializable_context(self) -> None:
        """Context values JSON cannot encode use their string form."""
        data = json.loads(JSONFormatter().format(_record("x", reason=ValueError("bad"))))

        assert data["context"]["reason"] == "bad"


class TestDevFormatter:
    """Tests for development formatter."""

    def test_readable_line(self) -> None:
        """Development lines show level, logger and message."""
        output = DevFormatter().format(
            _record(
                "Remote embedding failed, using fallback",
                level=logging.WARNING,
                name="docstore_qa.embeddings.service",
            )
        )

        assert "WARNING" in output
        assert "docstore_qa.embeddings.service" in output
        assert "Remote embedding failed, using fallback" in output


class TestSetupLogging:
    """Tests for logging setup."""

    def test_returns_root_logger(self) -> None:
        """setup_logging returns root logger."""
        assert setup_logging(level="INFO", json_output=False) is logging.getLogger()

    def test_formatter_follows_environment(self) -> None:
        """JSON outside development, readable lines in development."""
        for environment, formatter in (
            (Environment.PRODUCTION, JSONFormatter),
            (Environment.STAGING, JSONFormatter),
            (Environment.DEVELOPMENT, DevFormatter),
        ):
            with patch(
                "docstore_qa.logging_config.get_settings",
                return_value=Settings(environment=environment),
            ):
                setup_logging()

            handlers = logging.getLogger().handlers
            assert len(handlers) == 1
            assert isinstance(handlers[0].formatter, formatter)

    def test_json_output_override(self) -> None:
        """JSON output can be forced in development."""
        with patch(
            "docstore_qa.logging_config.get_settings",
            return_value=Settings(environment=Environment.DEVELOPMENT),
        ):
            setup_logging(json_output=True)

        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_level_from_settings(self) -> None:
        """Without an override the configured level is used."""
        with patch(
            "docstore_qa.logging_config.get_settings",
            return_value=Settings(log_level="ERROR"),
        ):
            setup_logging(json_output=False)

        assert logging.getLogger().level == logging.ERROR

    def test_level_override(self) -> None:
        """Log level can be overridden."""
        setup_logging(level="DEBUG", json_output=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_client_loggers_quieted(self) -> None:
        """HTTP and database client loggers stay at WARNING."""
        setup_logging(level="DEBUG", json_output=False)
        assert set(NOISY_LOGGERS) >= {"httpx", "httpcore", "pymongo"}
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestGetLogger:
    """Tests for named logger retrieval."""

    def test_returns_named_logger(self) -> None:
        """get_logger returns a logger with the given name."""
        assert get_logger("docstore_qa.system").name == "docstore_qa.system"

    def test_inherits_root_level(self) -> None:
        """Module loggers inherit the root level."""
        setup_logging(level="WARNING", json_output=False)
        assert get_logger("docstore_qa.rag.synthesizer").getEffectiveLevel() == logging.WARNING
