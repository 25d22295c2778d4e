"""Unit tests for logging setup."""

import io
import json
import logging

import pytest

from pagerender.utils.logging import (
    HumanFormatter,
    LogMode,
    PagerenderLogger,
    configure_from_cli,
    get_logger,
    setup_logging,
)


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_human_mode(self, stream: io.StringIO) -> None:
        """Test human-readable output."""
        setup_logging(LogMode.HUMAN, stream=stream)

        get_logger("pagerender.test").info("hello %s", "world")

        assert stream.getvalue() == "[INFO] hello world\n"

    def test_verbose_mode(self, stream: io.StringIO) -> None:
        """Test verbose output includes the logger name."""
        setup_logging(LogMode.VERBOSE, level=logging.DEBUG, stream=stream)

        get_logger("pagerender.test").debug("details")

        assert "[DEBUG][" in stream.getvalue()
        assert "pagerender.test: details" in stream.getvalue()

    def test_json_mode_with_fields(self, stream: io.StringIO) -> None:
        """Test JSON output merges structured fields."""
        setup_logging(LogMode.JSON, stream=stream)

        get_logger("pagerender.test").structured(
            logging.INFO, "rendered %s", "home", template="home.page.tmpl", bytes=19
        )

        entry = json.loads(stream.getvalue())
        assert entry["level"] == "INFO"
        assert entry["logger"] == "pagerender.test"
        assert entry["msg"] == "rendered home"
        assert entry["template"] == "home.page.tmpl"
        assert entry["bytes"] == 19

    def test_level_filters(self, stream: io.StringIO) -> None:
        """Test that messages below the level are dropped."""
        setup_logging(LogMode.HUMAN, level=logging.WARNING, stream=stream)

        get_logger("pagerender.test").info("hidden")
        get_logger("pagerender.test").warning("shown")

        assert stream.getvalue() == "[WARNING] shown\n"

    def test_setup_replaces_handlers(self, stream: io.StringIO) -> None:
        """Test that repeated setup does not duplicate output."""
        setup_logging(stream=stream)
        setup_logging(stream=stream)

        get_logger("pagerender.test").info("once")

        assert stream.getvalue().count("once") == 1


class TestLogger:
    """Tests for the logger class."""

    def test_get_logger_class(self) -> None:
        """Test that pagerender loggers support structured logging."""
        assert isinstance(get_logger("pagerender.other"), PagerenderLogger)

    def test_human_formatter_without_colors(self) -> None:
        """Test plain formatting."""
        record = logging.LogRecord("pagerender", logging.ERROR, __file__, 1, "boom", (), None)

        assert HumanFormatter(use_colors=False).format(record) == "[ERROR] boom"


class TestConfigureFromCli:
    """Tests for configure_from_cli."""

    @pytest.mark.parametrize(
        ("kwargs", "level"),
        [
            ({}, logging.INFO),
            ({"verbose": True}, logging.DEBUG),
            ({"quiet": True}, logging.WARNING),
        ],
    )
    def test_levels(self, kwargs: dict, level: int) -> None:
        """Test that CLI flags pick the log level."""
        configure_from_cli(**kwargs)

        assert logging.getLogger("pagerender").level == level
