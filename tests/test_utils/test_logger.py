from __future__ import annotations

import io
import logging
from typing import Iterator

import pytest

from depfinder.utils.logger import (
    ColoredFormatter,
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)


class TTYStream(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Leave the depfinder logger unconfigured after every test."""
    yield
    disable_logging()


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger naming."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            (None, "depfinder"),
            ("depfinder", "depfinder"),
            ("http", "depfinder.http"),
            ("depfinder.core.feeds", "depfinder.core.feeds"),
        ],
    )
    def test_names_are_namespaced(self, name, expected: str) -> None:
        assert get_logger(name).name == expected

    def test_same_logger_for_short_and_full_name(self) -> None:
        assert get_logger("http") is get_logger("depfinder.http")


@pytest.mark.unit
class TestVerbosityToLevel:
    @pytest.mark.parametrize(
        "verbose, level",
        [(-1, logging.WARNING), (0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_mapping(self, verbose: int, level: int) -> None:
        assert verbosity_to_level(verbose) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging / disable_logging."""

    def test_records_reach_stream(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.DEBUG, stream=stream)

        get_logger("graph_builder").debug("Expanding %s", "A@1.0.0")

        assert "DEBUG: Expanding A@1.0.0" in stream.getvalue()
        assert is_logging_configured() is True

    def test_level_filters_records(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.WARNING, stream=stream)

        get_logger("feeds").info("hidden")
        get_logger("feeds").warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_verbose_format_includes_logger_name(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.INFO, verbose=True, stream=stream)

        get_logger("feeds").info("hello")

        assert "depfinder.feeds - INFO - hello" in stream.getvalue()

    def test_repeated_setup_keeps_one_handler(self) -> None:
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger("depfinder").handlers) == 1

    def test_disable_logging(self) -> None:
        stream = io.StringIO()
        setup_logging(stream=stream)
        disable_logging()

        get_logger("feeds").error("dropped")

        assert stream.getvalue() == ""
        assert is_logging_configured() is False


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("depfinder", logging.ERROR, __file__, 1, "boom", None, None)

    def test_no_color_for_non_tty(self) -> None:
        formatter = ColoredFormatter("%(levelname)s %(message)s", stream=io.StringIO())

        assert formatter.format(self._record()) == "ERROR boom"

    def test_color_on_tty_leaves_record_untouched(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test coloring does not leak into the shared record."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        stream = TTYStream()
        formatter = ColoredFormatter("%(levelname)s %(message)s", stream=stream)
        record = self._record()

        assert formatter.format(record) == "\033[31mERROR\033[0m boom"
        assert record.levelname == "ERROR"

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        stream = TTYStream()
        formatter = ColoredFormatter("%(levelname)s", stream=stream)

        assert formatter.format(self._record()) == "ERROR"
