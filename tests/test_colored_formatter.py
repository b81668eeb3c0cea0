"""Tests for ColoredFormatter."""

import logging
from io import StringIO
from unittest.mock import patch

import pytest

from discord_guild_agent.utils.logging import ColoredFormatter

RESET = "\033[0m"
DIM = "\033[2m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


def _make_record(level: int, message: str = "test") -> logging.LogRecord:
    return logging.LogRecord(
        name="discord_guild_agent.audit",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


def _tty_stream() -> StringIO:
    stream = StringIO()
    stream.isatty = lambda: True  # type: ignore[method-assign]
    return stream


class TestColoredFormatter:
    """Tests for ANSI color formatting."""

    @pytest.mark.parametrize("level", list(LEVEL_COLORS))
    def test_color_applied_per_level(self, monkeypatch, level):
        """Should apply the level's color on a TTY."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        fmt = ColoredFormatter("%(levelname)s | %(message)s", stream=_tty_stream())

        output = fmt.format(_make_record(level))

        assert LEVEL_COLORS[level] in output
        assert RESET in output

    def test_logger_name_dimmed(self, monkeypatch):
        """Should dim the logger name."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        fmt = ColoredFormatter("%(name)s | %(message)s", stream=_tty_stream())

        output = fmt.format(_make_record(logging.INFO))

        assert output.startswith(f"{DIM}discord_guild_agent.audit{RESET}")

    def test_no_color_when_no_color_env_set(self):
        """Should not color when NO_COLOR is set."""
        fmt = ColoredFormatter("%(levelname)s | %(message)s", stream=_tty_stream())

        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            output = fmt.format(_make_record(logging.INFO))

        assert "\033[" not in output

    def test_no_color_when_stream_not_tty(self, monkeypatch):
        """Should not color when the stream is redirected."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        fmt = ColoredFormatter("%(levelname)s | %(message)s", stream=StringIO())

        output = fmt.format(_make_record(logging.ERROR))

        assert output == "ERROR | test"

    def test_original_record_not_mutated(self, monkeypatch):
        """Should leave the caller's record untouched for other handlers."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        fmt = ColoredFormatter("%(levelname)s %(name)s", stream=_tty_stream())
        record = _make_record(logging.WARNING)

        fmt.format(record)

        assert record.levelname == "WARNING"
        assert record.name == "discord_guild_agent.audit"
