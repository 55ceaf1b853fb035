"""
Tests for message formatting, error description and line formatters.
"""

from datetime import datetime, timezone

import pytest

from arbor.formatters import (
    CompactFormatter,
    DetailedFormatter,
    compose_message,
    describe_error,
    format_message,
)
from arbor.records import Priority, SinkRecord


def _raise_nested():
    try:
        {}["key"]
    except KeyError as inner:
        raise RuntimeError("wrapped") from inner


class TestFormatMessage:
    def test_passthrough_without_args(self):
        assert format_message("te%st", ()) == "te%st"

    def test_positional_args(self):
        assert format_message("%s=%d", ("n", 3)) == "n=3"

    def test_mapping_arg(self):
        assert format_message("%(who)s waved", ({"who": "ada"},)) == "ada waved"

    def test_bad_args_raise(self):
        with pytest.raises(TypeError):
            format_message("%d", ("x",))


class TestDescribeError:
    def test_unraised_error(self):
        assert describe_error(ValueError("plain")) == "ValueError: plain"

    def test_includes_stack_and_cause(self):
        try:
            _raise_nested()
        except RuntimeError as exc:
            text = describe_error(exc)

        assert text.startswith("Traceback (most recent call last):")
        assert "KeyError: 'key'" in text
        assert "direct cause" in text
        assert "_raise_nested" in text
        assert text.endswith("RuntimeError: wrapped")


class TestComposeMessage:
    def test_without_error(self):
        assert compose_message("hello", None) == "hello"

    def test_with_error(self):
        assert compose_message("hello", ValueError("v")) == "hello\nValueError: v"

    def test_empty_message_with_error(self):
        assert compose_message("", ValueError("v")) == "\nValueError: v"


class TestLineFormatters:
    def _record(self):
        ts = datetime(2026, 2, 12, 14, 32, 5, 123456, tzinfo=timezone.utc)
        return SinkRecord(
            timestamp=ts,
            priority=Priority.DEBUG,
            level_name="DEBUG",
            tag="MainActivity",
            message="Hello",
            thread_name="worker-1",
        )

    def test_compact(self):
        assert CompactFormatter().format(self._record()) == "14:32:05 D/MainActivity: Hello"

    def test_compact_unknown_priority(self):
        ts = datetime(2026, 2, 12, 14, 32, 5, tzinfo=timezone.utc)
        record = SinkRecord(
            timestamp=ts, priority=10, level_name="10", tag="Tag", message="msg",
        )
        assert CompactFormatter().format(record) == "14:32:05 10/Tag: msg"

    def test_detailed(self):
        result = DetailedFormatter().format(self._record())
        assert result == "2026-02-12 14:32:05.123456 [  DEBUG] [worker-1] MainActivity: Hello"

    def test_detailed_without_thread(self):
        record = SinkRecord(
            timestamp=datetime.now(timezone.utc), priority=Priority.INFO,
            level_name="INFO", tag="Tag", message="msg",
        )
        result = DetailedFormatter().format(record)
        assert "[]" not in result
        assert result.endswith("[   INFO] Tag: msg")
