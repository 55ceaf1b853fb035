"""
Tests for sinks: stdlib logging bridge, terminal and memory.
"""

import io
import logging
from unittest.mock import patch

from arbor.debug_tree import DebugTree
from arbor.formatters import DetailedFormatter
from arbor.records import Priority
from arbor.sinks import LoggingSink, MemorySink, TerminalSink


# ═══════════════════════════════════════════════════════════════════
#  LoggingSink
# ═══════════════════════════════════════════════════════════════════

class TestLoggingSink:
    def test_logger_name_from_tag(self, caplog):
        caplog.set_level(logging.DEBUG)
        LoggingSink().write(Priority.INFO, "Network", "connected")

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.name == "arbor.Network"
        assert record.levelno == logging.INFO
        assert record.getMessage() == "connected"

    def test_custom_prefix(self, caplog):
        caplog.set_level(logging.DEBUG)
        LoggingSink(logger_prefix="myapp").write(Priority.ERROR, "Db", "down")
        assert caplog.records[0].name == "myapp.Db"
        assert caplog.records[0].levelno == logging.ERROR

    def test_empty_prefix(self):
        assert LoggingSink(logger_prefix="").logger_for("Bare").name == "Bare"

    def test_verbose_below_debug(self, caplog):
        caplog.set_level(logging.DEBUG)
        LoggingSink().write(Priority.VERBOSE, "Chatty", "noise")
        assert caplog.records == []

        caplog.set_level(1)
        LoggingSink().write(Priority.VERBOSE, "Chatty", "noise")
        assert caplog.records[0].levelno == 5

    def test_unknown_priority_maps_to_nearest_lower(self, caplog):
        caplog.set_level(1)
        LoggingSink().write(8, "Custom", "above assert")
        LoggingSink().write(1, "Custom", "below verbose")
        assert [r.levelno for r in caplog.records] == [logging.CRITICAL, 5]

    def test_percent_not_interpreted(self, caplog):
        caplog.set_level(logging.DEBUG)
        LoggingSink().write(Priority.INFO, "Tag", "100% done %s")
        assert caplog.records[0].getMessage() == "100% done %s"

    def test_debug_tree_default_sink(self, caplog):
        caplog.set_level(logging.DEBUG)
        DebugTree().info("through logging")
        assert caplog.records[0].name == "arbor.TestLoggingSink"


# ═══════════════════════════════════════════════════════════════════
#  TerminalSink
# ═══════════════════════════════════════════════════════════════════

class TestTerminalSink:
    def test_emit_to_stdout(self, capsys):
        TerminalSink(color=False).write(Priority.INFO, "Main", "hello terminal")
        captured = capsys.readouterr()
        assert "I/Main: hello terminal" in captured.out
        assert captured.err == ""

    def test_error_to_stderr(self, capsys):
        TerminalSink(color=False).write(Priority.ERROR, "Main", "bad thing")
        captured = capsys.readouterr()
        assert "E/Main: bad thing" in captured.err
        assert captured.out == ""

    def test_color_codes_applied(self):
        sink = TerminalSink(color=True)
        with patch("sys.stdout", new_callable=io.StringIO) as mock:
            sink.write(Priority.WARN, "Main", "caution")
            output = mock.getvalue()
        assert "\033[33m" in output  # Yellow for WARN
        assert "\033[0m" in output   # Reset

    def test_unknown_priority_falls_back_to_lower_color(self):
        sink = TerminalSink()
        assert sink._get_color(99) == TerminalSink.COLORS[Priority.ASSERT]
        assert sink._get_color(1) == ""

    def test_custom_formatter(self, capsys):
        TerminalSink(color=False, formatter=DetailedFormatter()).write(Priority.DEBUG, "T", "m")
        assert "[  DEBUG]" in capsys.readouterr().out


# ═══════════════════════════════════════════════════════════════════
#  MemorySink
# ═══════════════════════════════════════════════════════════════════

class TestMemorySink:
    def test_ring_buffer(self):
        sink = MemorySink(capacity=5)
        for i in range(10):
            sink.write(Priority.INFO, "T", f"msg {i}")
        assert sink.count == 5
        assert sink.capacity == 5
        recent = sink.get_recent(n=3)
        assert [r.message for r in recent] == ["msg 7", "msg 8", "msg 9"]

    def test_filter_by_tag(self):
        sink = MemorySink()
        sink.write(Priority.INFO, "A", "one")
        sink.write(Priority.INFO, "B", "two")
        sink.write(Priority.INFO, "A", "three")
        assert [r.message for r in sink.get_recent(tag="A")] == ["one", "three"]

    def test_get_recent_zero(self):
        sink = MemorySink()
        sink.write(Priority.INFO, "A", "one")
        assert sink.get_recent(n=0) == []

    def test_clear(self):
        sink = MemorySink()
        sink.write(Priority.INFO, "A", "one")
        sink.clear()
        assert sink.count == 0
        assert sink.messages == []
