"""Tests for the console sink ownership and text formatting."""

import io
import unittest

from console_process.console import Console, ScrollbackConsole


class _Emitter:
    """Stand-in for a spawned Process: only the attributes the console reads."""

    def __init__(self, span_id, cmd, pid=None):
        self.span_id = span_id
        self.pid = pid
        self._cmd = cmd

    def get_command_str(self):
        return " ".join(self._cmd)


class TestConsole(unittest.TestCase):
    """Test lazy creation, span headers and visibility."""

    def test_sink_created_lazily(self):
        console = Console()
        self.assertIsNone(console.sink)
        self.assertFalse(console.visible)

        console.append_log(_Emitter(1, ["git", "status"]), "clean\n")
        self.assertIsInstance(console.sink, ScrollbackConsole)

    def test_hide_does_not_create_sink(self):
        console = Console()
        console.hide()
        self.assertIsNone(console.sink)

    def test_show_creates_sink(self):
        console = Console()
        console.show()
        self.assertTrue(console.visible)

    def test_header_written_on_span_change(self):
        console = Console()
        status = _Emitter(10, ["git", "status"])
        fetch = _Emitter(11, ["git", "fetch", "origin"])

        console.append_log(status, "one")
        console.append_log(status, "two")
        console.append_log(fetch, "three")
        console.append_log(status, "four")

        self.assertEqual(
            console.sink.text,
            "\r\n> git status\r\none"
            "two"
            "\r\n> git fetch origin\r\nthree"
            "\r\n> git status\r\nfour",
        )

    def test_reused_pid_gets_its_own_header(self):
        """A later command that receives an earlier command's pid still starts a new span."""
        console = Console()
        console.append_log(_Emitter(1, ["git", "status"], pid=4242), "one")
        console.append_log(_Emitter(2, ["git", "status"], pid=4242), "two")

        self.assertEqual(console.sink.text.count("> git status"), 2)

    def test_newlines_rewritten_to_crlf(self):
        console = Console()
        console.append_log(_Emitter(1, ["ls"]), "a\nb\r\nc\n")

        self.assertTrue(console.sink.text.endswith("a\r\nb\r\nc\r\n"))
        self.assertNotIn("\r\r\n", console.sink.text)

    def test_close_clears_identity(self):
        """After the user closes the console, the next append recreates it with a fresh span."""
        console = Console()
        emitter = _Emitter(5, ["git", "log"])
        console.append_log(emitter, "before")
        first = console.sink

        console.close()
        self.assertIsNone(console.sink)

        console.append_log(emitter, "after")
        self.assertIsNot(console.sink, first)
        self.assertEqual(console.sink.text, "\r\n> git log\r\nafter")

    def test_custom_sink_factory(self):
        sinks = []

        def factory():
            sink = ScrollbackConsole()
            sinks.append(sink)
            return sink

        console = Console(factory)
        console.show()
        console.close()
        console.show()
        self.assertEqual(len(sinks), 2)


class TestScrollbackConsole(unittest.TestCase):
    """Test the default sink."""

    def test_hidden_sink_buffers(self):
        stream = io.StringIO()
        sink = ScrollbackConsole(stream)
        sink.append("buffered")

        self.assertEqual(stream.getvalue(), "")
        self.assertEqual(sink.text, "buffered")

    def test_show_flushes_scrollback_then_echoes(self):
        stream = io.StringIO()
        sink = ScrollbackConsole(stream)
        sink.append("early ")
        sink.show()
        sink.append("late")

        self.assertEqual(stream.getvalue(), "early late")
        self.assertEqual(sink.show_count, 1)

    def test_hide_keeps_content(self):
        sink = ScrollbackConsole()
        sink.append("kept")
        sink.show()
        sink.hide()

        self.assertFalse(sink.visible)
        self.assertEqual(sink.text, "kept")

    def test_show_twice_writes_once(self):
        stream = io.StringIO()
        sink = ScrollbackConsole(stream)
        sink.append("x")
        sink.show()
        sink.show()

        self.assertEqual(stream.getvalue(), "x")
        self.assertEqual(sink.show_count, 2)


if __name__ == "__main__":
    unittest.main()
