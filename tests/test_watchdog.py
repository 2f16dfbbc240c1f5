"""Tests for the watchdog timer and the console suppression switch."""

import asyncio
import sys
import unittest

from console_process import (
    ConsoleConfig,
    ConsoleState,
    Process,
    ProcessContext,
    ProcessState,
    resume_console,
    set_default_context,
    suppress_console,
)
from console_process.watchdog import WatchdogTimer

# Commands below run for SLOW_SECONDS, well past the reveal delay
REVEAL_MS = 100
SLOW_SECONDS = 0.6


def slow_command(code=0):
    script = f"import sys, time; print('step', 1, flush=True); time.sleep({SLOW_SECONDS}); sys.exit({code})"
    return [sys.executable, "-c", script]


class TestWatchdogTimer(unittest.TestCase):
    """Test the one-shot timer on its own."""

    def setUp(self):
        self.loop = asyncio.new_event_loop()
        self.calls = []

    def tearDown(self):
        self.loop.close()

    def run_for(self, seconds):
        self.loop.run_until_complete(asyncio.sleep(seconds))

    def test_fires_once_after_delay(self):
        timer = WatchdogTimer(self.loop, 0.05, lambda: self.calls.append("fired"))
        timer.start()
        self.assertTrue(timer.active)

        self.run_for(0.01)
        self.assertEqual(self.calls, [])

        self.run_for(0.1)
        self.assertEqual(self.calls, ["fired"])
        self.assertFalse(timer.active)
        self.assertTrue(timer.fired)

        timer.start()
        self.run_for(0.1)
        self.assertEqual(self.calls, ["fired"])

    def test_stop_prevents_firing(self):
        timer = WatchdogTimer(self.loop, 0.05, lambda: self.calls.append("fired"))
        timer.start()
        timer.stop()

        self.run_for(0.1)
        self.assertEqual(self.calls, [])
        self.assertFalse(timer.active)

    def test_stop_is_idempotent(self):
        timer = WatchdogTimer(self.loop, 0.05, lambda: None)
        timer.stop()
        timer.start()
        timer.stop()
        timer.stop()
        self.assertFalse(timer.active)


@unittest.skipIf(sys.platform == "win32", "POSIX event loop integration")
class WatchdogProcessTestCase(unittest.TestCase):
    def setUp(self):
        self.context = ProcessContext(config=ConsoleConfig(console_timeout_ms=REVEAL_MS))

    def tearDown(self):
        self.context.close()

    def process(self, cmd, **kwargs):
        return Process(cmd, context=self.context, **kwargs)

    def run_loop_for(self, seconds):
        self.context.loop.run_until_complete(asyncio.sleep(seconds))

    def use_reveal_delay(self, ms):
        self.context.close()
        self.context = ProcessContext(config=ConsoleConfig(console_timeout_ms=ms))


class TestConsoleReveal(WatchdogProcessTestCase):
    """Test when the watchdog reveals the console."""

    def test_slow_command_reveals_before_completion(self):
        """The elapsed-time line is shown while the command still runs."""
        seen_at_exit = []
        process = self.process(slow_command())
        process.spawn(on_exit=lambda result: seen_at_exit.append((self.context.console.visible, result.code)))
        result = process.wait()

        self.assertEqual(result.code, 0)
        self.assertEqual(seen_at_exit, [(True, 0)])
        self.assertRegex(self.context.console.sink.text, r"Command running for: \d+\.\d\d ms")

    def test_reveal_dumps_stdout_collected_so_far(self):
        self.context.suppress_console()
        process = self.process(slow_command())
        process.spawn()
        while "step 1" not in process.result.stdout and process.state is ProcessState.RUNNING:
            process.wait(timeout_ms=10)
        self.context.resume_console()
        process.wait()

        text = self.context.console.sink.text
        self.assertIn("step 1", text)
        self.assertLess(text.index("step 1"), text.index("Command running for:"))

    def test_verbose_command_marker_without_stdout_dump(self):
        """Verbose stdout is already mirrored live; only the marker is added."""
        process = self.process(slow_command(), verbose=True)
        process.spawn_blocking()

        text = self.context.console.sink.text
        self.assertEqual(text.count("step 1"), 1)
        self.assertIn("Command running for:", text)
        self.assertTrue(self.context.console.visible)

    def test_fast_success_never_reveals(self):
        self.use_reveal_delay(500)
        process = self.process(["echo", "hi"])
        process.spawn_blocking()
        self.run_loop_for(0.6)

        self.assertFalse(process.watchdog_active)
        self.assertFalse(self.context.console.visible)
        self.assertIsNone(self.context.console.sink)

    def test_failure_reveals_immediately(self):
        self.use_reveal_delay(60_000)
        process = self.process([sys.executable, "-c", "import sys; sys.exit(2)"])
        process.spawn_blocking()

        self.assertTrue(self.context.console.visible)
        self.assertNotIn("Command running for:", self.context.console.sink.text)

    def test_watchdog_released_on_exit(self):
        process = self.process(slow_command())
        process.spawn()
        self.assertTrue(process.watchdog_active)

        process.wait()
        self.assertFalse(process.watchdog_active)


class TestSuppression(WatchdogProcessTestCase):
    """Test the ACTIVE/SUPPRESSED switch."""

    def test_initially_active(self):
        self.assertIs(self.context.suppression.state, ConsoleState.ACTIVE)
        self.assertFalse(self.context.suppression.suppressed)

    def test_no_watchdog_when_spawned_suppressed(self):
        self.context.suppress_console()
        process = self.process(slow_command())
        process.spawn()

        self.assertFalse(process.watchdog_active)
        process.wait()
        self.assertFalse(self.context.console.visible)
        self.assertIsNone(self.context.console.sink)

    def test_failure_hidden_while_suppressed(self):
        self.context.suppress_console()
        self.process(["false"]).spawn_blocking()

        self.assertFalse(self.context.console.visible)

    def test_suppress_stops_watchdogs_and_hides(self):
        process = self.process(slow_command())
        process.spawn()
        self.context.console.show()
        self.assertTrue(process.watchdog_active)

        self.context.suppress_console()

        self.assertIs(self.context.suppression.state, ConsoleState.SUPPRESSED)
        self.assertFalse(process.watchdog_active)
        self.assertFalse(self.context.console.visible)
        process.wait()
        self.assertFalse(self.context.console.visible)

    def test_resume_arms_watchdog_for_running_processes(self):
        """Lifting suppression while a command still runs arms a fresh watchdog, which then reveals."""
        self.context.suppress_console()
        finished = self.process(["echo", "done"])
        finished.spawn_blocking()
        running = self.process(slow_command())
        running.spawn()
        running.wait(timeout_ms=REVEAL_MS * 2)
        self.assertFalse(self.context.console.visible)

        self.context.resume_console()

        self.assertIs(self.context.suppression.state, ConsoleState.ACTIVE)
        self.assertTrue(running.watchdog_active)
        self.assertFalse(finished.watchdog_active)
        self.assertIs(running.state, ProcessState.RUNNING)

        running.wait()
        self.assertTrue(self.context.console.visible)
        self.assertIn("Command running for:", self.context.console.sink.text)


@unittest.skipIf(sys.platform == "win32", "POSIX event loop integration")
class TestDefaultContextSwitch(unittest.TestCase):
    """Test the module-level suppress/resume operations."""

    def setUp(self):
        self.context = ProcessContext(config=ConsoleConfig(console_timeout_ms=REVEAL_MS))
        set_default_context(self.context)

    def tearDown(self):
        set_default_context(None)
        self.context.close()

    def test_module_functions_drive_default_context(self):
        suppress_console()
        process = Process(slow_command())
        process.spawn()
        self.assertIs(process.context, self.context)
        self.assertFalse(process.watchdog_active)

        resume_console()
        self.assertTrue(process.watchdog_active)
        process.wait()


if __name__ == "__main__":
    unittest.main()
