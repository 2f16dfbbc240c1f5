"""Test command line interface (CLI)."""

import subprocess
import sys
import unittest


class TestCLI(unittest.TestCase):
    """Test command line interface functionality."""

    def run_cli(self, *args):
        return subprocess.run(  # noqa: S603
            [sys.executable, "-m", "console_process.cli", *args],
            capture_output=True,
            text=True,
            check=False,
        )

    def test_imports(self) -> None:
        """Test command line interface (CLI)."""
        result = self.run_cli()
        self.assertEqual(result.returncode, 0)

    @unittest.skipIf(sys.platform == "win32", "POSIX event loop integration")
    def test_runs_command(self) -> None:
        result = self.run_cli("--", sys.executable, "-c", "print('hi')")
        self.assertEqual(result.returncode, 0)
        self.assertEqual(result.stdout.strip(), "hi")
        self.assertEqual(result.stderr, "")

    @unittest.skipIf(sys.platform == "win32", "POSIX event loop integration")
    def test_failure_shows_log(self) -> None:
        code = "import sys; sys.stderr.write('broken'); sys.exit(3)"
        result = self.run_cli("--", sys.executable, "-c", code)
        self.assertEqual(result.returncode, 3)
        self.assertIn("broken", result.stderr)

    def test_missing_executable(self) -> None:
        result = self.run_cli("--", "this_command_does_not_exist_12345")
        self.assertEqual(result.returncode, 127)


if __name__ == "__main__":
    unittest.main()
