import io
import json
import unittest
from contextlib import redirect_stdout

from flashsum import __version__
from flashsum.app.cli import main


class CliTests(unittest.TestCase):
    def test_version(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(["--version"]), 0)
        self.assertEqual(out.getvalue().strip(), f"flashsum {__version__}")

    def test_show_config_clamps(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["show-config", "--digits", "40", "--duration", "0.04", "--count", "7", "--repeat", "3", "--repeat-delay", "1"])
        self.assertEqual(code, 0)
        shown = json.loads(out.getvalue())
        self.assertEqual(shown["effective_config"]["digits_per_number"], 18)
        self.assertEqual(shown["effective_config"]["number_duration_s"], 0.1)
        self.assertEqual(shown["effective_config"]["total_numbers"], 7)
        self.assertEqual(shown["effective_auto_repeat"], {"enabled": True, "repeats": 3, "delay_s": 5.0})

    def test_show_config_defaults(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            main(["show-config"])
        shown = json.loads(out.getvalue())
        self.assertEqual(shown["effective_config"]["total_numbers"], 5)
        self.assertIsNone(shown["effective_auto_repeat"])

    def test_no_command_prints_help(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main([]), 2)
        self.assertIn("flashsum", out.getvalue())


if __name__ == "__main__":
    unittest.main()
