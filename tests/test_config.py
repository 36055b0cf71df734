import tempfile
import unittest
from pathlib import Path

from flashsum.config.config import load_config, validate_config


class ConfigTests(unittest.TestCase):
    def test_packaged_defaults(self) -> None:
        cfg = validate_config(load_config())
        self.assertEqual(cfg["drill"]["digits_per_number"], 1)
        self.assertEqual(cfg["drill"]["number_duration_s"], 0.5)
        self.assertEqual(cfg["drill"]["total_numbers"], 5)
        self.assertFalse(cfg["auto_repeat"]["enabled"])
        self.assertFalse(cfg["audio"]["enabled"])
        self.assertEqual(cfg["ui"]["color_scheme"], "midnight")
        self.assertEqual(cfg["history"]["capacity"], 50)

    def test_empty_config_gets_every_section(self) -> None:
        cfg = validate_config({})
        for section in ("drill", "auto_repeat", "audio", "ui", "history"):
            self.assertIn(section, cfg)
        self.assertEqual(cfg["auto_repeat"]["delay_s"], 5)

    def test_unsupported_values_fall_back(self) -> None:
        raw = {
            "ui": {"color_scheme": "plaid", "theme_mode": "sepia"},
            "audio": {"backend": "midi"},
            "history": {"capacity": "lots"},
        }
        with self.assertLogs("flashsum.config", level="WARNING") as logs:
            cfg = validate_config(raw)
        self.assertEqual(cfg["ui"]["color_scheme"], "midnight")
        self.assertEqual(cfg["ui"]["theme_mode"], "dark")
        self.assertEqual(cfg["audio"]["backend"], "fluidsynth")
        self.assertEqual(cfg["history"]["capacity"], 50)
        self.assertEqual(len(logs.output), 4)

    def test_missing_soundfont_disables_audio(self) -> None:
        raw = {"audio": {"enabled": True, "soundfont_path": "/nonexistent/font.sf2"}}
        with self.assertLogs("flashsum.config", level="WARNING"):
            cfg = validate_config(raw)
        self.assertFalse(cfg["audio"]["enabled"])

    def test_load_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "drill.yml"
            path.write_text("drill:\n  digits_per_number: 4\n  total_numbers: 12\n", encoding="utf-8")
            cfg = validate_config(load_config(str(path)))
        self.assertEqual(cfg["drill"]["digits_per_number"], 4)
        self.assertEqual(cfg["drill"]["total_numbers"], 12)
        self.assertEqual(cfg["drill"]["number_duration_s"], 0.5)


if __name__ == "__main__":
    unittest.main()
