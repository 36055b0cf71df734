from __future__ import annotations

"""Configuration loading and validation for flashsum.

This module loads YAML configuration, applies defaults, and falls back to a
sane value (with a warning) wherever an enumeration is not supported.
Numeric drill parameters are left alone here; the session normalizer clamps
them when a drill starts.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger("flashsum.config")

ALLOWED_BACKENDS = {"fluidsynth"}
ALLOWED_COLOR_SCHEMES = {"midnight", "ivory", "crimson", "aqua", "violet", "amber"}
ALLOWED_THEME_MODES = {"dark", "light"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    cfg.setdefault("drill", {})
    cfg.setdefault("auto_repeat", {})
    cfg.setdefault("audio", {})
    cfg.setdefault("ui", {})
    cfg.setdefault("history", {})

    drill = cfg["drill"]
    auto_repeat = cfg["auto_repeat"]
    audio = cfg["audio"]
    ui = cfg["ui"]
    history = cfg["history"]

    drill.setdefault("digits_per_number", 1)
    drill.setdefault("number_duration_s", 0.5)
    drill.setdefault("delay_between_numbers_s", 0.0)
    drill.setdefault("total_numbers", 5)
    drill.setdefault("allow_negative_numbers", False)

    auto_repeat.setdefault("enabled", False)
    auto_repeat.setdefault("repeats", 2)
    auto_repeat.setdefault("delay_s", 5)

    audio.setdefault("enabled", False)
    audio.setdefault("backend", "fluidsynth")
    audio.setdefault("soundfont_path", "./soundfonts/GrandPiano.sf2")
    audio.setdefault("sample_rate", 44100)
    audio.setdefault("gain", 0.5)
    audio.setdefault("program", 0)

    ui.setdefault("color_scheme", "midnight")
    ui.setdefault("theme_mode", "dark")
    ui.setdefault("show_running_sum", False)

    history.setdefault("capacity", 50)

    backend = audio.get("backend")
    if backend not in ALLOWED_BACKENDS:
        logger.warning("Unsupported audio backend '%s', falling back to 'fluidsynth'.", backend)
        audio["backend"] = "fluidsynth"

    scheme = ui.get("color_scheme")
    if scheme not in ALLOWED_COLOR_SCHEMES:
        logger.warning("Unsupported color_scheme '%s', using 'midnight'.", scheme)
        ui["color_scheme"] = "midnight"

    mode = ui.get("theme_mode")
    if mode not in ALLOWED_THEME_MODES:
        logger.warning("Unsupported theme_mode '%s', using 'dark'.", mode)
        ui["theme_mode"] = "dark"

    # Sound is optional: a missing SoundFont disables it instead of aborting.
    if audio["enabled"] and audio["backend"] == "fluidsynth":
        sf_path = Path(str(audio.get("soundfont_path", "")))
        if not sf_path.exists():
            logger.warning("SoundFont not found at '%s'; sound cues disabled.", sf_path)
            audio["enabled"] = False

    try:
        history["capacity"] = max(1, int(history.get("capacity", 50)))
    except (TypeError, ValueError):
        logger.warning("Invalid history capacity '%s', using 50.", history.get("capacity"))
        history["capacity"] = 50

    return cfg
