from __future__ import annotations

"""App settings (theme): kept in memory, independent of session state."""

import threading
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Literal, Optional

from pydantic import TypeAdapter, ValidationError

from .events import APP_SETTINGS_CHANGED

ColorScheme = Literal["midnight", "ivory", "crimson", "aqua", "violet", "amber"]
ThemeMode = Literal["dark", "light"]

_COLOR_SCHEME = TypeAdapter(ColorScheme)
_THEME_MODE = TypeAdapter(ThemeMode)


@dataclass(frozen=True)
class AppSettings:
    color_scheme: str = "midnight"
    theme_mode: str = "dark"

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


class SettingsStore:
    def __init__(self, emit: Optional[Callable[[str, Any], None]] = None, initial: Optional[AppSettings] = None) -> None:
        self._emit = emit
        self._settings = initial or AppSettings()
        self._lock = threading.Lock()

    def get(self) -> AppSettings:
        with self._lock:
            return self._settings

    def set_color_scheme(self, color_scheme: str) -> AppSettings:
        value = _validated(_COLOR_SCHEME, color_scheme, "color_scheme")
        return self._update(color_scheme=value)

    def set_theme_mode(self, theme_mode: str) -> AppSettings:
        value = _validated(_THEME_MODE, theme_mode, "theme_mode")
        return self._update(theme_mode=value)

    def _update(self, **changes: str) -> AppSettings:
        with self._lock:
            self._settings = replace(self._settings, **changes)
            updated = self._settings
        if self._emit is not None:
            self._emit(APP_SETTINGS_CHANGED, updated)
        return updated


def _validated(adapter: TypeAdapter, value: str, name: str) -> str:
    try:
        return adapter.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"Unsupported {name} '{value}'") from e
