# services/api/models/appearance.py
from __future__ import annotations

from enum import Enum


class AppearanceStyle(str, Enum):
    """Concrete interface style the reader renders with."""
    LIGHT = "light"
    DARK = "dark"


class AppearanceMode(str, Enum):
    """User-facing appearance preference; `automatic` follows the host default."""
    AUTOMATIC = "automatic"
    LIGHT = "light"
    DARK = "dark"

    def resolve(self, default: AppearanceStyle = AppearanceStyle.LIGHT) -> AppearanceStyle:
        if self is AppearanceMode.LIGHT:
            return AppearanceStyle.LIGHT
        if self is AppearanceMode.DARK:
            return AppearanceStyle.DARK
        return default
