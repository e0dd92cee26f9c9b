# services/api/core/colors.py
from __future__ import annotations

import colorsys
from typing import Optional, Tuple

from adapters.base import ResolvedColor
from adapters.reader import BlendMode
from models.geometry import round_half_away
from models.annotation import is_hex_color
from models.appearance import AppearanceStyle
from settings import AnnotationsConfig


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """'#rrggbb' -> (r, g, b) with components in [0, 1]."""
    if not is_hex_color(value):
        raise ValueError(f"Invalid hex color: {value!r}")
    return tuple(int(value[i:i + 2], 16) / 255 for i in (1, 3, 5))  # type: ignore[return-value]


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#" + "".join(f"{int(round_half_away(max(0.0, min(1.0, c)) * 255)):02x}" for c in (r, g, b))


class AnnotationColorGenerator:
    """
    Default ColorResolver.

    Non-highlight annotations are drawn opaque in their base color.
    Highlights are translucent: multiplied onto the page in light mode,
    and more saturated and lightened in dark mode so they stay visible on
    inverted pages.
    """

    def __init__(self, config: Optional[AnnotationsConfig] = None):
        self.config = config or AnnotationsConfig()

    def resolve(self, base_color: str, is_highlight: bool, appearance: AppearanceStyle) -> ResolvedColor:
        color = base_color.lower()
        if not is_highlight:
            return ResolvedColor(color=color, alpha=1.0, blend_mode=None)

        if appearance == AppearanceStyle.DARK:
            hue, saturation, value = colorsys.rgb_to_hsv(*hex_to_rgb(color))
            adjusted = colorsys.hsv_to_rgb(hue, min(1.0, saturation * 1.2), value)
            return ResolvedColor(
                color=rgb_to_hex(*adjusted),
                alpha=self.config.highlight_dark_opacity,
                blend_mode=BlendMode.LIGHTEN,
            )

        return ResolvedColor(
            color=color,
            alpha=self.config.highlight_opacity,
            blend_mode=BlendMode.MULTIPLY,
        )
