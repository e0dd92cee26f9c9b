"""
Tests for annotation color resolution.

Run with: pytest tests/test_colors.py -v
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import colorsys

import pytest

from adapters.reader import BlendMode
from core.colors import AnnotationColorGenerator, hex_to_rgb, rgb_to_hex
from models.appearance import AppearanceStyle
from settings import AnnotationsConfig


class TestHexConversion:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
        assert hex_to_rgb("#000000") == (0.0, 0.0, 0.0)

    def test_rgb_to_hex_round_trips(self):
        for color in ("#ffd400", "#2ea8e5", "#a28ae5", "#000000", "#ffffff"):
            assert rgb_to_hex(*hex_to_rgb(color)) == color

    def test_rgb_to_hex_clamps(self):
        assert rgb_to_hex(1.5, -0.2, 0.0) == "#ff0000"

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            hex_to_rgb("red")


class TestAnnotationColorGenerator:
    """Appearance-dependent colors for reader objects."""

    def test_non_highlight_is_opaque(self):
        generator = AnnotationColorGenerator()
        for appearance in AppearanceStyle:
            resolved = generator.resolve("#2EA8E5", is_highlight=False, appearance=appearance)
            assert resolved.color == "#2ea8e5"
            assert resolved.alpha == 1.0
            assert resolved.blend_mode is None

    def test_light_highlight(self):
        resolved = AnnotationColorGenerator().resolve("#ffd400", is_highlight=True, appearance=AppearanceStyle.LIGHT)
        assert resolved.color == "#ffd400"
        assert resolved.alpha == 0.5
        assert resolved.blend_mode == BlendMode.MULTIPLY

    def test_dark_highlight_is_more_saturated(self):
        resolved = AnnotationColorGenerator().resolve("#a28ae5", is_highlight=True, appearance=AppearanceStyle.DARK)
        assert resolved.blend_mode == BlendMode.LIGHTEN
        assert resolved.alpha == 0.5

        _, base_saturation, base_value = colorsys.rgb_to_hsv(*hex_to_rgb("#a28ae5"))
        _, saturation, value = colorsys.rgb_to_hsv(*hex_to_rgb(resolved.color))
        assert saturation > base_saturation
        assert value == pytest.approx(base_value, abs=0.01)

    def test_dark_highlight_saturation_capped(self):
        resolved = AnnotationColorGenerator().resolve("#ff0000", is_highlight=True, appearance=AppearanceStyle.DARK)
        assert resolved.color == "#ff0000"

    def test_configured_opacity(self):
        config = AnnotationsConfig(highlight_opacity=0.3, highlight_dark_opacity=0.7)
        generator = AnnotationColorGenerator(config)
        assert generator.resolve("#ffd400", True, AppearanceStyle.LIGHT).alpha == 0.3
        assert generator.resolve("#ffd400", True, AppearanceStyle.DARK).alpha == 0.7
