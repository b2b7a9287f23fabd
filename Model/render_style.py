# Model/render_style.py
import colorsys
from typing import Tuple

RGBA = Tuple[int, int, int, int]

HUE_STEP = 60           # degrees between consecutive polygons -> 6 distinct hues
SATURATION = 0.70
LIGHTNESS = 0.50
FILL_ALPHA = 0.2

LINE_WIDTH = 2
POINT_RADIUS = 4
DASH_PATTERN = (5, 5)

START_POINT_COLOR: RGBA = (0xEF, 0x44, 0x44, 255)   # red marker on the first vertex
CURRENT_COLOR: RGBA = (0x3B, 0x82, 0xF6, 255)       # in-progress polygon


def polygon_hue(index: int) -> int:
    return (index * HUE_STEP) % 360


def _hsl(hue_deg: int, alpha: float) -> RGBA:
    r, g, b = colorsys.hls_to_rgb(hue_deg / 360.0, LIGHTNESS, SATURATION)
    return round(r * 255), round(g * 255), round(b * 255), round(alpha * 255)


def polygon_colors(index: int) -> Tuple[RGBA, RGBA]:
    """(stroke, fill) of the completed polygon with the given index."""
    hue = polygon_hue(index)
    return _hsl(hue, 1.0), _hsl(hue, FILL_ALPHA)
