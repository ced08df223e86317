"""
Palette helpers: hex parsing, HSL hue rotation and color smoothing.

Colors are float RGB in [0, 1]. A palette is a (3, 3) array of
(primary, secondary, highlight) rows.
"""

import colorsys
from typing import Sequence

import numpy as np


def hex_to_rgb(value: str) -> np.ndarray:
    """
    Parse ``#rrggbb`` or ``#rgb`` into float RGB.

    Raises:
        ValueError: If the string is not a hex color.
    """
    text = str(value).strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Not a hex color: {value!r}")
    try:
        channels = [int(text[i:i + 2], 16) for i in (0, 2, 4)]
    except ValueError as e:
        raise ValueError(f"Not a hex color: {value!r}") from e
    return np.array(channels, dtype=np.float64) / 255.0


def rgb_to_hex(rgb: Sequence[float]) -> str:
    channels = np.clip(np.round(np.asarray(rgb, dtype=np.float64) * 255.0), 0, 255).astype(int)
    return "#{:02x}{:02x}{:02x}".format(*channels)


def is_hex_color(value) -> bool:
    try:
        hex_to_rgb(value)
    except ValueError:
        return False
    return True


def offset_hue(rgb: Sequence[float], turns: float) -> np.ndarray:
    """Rotate the HSL hue of a color by ``turns`` (1.0 = full circle)."""
    r, g, b = (float(c) for c in rgb)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return np.array(colorsys.hls_to_rgb((h + turns) % 1.0, l, s))


def palette_from_hex(colors: Sequence[str]) -> np.ndarray:
    return np.stack([hex_to_rgb(c) for c in colors])


def rotate_palette(palette: np.ndarray, turns: float) -> np.ndarray:
    return np.stack([offset_hue(row, turns) for row in palette])


def lerp_colors(current: np.ndarray, target: np.ndarray, factor: float) -> np.ndarray:
    return current + (target - current) * factor
