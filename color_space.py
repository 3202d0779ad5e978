"""
PHOTO ALIGN - Color Space Utilities

Vectorized RGB <-> HSL conversion for 8-bit pixel arrays.
"""

from typing import Tuple

import numpy as np


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round .5 upward, matching the rounding used throughout the pipeline."""
    return np.floor(values + 0.5)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round half-up and clamp to [0, 255]."""
    return np.clip(round_half_up(values), 0, 255).astype(np.uint8)


def rgb_to_hsl(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert an (..., 3) uint8 RGB array to hue, saturation and lightness.

    Returns:
        (h, s, l) float64 arrays, each in [0, 1].
    """
    rgb = rgb.astype(np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = np.max(rgb, axis=-1)
    mn = np.min(rgb, axis=-1)
    lightness = (mx + mn) / 2.0
    delta = mx - mn
    chromatic = delta > 0

    # Denominators only matter where chromatic; keep the rest finite
    safe_delta = np.where(chromatic, delta, 1.0)
    high = 2.0 - mx - mn
    low = mx + mn
    sat = np.where(
        lightness > 0.5,
        delta / np.where(high > 0, high, 1.0),
        delta / np.where(low > 0, low, 1.0),
    )
    sat = np.where(chromatic, sat, 0.0)

    # Red wins ties with green, green wins ties with blue
    hue_r = ((g - b) / safe_delta + np.where(g < b, 6.0, 0.0)) / 6.0
    hue_g = ((b - r) / safe_delta + 2.0) / 6.0
    hue_b = ((r - g) / safe_delta + 4.0) / 6.0
    hue = np.select([mx == r, mx == g], [hue_r, hue_g], default=hue_b)
    hue = np.where(chromatic, hue, 0.0)

    return hue, sat, lightness


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb(hue: np.ndarray, sat: np.ndarray, lightness: np.ndarray) -> np.ndarray:
    """
    Convert hue, saturation and lightness arrays (each in [0, 1]) to uint8 RGB.

    Returns:
        (..., 3) uint8 array.
    """
    q = np.where(lightness < 0.5, lightness * (1.0 + sat), lightness + sat - lightness * sat)
    p = 2.0 * lightness - q

    channels = np.stack([
        _hue_to_channel(p, q, hue + 1.0 / 3.0),
        _hue_to_channel(p, q, hue),
        _hue_to_channel(p, q, hue - 1.0 / 3.0),
    ], axis=-1)

    # Achromatic pixels collapse to their lightness
    gray = np.repeat(lightness[..., np.newaxis], 3, axis=-1)
    channels = np.where((sat == 0)[..., np.newaxis], gray, channels)

    return to_uint8(channels * 255.0)
