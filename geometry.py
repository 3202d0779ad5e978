"""
PHOTO ALIGN - Crop Geometry

Inscribed-rectangle math for rotated images and the fit/display scale factors
that tie the interactive preview to the full-resolution export.
"""

import math
from typing import NamedTuple, Tuple

from config import Preview

# Below this the rotation is treated as zero / cos(2a) as zero
_EPSILON = 1e-6


class CropSize(NamedTuple):
    width: float
    height: float


def _require_positive_size(width: float, height: float):
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")


def rotated_bounding_box(width: float, height: float, rotation_degrees: float) -> CropSize:
    """Axis-aligned bounding box of a width x height rect rotated about its center."""
    alpha = abs(math.radians(rotation_degrees))
    sin_a = abs(math.sin(alpha))
    cos_a = abs(math.cos(alpha))
    return CropSize(width * cos_a + height * sin_a, width * sin_a + height * cos_a)


def compute_inscribed_crop(width: float, height: float, rotation_degrees: float) -> CropSize:
    """
    Largest centered axis-aligned rectangle inside a width x height image
    rotated by rotation_degrees.

    Uses w = (W cos a - H sin a) / cos 2a, h = (H cos a - W sin a) / cos 2a with
    two fallbacks where that formula breaks down:
      - cos 2a ~ 0 (a near 45 degrees): largest inscribed square,
        side = min(W, H) / (sin a + cos a)
      - non-positive w or h (large angles): rotated bounding box shrunk to the
        original aspect ratio

    Args:
        width: Image width in pixels
        height: Image height in pixels
        rotation_degrees: Rotation applied to the image

    Returns:
        CropSize(width, height) in the same units as the input
    """
    _require_positive_size(width, height)

    alpha = abs(math.radians(rotation_degrees))
    if alpha < _EPSILON:
        return CropSize(float(width), float(height))

    sin_a = math.sin(alpha)
    cos_a = math.cos(alpha)
    cos_2a = math.cos(2 * alpha)

    if abs(cos_2a) < _EPSILON:
        side = min(width, height) / (sin_a + cos_a)
        return CropSize(side, side)

    w = (width * cos_a - height * sin_a) / cos_2a
    h = (height * cos_a - width * sin_a) / cos_2a

    if w <= 0 or h <= 0:
        bw = width * cos_a + height * sin_a
        bh = width * sin_a + height * cos_a
        aspect = width / height
        w = min(bw, bh * aspect)
        h = w / aspect

    return CropSize(w, h)


def compute_fit_scale(canvas_width: float, canvas_height: float,
                      image_width: float, image_height: float) -> float:
    """Scale that fits the whole image inside the canvas (display / source)."""
    _require_positive_size(image_width, image_height)
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(f"Canvas size must be positive, got {canvas_width}x{canvas_height}")
    return min(canvas_width / image_width, canvas_height / image_height)


def compute_display_size(image_width: int, image_height: int, max_width: int,
                         max_height: int = Preview.CANVAS_MAX_HEIGHT) -> Tuple[int, int]:
    """
    Canvas size for the interactive preview.

    Fills the available width at the image's aspect ratio, then shrinks to
    max_height if that is too tall.
    """
    _require_positive_size(image_width, image_height)
    aspect = image_width / image_height
    w = float(max_width)
    h = w / aspect
    if h > max_height:
        h = float(max_height)
        w = h * aspect
    return int(math.floor(w + 0.5)), int(math.floor(h + 0.5))
