"""
PHOTO ALIGN - Editor State

Immutable value objects for the geometric state of an edit: transform, grid
overlay and crop rectangle. Every update returns a new instance so callers can
hold on to earlier versions safely.
"""

from dataclasses import dataclass, replace
from typing import Tuple

from config import Interaction, Overlay


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """Parse '#rrggbb' (or 'rrggbb') into an RGB tuple."""
    text = value.strip().lstrip('#')
    if len(text) == 3:
        text = ''.join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Not a hex color: {value!r}")
    return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


@dataclass(frozen=True)
class Transform:
    """Geometric state applied to the image for preview and export.

    rotation is in degrees (clockwise on screen), scale multiplies the
    fit-to-canvas size, translate_x/translate_y are display pixels.
    """
    rotation: float = 0.0
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    flip_h: bool = False
    flip_v: bool = False

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError(f"Transform scale must be positive, got {self.scale}")

    def with_rotation(self, degrees: float) -> "Transform":
        """Set rotation, clamped to the slider range."""
        return replace(self, rotation=_clamp(degrees, Interaction.ROTATION_MIN, Interaction.ROTATION_MAX))

    def rotated_by(self, delta: float) -> "Transform":
        return self.with_rotation(self.rotation + delta)

    def with_scale(self, scale: float) -> "Transform":
        return replace(self, scale=_clamp(scale, Interaction.SCALE_MIN, Interaction.SCALE_MAX))

    def zoomed(self, notches: float) -> "Transform":
        """Zoom by wheel notches (positive zooms in)."""
        return self.with_scale(self.scale + notches * Interaction.ZOOM_STEP)

    def panned(self, dx: float, dy: float) -> "Transform":
        return replace(self, translate_x=self.translate_x + dx, translate_y=self.translate_y + dy)

    def flipped_horizontal(self) -> "Transform":
        return replace(self, flip_h=not self.flip_h)

    def flipped_vertical(self) -> "Transform":
        return replace(self, flip_v=not self.flip_v)

    @property
    def is_identity(self) -> bool:
        return self == DEFAULT_TRANSFORM


@dataclass(frozen=True)
class GridSettings:
    """Alignment grid overlay. Display-only; never affects exported pixels."""
    cell_size: int = 50
    color: Tuple[int, int, int] = Overlay.GRID_DEFAULT_COLOR
    opacity_percent: float = 40.0
    line_width_px: int = 1
    visible: bool = True

    def __post_init__(self):
        if self.cell_size <= 0:
            raise ValueError(f"Grid cell size must be positive, got {self.cell_size}")
        if not 0 <= self.opacity_percent <= 100:
            raise ValueError(f"Grid opacity must be 0-100, got {self.opacity_percent}")

    def with_color(self, hex_color: str) -> "GridSettings":
        return replace(self, color=parse_hex_color(hex_color))


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in preview/display coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def scaled(self, factor: float) -> "CropRect":
        return CropRect(self.x * factor, self.y * factor, self.width * factor, self.height * factor)


DEFAULT_TRANSFORM = Transform()
DEFAULT_GRID = GridSettings()
