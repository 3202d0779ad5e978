"""
PHOTO ALIGN - Crop Rectangle Model

Hit-testing and the draw/move/resize interaction for the crop rectangle.
All coordinates are preview (display canvas) pixels.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from loguru import logger

from config import Interaction
from geometry import compute_fit_scale, compute_inscribed_crop
from state import CropRect, Transform


class HandleName(Enum):
    """The 8 drag handles: 4 corners + 4 edge midpoints."""
    TOP_LEFT = "topLeft"
    TOP_RIGHT = "topRight"
    BOTTOM_LEFT = "bottomLeft"
    BOTTOM_RIGHT = "bottomRight"
    TOP_MID = "topMid"
    BOTTOM_MID = "bottomMid"
    LEFT_MID = "leftMid"
    RIGHT_MID = "rightMid"


# Which edges each handle drags. Midpoints move exactly one edge.
HANDLE_EDGES = {
    HandleName.TOP_LEFT: ('left', 'top'),
    HandleName.TOP_RIGHT: ('right', 'top'),
    HandleName.BOTTOM_LEFT: ('left', 'bottom'),
    HandleName.BOTTOM_RIGHT: ('right', 'bottom'),
    HandleName.TOP_MID: ('top',),
    HandleName.BOTTOM_MID: ('bottom',),
    HandleName.LEFT_MID: ('left',),
    HandleName.RIGHT_MID: ('right',),
}


class CropMode(Enum):
    """Interaction state."""
    IDLE = "idle"
    DRAWING = "drawing"
    MOVING = "moving"
    RESIZING = "resizing"


@dataclass(frozen=True)
class DrawAction:
    start_x: float
    start_y: float


@dataclass(frozen=True)
class MoveAction:
    start_x: float
    start_y: float
    origin: CropRect


@dataclass(frozen=True)
class ResizeAction:
    handle: HandleName
    origin: CropRect


CropAction = Union[DrawAction, MoveAction, ResizeAction]


# =============================================================================
# HIT TESTING
# =============================================================================

def handle_positions(crop: CropRect) -> Dict[HandleName, Tuple[float, float]]:
    """Handle centers, in hit-test priority order."""
    x, y, w, h = crop.x, crop.y, crop.width, crop.height
    return {
        HandleName.TOP_LEFT: (x, y),
        HandleName.TOP_RIGHT: (x + w, y),
        HandleName.BOTTOM_LEFT: (x, y + h),
        HandleName.BOTTOM_RIGHT: (x + w, y + h),
        HandleName.TOP_MID: (x + w / 2, y),
        HandleName.BOTTOM_MID: (x + w / 2, y + h),
        HandleName.LEFT_MID: (x, y + h / 2),
        HandleName.RIGHT_MID: (x + w, y + h / 2),
    }


def hit_test_handle(crop: CropRect, px: float, py: float,
                    threshold: float = Interaction.HANDLE_HIT_THRESHOLD) -> Optional[HandleName]:
    """Handle within threshold of the point on both axes, or None."""
    for name, (hx, hy) in handle_positions(crop).items():
        if abs(px - hx) < threshold and abs(py - hy) < threshold:
            return name
    return None


def is_inside_crop(crop: CropRect, px: float, py: float) -> bool:
    """Point inside the rect, edges included."""
    return crop.x <= px <= crop.right and crop.y <= py <= crop.bottom


def clamp_to_canvas(crop: CropRect, canvas_width: float, canvas_height: float) -> CropRect:
    """Pull the origin inside the canvas and trim the far edges to fit."""
    x = max(0.0, crop.x)
    y = max(0.0, crop.y)
    return CropRect(x, y, min(crop.width, canvas_width - x), min(crop.height, canvas_height - y))


# =============================================================================
# AUTO-FIT
# =============================================================================

def auto_fit_crop(image_width: int, image_height: int, canvas_width: float,
                  canvas_height: float, transform: Transform) -> CropRect:
    """
    Largest clean crop for the current rotation, in display coordinates.

    The inscribed rectangle is computed in full-resolution pixels, scaled into
    the canvas by the preview's fit scale and the transform's zoom, centered on
    the image's (translated) center and clamped to the canvas.
    """
    fit_scale = compute_fit_scale(canvas_width, canvas_height, image_width, image_height)
    inscribed = compute_inscribed_crop(image_width, image_height, transform.rotation)

    crop_w = inscribed.width * fit_scale * transform.scale
    crop_h = inscribed.height * fit_scale * transform.scale
    cx = canvas_width / 2 + transform.translate_x - crop_w / 2
    cy = canvas_height / 2 + transform.translate_y - crop_h / 2

    rect = clamp_to_canvas(CropRect(cx, cy, crop_w, crop_h), canvas_width, canvas_height)
    logger.debug(
        f"[Crop] Auto-fit rotation={transform.rotation:.2f} inscribed="
        f"{inscribed.width:.1f}x{inscribed.height:.1f} -> {rect}"
    )
    return rect


# =============================================================================
# INTERACTION
# =============================================================================

class CropInteraction:
    """Pointer-driven crop editing.

    Idle -> Drawing -> Idle, Idle -> Moving -> Idle and
    Idle -> Resizing(handle) -> Idle. The rect survives pointer-up; a drawing
    gesture that ends with zero area is discarded.
    """

    def __init__(self, canvas_width: float, canvas_height: float,
                 crop: Optional[CropRect] = None,
                 threshold: float = Interaction.HANDLE_HIT_THRESHOLD):
        self._canvas_width = 0.0
        self._canvas_height = 0.0
        self.set_canvas_size(canvas_width, canvas_height)
        self._threshold = threshold
        self._crop = crop
        self._action: Optional[CropAction] = None

    @property
    def crop(self) -> Optional[CropRect]:
        return self._crop

    @property
    def action(self) -> Optional[CropAction]:
        return self._action

    @property
    def mode(self) -> CropMode:
        if isinstance(self._action, DrawAction):
            return CropMode.DRAWING
        if isinstance(self._action, MoveAction):
            return CropMode.MOVING
        if isinstance(self._action, ResizeAction):
            return CropMode.RESIZING
        return CropMode.IDLE

    @property
    def canvas_size(self) -> Tuple[float, float]:
        return (self._canvas_width, self._canvas_height)

    def set_canvas_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self._canvas_width = float(width)
        self._canvas_height = float(height)

    def set_crop(self, crop: Optional[CropRect]):
        """Replace the rect (clamped to the canvas). Empty rects clear it."""
        self._action = None
        if crop is None:
            self._crop = None
            return
        crop = clamp_to_canvas(crop, self._canvas_width, self._canvas_height)
        self._crop = None if crop.is_empty else crop

    def clear(self):
        self._action = None
        self._crop = None

    def _clamp_point(self, x: float, y: float) -> Tuple[float, float]:
        return (max(0.0, min(x, self._canvas_width)), max(0.0, min(y, self._canvas_height)))

    def pointer_down(self, x: float, y: float) -> CropMode:
        """Start resizing, moving or drawing depending on what is under the point."""
        if self._crop is not None:
            handle = hit_test_handle(self._crop, x, y, self._threshold)
            if handle is not None:
                self._action = ResizeAction(handle, self._crop)
                return CropMode.RESIZING
            if is_inside_crop(self._crop, x, y):
                self._action = MoveAction(x, y, self._crop)
                return CropMode.MOVING

        sx, sy = self._clamp_point(x, y)
        self._action = DrawAction(sx, sy)
        self._crop = CropRect(sx, sy, 0.0, 0.0)
        return CropMode.DRAWING

    def pointer_move(self, x: float, y: float) -> Optional[CropRect]:
        """Update the rect for the active gesture. Returns the current rect."""
        action = self._action
        if isinstance(action, DrawAction):
            self._crop = self._drawn_rect(action, x, y)
        elif isinstance(action, MoveAction):
            self._crop = self._moved_rect(action, x, y)
        elif isinstance(action, ResizeAction):
            self._crop = self._resized_rect(action, x, y)
        return self._crop

    def pointer_up(self) -> Optional[CropRect]:
        """End the gesture, keeping the rect unless a draw left it empty."""
        if isinstance(self._action, DrawAction) and self._crop is not None and self._crop.is_empty:
            logger.debug("[Crop] Discarding zero-area rect")
            self._crop = None
        self._action = None
        return self._crop

    cancel = pointer_up

    def _drawn_rect(self, action: DrawAction, x: float, y: float) -> CropRect:
        nx, ny = self._clamp_point(x, y)
        return CropRect(
            min(action.start_x, nx),
            min(action.start_y, ny),
            abs(nx - action.start_x),
            abs(ny - action.start_y),
        )

    def _moved_rect(self, action: MoveAction, x: float, y: float) -> CropRect:
        oc = action.origin
        dx = x - action.start_x
        dy = y - action.start_y
        nx = max(0.0, min(oc.x + dx, self._canvas_width - oc.width))
        ny = max(0.0, min(oc.y + dy, self._canvas_height - oc.height))
        return CropRect(nx, ny, oc.width, oc.height)

    def _resized_rect(self, action: ResizeAction, x: float, y: float) -> CropRect:
        oc = action.origin
        cx, cy, cw, ch = oc.x, oc.y, oc.width, oc.height
        min_size = Interaction.MIN_RESIZE_SIZE
        edges = HANDLE_EDGES[action.handle]

        if 'left' in edges:
            new_x = max(0.0, min(x, cx + cw - min_size))
            cw = cx + cw - new_x
            cx = new_x
        if 'right' in edges:
            cw = max(min_size, min(x - cx, self._canvas_width - cx))
        if 'top' in edges:
            new_y = max(0.0, min(y, cy + ch - min_size))
            ch = cy + ch - new_y
            cy = new_y
        if 'bottom' in edges:
            ch = max(min_size, min(y - cy, self._canvas_height - cy))

        return CropRect(cx, cy, cw, ch)
