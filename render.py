"""
PHOTO ALIGN - Renderer

Composes the interactive preview (checkerboard, transformed image, grid, crop
overlay) and the full-resolution export. Both paths place the image with the
same affine model, so the export reproduces what the preview shows:

    canvas = translate(center + t) . rotate(r) . scale(+/-s) . fit(k) . (p - image_center)

The preview uses k = fit scale of the drawn buffer; the export draws the
original at k = 1 on a canvas enlarged by 1 / fit_scale.
"""

import math
from typing import Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from config import Overlay
from geometry import compute_fit_scale
from pixel_buffer import PixelBuffer
from state import CropRect, GridSettings, Transform
from crop import handle_positions


def _px(value: float) -> int:
    """Round half-up to an integer pixel coordinate."""
    return int(math.floor(value + 0.5))


# =============================================================================
# AFFINE PLACEMENT
# =============================================================================

def _translation(tx: float, ty: float) -> np.ndarray:
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])


def _scaling(sx: float, sy: float) -> np.ndarray:
    return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])


def _rotation(degrees: float) -> np.ndarray:
    # y points down, so positive angles turn clockwise on screen
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def image_to_canvas_matrix(image_width: int, image_height: int, origin: Tuple[float, float],
                           transform: Transform, draw_scale: float) -> np.ndarray:
    """
    3x3 matrix mapping continuous image coordinates to canvas coordinates.

    Args:
        image_width: Width of the buffer being drawn
        image_height: Height of the buffer being drawn
        origin: Canvas point the image center lands on (before rotation)
        transform: Rotation, zoom and flips to apply
        draw_scale: Source-to-canvas scale (fit scale for previews, 1 for export)
    """
    flip_x = -1.0 if transform.flip_h else 1.0
    flip_y = -1.0 if transform.flip_v else 1.0
    return (
        _translation(origin[0], origin[1])
        @ _rotation(transform.rotation)
        @ _scaling(transform.scale * flip_x, transform.scale * flip_y)
        @ _scaling(draw_scale, draw_scale)
        @ _translation(-image_width / 2.0, -image_height / 2.0)
    )


def _pixel_matrix(matrix: np.ndarray) -> np.ndarray:
    """Convert a continuous-coordinate mapping to OpenCV's pixel-center convention."""
    return (_translation(-0.5, -0.5) @ matrix @ _translation(0.5, 0.5))[:2]


# =============================================================================
# PREMULTIPLIED CANVAS
# =============================================================================

def _premultiplied(buffer: PixelBuffer) -> np.ndarray:
    """float32 (H, W, 4) with color premultiplied by alpha, all in [0, 1]."""
    rgba = buffer.data.astype(np.float32) / 255.0
    rgba[:, :, :3] *= rgba[:, :, 3:4]
    return rgba


def _to_buffer(canvas: np.ndarray) -> PixelBuffer:
    """Un-premultiply a float canvas back into a straight-alpha RGBA8 buffer."""
    alpha = canvas[:, :, 3:4]
    safe_alpha = np.where(alpha > 0, alpha, 1.0)
    rgb = np.where(alpha > 0, canvas[:, :, :3] / safe_alpha, 0.0)
    rgba = np.concatenate([rgb, alpha], axis=2)
    out = np.clip(np.floor(rgba * 255.0 + 0.5), 0, 255).astype(np.uint8)
    return PixelBuffer(out.shape[1], out.shape[0], out)


def _draw_image(canvas: np.ndarray, image: PixelBuffer, matrix: np.ndarray) -> np.ndarray:
    """Source-over composite of the image, placed by matrix, onto canvas."""
    h, w = canvas.shape[:2]
    warped = cv2.warpAffine(
        _premultiplied(image),
        _pixel_matrix(matrix),
        (w, h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    return warped + canvas * (1.0 - warped[:, :, 3:4])


# =============================================================================
# OVERLAYS
# =============================================================================

def draw_checkerboard(width: int, height: int, pattern_size: int = Overlay.CHECKER_SIZE) -> np.ndarray:
    """Opaque light checkerboard so transparent regions stay visible. Returns RGB uint8."""
    ys, xs = np.mgrid[0:height, 0:width]
    dark = ((xs // pattern_size + ys // pattern_size) % 2) == 0
    board = np.empty((height, width, 3), dtype=np.uint8)
    board[:] = Overlay.CHECKER_LIGHT
    board[dark] = Overlay.CHECKER_DARK
    return board


def _blend(base: np.ndarray, layer: np.ndarray, alpha: float) -> np.ndarray:
    return cv2.addWeighted(layer, alpha, base, 1.0 - alpha, 0)


def draw_grid(rgb: np.ndarray, grid: GridSettings) -> np.ndarray:
    """Grid lines every cell_size pixels at the grid's opacity. Returns a new image."""
    if not grid.visible:
        return rgb.copy()

    h, w = rgb.shape[:2]
    layer = rgb.copy()
    color = tuple(int(c) for c in grid.color)
    thickness = max(1, int(grid.line_width_px))

    for x in range(0, w + 1, grid.cell_size):
        cv2.line(layer, (x, 0), (x, h), color, thickness)
    for y in range(0, h + 1, grid.cell_size):
        cv2.line(layer, (0, y), (w, y), color, thickness)

    return _blend(rgb, layer, grid.opacity_percent / 100.0)


def _dashed_line(img: np.ndarray, p0: Tuple[float, float], p1: Tuple[float, float],
                 color, thickness: int, on: int = Overlay.DASH_ON, off: int = Overlay.DASH_OFF):
    length = math.hypot(p1[0] - p0[0], p1[1] - p0[1])
    if length == 0:
        return
    ux = (p1[0] - p0[0]) / length
    uy = (p1[1] - p0[1]) / length
    start = 0.0
    while start < length:
        end = min(start + on, length)
        cv2.line(
            img,
            (_px(p0[0] + ux * start), _px(p0[1] + uy * start)),
            (_px(p0[0] + ux * end), _px(p0[1] + uy * end)),
            color,
            thickness,
        )
        start += on + off


def draw_crop_overlay(rgb: np.ndarray, crop: CropRect) -> np.ndarray:
    """
    Dim everything outside the crop, then draw a dashed border, rule-of-thirds
    guides and the 8 drag handles. Returns a new image.
    """
    h, w = rgb.shape[:2]
    out = rgb.copy()

    # Dim outside
    x0 = max(0, min(w, _px(crop.x)))
    y0 = max(0, min(h, _px(crop.y)))
    x1 = max(0, min(w, _px(crop.right)))
    y1 = max(0, min(h, _px(crop.bottom)))
    outside = np.ones((h, w), dtype=bool)
    outside[y0:y1, x0:x1] = False
    out[outside] = (out[outside].astype(np.float32) * (1.0 - Overlay.DIM_ALPHA) + 0.5).astype(np.uint8)

    # Rule-of-thirds guides
    guides = out.copy()
    for i in (1, 2):
        vx = _px(crop.x + crop.width * i / 3)
        hy = _px(crop.y + crop.height * i / 3)
        cv2.line(guides, (vx, y0), (vx, y1), Overlay.THIRDS_COLOR, 1)
        cv2.line(guides, (x0, hy), (x1, hy), Overlay.THIRDS_COLOR, 1)
    out = _blend(out, guides, Overlay.THIRDS_ALPHA)

    # Dashed border
    corners = [(crop.x, crop.y), (crop.right, crop.y), (crop.right, crop.bottom), (crop.x, crop.bottom)]
    for i in range(4):
        _dashed_line(out, corners[i], corners[(i + 1) % 4], Overlay.BORDER_COLOR, Overlay.BORDER_WIDTH)

    # Handles
    half = Overlay.HANDLE_SIZE / 2
    for hx, hy in handle_positions(crop).values():
        top_left = (_px(hx - half), _px(hy - half))
        bottom_right = (_px(hx + half), _px(hy + half))
        cv2.rectangle(out, top_left, bottom_right, Overlay.HANDLE_FILL, -1)
        cv2.rectangle(out, top_left, bottom_right, Overlay.HANDLE_OUTLINE, 1)

    return out


# =============================================================================
# PREVIEW
# =============================================================================

def render_preview(image: PixelBuffer, canvas_width: int, canvas_height: int,
                   transform: Transform, grid: Optional[GridSettings] = None,
                   crop: Optional[CropRect] = None,
                   fit_scale: Optional[float] = None) -> PixelBuffer:
    """
    Compose the on-screen preview.

    The image (usually the downsampled working copy) is drawn at fit_scale.
    When it is not given it is fitted to the canvas from the image's own size,
    so any resolution of the same photo covers the same display area.

    Returns:
        Opaque RGBA buffer of canvas size.
    """
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(f"Canvas size must be positive, got {canvas_width}x{canvas_height}")

    board = draw_checkerboard(canvas_width, canvas_height)
    canvas = np.concatenate(
        [board.astype(np.float32) / 255.0, np.ones((canvas_height, canvas_width, 1), np.float32)],
        axis=2,
    )

    if fit_scale is None:
        fit_scale = compute_fit_scale(canvas_width, canvas_height, image.width, image.height)
    origin = (canvas_width / 2.0 + transform.translate_x, canvas_height / 2.0 + transform.translate_y)
    matrix = image_to_canvas_matrix(image.width, image.height, origin, transform, fit_scale)
    canvas = _draw_image(canvas, image, matrix)

    rgb = np.clip(np.floor(canvas[:, :, :3] * 255.0 + 0.5), 0, 255).astype(np.uint8)
    if grid is not None:
        rgb = draw_grid(rgb, grid)
    if crop is not None and not crop.is_empty:
        rgb = draw_crop_overlay(rgb, crop)

    rgba = np.concatenate([rgb, np.full((canvas_height, canvas_width, 1), 255, np.uint8)], axis=2)
    return PixelBuffer(canvas_width, canvas_height, rgba)


# =============================================================================
# EXPORT
# =============================================================================

def export_crop_box(crop: CropRect, full_res_scale: float) -> Tuple[int, int, int, int]:
    """Crop rect scaled from display to full-resolution pixels: (x, y, w, h)."""
    return (
        _px(crop.x * full_res_scale),
        _px(crop.y * full_res_scale),
        max(1, _px(crop.width * full_res_scale)),
        max(1, _px(crop.height * full_res_scale)),
    )


def render_for_export(image: PixelBuffer, transform: Transform, canvas_width: float,
                      canvas_height: float, crop: Optional[CropRect] = None,
                      fit_scale: Optional[float] = None) -> PixelBuffer:
    """
    Render the edit at the image's native resolution.

    With a crop: the preview canvas is scaled by full_res_scale = 1 / fit_scale,
    the image is drawn at native size with the same rotation, zoom, flips and
    (scaled) translation, and exactly the scaled crop box is extracted. Parts of
    the box outside that enlarged canvas are transparent.

    Without a crop: the output is image.width x image.height with the image
    rotated/zoomed/flipped about the center. It is not expanded to the rotated
    bounding box, so its pixel size never changes.

    Args:
        image: Full-resolution source (already color-adjusted)
        transform: Geometry shared with the preview
        canvas_width: Preview canvas width the crop was drawn on
        canvas_height: Preview canvas height the crop was drawn on
        crop: Crop rect in preview coordinates, or None
        fit_scale: Display / source scale of this image on the canvas; derived
            from the canvas and image size when omitted

    Returns:
        Straight-alpha RGBA buffer.
    """
    ow, oh = image.width, image.height

    if crop is not None and not crop.is_empty:
        if fit_scale is None:
            fit_scale = compute_fit_scale(canvas_width, canvas_height, ow, oh)
        full_res_scale = 1.0 / fit_scale
        full_w = _px(canvas_width * full_res_scale)
        full_h = _px(canvas_height * full_res_scale)
        cx, cy, cw, ch = export_crop_box(crop, full_res_scale)

        origin = (
            full_w / 2.0 + transform.translate_x * full_res_scale,
            full_h / 2.0 + transform.translate_y * full_res_scale,
        )
        # Render straight into the crop window of the enlarged canvas
        matrix = _translation(-cx, -cy) @ image_to_canvas_matrix(ow, oh, origin, transform, 1.0)
        canvas = _draw_image(np.zeros((ch, cw, 4), np.float32), image, matrix)

        # Clip to the enlarged canvas bounds
        canvas[:max(0, -cy), :] = 0
        canvas[:, :max(0, -cx)] = 0
        canvas[max(0, full_h - cy):, :] = 0
        canvas[:, max(0, full_w - cx):] = 0

        logger.info(
            f"[Export] crop {cw}x{ch} at ({cx}, {cy}) from {ow}x{oh} "
            f"(full-res scale {full_res_scale:.4f})"
        )
        return _to_buffer(canvas)

    matrix = image_to_canvas_matrix(ow, oh, (ow / 2.0, oh / 2.0), transform, 1.0)
    canvas = _draw_image(np.zeros((oh, ow, 4), np.float32), image, matrix)
    logger.info(f"[Export] full frame {ow}x{oh} rotation={transform.rotation:.2f}")
    return _to_buffer(canvas)
