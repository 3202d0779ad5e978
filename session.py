"""
PHOTO ALIGN - Editor Session

Owns the loaded image and the canonical edit state (transform, crop, grid,
color adjustments) and routes pointer input. Every state change emits a Qt
signal so any number of views stay in sync, the same way a GUI would bind to
it. Rendering and export are delegated to the pure functions in render.py.
"""

from typing import Optional, Tuple

from loguru import logger
from PySide6.QtCore import QObject, Signal

from adjustments import DEFAULT_ADJUSTMENTS, ColorAdjustments, apply_all_adjustments, is_default_adjustments
from auto_align import apply_skew_correction, detect_skew_angle
from config import Interaction, Preview
from crop import CropInteraction, CropMode, auto_fit_crop
from geometry import compute_display_size, compute_fit_scale
from pixel_buffer import PixelBuffer, downsample
from presets import apply_preset, auto_enhance
from render import render_for_export, render_preview
from state import DEFAULT_GRID, DEFAULT_TRANSFORM, CropRect, GridSettings, Transform
from workers.skew_worker import SkewDetectionService

# Status messages reported after auto-align
MSG_NO_ALIGNMENT = "No dominant alignment detected"
MSG_ALIGN_FAILED = "Auto-align failed"


def corrected_message(angle: float) -> str:
    return f"Corrected {abs(angle):.1f}° skew"


class EditorSession(QObject):
    """Single-image editing session.

    Pointer events are in canvas pixels. In crop mode they drive the crop
    rectangle; otherwise a drag pans the image.
    """

    # Signals for state changes
    imageLoaded = Signal(int, int)          # original width, height
    imageCleared = Signal()
    canvasSizeChanged = Signal(int, int)    # display width, height
    transformChanged = Signal(object)       # Transform
    gridChanged = Signal(object)            # GridSettings
    cropChanged = Signal(object)            # CropRect or None
    cropModeChanged = Signal(bool)
    adjustmentsChanged = Signal(object)     # ColorAdjustments
    showOriginalChanged = Signal(bool)
    autoAlignFinished = Signal(str)         # status message

    def __init__(self, parent: QObject = None):
        super().__init__(parent)
        self._original: Optional[PixelBuffer] = None
        self._preview: Optional[PixelBuffer] = None
        self._adjusted_preview: Optional[PixelBuffer] = None

        self._canvas_size = (Preview.CANVAS_DEFAULT_WIDTH, Preview.CANVAS_DEFAULT_HEIGHT)
        self._transform = DEFAULT_TRANSFORM
        self._grid = DEFAULT_GRID
        self._adjustments = DEFAULT_ADJUSTMENTS
        self._crop_mode = False
        self._show_original = False
        self._auto_align_result: Optional[str] = None
        self._crop = CropInteraction(*self._canvas_size)
        self._pan_last: Optional[Tuple[float, float]] = None
        self._skew_service = None
        self._align_pending = False

    # -------------------------------------------------------------------------
    # Image lifecycle
    # -------------------------------------------------------------------------

    @property
    def has_image(self) -> bool:
        return self._original is not None

    @property
    def original(self) -> Optional[PixelBuffer]:
        return self._original

    @property
    def preview(self) -> Optional[PixelBuffer]:
        """Downsampled working copy used for interactive color previews."""
        return self._preview

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self._canvas_size

    def load_image(self, buffer: PixelBuffer, available_width: int = Preview.CANVAS_DEFAULT_WIDTH):
        """
        Start editing a new image. All edit state except the grid is reset.

        Args:
            buffer: Decoded full-resolution image
            available_width: Width the host can give the preview canvas
        """
        self._cancel_auto_align()
        self._original = buffer
        self._preview = downsample(buffer, Preview.MAX_DIMENSION)
        self._adjusted_preview = None
        self._auto_align_result = None
        self._pan_last = None

        self._set_canvas_size(compute_display_size(buffer.width, buffer.height, available_width))
        self.transform = DEFAULT_TRANSFORM
        self.crop_mode = False
        self.adjustments = DEFAULT_ADJUSTMENTS

        logger.info(
            f"[Session] Loaded {buffer.width}x{buffer.height}, preview "
            f"{self._preview.width}x{self._preview.height}, canvas {self._canvas_size}"
        )
        self.imageLoaded.emit(buffer.width, buffer.height)

    def resize_canvas(self, available_width: int):
        """Recompute the display size for a new container width."""
        self._require_image()
        size = compute_display_size(self._original.width, self._original.height, available_width)
        self._set_canvas_size(size)

    def _set_canvas_size(self, size: Tuple[int, int]):
        if size == self._canvas_size:
            return
        previous = self._crop.crop
        factor = size[0] / self._canvas_size[0]
        self._canvas_size = size
        self._crop.set_canvas_size(*size)
        # Keep the crop over the same part of the image
        self._crop.set_crop(previous.scaled(factor) if previous is not None else None)
        self.canvasSizeChanged.emit(*size)
        if self._crop.crop != previous:
            self.cropChanged.emit(self._crop.crop)

    def reset(self):
        """Drop the image and return every setting to its default."""
        self._cancel_auto_align()
        self._original = None
        self._preview = None
        self._adjusted_preview = None
        self._auto_align_result = None
        self._pan_last = None

        self.transform = DEFAULT_TRANSFORM
        self.grid = DEFAULT_GRID
        self.crop_mode = False
        self.show_original = False
        self.adjustments = DEFAULT_ADJUSTMENTS
        self.imageCleared.emit()

    def _require_image(self):
        if self._original is None:
            raise RuntimeError("No image loaded")

    # -------------------------------------------------------------------------
    # Transform
    # -------------------------------------------------------------------------

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, value: Transform):
        if self._transform != value:
            self._transform = value
            self.transformChanged.emit(value)

    def set_rotation(self, degrees: float):
        self.transform = self._transform.with_rotation(degrees)

    def rotate_by(self, delta: float = Interaction.ROTATION_STEP):
        self.transform = self._transform.rotated_by(delta)

    def set_scale(self, scale: float):
        self.transform = self._transform.with_scale(scale)

    def wheel(self, delta_y: float):
        """Scroll-to-zoom: scrolling down zooms out one step, up zooms in."""
        if delta_y == 0:
            return
        self.transform = self._transform.zoomed(-1 if delta_y > 0 else 1)

    def flip_horizontal(self):
        self.transform = self._transform.flipped_horizontal()

    def flip_vertical(self):
        self.transform = self._transform.flipped_vertical()

    def reset_transform(self):
        self.transform = DEFAULT_TRANSFORM

    # -------------------------------------------------------------------------
    # Grid
    # -------------------------------------------------------------------------

    @property
    def grid(self) -> GridSettings:
        return self._grid

    @grid.setter
    def grid(self, value: GridSettings):
        if self._grid != value:
            self._grid = value
            self.gridChanged.emit(value)

    # -------------------------------------------------------------------------
    # Crop
    # -------------------------------------------------------------------------

    @property
    def crop(self) -> Optional[CropRect]:
        return self._crop.crop

    @property
    def crop_interaction_mode(self) -> CropMode:
        return self._crop.mode

    @property
    def crop_mode(self) -> bool:
        return self._crop_mode

    @crop_mode.setter
    def crop_mode(self, value: bool):
        if self._crop_mode != value:
            self._crop_mode = value
            self.cropModeChanged.emit(value)
        if not value:
            # Leaving crop mode discards the rectangle
            self.clear_crop()

    def set_crop(self, crop: Optional[CropRect]):
        """Replace the crop rect (clamped to the canvas)."""
        previous = self._crop.crop
        self._crop.set_crop(crop)
        if self._crop.crop != previous:
            self.cropChanged.emit(self._crop.crop)

    def clear_crop(self):
        self.set_crop(None)

    def auto_fit_crop(self) -> Optional[CropRect]:
        """
        Set the crop to the largest clean rect for the current rotation and enter crop mode.

        Returns None when the image is panned clear of the canvas.
        """
        self._require_image()
        rect = auto_fit_crop(
            self._original.width, self._original.height,
            self._canvas_size[0], self._canvas_size[1], self._transform,
        )
        self.set_crop(rect)
        if not self._crop_mode:
            self._crop_mode = True
            self.cropModeChanged.emit(True)
        return self._crop.crop

    # -------------------------------------------------------------------------
    # Pointer routing
    # -------------------------------------------------------------------------

    def pointer_down(self, x: float, y: float):
        if self._crop_mode:
            previous = self._crop.crop
            self._crop.pointer_down(x, y)
            if self._crop.crop != previous:
                self.cropChanged.emit(self._crop.crop)
            return
        self._pan_last = (x, y)

    def pointer_move(self, x: float, y: float):
        if self._crop_mode:
            if self._crop.action is None:
                return
            previous = self._crop.crop
            self._crop.pointer_move(x, y)
            if self._crop.crop != previous:
                self.cropChanged.emit(self._crop.crop)
            return

        if self._pan_last is None:
            return
        dx = x - self._pan_last[0]
        dy = y - self._pan_last[1]
        self._pan_last = (x, y)
        self.transform = self._transform.panned(dx, dy)

    def pointer_up(self):
        self._pan_last = None
        if self._crop.action is not None:
            previous = self._crop.crop
            self._crop.pointer_up()
            if self._crop.crop != previous:
                self.cropChanged.emit(self._crop.crop)

    # -------------------------------------------------------------------------
    # Auto-align
    # -------------------------------------------------------------------------

    @property
    def auto_align_result(self) -> Optional[str]:
        """Status message from the last auto-align, or None."""
        return self._auto_align_result

    def auto_align(self) -> Optional[float]:
        """
        Detect skew on the original and rotate it out.

        Returns:
            The detected angle, or None when nothing dominant was found or
            detection failed.
        """
        self._require_image()
        try:
            angle = detect_skew_angle(self._original)
        except Exception:
            logger.exception("[Session] Auto-align failed")
            self._finish_auto_align(MSG_ALIGN_FAILED)
            return None
        self.apply_detected_angle(angle)
        return angle

    def auto_align_async(self):
        """Run detection on a background thread; the result is applied when it arrives."""
        self._require_image()
        if self._skew_service is None:
            self._skew_service = SkewDetectionService(self)
            self._skew_service.angleDetected.connect(self._on_angle_detected)
            self._skew_service.error.connect(self._on_auto_align_error)
        self._auto_align_result = None
        self._align_pending = True
        self._skew_service.detect_async(self._original)

    def apply_detected_angle(self, angle: Optional[float]):
        """Rotate out a detected skew and report the outcome."""
        if angle is None:
            self._finish_auto_align(MSG_NO_ALIGNMENT)
            return
        self.transform = apply_skew_correction(self._transform, angle)
        self._finish_auto_align(corrected_message(angle))

    def _cancel_auto_align(self):
        self._align_pending = False
        if self._skew_service is not None:
            self._skew_service.cancel()

    def _on_angle_detected(self, angle: Optional[float]):
        # Results for an image that has since been replaced are dropped
        if not self._align_pending:
            return
        self._align_pending = False
        self.apply_detected_angle(angle)

    def _on_auto_align_error(self, message: str):
        if not self._align_pending:
            return
        self._align_pending = False
        logger.error(f"[Session] Auto-align failed: {message}")
        self._finish_auto_align(MSG_ALIGN_FAILED)

    def _finish_auto_align(self, message: str):
        self._auto_align_result = message
        logger.info(f"[Session] {message}")
        self.autoAlignFinished.emit(message)

    # -------------------------------------------------------------------------
    # Color
    # -------------------------------------------------------------------------

    @property
    def adjustments(self) -> ColorAdjustments:
        return self._adjustments

    @adjustments.setter
    def adjustments(self, value: ColorAdjustments):
        value = value.clamped()
        if self._adjustments != value:
            self._adjustments = value
            self._adjusted_preview = None
            self.adjustmentsChanged.emit(value)

    def set_adjustment(self, name: str, value):
        """Change a single control, e.g. set_adjustment('contrast', 25)."""
        self.adjustments = self._adjustments.merged({name: value})

    def apply_preset(self, key: str):
        self.adjustments = apply_preset(key)

    def auto_enhance(self):
        self.adjustments = auto_enhance(self._adjustments)

    def reset_adjustments(self):
        self.adjustments = DEFAULT_ADJUSTMENTS

    @property
    def show_original(self) -> bool:
        return self._show_original

    @show_original.setter
    def show_original(self, value: bool):
        if self._show_original != value:
            self._show_original = value
            self.showOriginalChanged.emit(value)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def adjusted_preview(self) -> PixelBuffer:
        """Preview copy with the current color adjustments, cached until they change."""
        self._require_image()
        if self._adjusted_preview is None:
            self._adjusted_preview = apply_all_adjustments(self._preview, self._adjustments)
        return self._adjusted_preview

    def render_preview(self) -> PixelBuffer:
        """Compose the canvas for display."""
        self._require_image()
        cw, ch = self._canvas_size
        fit_scale = compute_fit_scale(cw, ch, self._preview.width, self._preview.height)
        if self._show_original:
            # Compare view: untouched image, no overlays
            return render_preview(self._preview, cw, ch, DEFAULT_TRANSFORM, fit_scale=fit_scale)
        return render_preview(
            self.adjusted_preview(), cw, ch, self._transform,
            grid=self._grid, crop=self._crop.crop, fit_scale=fit_scale,
        )

    def export(self) -> PixelBuffer:
        """Render the current edit at full resolution."""
        self._require_image()
        source = self._original
        if not is_default_adjustments(self._adjustments):
            source = apply_all_adjustments(self._original, self._adjustments)
        cw, ch = self._canvas_size
        fit_scale = compute_fit_scale(cw, ch, source.width, source.height)
        return render_for_export(source, self._transform, cw, ch, self._crop.crop, fit_scale=fit_scale)
