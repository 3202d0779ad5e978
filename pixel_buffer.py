"""
PHOTO ALIGN - Pixel Buffer

RGBA8 image container shared by every stage of the pipeline, plus conversion
helpers for the OpenCV arrays produced by the host image codec.
"""

from dataclasses import dataclass

import cv2
import numpy as np


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """A width x height RGBA8 bitmap, row-major, no padding.

    ``data`` has shape (height, width, 4) and dtype uint8. Stages never write
    into a buffer they received; they build a new one.
    """
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"PixelBuffer must be non-empty, got {self.width}x{self.height}")
        if self.data.dtype != np.uint8:
            raise ValueError(f"PixelBuffer data must be uint8, got {self.data.dtype}")
        if self.data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"PixelBuffer data shape {self.data.shape} does not match "
                f"{self.width}x{self.height} RGBA"
            )

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelBuffer":
        """Wrap a copy of an (H, W, 4) uint8 RGBA array."""
        arr = np.ascontiguousarray(arr, dtype=np.uint8).copy()
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) RGBA array, got shape {arr.shape}")
        return cls(width=arr.shape[1], height=arr.shape[0], data=arr)

    @classmethod
    def from_bytes(cls, width: int, height: int, raw: bytes) -> "PixelBuffer":
        """Build a buffer from a flat RGBA byte string."""
        if len(raw) != width * height * 4:
            raise ValueError(f"Expected {width * height * 4} bytes, got {len(raw)}")
        arr = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, 4)
        return cls.from_array(arr)

    @classmethod
    def filled(cls, width: int, height: int, rgba=(0, 0, 0, 255)) -> "PixelBuffer":
        """Solid-color buffer."""
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = rgba
        return cls(width=width, height=height, data=arr)

    @property
    def rgb(self) -> np.ndarray:
        """Read-only view of the color channels."""
        view = self.data[:, :, :3]
        view.flags.writeable = False
        return view

    @property
    def alpha(self) -> np.ndarray:
        view = self.data[:, :, 3]
        view.flags.writeable = False
        return view

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.data.copy())

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """New buffer with replaced color channels and this buffer's alpha."""
        out = self.data.copy()
        out[:, :, :3] = rgb
        return PixelBuffer(self.width, self.height, out)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def equals(self, other: "PixelBuffer") -> bool:
        """Byte-for-byte comparison."""
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.data, other.data)
        )


# =============================================================================
# OPENCV INTEROP
# =============================================================================

def from_cv2(img: np.ndarray) -> PixelBuffer:
    """
    Convert an image as returned by cv2.imread to an RGBA PixelBuffer.

    Accepts grayscale, BGR or BGRA arrays in uint8, uint16 or float32 (0-1).
    """
    if img.dtype == np.uint16:
        img = (img / 257.0 + 0.5).astype(np.uint8)
    elif img.dtype in (np.float32, np.float64):
        img = (np.clip(img, 0, 1) * 255 + 0.5).astype(np.uint8)

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 3:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        raise ValueError(f"Unsupported channel count: {img.shape[2]}")

    return PixelBuffer.from_array(rgba)


def to_cv2(buffer: PixelBuffer) -> np.ndarray:
    """Convert a PixelBuffer to a BGRA array suitable for cv2.imwrite."""
    return cv2.cvtColor(buffer.data, cv2.COLOR_RGBA2BGRA)


def downsample(buffer: PixelBuffer, max_dim: int) -> PixelBuffer:
    """
    Shrink a buffer so neither side exceeds max_dim, keeping aspect ratio.

    Buffers already within the limit are returned as a copy.
    """
    ratio = min(max_dim / buffer.width, max_dim / buffer.height, 1.0)
    if ratio >= 1.0:
        return buffer.copy()

    w = max(1, int(buffer.width * ratio + 0.5))
    h = max(1, int(buffer.height * ratio + 0.5))
    small = cv2.resize(buffer.data, (w, h), interpolation=cv2.INTER_AREA)
    return PixelBuffer(w, h, small)
