"""
Skew detection based on edge orientation.

Finds the dominant straight-edge direction in a photo (horizon, building
edges, document borders) and reports how far it deviates from the nearest
horizontal/vertical axis:
1. Downsample - skew is a low-frequency property
2. Sobel gradients on luminance
3. Keep only the strongest edges (top 20% by magnitude)
4. Magnitude-weighted vote over edge angles folded into [-45, 45] degrees

Uses only OpenCV and numpy.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from config import Detection
from histogram import weighted_histogram
from pixel_buffer import PixelBuffer, downsample
from state import Transform


@dataclass
class SkewResult:
    """Result of skew analysis."""
    angle: Optional[float]  # Degrees, or None when no orientation dominates
    peak_weight: float      # Accumulated magnitude in the winning bin
    mean_weight: float      # Average accumulated magnitude per bin
    edge_pixels: int        # Pixels that survived the magnitude threshold
    details: dict = field(default_factory=dict)  # Additional info for debugging

    @property
    def found(self) -> bool:
        return self.angle is not None


# =============================================================================
# EDGE ANALYSIS
# =============================================================================

def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Rec. 709 luma as float64, same shape as the image."""
    rgb = buffer.data[:, :, :3].astype(np.float64)
    return (Detection.LUMA_R * rgb[:, :, 0]
            + Detection.LUMA_G * rgb[:, :, 1]
            + Detection.LUMA_B * rgb[:, :, 2])


def sobel_gradients(gray: np.ndarray):
    """
    3x3 Sobel magnitude and direction for interior pixels.

    Border pixels have no full neighbourhood, so their magnitude is 0.

    Returns:
        (magnitude, angle_degrees) float64 arrays
    """
    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)

    magnitude = np.sqrt(gx * gx + gy * gy)
    angle = np.degrees(np.arctan2(gy, gx))

    magnitude[0, :] = 0
    magnitude[-1, :] = 0
    magnitude[:, 0] = 0
    magnitude[:, -1] = 0
    angle[magnitude == 0] = 0

    return magnitude, angle


def edge_threshold(magnitude: np.ndarray, percentile: float = Detection.EDGE_PERCENTILE) -> float:
    """Magnitude at the given rank among all positive magnitudes (0 if none)."""
    positive = np.sort(magnitude[magnitude > 0])
    if positive.size == 0:
        return 0.0
    return float(positive[int(np.floor(positive.size * percentile))])


def fold_angles(angles: np.ndarray) -> np.ndarray:
    """
    Fold edge directions into [-45, 45] degrees.

    Edges have a 90 degree period for straightening purposes: a vertical edge
    and a horizontal edge tilted by the same amount call for the same fix.
    """
    folded = np.fmod(angles, 90.0)  # Keeps the sign of the input
    folded = np.where(folded > 45, folded - 90, folded)
    folded = np.where(folded < -45, folded + 90, folded)
    return folded


def bin_to_angle(bin_index: int, bin_count: int = Detection.BIN_COUNT) -> float:
    """Center angle of a histogram bin."""
    return bin_index * 90.0 / (bin_count - 1) - 45.0


# =============================================================================
# DETECTION
# =============================================================================

def analyze_skew(buffer: PixelBuffer) -> SkewResult:
    """
    Build the weighted edge-angle histogram and pick the dominant orientation.

    Args:
        buffer: Image to analyse (any size; downsampled internally)

    Returns:
        SkewResult; angle is None when the peak bin is weaker than
        DOMINANCE_RATIO times the average bin weight.
    """
    small = downsample(buffer, Detection.MAX_DIMENSION)
    gray = luminance(small)
    magnitude, angle = sobel_gradients(gray)

    threshold = edge_threshold(magnitude)
    strong = magnitude >= threshold
    if threshold == 0:
        # Flat image: nothing but zero-magnitude pixels would vote
        strong &= magnitude > 0

    bin_count = Detection.BIN_COUNT
    histogram = weighted_histogram(
        fold_angles(angle[strong]), magnitude[strong], bin_count, -45.0, 45.0
    )

    total_weight = float(histogram.sum())
    peak_bin = int(np.argmax(histogram))
    peak_weight = float(histogram[peak_bin])
    mean_weight = total_weight / bin_count

    details = {
        "size": (small.width, small.height),
        "threshold": threshold,
        "peak_bin": peak_bin,
    }

    # A zero-weight histogram has no orientation at all; 0 would claim certainty
    if total_weight <= 0 or peak_weight < mean_weight * Detection.DOMINANCE_RATIO:
        found_angle = None
    else:
        found_angle = bin_to_angle(peak_bin, bin_count)

    result = SkewResult(
        angle=found_angle,
        peak_weight=peak_weight,
        mean_weight=mean_weight,
        edge_pixels=int(np.count_nonzero(strong)),
        details=details,
    )
    logger.debug(
        f"[Auto-align] angle={result.angle} peak={peak_weight:.1f} "
        f"mean={mean_weight:.1f} edges={result.edge_pixels} size={details['size']}"
    )
    return result


def detect_skew_angle(buffer: PixelBuffer) -> Optional[float]:
    """
    Dominant skew of the image in degrees, or None if no orientation dominates.

    Pure and synchronous; callers that must keep a UI responsive should run it
    off the UI thread (see workers.skew_worker).
    """
    return analyze_skew(buffer).angle


def apply_skew_correction(transform: Transform, angle: Optional[float]) -> Transform:
    """Transform with the detected skew rotated out. No-op when angle is None."""
    if angle is None:
        return transform
    return replace(transform, rotation=transform.rotation - angle)
