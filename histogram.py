"""
PHOTO ALIGN - Histogram Builder

Per-channel intensity histograms (auto-levels) and weighted value histograms
(edge-angle voting for skew detection).
"""

import numpy as np

from pixel_buffer import PixelBuffer


def channel_histograms(buffer: PixelBuffer) -> np.ndarray:
    """
    Count intensities for the R, G and B channels.

    Returns:
        (3, 256) int64 array; row 0 is red, 1 green, 2 blue.
    """
    hist = np.zeros((3, 256), dtype=np.int64)
    for c in range(3):
        hist[c] = np.bincount(buffer.data[:, :, c].ravel(), minlength=256)
    return hist


def find_percentile(channel_hist: np.ndarray, total: int, percentile: float) -> int:
    """
    First intensity whose cumulative count reaches floor(total * percentile).

    Returns 255 when the histogram never reaches the target.
    """
    target = int(np.floor(total * percentile))
    cumulative = np.cumsum(channel_hist)
    idx = int(np.searchsorted(cumulative, target, side='left'))
    return min(idx, 255)


def weighted_histogram(values: np.ndarray, weights: np.ndarray, bin_count: int,
                       lo: float, hi: float) -> np.ndarray:
    """
    Accumulate weights into bin_count bins whose centers span [lo, hi].

    A value maps to bin round((v - lo) * (bin_count - 1) / (hi - lo)); values
    outside the range are dropped.

    Returns:
        (bin_count,) float64 array of accumulated weight.
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    weights = np.asarray(weights, dtype=np.float64).ravel()

    bins = np.floor((values - lo) * (bin_count - 1) / (hi - lo) + 0.5).astype(np.int64)
    valid = (bins >= 0) & (bins < bin_count)

    return np.bincount(bins[valid], weights=weights[valid], minlength=bin_count).astype(np.float64)
