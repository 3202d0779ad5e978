import math

import numpy as np
import pytest
from PySide6.QtCore import QCoreApplication

from pixel_buffer import PixelBuffer


@pytest.fixture(scope="session")
def qapp():
    """Core application so signals and QThreads have an event loop to use."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def gray_buffer():
    def make(width, height, value=128):
        return PixelBuffer.filled(width, height, (value, value, value, 255))
    return make


@pytest.fixture
def noise_buffer():
    """Independent uniform noise per channel, fixed seed."""
    def make(width=256, height=256, seed=1234):
        rng = np.random.default_rng(seed)
        data = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        data[:, :, 3] = 255
        return PixelBuffer(width, height, data)
    return make


@pytest.fixture
def skewed_edge():
    """
    Dark/light half-planes split by a straight edge tilted by angle degrees
    (clockwise, y down), with a soft linear ramp across the edge.
    """
    def make(angle, width=400, height=300, ramp=6.0):
        theta = math.radians(angle)
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
        d = -(xs - width / 2) * math.sin(theta) + (ys - height / 2) * math.cos(theta)
        value = np.clip(0.5 + d / ramp, 0.0, 1.0) * 200.0 + 20.0
        gray = np.floor(value + 0.5).astype(np.uint8)
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :, 0] = gray
        data[:, :, 1] = gray
        data[:, :, 2] = gray
        data[:, :, 3] = 255
        return PixelBuffer(width, height, data)
    return make


@pytest.fixture
def color_buffer():
    """Buffer from a list of rows of (r, g, b) tuples, fully opaque."""
    def make(rows):
        rgb = np.array(rows, dtype=np.uint8)
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        return PixelBuffer.from_array(np.concatenate([rgb, alpha], axis=2))
    return make
