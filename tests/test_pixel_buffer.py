import numpy as np
import pytest

from pixel_buffer import PixelBuffer, downsample, from_cv2, to_cv2


def test_filled_buffer_has_rgba_layout():
    buf = PixelBuffer.filled(4, 3, (1, 2, 3, 4))
    assert buf.data.shape == (3, 4, 4)
    assert buf.pixel_count == 12
    assert tuple(buf.data[2, 3]) == (1, 2, 3, 4)


def test_rejects_empty_and_malformed_buffers():
    with pytest.raises(ValueError):
        PixelBuffer(0, 10, np.zeros((10, 0, 4), np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(2, 2, np.zeros((2, 2, 3), np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(2, 2, np.zeros((2, 2, 4), np.float32))


def test_from_bytes_checks_length():
    raw = bytes(range(16))
    buf = PixelBuffer.from_bytes(2, 2, raw)
    assert buf.to_bytes() == raw
    with pytest.raises(ValueError):
        PixelBuffer.from_bytes(2, 2, raw[:-1])


def test_with_rgb_keeps_alpha_and_source():
    buf = PixelBuffer.filled(2, 2, (10, 20, 30, 77))
    out = buf.with_rgb(np.full((2, 2, 3), 200, np.uint8))
    assert np.all(out.data[:, :, :3] == 200)
    assert np.all(out.alpha == 77)
    assert np.all(buf.data[:, :, :3] == (10, 20, 30))


def test_rgb_view_is_read_only():
    buf = PixelBuffer.filled(2, 2)
    with pytest.raises(ValueError):
        buf.rgb[0, 0, 0] = 1


def test_from_cv2_converts_bgr_and_gray():
    bgr = np.zeros((2, 3, 3), np.uint8)
    bgr[:, :, 0] = 255  # blue
    buf = from_cv2(bgr)
    assert tuple(buf.data[0, 0]) == (0, 0, 255, 255)

    gray = np.full((2, 3), 90, np.uint8)
    assert tuple(from_cv2(gray).data[1, 2]) == (90, 90, 90, 255)


def test_from_cv2_scales_16_bit():
    img = np.full((1, 1, 3), 65535, np.uint16)
    assert tuple(from_cv2(img).data[0, 0]) == (255, 255, 255, 255)


def test_to_cv2_restores_bgra_order():
    bgra = np.array([[[1, 2, 3, 4], [5, 6, 7, 8]]], np.uint8)
    assert np.array_equal(to_cv2(from_cv2(bgra)), bgra)


def test_downsample_limits_longest_side():
    buf = PixelBuffer.filled(2000, 1000)
    small = downsample(buf, 1000)
    assert (small.width, small.height) == (1000, 500)


def test_downsample_returns_copy_when_small_enough():
    buf = PixelBuffer.filled(300, 200)
    small = downsample(buf, 1000)
    assert small is not buf
    assert small.equals(buf)
