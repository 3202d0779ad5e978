import numpy as np
import pytest

from color_space import hsl_to_rgb, rgb_to_hsl, round_half_up, to_uint8


def test_round_half_up():
    assert list(round_half_up(np.array([0.5, 1.5, 2.4, -0.5]))) == [1.0, 2.0, 2.0, 0.0]


def test_to_uint8_clamps():
    assert list(to_uint8(np.array([-20.0, 127.5, 300.0]))) == [0, 128, 255]


def test_pure_red_hsl():
    h, s, l = rgb_to_hsl(np.array([255, 0, 0], np.uint8))
    assert float(h) == pytest.approx(0.0)
    assert float(s) == pytest.approx(1.0)
    assert float(l) == pytest.approx(0.5)


def test_gray_has_no_saturation_or_hue():
    h, s, l = rgb_to_hsl(np.array([[90, 90, 90]], np.uint8))
    assert h[0] == 0.0
    assert s[0] == 0.0
    assert l[0] == pytest.approx(90 / 255)


def test_hues_of_primaries():
    rgb = np.array([[0, 255, 0], [0, 0, 255]], np.uint8)
    h, _, _ = rgb_to_hsl(rgb)
    assert h[0] == pytest.approx(1 / 3)
    assert h[1] == pytest.approx(2 / 3)


def test_conversion_is_lossless_for_8_bit_colors():
    rgb = np.array([[200, 30, 90], [12, 240, 100], [255, 255, 0], [1, 2, 3]], np.uint8)
    assert np.array_equal(hsl_to_rgb(*rgb_to_hsl(rgb)), rgb)
