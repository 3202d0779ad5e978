import numpy as np
import pytest

from auto_align import (
    analyze_skew,
    apply_skew_correction,
    bin_to_angle,
    detect_skew_angle,
    edge_threshold,
    fold_angles,
    sobel_gradients,
)
from state import Transform


def test_fold_angles_into_quarter_turn():
    folded = fold_angles(np.array([50.0, -50.0, 100.0, -100.0, 0.0, 180.0, 135.0, 102.0]))
    assert list(folded) == pytest.approx([-40.0, 40.0, 10.0, -10.0, 0.0, 0.0, 45.0, 12.0])


def test_bin_centers_span_range():
    assert bin_to_angle(0) == pytest.approx(-45.0)
    assert bin_to_angle(179) == pytest.approx(45.0)


def test_sobel_ignores_border_pixels():
    gray = np.tile(np.arange(10, dtype=np.float64) * 10, (10, 1))
    magnitude, angle = sobel_gradients(gray)
    assert np.all(magnitude[0, :] == 0) and np.all(magnitude[:, -1] == 0)
    # Linear ramp along x: exact horizontal gradient
    assert magnitude[5, 5] == pytest.approx(80.0)
    assert angle[5, 5] == pytest.approx(0.0)


def test_edge_threshold_takes_80th_percentile():
    mags = np.array([0.0, 0.0, 1.0, 2.0, 3.0, 4.0, 5.0])
    assert edge_threshold(mags) == 5.0
    assert edge_threshold(np.zeros(5)) == 0.0


def test_noise_has_no_dominant_angle(noise_buffer):
    assert detect_skew_angle(noise_buffer(256, 256)) is None


def test_flat_image_has_no_dominant_angle(gray_buffer):
    result = analyze_skew(gray_buffer(100, 80))
    assert result.angle is None
    assert not result.found
    assert result.edge_pixels == 0


@pytest.mark.parametrize("angle", [12.0, -7.0, 3.0])
def test_detects_tilted_edge(skewed_edge, angle):
    detected = detect_skew_angle(skewed_edge(angle))
    assert detected is not None
    assert abs(detected - angle) < 1.0


def test_large_images_are_downsampled(skewed_edge):
    result = analyze_skew(skewed_edge(12.0, width=1600, height=1200, ramp=24.0))
    assert result.details["size"] == (1000, 750)
    assert abs(result.angle - 12.0) < 1.0


def test_correction_subtracts_detected_angle():
    t = Transform(rotation=5.0, scale=1.5)
    corrected = apply_skew_correction(t, 12.0)
    assert corrected.rotation == pytest.approx(-7.0)
    assert corrected.scale == 1.5
    assert apply_skew_correction(t, None) is t
