import numpy as np

from histogram import channel_histograms, find_percentile, weighted_histogram


def test_channel_histograms_count_each_channel(color_buffer):
    buf = color_buffer([[(0, 10, 255), (0, 20, 255)]])
    hist = channel_histograms(buf)
    assert hist.shape == (3, 256)
    assert hist[0, 0] == 2
    assert hist[1, 10] == 1 and hist[1, 20] == 1
    assert hist[2, 255] == 2


def test_find_percentile():
    hist = np.zeros(256, np.int64)
    hist[50:151] = 1  # 101 pixels, one per value
    assert find_percentile(hist, 101, 0.01) == 50
    assert find_percentile(hist, 101, 0.99) == 148


def test_find_percentile_caps_at_255():
    hist = np.zeros(256, np.int64)
    assert find_percentile(hist, 10, 0.5) == 255


def test_weighted_histogram_rounds_and_drops_out_of_range():
    values = np.array([-45.0, 0.0, 45.0, 50.0])
    weights = np.array([1.0, 2.0, 3.0, 4.0])
    hist = weighted_histogram(values, weights, 180, -45.0, 45.0)
    assert hist[0] == 1.0
    assert hist[90] == 2.0
    assert hist[179] == 3.0
    assert hist.sum() == 6.0
