import pytest

from crop import (
    CropInteraction,
    CropMode,
    HandleName,
    auto_fit_crop,
    clamp_to_canvas,
    hit_test_handle,
    is_inside_crop,
)
from state import CropRect, Transform

RECT = CropRect(10, 10, 100, 50)


# =============================================================================
# HIT TESTING
# =============================================================================

@pytest.mark.parametrize("point,handle", [
    ((10, 10), HandleName.TOP_LEFT),
    ((110, 10), HandleName.TOP_RIGHT),
    ((10, 60), HandleName.BOTTOM_LEFT),
    ((110, 60), HandleName.BOTTOM_RIGHT),
    ((60, 10), HandleName.TOP_MID),
    ((60, 60), HandleName.BOTTOM_MID),
    ((10, 35), HandleName.LEFT_MID),
    ((110, 35), HandleName.RIGHT_MID),
    ((19.9, 1), HandleName.TOP_LEFT),
])
def test_hit_test_finds_handles(point, handle):
    assert hit_test_handle(RECT, *point) == handle


def test_hit_test_threshold_is_strict():
    assert hit_test_handle(RECT, 20, 10) is None
    assert hit_test_handle(RECT, 60, 35) is None
    assert is_inside_crop(RECT, 60, 35)


def test_corners_win_over_midpoints_on_small_rects():
    small = CropRect(0, 0, 8, 8)
    assert hit_test_handle(small, 4, 0) == HandleName.TOP_LEFT


def test_inside_includes_edges():
    assert is_inside_crop(RECT, 10, 10)
    assert is_inside_crop(RECT, 110, 60)
    assert not is_inside_crop(RECT, 110.1, 30)


def test_clamp_to_canvas():
    assert clamp_to_canvas(CropRect(-10, 5, 50, 500), 100, 100) == CropRect(0, 5, 50, 95)


# =============================================================================
# RESIZING
# =============================================================================

def _resize(handle_point, to, canvas=(200, 200)):
    crop = CropInteraction(*canvas, crop=RECT)
    assert crop.pointer_down(*handle_point) == CropMode.RESIZING
    crop.pointer_move(*to)
    return crop.pointer_up()


def test_left_mid_moves_only_left_edge():
    assert _resize((10, 35), (30, 80)) == CropRect(30, 10, 80, 50)


def test_right_mid_moves_only_right_edge():
    assert _resize((110, 35), (150, 0)) == CropRect(10, 10, 140, 50)


def test_top_mid_moves_only_top_edge():
    assert _resize((60, 10), (0, 20)) == CropRect(10, 20, 100, 40)


def test_bottom_mid_moves_only_bottom_edge():
    assert _resize((60, 60), (500, 90)) == CropRect(10, 10, 100, 80)


def test_corner_moves_two_edges():
    assert _resize((110, 60), (150, 100)) == CropRect(10, 10, 140, 90)
    assert _resize((10, 10), (0, 0)) == CropRect(0, 0, 110, 60)


def test_resize_keeps_minimum_size():
    assert _resize((10, 35), (500, 35)) == CropRect(109, 10, 1, 50)
    assert _resize((60, 60), (60, -50)) == CropRect(10, 10, 100, 1)


def test_resize_stops_at_canvas():
    assert _resize((110, 35), (500, 35)) == CropRect(10, 10, 190, 50)
    assert _resize((10, 35), (-40, 35)) == CropRect(0, 10, 110, 50)


# =============================================================================
# DRAWING / MOVING
# =============================================================================

def test_draw_clamps_to_canvas():
    crop = CropInteraction(200, 100)
    assert crop.pointer_down(50, 50) == CropMode.DRAWING
    assert crop.mode == CropMode.DRAWING
    crop.pointer_move(250, -20)
    assert crop.pointer_up() == CropRect(50, 0, 150, 50)
    assert crop.mode == CropMode.IDLE


def test_draw_in_any_direction():
    crop = CropInteraction(200, 100)
    crop.pointer_down(100, 80)
    crop.pointer_move(20, 30)
    assert crop.pointer_up() == CropRect(20, 30, 80, 50)


def test_zero_area_draw_is_discarded():
    crop = CropInteraction(200, 100)
    crop.pointer_down(50, 50)
    assert crop.pointer_up() is None

    crop.pointer_down(50, 50)
    crop.pointer_move(120, 50)
    assert crop.pointer_up() is None


def test_move_keeps_size_and_stays_on_canvas():
    crop = CropInteraction(200, 100, crop=RECT)
    assert crop.pointer_down(50, 30) == CropMode.MOVING
    assert crop.pointer_move(500, 500) == CropRect(100, 50, 100, 50)
    assert crop.pointer_move(-500, -500) == CropRect(0, 0, 100, 50)
    crop.pointer_move(55, 35)
    assert crop.pointer_up() == CropRect(15, 15, 100, 50)


def test_pointer_down_outside_starts_new_rect():
    crop = CropInteraction(200, 100, crop=RECT)
    assert crop.pointer_down(180, 90) == CropMode.DRAWING
    crop.pointer_move(150, 70)
    assert crop.pointer_up() == CropRect(150, 70, 30, 20)


def test_move_without_gesture_is_ignored():
    crop = CropInteraction(200, 100, crop=RECT)
    assert crop.pointer_move(0, 0) == RECT


def test_set_crop_clamps_and_clears():
    crop = CropInteraction(200, 100)
    crop.set_crop(CropRect(150, 50, 100, 100))
    assert crop.crop == CropRect(150, 50, 50, 50)
    crop.set_crop(CropRect(10, 10, 0, 5))
    assert crop.crop is None


def test_canvas_size_must_be_positive():
    with pytest.raises(ValueError):
        CropInteraction(0, 100)


# =============================================================================
# AUTO-FIT
# =============================================================================

def test_auto_fit_centers_inscribed_rect():
    rect = auto_fit_crop(1000, 1000, 600, 600, Transform(rotation=10))
    assert rect.width == pytest.approx(863.218 * 0.6, abs=0.01)
    assert rect.height == pytest.approx(rect.width)
    assert rect.x == pytest.approx(300 - rect.width / 2)
    assert rect.y == pytest.approx(300 - rect.height / 2)


def test_auto_fit_follows_pan_and_clamps():
    rect = auto_fit_crop(1000, 1000, 600, 600, Transform(scale=0.5, translate_x=-200))
    assert rect.x == 0
    # Only the origin is pulled in; the width is kept
    assert rect.width == pytest.approx(300)
    assert rect.y == pytest.approx(150)


def test_auto_fit_zoomed_in_fills_canvas():
    rect = auto_fit_crop(1000, 1000, 600, 600, Transform(rotation=10, scale=2))
    assert rect == CropRect(0, 0, 600, 600)
