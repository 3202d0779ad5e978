import pytest

from state import DEFAULT_GRID, DEFAULT_TRANSFORM, CropRect, GridSettings, Transform, parse_hex_color


def test_default_transform_is_identity():
    assert DEFAULT_TRANSFORM.is_identity
    assert not DEFAULT_TRANSFORM.rotated_by(0.1).is_identity


def test_rotation_is_clamped():
    assert Transform().with_rotation(270).rotation == 180
    assert Transform(rotation=-179.95).rotated_by(-0.1).rotation == -180


def test_zoom_steps_and_clamps():
    assert Transform().zoomed(1).scale == pytest.approx(1.05)
    assert Transform().zoomed(-2).scale == pytest.approx(0.9)
    assert Transform(scale=0.12).zoomed(-1).scale == pytest.approx(0.1)
    assert Transform(scale=4.98).zoomed(1).scale == pytest.approx(5.0)


def test_scale_must_be_positive():
    with pytest.raises(ValueError):
        Transform(scale=0)


def test_pan_and_flip_return_new_values():
    t = Transform().panned(5, -3).panned(1, 1)
    assert (t.translate_x, t.translate_y) == (6, -2)
    flipped = t.flipped_horizontal()
    assert flipped.flip_h and not t.flip_h
    assert not flipped.flipped_horizontal().flip_h
    assert t.flipped_vertical().flip_v


def test_grid_defaults_and_validation():
    assert DEFAULT_GRID.cell_size == 50
    assert DEFAULT_GRID.color == (0, 170, 255)
    assert DEFAULT_GRID.opacity_percent == 40
    assert DEFAULT_GRID.visible
    with pytest.raises(ValueError):
        GridSettings(cell_size=0)
    with pytest.raises(ValueError):
        GridSettings(opacity_percent=120)


def test_parse_hex_color():
    assert parse_hex_color('#00aaff') == (0, 170, 255)
    assert parse_hex_color('fff') == (255, 255, 255)
    assert DEFAULT_GRID.with_color('#ff0000').color == (255, 0, 0)
    with pytest.raises(ValueError):
        parse_hex_color('#12345')


def test_crop_rect_edges():
    rect = CropRect(10, 20, 30, 40)
    assert (rect.right, rect.bottom) == (40, 60)
    assert not rect.is_empty
    assert CropRect(0, 0, 0, 10).is_empty
    assert rect.scaled(2) == CropRect(20, 40, 60, 80)
