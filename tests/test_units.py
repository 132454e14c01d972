import pytest

from ascii_view.units import contrast_ratio, parse_rgb, px, to_columns, to_rows


def test_px_parses_css_lengths():
    assert px("12.5px") == 12.5
    assert px("-4px") == -4.0
    assert px(7) == 7.0
    assert px("auto") == 0.0
    assert px(None) == 0.0


def test_pixels_to_cells():
    assert to_columns(84) == 10
    assert to_columns(-30) == 0
    assert to_rows(39.2) == 2


def test_parse_rgb_treats_transparent_as_missing():
    assert parse_rgb("rgb(10, 20, 30)") == (10, 20, 30)
    assert parse_rgb("rgba(10, 20, 30, 0.5)") == (10, 20, 30)
    assert parse_rgb("rgba(0, 0, 0, 0)") is None
    assert parse_rgb("transparent") is None
    assert parse_rgb("") is None


def test_contrast_ratio_bounds():
    assert contrast_ratio((0, 0, 0), (255, 255, 255)) == pytest.approx(21.0)
    assert contrast_ratio((90, 90, 90), (90, 90, 90)) == pytest.approx(1.0)
