"""
Tests for color lightness adjustment and CSS color parsing.
"""

import pytest

from utils.colors import (
    adjust_color_lightness,
    hex_to_rgb,
    interpolate_color,
    parse_css_color,
    parse_linear_gradient,
)


def test_full_lightness_is_white():
    assert adjust_color_lightness('#000000', 1.0) == '#FFFFFF'
    assert adjust_color_lightness('#336699', 1.0) == '#FFFFFF'


def test_zero_lightness_is_black():
    assert adjust_color_lightness('#FFFFFF', 0.0) == '#000000'
    assert adjust_color_lightness('#336699', 0.0) == '#000000'


def test_half_lightness_leaves_color_unchanged():
    assert adjust_color_lightness('#336699', 0.5) == '#336699'
    assert adjust_color_lightness('#abcdef', 0.5) == '#ABCDEF'


@pytest.mark.parametrize("color, amount", [
    ('#FFFFFF', 1.0),
    ('#000000', 0.0),
    ('#123456', 1.0),
    ('#123456', 0.0),
])
def test_extremes_are_stable_when_reapplied(color, amount):
    once = adjust_color_lightness(color, amount)
    assert adjust_color_lightness(once, amount) == once


def test_pastel_derivatives_of_brand_color():
    # 0.25 halves each channel, rounding half up: 0x33/2=25.5 -> 26, 0x99/2=76.5 -> 77
    assert adjust_color_lightness('#336699', 0.25) == '#1A334D'
    assert adjust_color_lightness('#336699', 0.92) == '#DEE7EF'


def test_darkening_keeps_channels_in_range():
    for amount in (0.0, 0.1, 0.25, 0.35, 0.4, 0.49):
        r, g, b = hex_to_rgb(adjust_color_lightness('#FF8000', amount))
        assert 0 <= r <= 255 and 0 <= g <= 255 and 0 <= b <= 255
        assert r >= g >= b


def test_malformed_hex_degrades_without_raising():
    assert hex_to_rgb('#GG0000') == (128, 128, 128)
    assert hex_to_rgb('#123') == (128, 128, 128)
    assert adjust_color_lightness('not-a-color', 0.5) == '#808080'
    assert adjust_color_lightness('', 1.0) == '#FFFFFF'


def test_hex_without_hash_is_accepted():
    assert hex_to_rgb('336699') == (0x33, 0x66, 0x99)


def test_parse_css_color_variants():
    assert parse_css_color('#336699') == (0x33, 0x66, 0x99, 255)
    assert parse_css_color('rgba(0,0,0,0.4)') == (0, 0, 0, 102)
    assert parse_css_color('rgb(10, 20, 30)') == (10, 20, 30, 255)
    assert parse_css_color('transparent') is None
    assert parse_css_color('rgba(0,0,0,0)') is None
    assert parse_css_color(None) is None


def test_parse_linear_gradient():
    angle, colors = parse_linear_gradient('linear-gradient(135deg, #336699 0%, #FF9900 100%)')
    assert angle == 135.0
    assert colors == ['#336699', '#FF9900']
    assert parse_linear_gradient('#336699') is None


def test_interpolate_color_endpoints():
    assert interpolate_color(['#000000', '#FFFFFF'], 0.0) == (0, 0, 0)
    assert interpolate_color(['#000000', '#FFFFFF'], 1.0) == (255, 255, 255)
    assert interpolate_color(['#000000', '#FFFFFF'], 0.5) == (127, 127, 127)
