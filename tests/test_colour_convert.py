"""Tests for RGB <-> HSV conversion."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from pixel_art.colour_convert import (
    hsv_sort_key,
    hsv_to_rgb,
    hsv_to_rgb_array,
    rgb_to_hsv,
    rgb_to_hsv_array,
)


# ---------------------------------------------------------------------------
# Scalar conversion
# ---------------------------------------------------------------------------


class TestScalar:
    @pytest.mark.parametrize(
        "rgb, hue",
        [((255, 0, 0), 0.0), ((0, 255, 0), 120.0), ((0, 0, 255), 240.0)],
    )
    def test_primaries(self, rgb, hue):
        h, s, v = rgb_to_hsv(rgb)
        assert h == pytest.approx(hue)
        assert s == pytest.approx(1.0)
        assert v == pytest.approx(1.0)

    @pytest.mark.parametrize("level", [0, 1, 128, 254, 255])
    def test_greys_have_no_hue_or_saturation(self, level):
        h, s, v = rgb_to_hsv((level, level, level))
        assert h == 0.0
        assert s == 0.0
        assert v == pytest.approx(level / 255.0)

    def test_hue_wraps(self):
        assert hsv_to_rgb((360.0, 1.0, 1.0)) == (255, 0, 0)
        assert hsv_to_rgb((480.0, 1.0, 1.0)) == (0, 255, 0)
        assert hsv_to_rgb((-120.0, 1.0, 1.0)) == (0, 0, 255)

    def test_out_of_range_saturation_and_value_are_clamped(self):
        assert hsv_to_rgb((0.0, 2.0, 5.0)) == (255, 0, 0)
        assert hsv_to_rgb((0.0, -1.0, -1.0)) == (0, 0, 0)

    def test_round_trip_within_one(self):
        levels = range(0, 256, 17)
        for rgb in itertools.product(levels, levels, levels):
            back = hsv_to_rgb(rgb_to_hsv(rgb))
            assert max(abs(a - b) for a, b in zip(rgb, back)) <= 1, rgb


# ---------------------------------------------------------------------------
# Vectorised conversion
# ---------------------------------------------------------------------------


class TestArray:
    def test_matches_scalar(self):
        rng = np.random.RandomState(3)
        rgb = rng.randint(0, 256, (20, 30, 3)).astype(np.uint8)
        hsv = rgb_to_hsv_array(rgb)
        for y in range(0, 20, 3):
            for x in range(0, 30, 4):
                expected = rgb_to_hsv(rgb[y, x].tolist())
                assert np.allclose(hsv[y, x], expected)

    def test_inverse_matches_scalar(self):
        rng = np.random.RandomState(4)
        hsv = np.stack(
            [
                rng.uniform(0.0, 360.0, 500),
                rng.uniform(0.0, 1.0, 500),
                rng.uniform(0.0, 1.0, 500),
            ],
            axis=-1,
        )
        rgb = hsv_to_rgb_array(hsv)
        assert rgb.dtype == np.uint8
        for row_hsv, row_rgb in zip(hsv.tolist(), rgb.tolist()):
            assert tuple(row_rgb) == hsv_to_rgb(row_hsv)

    def test_round_trip_within_one(self):
        rng = np.random.RandomState(5)
        rgb = rng.randint(0, 256, (64, 64, 3)).astype(np.uint8)
        back = hsv_to_rgb_array(rgb_to_hsv_array(rgb))
        diff = np.abs(back.astype(np.int16) - rgb.astype(np.int16))
        assert int(diff.max()) <= 1


class TestSortKey:
    def test_brighter_then_more_saturated_first(self):
        colours = [(0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 0, 255)]
        ordered = sorted(colours, key=hsv_sort_key)
        assert ordered == [(255, 0, 0), (0, 0, 255), (255, 255, 255), (0, 0, 0)]
