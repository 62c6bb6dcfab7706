"""Tests for hue locking."""

from __future__ import annotations

import numpy as np
import pytest

from pixel_art.colour_convert import rgb_to_hsv_array
from pixel_art.errors import InvalidConfiguration
from pixel_art.hue import lock_hue
from tests.helpers import buffer_from_pixels, random_buffer


class TestLockHue:
    def test_red_to_green(self):
        buf = buffer_from_pixels(1, 1, [(255, 0, 0, 255)])
        assert lock_hue(buf, 120).pixel(0, 0) == (0, 255, 0, 255)

    def test_keeps_saturation_value_and_alpha(self):
        buf = buffer_from_pixels(1, 1, [(200, 100, 100, 77)])
        r, g, b, a = lock_hue(buf, 240).pixel(0, 0)
        assert a == 77
        assert abs(r - 100) <= 1 and abs(g - 100) <= 1 and abs(b - 200) <= 1

    def test_greys_stay_grey(self):
        buf = buffer_from_pixels(
            3, 1, [(0, 0, 0, 255), (128, 128, 128, 10), (255, 255, 255, 0)]
        )
        assert lock_hue(buf, 200) == buf

    def test_hue_is_modular(self):
        buf = random_buffer(10, 10, seed=7)
        assert lock_hue(buf, 480) == lock_hue(buf, 120)

    def test_all_chromatic_pixels_share_the_hue(self):
        buf = random_buffer(32, 32, seed=8)
        hsv = rgb_to_hsv_array(buf.rgb)
        out = rgb_to_hsv_array(lock_hue(buf, 60).rgb)
        # 8-bit rounding moves hue noticeably only for weakly saturated, dark pixels
        strong = (hsv[..., 1] > 0.3) & (hsv[..., 2] > 0.3)
        assert np.all(np.abs(out[..., 0][strong] - 60.0) < 6.0)
        assert np.all(np.abs(out[..., 2] - hsv[..., 2]) <= 1.0 / 255.0 + 1e-9)

    @pytest.mark.parametrize("hue", [float("nan"), float("inf"), "red", None])
    def test_invalid_hue(self, hue):
        buf = random_buffer(2, 2)
        with pytest.raises(InvalidConfiguration):
            lock_hue(buf, hue)

    def test_threaded_matches_single(self):
        buf = random_buffer(12, 200, seed=9)
        assert lock_hue(buf, 300, workers=4) == lock_hue(buf, 300)
