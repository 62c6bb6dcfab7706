"""Tests for the grayscale and invert effects."""

from __future__ import annotations

import numpy as np

from pixel_art.core_types import PixelBuffer
from pixel_art.tone import grayscale, invert
from tests.helpers import buffer_from_pixels, random_buffer


class TestGrayscale:
    def test_black_and_white_unchanged(self):
        buf = buffer_from_pixels(2, 1, [(0, 0, 0, 255), (255, 255, 255, 255)])
        assert grayscale(buf) == buf

    def test_luma_weights_and_alpha(self):
        buf = buffer_from_pixels(2, 1, [(10, 20, 30, 128), (200, 100, 40, 3)])
        out = grayscale(buf)
        # 0.30*10 + 0.59*20 + 0.11*30 = 18.1 ; 60 + 59 + 4.4 = 123.4
        assert out.pixel(0, 0) == (18, 18, 18, 128)
        assert out.pixel(1, 0) == (123, 123, 123, 3)

    def test_channels_equal(self):
        out = grayscale(random_buffer(16, 9, seed=1))
        rgb = out.rgb
        assert np.array_equal(rgb[..., 0], rgb[..., 1])
        assert np.array_equal(rgb[..., 1], rgb[..., 2])

    def test_idempotent(self):
        once = grayscale(random_buffer(12, 12, seed=2))
        assert grayscale(once) == once

    def test_threaded_matches_single(self):
        buf = random_buffer(16, 200, seed=3)
        assert grayscale(buf, workers=4) == grayscale(buf)

    def test_empty(self):
        buf = PixelBuffer.filled(0, 0, (0, 0, 0))
        assert grayscale(buf).is_empty


class TestInvert:
    def test_values(self):
        buf = buffer_from_pixels(1, 1, [(10, 20, 30, 40)])
        assert invert(buf).pixel(0, 0) == (245, 235, 225, 40)

    def test_involution(self):
        buf = random_buffer(20, 15, seed=4)
        assert invert(invert(buf)) == buf

    def test_input_untouched(self):
        buf = random_buffer(8, 8, seed=5)
        before = buf.copy_array()
        invert(buf)
        assert np.array_equal(buf.data, before)

    def test_threaded_matches_single(self):
        buf = random_buffer(10, 256, seed=6)
        assert invert(buf, workers=3) == invert(buf)
