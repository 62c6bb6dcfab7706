"""Synthetic buffers shared by the test modules."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from pixel_art.core_types import PixelBuffer


def random_buffer(width: int, height: int, seed: int = 0, opaque: bool = False) -> PixelBuffer:
    rng = np.random.RandomState(seed)
    arr = rng.randint(0, 256, (height, width, 4)).astype(np.uint8)
    if opaque:
        arr[..., 3] = 255
    return PixelBuffer.from_array(arr)


def buffer_from_pixels(width: int, height: int, pixels: Sequence[Sequence[int]]) -> PixelBuffer:
    """Row-major list of (r, g, b, a) pixels."""
    arr = np.array(pixels, dtype=np.uint8).reshape(height, width, 4)
    return PixelBuffer.from_array(arr)
