# pixel_art/tone.py
from __future__ import annotations

"""
Tonal effects: luma grayscale and colour inversion. Alpha is left untouched.
"""

import numpy as np

from .constants import LUMA_WEIGHTS
from .core_types import PixelBuffer, to_u8
from .utils import run_row_chunks


def _luma_rows(rgb: np.ndarray) -> np.ndarray:
    wr, wg, wb = LUMA_WEIGHTS
    rgb_f = rgb.astype(np.float64)
    luma = to_u8(wr * rgb_f[..., 0] + wg * rgb_f[..., 1] + wb * rgb_f[..., 2])
    return np.repeat(luma[..., None], 3, axis=-1)


def _invert_rows(rgb: np.ndarray) -> np.ndarray:
    return (255 - rgb).astype(np.uint8)


def _map_rgb(buffer: PixelBuffer, func, workers: int) -> PixelBuffer:
    if buffer.is_empty:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    return buffer.with_rgb(run_row_chunks(func, buffer.rgb, workers))


def grayscale(buffer: PixelBuffer, *, workers: int = 1) -> PixelBuffer:
    """R, G and B all become 0.30 R + 0.59 G + 0.11 B (rounded half-up)."""
    return _map_rgb(buffer, _luma_rows, workers)


def invert(buffer: PixelBuffer, *, workers: int = 1) -> PixelBuffer:
    """Each colour channel c becomes 255 - c."""
    return _map_rgb(buffer, _invert_rows, workers)


__all__ = ["grayscale", "invert"]
