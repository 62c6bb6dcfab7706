# pixel_art/hue.py
from __future__ import annotations

"""
Hue normalisation: every pixel is rotated onto one fixed hue.

Saturation, value and alpha are kept. Pixels with zero saturation stay grey,
since hue has no effect on them.
"""

from functools import partial

import numpy as np

from .colour_convert import hsv_to_rgb_array, rgb_to_hsv_array
from .core_types import PixelBuffer, validate_hue
from .utils import run_row_chunks


def _lock_rows(rgb: np.ndarray, hue_deg: float) -> np.ndarray:
    hsv = rgb_to_hsv_array(rgb)
    hsv[..., 0] = hue_deg
    return hsv_to_rgb_array(hsv)


def lock_hue(
    buffer: PixelBuffer, target_hue: float, *, workers: int = 1
) -> PixelBuffer:
    """
    Overwrite each pixel's hue with target_hue (degrees, taken modulo 360).
    Raises InvalidConfiguration for a non-numeric or non-finite hue.
    """
    hue_deg = validate_hue(target_hue)
    if buffer.is_empty:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    rgb = run_row_chunks(partial(_lock_rows, hue_deg=hue_deg), buffer.rgb, workers)
    return buffer.with_rgb(rgb)


__all__ = ["lock_hue"]
