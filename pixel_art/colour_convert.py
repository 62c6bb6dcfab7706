# pixel_art/colour_convert.py
from __future__ import annotations

"""
Colour conversions between sRGB (0..255) and HSV.

HSV uses hue in degrees [0,360) and saturation/value in [0,1].

Exports:
  rgb_to_hsv(rgb)            scalar
  hsv_to_rgb(hsv)            scalar
  rgb_to_hsv_array(rgb)      vectorised (...,3)
  hsv_to_rgb_array(hsv)      vectorised (...,3)
  hsv_sort_key(rgb)
"""

import math
from typing import Sequence, Tuple

import numpy as np

from .core_types import HSV, RGBTuple, clamp_value, to_u8


# Scalar


def rgb_to_hsv(rgb: Sequence[int]) -> HSV:
    """
    (r, g, b[, a]) in 0..255 to (h, s, v).
    Greys (r == g == b) give h = 0 and s = 0; black gives s = 0.
    """
    r = float(rgb[0]) / 255.0
    g = float(rgb[1]) / 255.0
    b = float(rgb[2]) / 255.0
    mx = max(r, g, b)
    mn = min(r, g, b)
    d = mx - mn
    v = mx
    s = 0.0 if mx == 0.0 else d / mx

    if d == 0.0:
        h = 0.0
    elif mx == r:
        h = ((g - b) / d) % 6.0
    elif mx == g:
        h = (b - r) / d + 2.0
    else:
        h = (r - g) / d + 4.0
    h = (h * 60.0) % 360.0
    return (h, s, v)


def hsv_to_rgb(hsv: Sequence[float]) -> RGBTuple:
    """(h, s, v) to (r, g, b); channels rounded half-up and clamped to 0..255."""
    h = (float(hsv[0]) % 360.0) / 60.0
    s = clamp_value(float(hsv[1]), 0.0, 1.0)
    v = clamp_value(float(hsv[2]), 0.0, 1.0)

    sector = int(math.floor(h)) % 6
    f = h - math.floor(h)
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)

    r, g, b = (
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    )[sector]

    def _chan(x: float) -> int:
        return int(clamp_value(math.floor(x * 255.0 + 0.5), 0, 255))

    return (_chan(r), _chan(g), _chan(b))


# Vectorised


def rgb_to_hsv_array(rgb: np.ndarray) -> np.ndarray:
    """
    sRGB uint8 (...,3) to HSV float64 (...,3). Same rules as rgb_to_hsv().
    """
    arr = np.asarray(rgb)[..., :3].astype(np.float64) / 255.0
    r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]
    mx = arr.max(axis=-1)
    mn = arr.min(axis=-1)
    d = mx - mn

    safe_mx = np.where(mx == 0.0, 1.0, mx)
    safe_d = np.where(d == 0.0, 1.0, d)
    s = np.where(mx == 0.0, 0.0, d / safe_mx)

    h_r = np.mod((g - b) / safe_d, 6.0)
    h_g = (b - r) / safe_d + 2.0
    h_b = (r - g) / safe_d + 4.0
    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b))
    h = np.where(d == 0.0, 0.0, h)
    h = np.mod(h * 60.0, 360.0)

    out = np.empty(arr.shape, dtype=np.float64)
    out[..., 0] = h
    out[..., 1] = s
    out[..., 2] = mx
    return out


def hsv_to_rgb_array(hsv: np.ndarray) -> np.ndarray:
    """HSV float (...,3) to uint8 RGB (...,3), rounded half-up and clamped."""
    arr = np.asarray(hsv, dtype=np.float64)
    h = np.mod(arr[..., 0], 360.0) / 60.0
    s = np.clip(arr[..., 1], 0.0, 1.0)
    v = np.clip(arr[..., 2], 0.0, 1.0)

    floor_h = np.floor(h)
    sector = np.mod(floor_h.astype(np.int64), 6)
    f = h - floor_h
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)

    r = np.choose(sector, [v, q, p, p, t, v])
    g = np.choose(sector, [t, v, v, q, p, p])
    b = np.choose(sector, [p, p, t, v, v, q])

    out = np.stack([r, g, b], axis=-1) * 255.0
    return to_u8(out)


def hsv_sort_key(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """Sort key: brighter first, then more saturated, then by hue."""
    h, s, v = rgb_to_hsv(rgb)
    return (-v, -s, h)


__all__ = [
    "rgb_to_hsv",
    "hsv_to_rgb",
    "rgb_to_hsv_array",
    "hsv_to_rgb_array",
    "hsv_sort_key",
]
