# pixel_art/dither.py
from __future__ import annotations

"""
Dithering against a chosen palette.

Modes:
  none            : plain nearest-palette mapping
  ordered         : a named 8x8 threshold pattern added to RGB before lookup (stateless)
  error_diffusion : Floyd-Steinberg, row-major scan, edge fractions dropped
  atkinson        : Atkinson kernel, same scan; 2/8 of each residual is dropped

strength (0..2) scales the ordered threshold and the diffused residual alike;
0 reduces every mode to plain mapping.

The input is the effect-adjusted buffer before quantisation, so the residuals
come from the real colours rather than from already-snapped ones.
"""

from typing import List, Tuple, Union

import numpy as np

from .constants import (
    ATKINSON,
    BAYER_SIZE,
    DEFAULT_PATTERN,
    FLOYD_STEINBERG,
    PATTERN_OFFSETS,
    DiffusionKernel,
)
from .core_types import (
    DitherMode,
    Palette,
    PixelBuffer,
    validate_dither_strength,
    validate_pattern,
)
from .errors import InvalidConfiguration
from .quantize import map_to_palette, nearest_palette_indices


# ---------- ordered ----------------------------------------------------------


def ordered_spread(palette_len: int) -> float:
    """Threshold amplitude at strength 1: roughly one palette step per channel."""
    return 255.0 / float(max(1, palette_len)) ** (1.0 / 3.0)


def threshold_plane(width: int, height: int, pattern: str = DEFAULT_PATTERN) -> np.ndarray:
    """Pattern offsets in (-0.5, 0.5) tiled over an image, shape [H,W]."""
    offsets = PATTERN_OFFSETS[validate_pattern(pattern)]
    reps_y = (height + BAYER_SIZE - 1) // BAYER_SIZE
    reps_x = (width + BAYER_SIZE - 1) // BAYER_SIZE
    return np.tile(offsets, (reps_y, reps_x))[:height, :width]


def ordered_dither(
    buffer: PixelBuffer,
    palette: Palette,
    *,
    strength: float = 1.0,
    pattern: str = DEFAULT_PATTERN,
    workers: int = 1,
) -> PixelBuffer:
    """Add the position's threshold to R, G and B, clamp, then snap to the palette."""
    pal_rgb = palette.as_array()
    spread = ordered_spread(pal_rgb.shape[0]) * strength
    offsets = threshold_plane(buffer.width, buffer.height, pattern)[..., None] * spread
    biased = np.clip(buffer.rgb.astype(np.float64) + offsets, 0.0, 255.0)
    idx = nearest_palette_indices(biased.reshape(-1, 3), pal_rgb, workers=workers)
    return buffer.with_rgb(pal_rgb[idx].reshape(buffer.height, buffer.width, 3))


# ---------- error diffusion --------------------------------------------------


def diffusion_targets(
    x: int, y: int, width: int, height: int, kernel: DiffusionKernel = FLOYD_STEINBERG
) -> List[Tuple[int, int, float]]:
    """In-bounds (nx, ny, weight) neighbours that receive part of (x, y)'s residual."""
    out: List[Tuple[int, int, float]] = []
    for dx, dy, w in kernel:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            out.append((nx, ny, w))
    return out


def error_diffusion(
    buffer: PixelBuffer,
    palette: Palette,
    kernel: DiffusionKernel = FLOYD_STEINBERG,
    strength: float = 1.0,
) -> PixelBuffer:
    """
    Sequential error diffusion in scan order.

    For each pixel: value = clamp(original + carried error), pick the nearest
    palette colour, and push strength * (value - chosen) to unvisited
    neighbours by the kernel weights. Weights pointing outside the image are
    dropped.
    """
    H, W = buffer.height, buffer.width
    pal = palette.as_array().astype(np.float64)
    pal_u8 = palette.as_array()
    src = buffer.rgb.astype(np.float64)
    err = np.zeros((H, W, 3), dtype=np.float64)
    out = np.empty((H, W, 3), dtype=np.uint8)

    for y in range(H):
        for x in range(W):
            value = np.clip(src[y, x] + err[y, x], 0.0, 255.0)
            diff = pal - value
            j = int(np.argmin((diff * diff).sum(axis=1)))
            out[y, x] = pal_u8[j]

            residual = (value - pal[j]) * strength
            if not residual.any():
                continue
            for nx, ny, w in diffusion_targets(x, y, W, H, kernel):
                err[ny, nx] += residual * w

    return buffer.with_rgb(out)


# ---------- dispatch ---------------------------------------------------------


def dither(
    buffer: PixelBuffer,
    palette: Palette,
    mode: Union[DitherMode, str] = DitherMode.NONE,
    *,
    strength: float = 1.0,
    pattern: str = DEFAULT_PATTERN,
    workers: int = 1,
) -> PixelBuffer:
    """
    Map buffer onto palette with the requested dithering.
    Raises InvalidConfiguration for an unknown mode or pattern, a strength
    outside [0, 2], or an empty palette.
    """
    mode = DitherMode.parse(mode)
    strength = validate_dither_strength(strength)
    pattern = validate_pattern(pattern)
    if buffer.is_empty:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    if len(palette) == 0:
        raise InvalidConfiguration("palette is empty")

    if mode is DitherMode.NONE or strength == 0.0:
        return map_to_palette(buffer, palette, workers=workers)
    if mode is DitherMode.ORDERED:
        return ordered_dither(
            buffer, palette, strength=strength, pattern=pattern, workers=workers
        )
    if mode is DitherMode.ERROR_DIFFUSION:
        return error_diffusion(buffer, palette, FLOYD_STEINBERG, strength)
    return error_diffusion(buffer, palette, ATKINSON, strength)


__all__ = [
    "ordered_spread",
    "threshold_plane",
    "ordered_dither",
    "diffusion_targets",
    "error_diffusion",
    "dither",
]
