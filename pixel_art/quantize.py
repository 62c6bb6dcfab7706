# pixel_art/quantize.py
from __future__ import annotations

"""
Palette quantisation.

build_palette() runs a deterministic median cut over the distinct colours of a
buffer (weighted by pixel count). map_to_palette() snaps every pixel to its
nearest palette entry by squared RGB distance; ties go to the earliest entry.

Exports:
  distinct_colours(buffer) -> (colours, counts)
  build_palette(buffer, palette_size) -> Palette
  nearest_palette_indices(rgb_rows, palette_rgb, workers=1) -> indices
  map_to_palette(buffer, palette, workers=1) -> PixelBuffer
  palette_usage(buffer, palette) -> counts per entry
  sort_palette_by_hsv(palette) -> Palette
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from .colour_convert import hsv_sort_key
from .constants import NEAREST_CHUNK, NEAREST_MAX_ELEMS
from .core_types import (
    Palette,
    PixelBuffer,
    U8Rows,
    validate_palette_size,
)
from .errors import InvalidConfiguration

# Distinct colours


def distinct_colours(buffer: PixelBuffer) -> Tuple[U8Rows, np.ndarray]:
    """
    Distinct RGB rows in first-occurrence (row-major) order with pixel counts.

    Returns:
      colours: uint8 [U,3]
      counts: int64 [U]
    """
    if buffer.is_empty:
        return np.zeros((0, 3), dtype=np.uint8), np.zeros((0,), dtype=np.int64)
    flat = buffer.rgb.reshape(-1, 3)
    uniques, first_idx, counts = np.unique(
        flat, axis=0, return_index=True, return_counts=True
    )
    order = np.argsort(first_idx, kind="stable")
    return (
        uniques[order].astype(np.uint8, copy=False),
        counts[order].astype(np.int64, copy=False),
    )


# Median cut


def _box_range(colours: np.ndarray, idx: np.ndarray) -> np.ndarray:
    """Per-channel value range [3] of a box; zeros for single-colour boxes."""
    if idx.size < 2:
        return np.zeros((3,), dtype=np.int64)
    sub = colours[idx]
    return sub.max(axis=0) - sub.min(axis=0)


def _split_box(
    colours: np.ndarray, counts: np.ndarray, idx: np.ndarray, channel: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split a box along channel at the count-weighted median.

    Equal channel values always land on the same side, so the two halves have
    disjoint ranges on that channel. Ties between candidate cut points go to
    the earlier cut.
    """
    order = np.argsort(colours[idx, channel], kind="stable")
    idx_sorted = idx[order]
    values = colours[idx_sorted, channel]
    cum = np.cumsum(counts[idx_sorted])
    half = cum[-1] / 2.0

    # cut b puts idx_sorted[:b] on the left; only where the value changes
    cuts = np.nonzero(values[1:] != values[:-1])[0] + 1
    left_weight = cum[cuts - 1]
    best = int(cuts[int(np.argmin(np.abs(left_weight - half)))])
    return idx_sorted[:best], idx_sorted[best:]


def _box_colour(colours: np.ndarray, counts: np.ndarray, idx: np.ndarray) -> Tuple[int, int, int]:
    """Count-weighted mean colour of a box, rounded half-up in integers."""
    w = counts[idx]
    total = int(w.sum())
    sums = (colours[idx].astype(np.int64) * w[:, None]).sum(axis=0)
    mean = (2 * sums + total) // (2 * total)
    return (int(mean[0]), int(mean[1]), int(mean[2]))


def median_cut(colours: np.ndarray, counts: np.ndarray, palette_size: int) -> List[Tuple[int, int, int]]:
    """
    Median cut over distinct colours.

    Repeatedly splits the box whose widest channel range is largest (earliest
    box on ties) along that channel (R, then G, then B on ties) until
    palette_size boxes exist or no box holds more than one colour.
    """
    colours_i = colours.astype(np.int64, copy=False)
    boxes: List[np.ndarray] = [np.arange(colours_i.shape[0], dtype=np.int64)]
    ranges: List[np.ndarray] = [_box_range(colours_i, boxes[0])]

    while len(boxes) < palette_size:
        best = -1
        best_range = 0
        for i, rng in enumerate(ranges):
            widest = int(rng.max())
            if widest > best_range:
                best, best_range = i, widest
        if best < 0:
            break

        channel = int(np.argmax(ranges[best]))
        left, right = _split_box(colours_i, counts, boxes[best], channel)
        boxes[best : best + 1] = [left, right]
        ranges[best : best + 1] = [
            _box_range(colours_i, left),
            _box_range(colours_i, right),
        ]

    return [_box_colour(colours_i, counts, idx) for idx in boxes]


def build_palette(buffer: PixelBuffer, palette_size: int) -> Palette:
    """
    Reduce the buffer's colours to at most palette_size entries.

    When the buffer has no more distinct colours than requested, the palette is
    exactly those colours in first-occurrence order. An empty buffer gives an
    empty palette. Raises InvalidConfiguration when palette_size < 1.
    """
    n = validate_palette_size(palette_size)
    colours, counts = distinct_colours(buffer)
    if colours.shape[0] == 0:
        return Palette()
    if colours.shape[0] <= n:
        return Palette(tuple(tuple(int(c) for c in row) for row in colours.tolist()))
    return Palette.from_colours(median_cut(colours, counts, n))


# Nearest mapping


def _nearest_block(rows: np.ndarray, pal: np.ndarray, pal_sq: np.ndarray) -> np.ndarray:
    """argmin over |x - p|^2 for one block of rows; first index wins on ties."""
    rows_f = rows.astype(np.float64, copy=False)
    d2 = (
        (rows_f * rows_f).sum(axis=1)[:, None]
        - 2.0 * (rows_f @ pal.T)
        + pal_sq[None, :]
    )
    return np.argmin(d2, axis=1)


def nearest_palette_indices(
    rgb_rows: np.ndarray,
    palette_rgb: np.ndarray,
    workers: int = 1,
    chunk: int = NEAREST_CHUNK,
) -> np.ndarray:
    """
    Index of the nearest palette row (squared Euclidean RGB) for each row.

    Args:
      rgb_rows: [N,3] uint8 or float colours
      palette_rgb: [P,3] palette colours
      workers: threads; chunks are spread over the pool
      chunk: rows per chunk (lowered for large palettes to bound memory)
    Returns:
      int64 [N]
    """
    pal = np.asarray(palette_rgb, dtype=np.float64).reshape(-1, 3)
    if pal.shape[0] == 0:
        raise InvalidConfiguration("palette is empty")
    rows = np.asarray(rgb_rows).reshape(-1, 3)
    n = rows.shape[0]
    if n == 0:
        return np.zeros((0,), dtype=np.int64)

    pal_sq = (pal * pal).sum(axis=1)
    step = max(1, min(int(chunk), NEAREST_MAX_ELEMS // pal.shape[0]))
    spans = [(s, min(s + step, n)) for s in range(0, n, step)]

    if workers <= 1 or len(spans) == 1:
        parts = [_nearest_block(rows[s:e], pal, pal_sq) for s, e in spans]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_nearest_block, rows[s:e], pal, pal_sq) for s, e in spans
            ]
            parts = [f.result() for f in futures]
    return np.concatenate(parts).astype(np.int64, copy=False)


def map_to_palette(
    buffer: PixelBuffer, palette: Palette, *, workers: int = 1
) -> PixelBuffer:
    """
    Replace each pixel's RGB with its nearest palette colour; alpha is kept.

    Distinct colours are resolved once and scattered back through the inverse
    index. Raises InvalidConfiguration for an empty palette on a non-empty buffer.
    """
    if buffer.is_empty:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    pal_rgb = palette.as_array()
    if pal_rgb.shape[0] == 0:
        raise InvalidConfiguration("palette is empty")

    flat = buffer.rgb.reshape(-1, 3)
    uniques, inverse = np.unique(flat, axis=0, return_inverse=True)
    nearest = nearest_palette_indices(uniques, pal_rgb, workers=workers)
    mapped = pal_rgb[nearest[inverse.reshape(-1)]]
    return buffer.with_rgb(mapped.reshape(buffer.height, buffer.width, 3))


# Reports


def palette_usage(buffer: PixelBuffer, palette: Palette) -> np.ndarray:
    """
    Pixel count per palette entry for a buffer already mapped to the palette.
    Colours outside the palette are not counted.
    """
    usage = np.zeros((len(palette),), dtype=np.int64)
    if buffer.is_empty or len(palette) == 0:
        return usage
    colours, counts = distinct_colours(buffer)
    lookup = {c: i for i, c in enumerate(palette.colors)}
    for row, count in zip(colours.tolist(), counts.tolist()):
        j = lookup.get((row[0], row[1], row[2]))
        if j is not None:
            usage[j] += count
    return usage


def sort_palette_by_hsv(palette: Palette) -> Palette:
    """Display order: brighter first, then more saturated, then by hue."""
    return Palette(tuple(sorted(palette.colors, key=hsv_sort_key)))


__all__ = [
    "distinct_colours",
    "median_cut",
    "build_palette",
    "nearest_palette_indices",
    "map_to_palette",
    "palette_usage",
    "sort_palette_by_hsv",
]
