# pixel_art/pixelate.py
from __future__ import annotations

"""
Pixelation: block averaging over a grid of square cells.

The output keeps the input's dimensions; every pixel of a cell carries the
cell's mean RGBA. Cells on the right and bottom edges are truncated when the
size does not divide evenly. Sums are accumulated in int64, so results do not
depend on summation order.
"""

from functools import partial
from typing import Tuple

import numpy as np

from .core_types import PixelBuffer, validate_block_size
from .utils import run_row_chunks


def cell_grid(width: int, height: int, block_size: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Cell boundaries.

    Returns:
      row_starts: int64 [R] first row of each cell row
      col_starts: int64 [C] first column of each cell column
    """
    block = validate_block_size(block_size)
    return (
        np.arange(0, max(0, int(height)), block, dtype=np.int64),
        np.arange(0, max(0, int(width)), block, dtype=np.int64),
    )


def _cell_means(rgba: np.ndarray, block: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Per-cell mean RGBA, rounded half-up.

    Returns:
      means: uint8 [R,C,4]
      row_sizes: int64 [R]
      col_sizes: int64 [C]
    """
    height, width = rgba.shape[0], rgba.shape[1]
    row_starts, col_starts = cell_grid(width, height, block)
    row_sizes = np.diff(np.append(row_starts, height))
    col_sizes = np.diff(np.append(col_starts, width))

    sums = np.add.reduceat(rgba.astype(np.int64), row_starts, axis=0)
    sums = np.add.reduceat(sums, col_starts, axis=1)
    counts = (row_sizes[:, None] * col_sizes[None, :])[..., None]
    means = (2 * sums + counts) // (2 * counts)
    return np.clip(means, 0, 255).astype(np.uint8), row_sizes, col_sizes


def _pixelate_rows(rgba: np.ndarray, block: int) -> np.ndarray:
    means, row_sizes, col_sizes = _cell_means(rgba, block)
    return np.repeat(np.repeat(means, row_sizes, axis=0), col_sizes, axis=1)


def pixelate(buffer: PixelBuffer, block_size: int, *, workers: int = 1) -> PixelBuffer:
    """
    Replace every block_size x block_size cell with its mean colour.

    Raises InvalidConfiguration when block_size < 1. A block_size covering the
    whole image yields a single solid colour.
    """
    block = validate_block_size(block_size)
    if buffer.is_empty:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    if block == 1:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    out = run_row_chunks(
        partial(_pixelate_rows, block=block), buffer.data, workers, align=block
    )
    return PixelBuffer.from_array(out, copy=False)


def reduce_to_cells(buffer: PixelBuffer, block_size: int) -> PixelBuffer:
    """One pixel per cell: a ceil(W/b) x ceil(H/b) image of the cell means."""
    block = validate_block_size(block_size)
    if buffer.is_empty:
        return PixelBuffer.from_array(buffer.copy_array(), copy=False)
    means, _rows, _cols = _cell_means(buffer.data, block)
    return PixelBuffer.from_array(means, copy=False)


def expand_cells(cells: PixelBuffer, block_size: int, width: int, height: int) -> PixelBuffer:
    """
    Inverse of reduce_to_cells(): repeat each cell pixel over its block and
    crop to width x height.
    """
    block = validate_block_size(block_size)
    arr = np.repeat(np.repeat(cells.data, block, axis=0), block, axis=1)
    return PixelBuffer.from_array(arr[:height, :width], copy=True)


__all__ = ["cell_grid", "pixelate", "reduce_to_cells", "expand_cells"]
