"""Tests for block pixelation."""

from __future__ import annotations

import numpy as np
import pytest

from pixel_art.core_types import PixelBuffer
from pixel_art.errors import InvalidConfiguration
from pixel_art.pixelate import cell_grid, expand_cells, pixelate, reduce_to_cells
from tests.helpers import buffer_from_pixels, random_buffer


# ---------------------------------------------------------------------------
# Reference implementation (plain loops)
# ---------------------------------------------------------------------------


def _reference_pixelate(arr: np.ndarray, block: int) -> np.ndarray:
    h, w = arr.shape[:2]
    out = np.empty_like(arr)
    for y0 in range(0, h, block):
        for x0 in range(0, w, block):
            cell = arr[y0 : y0 + block, x0 : x0 + block].astype(np.int64)
            n = cell.shape[0] * cell.shape[1]
            sums = cell.reshape(-1, 4).sum(axis=0)
            out[y0 : y0 + block, x0 : x0 + block] = (2 * sums + n) // (2 * n)
    return out


class TestPixelate:
    def test_cell_mean(self):
        buf = buffer_from_pixels(
            2,
            2,
            [(0, 0, 0, 255), (255, 255, 255, 255), (10, 20, 30, 255), (20, 40, 60, 255)],
        )
        out = pixelate(buf, 2)
        for y in range(2):
            for x in range(2):
                assert out.pixel(x, y) == (71, 79, 86, 255)

    def test_halves_round_up(self):
        buf = buffer_from_pixels(2, 1, [(0, 0, 0, 0), (1, 1, 1, 1)])
        assert pixelate(buf, 2).pixel(0, 0) == (1, 1, 1, 1)

    @pytest.mark.parametrize("block", [2, 3, 4, 7])
    def test_matches_reference_with_edge_cells(self, block):
        buf = random_buffer(13, 11, seed=block)
        expected = _reference_pixelate(buf.copy_array(), block)
        assert np.array_equal(pixelate(buf, block).data, expected)

    def test_cells_are_uniform(self):
        out = pixelate(random_buffer(12, 8, seed=1), 4)
        for y0 in range(0, 8, 4):
            for x0 in range(0, 12, 4):
                cell = out.data[y0 : y0 + 4, x0 : x0 + 4].reshape(-1, 4)
                assert np.all(cell == cell[0])

    def test_block_one_is_identity(self):
        buf = random_buffer(5, 4, seed=2)
        assert pixelate(buf, 1) == buf

    def test_block_covering_image_gives_solid_colour(self):
        out = pixelate(random_buffer(6, 5, seed=3), 50)
        flat = out.data.reshape(-1, 4)
        assert np.all(flat == flat[0])

    def test_dimensions_kept(self):
        out = pixelate(random_buffer(9, 7), 4)
        assert (out.width, out.height) == (9, 7)

    @pytest.mark.parametrize("block", [0, -1, 1.5, None])
    def test_invalid_block(self, block):
        with pytest.raises(InvalidConfiguration):
            pixelate(random_buffer(4, 4), block)

    def test_threaded_matches_single(self):
        buf = random_buffer(20, 256, seed=4)
        assert pixelate(buf, 3, workers=4) == pixelate(buf, 3)

    def test_empty(self):
        assert pixelate(PixelBuffer.filled(0, 4, (0, 0, 0)), 2).is_empty


class TestCells:
    def test_cell_grid(self):
        rows, cols = cell_grid(5, 3, 2)
        assert rows.tolist() == [0, 2]
        assert cols.tolist() == [0, 2, 4]

    def test_reduce_shape(self):
        cells = reduce_to_cells(random_buffer(10, 7), 4)
        assert (cells.width, cells.height) == (3, 2)

    def test_expand_inverts_reduce(self):
        buf = random_buffer(10, 7, seed=5)
        cells = reduce_to_cells(buf, 4)
        assert expand_cells(cells, 4, 10, 7) == pixelate(buf, 4)
