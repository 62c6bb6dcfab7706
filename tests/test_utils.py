"""Tests for row partitioning and formatting helpers."""

from __future__ import annotations

import numpy as np

from pixel_art.utils import (
    format_percentage,
    format_seconds_compact,
    key_value_pairs_to_string,
    run_row_chunks,
    split_rows_into_parts,
)


class TestRowSplitting:
    def test_covers_all_rows(self):
        spans = split_rows_into_parts(100, 3)
        assert spans[0][0] == 0 and spans[-1][1] == 100
        assert all(a[1] == b[0] for a, b in zip(spans, spans[1:]))

    def test_aligned_starts(self):
        spans = split_rows_into_parts(100, 4, align=8)
        assert all(start % 8 == 0 for start, _end in spans)

    def test_empty(self):
        assert split_rows_into_parts(0, 4) == []

    def test_run_row_chunks_concatenates_in_order(self):
        arr = np.arange(300 * 2).reshape(300, 2)
        out = run_row_chunks(lambda rows: rows * 2, arr, 4)
        assert np.array_equal(out, arr * 2)


class TestFormatting:
    def test_seconds(self):
        assert format_seconds_compact(0.25) == "250.0ms"
        assert format_seconds_compact(2.5) == "2.500s"
        assert format_seconds_compact(75.0) == "1m 15.0s"

    def test_percentage(self):
        assert format_percentage(0.125) == "12.5%"

    def test_pairs(self):
        text = key_value_pairs_to_string([("Block", 8), ("Grayscale", True), ("Size", 1234)])
        assert text == "Block: 8  Grayscale: on  Size: 1,234"
