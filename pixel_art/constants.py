# pixel_art/constants.py
"""
Read-only tables and tunables shared across the pipeline.

- LUMA_WEIGHTS
- BAYER_8X8 and the named 8x8 ordered-dither patterns
- FLOYD_STEINBERG / ATKINSON diffusion kernels
- Pipeline and CLI defaults
"""
from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

# =========
# Tone
# =========
LUMA_R: float = 0.30
LUMA_G: float = 0.59
LUMA_B: float = 0.11
LUMA_WEIGHTS: Tuple[float, float, float] = (LUMA_R, LUMA_G, LUMA_B)

# ==============
# Ordered dither
# ==============
BAYER_SIZE: int = 8


def bayer_matrix(n: int) -> np.ndarray:
    """
    Recursive Bayer index matrix of size n x n (n a power of two).
    Entries are the integers 0 .. n*n-1.
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError("bayer size must be a power of two")
    m = np.zeros((1, 1), dtype=np.int32)
    while m.shape[0] < n:
        m = np.block([[4 * m, 4 * m + 2], [4 * m + 3, 4 * m + 1]])
    return m.astype(np.int32, copy=False)


BAYER_8X8: np.ndarray = bayer_matrix(BAYER_SIZE)
BAYER_8X8.setflags(write=False)

_YY, _XX = np.mgrid[0:BAYER_SIZE, 0:BAYER_SIZE]

_NOISE_8X8 = np.array(
    [
        [35, 5, 48, 14, 22, 59, 2, 40],
        [11, 26, 33, 63, 7, 54, 19, 0],
        [44, 16, 28, 9, 58, 13, 36, 23],
        [30, 46, 1, 32, 20, 41, 52, 10],
        [27, 6, 57, 15, 47, 21, 31, 50],
        [3, 61, 12, 38, 18, 43, 60, 24],
        [56, 39, 4, 25, 29, 55, 49, 8],
        [42, 37, 62, 34, 17, 53, 6, 51],
    ]
)

_POLKADOT_8X8 = np.array(
    [
        [63, 63, 0, 0, 0, 0, 63, 63],
        [63, 0, 0, 0, 0, 0, 0, 63],
        [0, 0, 0, 63, 63, 0, 0, 0],
        [0, 0, 63, 63, 63, 63, 0, 0],
        [0, 0, 63, 63, 63, 63, 0, 0],
        [0, 0, 0, 63, 63, 0, 0, 0],
        [63, 0, 0, 0, 0, 0, 0, 63],
        [63, 63, 0, 0, 0, 0, 63, 63],
    ]
)

_MESH_8X8 = np.where((_XX == _YY) | (_XX + _YY == BAYER_SIZE - 1), 0, 63)


def _frozen(arr: np.ndarray, dtype=np.int32) -> np.ndarray:
    out = np.array(arr, dtype=dtype)
    out.setflags(write=False)
    return out


# Named 8x8 threshold patterns, entries in 0..63
DITHER_PATTERNS: Dict[str, np.ndarray] = {
    "basic": BAYER_8X8,
    "noise": _NOISE_8X8,
    "plaid": np.minimum(63, 32 * ((_XX % 2) + (_YY % 2))),
    "checkered": 63 * ((_XX + _YY) % 2),
    "lead_glass": np.minimum(63, 9 * (_XX + _YY)),
    "crt_vertical": 63 * (_XX % 2),
    "crt_horizontal": 63 * (_YY % 2),
    "diagonal": np.array([0, 32, 63, 32])[(_XX - _YY) % 4],
    "mesh_light": _MESH_8X8,
    "mesh_dark": 63 - _MESH_8X8,
    "polkadot_light": _POLKADOT_8X8,
    "polkadot_dark": 63 - _POLKADOT_8X8,
}
DITHER_PATTERNS = {name: _frozen(t) for name, t in DITHER_PATTERNS.items()}
DEFAULT_PATTERN: str = "basic"

# Centred offsets in (-0.5, 0.5) per pattern
PATTERN_OFFSETS: Dict[str, np.ndarray] = {
    name: _frozen((t + 0.5) / float(BAYER_SIZE * BAYER_SIZE) - 0.5, np.float64)
    for name, t in DITHER_PATTERNS.items()
}

# Dither strength bounds: scales the ordered threshold and the diffused residual
MIN_DITHER_STRENGTH: float = 0.0
MAX_DITHER_STRENGTH: float = 2.0

# ======================
# Error diffusion (dx, dy, weight)
# ======================
DiffusionKernel = Tuple[Tuple[int, int, float], ...]

FLOYD_STEINBERG: DiffusionKernel = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)

# Atkinson spreads 6/8 of the residual; the rest is dropped.
ATKINSON: DiffusionKernel = (
    (1, 0, 1 / 8),
    (2, 0, 1 / 8),
    (-1, 1, 1 / 8),
    (0, 1, 1 / 8),
    (1, 1, 1 / 8),
    (0, 2, 1 / 8),
)

# ==========
# Defaults
# ==========
DEFAULT_BLOCK_SIZE: int = 8
DEFAULT_PALETTE_SIZE: int = 16

# Rows per chunk below which threaded helpers run inline
MIN_ROWS_PER_WORKER: int = 64

# Rows per nearest-palette chunk, and the cap on rows x palette entries per chunk
NEAREST_CHUNK: int = 200_000
NEAREST_MAX_ELEMS: int = 4_000_000

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}
OUTPUT_SUFFIX: str = "_pixel"

__all__ = [
    "LUMA_R",
    "LUMA_G",
    "LUMA_B",
    "LUMA_WEIGHTS",
    "BAYER_SIZE",
    "bayer_matrix",
    "BAYER_8X8",
    "DITHER_PATTERNS",
    "DEFAULT_PATTERN",
    "PATTERN_OFFSETS",
    "MIN_DITHER_STRENGTH",
    "MAX_DITHER_STRENGTH",
    "DiffusionKernel",
    "FLOYD_STEINBERG",
    "ATKINSON",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_PALETTE_SIZE",
    "MIN_ROWS_PER_WORKER",
    "NEAREST_CHUNK",
    "NEAREST_MAX_ELEMS",
    "IMAGE_EXTS",
    "OUTPUT_SUFFIX",
]
