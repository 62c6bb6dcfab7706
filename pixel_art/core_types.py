# pixel_art/core_types.py
from __future__ import annotations

"""
Core type aliases, value objects, and lightweight helpers.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .constants import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_PALETTE_SIZE,
    DEFAULT_PATTERN,
    DITHER_PATTERNS,
    MAX_DITHER_STRENGTH,
    MIN_DITHER_STRENGTH,
)
from .errors import DimensionMismatch, InvalidConfiguration

# Basic aliases

RGBTuple = Tuple[int, int, int]
Color = Tuple[int, int, int, int]  # (r, g, b, a)
HSV = Tuple[float, float, float]  # h in [0,360), s and v in [0,1]

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA or (H, W, 3) RGB
U8Rows = NDArray[np.uint8]  # (N, 3)


# Small helpers


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to nearest with .5 going up; numpy's rint rounds half to even."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def to_u8(values: np.ndarray) -> U8Image:
    """Round half-up, clamp to [0,255] and cast to uint8."""
    return np.clip(round_half_up(values), 0, 255).astype(np.uint8)


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """RGB triple to lowercase hex string '#rrggbb'."""
    return f"#{int(rgb[0]):02x}{int(rgb[1]):02x}{int(rgb[2]):02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive, '#' optional) into an RGB tuple."""
    s = hex_str.strip().lower().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        raise InvalidConfiguration(f"hex colour must be '#rrggbb' or '#rgb', got {hex_str!r}")
    try:
        return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
    except ValueError:
        raise InvalidConfiguration(f"not a hex colour: {hex_str!r}") from None


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length (or longer) sequence or array row to an (int, int, int) tuple.
    Helpful when extracting values from NumPy rows.
    """
    if len(value) < 3:  # type: ignore[arg-type]
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


# Value objects


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Immutable RGBA image: width, height and a read-only (H, W, 4) uint8 array.

    Stages never write into a buffer they receive; they build a fresh array
    and wrap it with from_array(..., copy=False).
    """

    width: int
    height: int
    data: U8Image = field(repr=False)

    def __post_init__(self) -> None:
        if int(self.width) < 0 or int(self.height) < 0:
            raise DimensionMismatch("width and height must be non-negative")
        arr = np.asarray(self.data)
        if arr.dtype != np.uint8:
            raise TypeError("expected uint8 samples")
        expected = (int(self.height), int(self.width), 4)
        if arr.size != expected[0] * expected[1] * expected[2]:
            raise DimensionMismatch(
                f"{arr.size} samples for a {self.width}x{self.height} RGBA buffer"
            )
        # always a private copy: a read-only view can still share a writable base
        arr = arr.reshape(expected).copy()
        arr.setflags(write=False)
        object.__setattr__(self, "width", int(self.width))
        object.__setattr__(self, "height", int(self.height))
        object.__setattr__(self, "data", arr)

    @classmethod
    def _adopt(cls, arr: np.ndarray) -> "PixelBuffer":
        """Wrap a freshly built (H, W, 4) uint8 array without copying it."""
        arr.setflags(write=False)
        buf = object.__new__(cls)
        object.__setattr__(buf, "width", int(arr.shape[1]))
        object.__setattr__(buf, "height", int(arr.shape[0]))
        object.__setattr__(buf, "data", arr)
        return buf

    # constructors

    @classmethod
    def from_array(cls, array: np.ndarray, *, copy: bool = True) -> "PixelBuffer":
        """
        Wrap an (H, W, 4) uint8 array. (H, W, 3) input gets an opaque alpha.
        copy=False hands ownership of a freshly built array to the buffer;
        the caller must not keep writing to it.
        """
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[-1] not in (3, 4):
            raise TypeError("expected (H,W,3) or (H,W,4) array")
        if arr.dtype != np.uint8:
            raise TypeError("expected uint8 array")
        if arr.shape[-1] == 3:
            rgba = np.empty(arr.shape[:2] + (4,), dtype=np.uint8)
            rgba[..., :3] = arr
            rgba[..., 3] = 255
            return cls._adopt(rgba)
        if copy or arr.base is not None:
            arr = arr.copy()
        return cls._adopt(arr)

    @classmethod
    def from_bytes(
        cls, width: int, height: int, samples: Union[bytes, bytearray, Sequence[int]]
    ) -> "PixelBuffer":
        """Build from a row-major RGBA byte sequence of length width*height*4."""
        if isinstance(samples, (bytes, bytearray)):
            arr = np.frombuffer(bytes(samples), dtype=np.uint8)
        else:
            arr = np.asarray(list(samples), dtype=np.int64)
            if arr.size and (arr.min() < 0 or arr.max() > 255):
                raise ValueError("samples must be in 0..255")
            arr = arr.astype(np.uint8)
        return cls(width=width, height=height, data=arr)

    @classmethod
    def filled(cls, width: int, height: int, color: Sequence[int]) -> "PixelBuffer":
        """Solid-colour buffer."""
        rgba = tuple(int(c) for c in color)
        if len(rgba) == 3:
            rgba = rgba + (255,)
        arr = np.empty((int(height), int(width), 4), dtype=np.uint8)
        arr[...] = np.asarray(rgba, dtype=np.uint8)
        return cls.from_array(arr, copy=False)

    # views

    @property
    def rgb(self) -> U8Image:
        """Read-only (H, W, 3) view."""
        return self.data[..., :3]

    @property
    def alpha(self) -> NDArray[np.uint8]:
        """Read-only (H, W) view."""
        return self.data[..., 3]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.pixel_count == 0

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width)"""
        return (self.height, self.width)

    def pixel(self, x: int, y: int) -> Color:
        r, g, b, a = self.data[y, x].tolist()
        return (r, g, b, a)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def copy_array(self) -> U8Image:
        """Writable copy of the samples for building the next stage's output."""
        return self.data.copy()

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """New buffer with the given (H, W, 3) colours and this buffer's alpha."""
        out = np.empty_like(self.data)
        out[..., :3] = rgb
        out[..., 3] = self.data[..., 3]
        return PixelBuffer.from_array(out, copy=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.data, other.data)
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class Palette:
    """Ordered, duplicate-free RGB palette."""

    colors: Tuple[RGBTuple, ...] = ()

    def __post_init__(self) -> None:
        cleaned = tuple(coerce_to_rgb_tuple(c) for c in self.colors)
        for c in cleaned:
            if any(ch < 0 or ch > 255 for ch in c):
                raise InvalidConfiguration(f"palette colour out of range: {c}")
        if len(set(cleaned)) != len(cleaned):
            raise InvalidConfiguration("palette contains duplicate colours")
        object.__setattr__(self, "colors", cleaned)

    @classmethod
    def from_colours(cls, colours: Iterable[Sequence[int]]) -> "Palette":
        """Build a palette, dropping repeats and keeping first occurrences."""
        seen = dict.fromkeys(coerce_to_rgb_tuple(c) for c in colours)
        return cls(tuple(seen))

    @classmethod
    def from_hex(cls, text: str) -> "Palette":
        """Parse a comma- or space-separated list such as '#ff0000,#0f0'."""
        parts = [p for p in text.replace(",", " ").split() if p]
        if not parts:
            raise InvalidConfiguration("palette list is empty")
        return cls.from_colours(hex_to_rgb(p) for p in parts)

    def as_array(self) -> U8Rows:
        """(P, 3) uint8 array in palette order."""
        if not self.colors:
            return np.zeros((0, 3), dtype=np.uint8)
        return np.array(self.colors, dtype=np.uint8)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[RGBTuple]:
        return iter(self.colors)

    def __contains__(self, rgb: object) -> bool:
        if not isinstance(rgb, (tuple, list)) or len(rgb) < 3:
            return False
        return coerce_to_rgb_tuple(rgb) in self.colors

    def hex_codes(self) -> Tuple[str, ...]:
        return tuple(rgb_to_hex(c) for c in self.colors)


class DitherMode(str, Enum):
    """Dithering applied against the chosen palette."""

    NONE = "none"
    ORDERED = "ordered"
    ERROR_DIFFUSION = "error_diffusion"
    ATKINSON = "atkinson"

    @classmethod
    def parse(cls, value: Union[str, "DitherMode"]) -> "DitherMode":
        """Accept an enum member or a name such as 'ordered' or 'floyd-steinberg'."""
        if isinstance(value, DitherMode):
            return value
        key = str(value).strip().lower().replace("-", "_")
        if key in ("floyd_steinberg", "floydsteinberg", "fs"):
            key = cls.ERROR_DIFFUSION.value
        for mode in cls:
            if mode.value == key:
                return mode
        raise InvalidConfiguration(f"unrecognised dither mode: {value!r}")


@dataclass(frozen=True)
class PipelineConfig:
    """Options recognised by pipeline.convert()."""

    block_size: int = DEFAULT_BLOCK_SIZE
    palette_size: int = DEFAULT_PALETTE_SIZE
    grayscale: bool = False
    invert: bool = False
    hue_lock: Optional[float] = None
    dither_mode: DitherMode = DitherMode.NONE
    dither_strength: float = 1.0
    dither_pattern: str = DEFAULT_PATTERN

    def validate(self) -> "PipelineConfig":
        """Raise InvalidConfiguration on any bad option; return self otherwise."""
        validate_block_size(self.block_size)
        validate_palette_size(self.palette_size)
        if not isinstance(self.dither_mode, DitherMode):
            raise InvalidConfiguration(
                f"unrecognised dither mode: {self.dither_mode!r}"
            )
        if self.hue_lock is not None:
            validate_hue(self.hue_lock)
        validate_dither_strength(self.dither_strength)
        validate_pattern(self.dither_pattern)
        return self


def _is_int(value: object) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def validate_block_size(block_size: object) -> int:
    if not _is_int(block_size) or int(block_size) < 1:  # type: ignore[arg-type]
        raise InvalidConfiguration(f"block size must be >= 1, got {block_size!r}")
    return int(block_size)  # type: ignore[arg-type]


def validate_palette_size(palette_size: object) -> int:
    if not _is_int(palette_size) or int(palette_size) < 1:  # type: ignore[arg-type]
        raise InvalidConfiguration(f"palette size must be >= 1, got {palette_size!r}")
    return int(palette_size)  # type: ignore[arg-type]


def validate_hue(hue: object) -> float:
    try:
        h = float(hue)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"hue must be a number, got {hue!r}") from None
    if not math.isfinite(h):
        raise InvalidConfiguration(f"hue must be finite, got {hue!r}")
    return h % 360.0


def validate_dither_strength(strength: object) -> float:
    """Strength multiplier in [0, 2]; 0 disables dithering, 1 is the default."""
    try:
        s = float(strength)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"dither strength must be a number, got {strength!r}") from None
    if not math.isfinite(s) or not MIN_DITHER_STRENGTH <= s <= MAX_DITHER_STRENGTH:
        raise InvalidConfiguration(
            f"dither strength must be in [{MIN_DITHER_STRENGTH:g}, "
            f"{MAX_DITHER_STRENGTH:g}], got {strength!r}"
        )
    return s


def validate_pattern(name: object) -> str:
    """Normalise an ordered-dither pattern name ('Lead-Glass' -> 'lead_glass')."""
    key = str(name).strip().lower().replace("-", "_")
    if key not in DITHER_PATTERNS:
        known = ", ".join(DITHER_PATTERNS)
        raise InvalidConfiguration(f"unknown dither pattern {name!r}; expected one of {known}")
    return key


__all__ = [
    # aliases / types
    "RGBTuple",
    "Color",
    "HSV",
    "U8Image",
    "U8Rows",
    # value objects
    "PixelBuffer",
    "Palette",
    "DitherMode",
    "PipelineConfig",
    # helpers
    "clamp_value",
    "round_half_up",
    "to_u8",
    "rgb_to_hex",
    "coerce_to_rgb_tuple",
    "hex_to_rgb",
    "validate_block_size",
    "validate_palette_size",
    "validate_hue",
    "validate_dither_strength",
    "validate_pattern",
]
