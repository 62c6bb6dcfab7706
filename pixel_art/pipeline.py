# pixel_art/pipeline.py
from __future__ import annotations

"""
Conversion pipeline.

Fixed stage order:
  pixelate -> grayscale? -> invert? -> lock_hue? -> build_palette -> map / dither

Every stage returns a new PixelBuffer of the input's size; a stage that breaks
that raises DimensionMismatch. Errors abort the whole conversion.
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .core_types import DitherMode, Palette, PipelineConfig, PixelBuffer
from .dither import dither
from .errors import (
    ConversionCancelled,
    DimensionMismatch,
    EmptyInput,
    InvalidConfiguration,
)
from .hue import lock_hue
from .pixelate import pixelate
from .quantize import build_palette, map_to_palette
from .tone import grayscale, invert
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string

CancelCheck = Callable[[], bool]


@dataclass(frozen=True)
class ConversionResult:
    """Output buffer plus the palette it was quantised against."""

    image: PixelBuffer
    palette: Palette


def _check_stage(name: str, before: PixelBuffer, after: PixelBuffer) -> PixelBuffer:
    if (after.width, after.height) != (before.width, before.height):
        raise DimensionMismatch(
            f"{name} produced {after.width}x{after.height} from "
            f"{before.width}x{before.height}"
        )
    return after


def _check_cancel(should_cancel: Optional[CancelCheck], next_stage: str) -> None:
    if should_cancel is not None and should_cancel():
        raise ConversionCancelled(f"cancelled before {next_stage}")


def convert_with_palette(
    buffer: PixelBuffer,
    config: PipelineConfig,
    *,
    workers: int = 1,
    palette: Optional[Palette] = None,
    should_cancel: Optional[CancelCheck] = None,
    debug: bool = False,
) -> ConversionResult:
    """
    Run the full pipeline and return the output with its palette.

    A caller-supplied palette replaces build_palette(); it is used as given,
    so config.palette_size does not limit it.

    Raises:
      InvalidConfiguration: a config precondition failed or palette is empty
      EmptyInput: buffer has no pixels
      DimensionMismatch: a stage changed the image size
      ConversionCancelled: should_cancel() returned true between stages
    """
    config.validate()
    if palette is not None and len(palette) == 0:
        raise InvalidConfiguration("palette is empty")
    if buffer.is_empty:
        raise EmptyInput(f"input is {buffer.width}x{buffer.height}")

    timings: List[tuple] = []

    def _stage(name: str, func: Callable[[PixelBuffer], PixelBuffer], src: PixelBuffer) -> PixelBuffer:
        _check_cancel(should_cancel, name)
        t0 = time.perf_counter()
        out = _check_stage(name, src, func(src))
        timings.append((name, format_seconds_compact(time.perf_counter() - t0)))
        return out

    current = _stage(
        "pixelate", lambda b: pixelate(b, config.block_size, workers=workers), buffer
    )
    if config.grayscale:
        current = _stage("grayscale", lambda b: grayscale(b, workers=workers), current)
    if config.invert:
        current = _stage("invert", lambda b: invert(b, workers=workers), current)
    if config.hue_lock is not None:
        hue = config.hue_lock
        current = _stage(
            "lock_hue", lambda b: lock_hue(b, hue, workers=workers), current
        )

    _check_cancel(should_cancel, "build_palette")
    t0 = time.perf_counter()
    if palette is None:
        palette = build_palette(current, config.palette_size)
    timings.append(("palette", format_seconds_compact(time.perf_counter() - t0)))

    if config.dither_mode is DitherMode.NONE or config.dither_strength == 0:
        current = _stage(
            "map", lambda b: map_to_palette(b, palette, workers=workers), current
        )
    else:
        current = _stage(
            "dither",
            lambda b: dither(
                b,
                palette,
                config.dither_mode,
                strength=config.dither_strength,
                pattern=config.dither_pattern,
                workers=workers,
            ),
            current,
        )

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Size", f"{buffer.width}x{buffer.height}"),
                    ("Palette", len(palette)),
                    ("Dither", config.dither_mode.value),
                ]
            )
        )
        debug_log(key_value_pairs_to_string(timings))

    return ConversionResult(image=current, palette=palette)


def convert(
    buffer: PixelBuffer,
    config: PipelineConfig,
    *,
    workers: int = 1,
    palette: Optional[Palette] = None,
    should_cancel: Optional[CancelCheck] = None,
    debug: bool = False,
) -> PixelBuffer:
    """Convert buffer to pixel art according to config. See convert_with_palette()."""
    return convert_with_palette(
        buffer,
        config,
        workers=workers,
        palette=palette,
        should_cancel=should_cancel,
        debug=debug,
    ).image


def convert_frames(
    frames: Iterable[PixelBuffer],
    config: PipelineConfig,
    *,
    workers: int = 1,
    palette: Optional[Palette] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> List[PixelBuffer]:
    """
    Convert each frame independently, e.g. the frames of an animation.
    Pass palette to keep one shared palette across frames.
    """
    return [
        convert(
            frame,
            config,
            workers=workers,
            palette=palette,
            should_cancel=should_cancel,
        )
        for frame in frames
    ]


__all__ = [
    "CancelCheck",
    "ConversionResult",
    "convert_with_palette",
    "convert",
    "convert_frames",
]
