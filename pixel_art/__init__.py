# pixel_art/__init__.py
"""
pixel_art package.

Purpose:
  Turn a decoded RGBA image into pixel art: block pixelation, optional tonal
  effects, a median-cut palette and optional dithering. See cli.py for the CLI.

Public API:
  convert        : full pipeline entry point (PixelBuffer, PipelineConfig) -> PixelBuffer
  convert_frames : the same, applied to each frame of an animation
  core_types     : PixelBuffer, Palette, PipelineConfig, DitherMode
  errors         : InvalidConfiguration, EmptyInput, DimensionMismatch, ...
  colour_convert : RGB <-> HSV
  tone, hue, pixelate, quantize, dither : the individual stages
  image_io       : Pillow load/save helpers

Quick start:
  from pixel_art import PipelineConfig, DitherMode, convert
  from pixel_art.image_io import load_image, save_image
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import errors
from . import tone
from . import hue
from . import pixelate
from . import quantize
from . import dither
from . import pipeline
from . import utils

from .core_types import DitherMode, Palette, PipelineConfig, PixelBuffer  # noqa: E402
from .errors import (  # noqa: E402
    ConversionCancelled,
    DimensionMismatch,
    EmptyInput,
    InvalidConfiguration,
    PixelArtError,
)
from .pipeline import ConversionResult, convert, convert_frames, convert_with_palette  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "errors",
    "tone",
    "hue",
    "pixelate",
    "quantize",
    "dither",
    "pipeline",
    "utils",
    "DitherMode",
    "Palette",
    "PipelineConfig",
    "PixelBuffer",
    "PixelArtError",
    "InvalidConfiguration",
    "EmptyInput",
    "DimensionMismatch",
    "ConversionCancelled",
    "ConversionResult",
    "convert",
    "convert_frames",
    "convert_with_palette",
]
