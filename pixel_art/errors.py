# pixel_art/errors.py
from __future__ import annotations

"""
Error types raised by the conversion pipeline.

Exports:
  PixelArtError        : common base
  InvalidConfiguration : bad block size, palette size, dither mode or hue
  EmptyInput           : zero-pixel input buffer
  DimensionMismatch    : a buffer whose sample count disagrees with its size
  ConversionCancelled  : caller asked to stop between stages
"""


class PixelArtError(Exception):
    """Base class for every error surfaced by pixel_art."""


class InvalidConfiguration(PixelArtError, ValueError):
    """A stage precondition on its configuration was violated."""


class EmptyInput(PixelArtError, ValueError):
    """The input buffer has zero pixels."""


class DimensionMismatch(PixelArtError, RuntimeError):
    """A buffer's samples do not match its declared width and height."""


class ConversionCancelled(PixelArtError):
    """Raised between stages when the caller's cancel check returns true."""


__all__ = [
    "PixelArtError",
    "InvalidConfiguration",
    "EmptyInput",
    "DimensionMismatch",
    "ConversionCancelled",
]
