# pixel_art/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageOps, ImageSequence, UnidentifiedImageError

from .core_types import PixelBuffer

"""
Image I/O helpers: Pillow images <-> PixelBuffer (RGBA in sRGB), single images
and animated frame sequences.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (OSError, ValueError, ImageCms.PyCMSError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def buffer_from_image(im: Image.Image) -> PixelBuffer:
    """Any Pillow image to an RGBA PixelBuffer."""
    rgba = im if im.mode == "RGBA" else im.convert("RGBA")
    arr = np.array(rgba, dtype=np.uint8)
    return PixelBuffer.from_array(arr, copy=False)


def buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    """PixelBuffer to a Pillow RGBA image (copies the samples)."""
    return Image.fromarray(np.ascontiguousarray(buffer.data).copy())


def _decode_frame(frame: Image.Image, icc: Optional[bytes] = None) -> PixelBuffer:
    """EXIF orientation, then ICC -> sRGB RGBA. Shared by stills and animation frames."""
    im = ImageOps.exif_transpose(frame)
    if icc and not im.info.get("icc_profile"):
        im.info["icc_profile"] = icc
    return buffer_from_image(_convert_to_srgb_rgba(im))


def load_image(path: Path) -> PixelBuffer:
    """Load the first frame of an image as sRGB RGBA, honouring EXIF orientation."""
    with Image.open(path) as im0:
        return _decode_frame(im0)


def save_image(path: Path, buffer: PixelBuffer) -> Path:
    """Save as PNG (the suffix is forced to .png). Returns the written path."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    buffer_to_image(buffer).save(path)
    return path


def is_animated(path: Path) -> bool:
    with Image.open(path) as im:
        return bool(getattr(im, "is_animated", False)) and int(
            getattr(im, "n_frames", 1)
        ) > 1


def load_frames(path: Path) -> Tuple[List[PixelBuffer], List[int]]:
    """
    All frames of an (optionally animated) image.

    Returns:
      frames: sRGB RGBA buffers, colour-managed and oriented like load_image()
      durations: per-frame display time in ms (100 when unspecified)
    """
    frames: List[PixelBuffer] = []
    durations: List[int] = []
    with Image.open(path) as im:
        icc = im.info.get("icc_profile")
        for frame in ImageSequence.Iterator(im):
            durations.append(int(frame.info.get("duration", 100) or 100))
            frames.append(_decode_frame(frame, icc))
    return frames, durations


def save_frames(
    path: Path,
    frames: Sequence[PixelBuffer],
    durations: Optional[Sequence[int]] = None,
    loop: int = 0,
) -> Path:
    """
    Save frames as an animated GIF (or WebP when the suffix says so).
    A single frame falls back to save_image().
    """
    if not frames:
        raise ValueError("no frames to save")
    if len(frames) == 1:
        return save_image(path, frames[0])
    suffix = path.suffix.lower()
    if suffix not in (".gif", ".webp"):
        path = path.with_suffix(".gif")
    images = [buffer_to_image(f) for f in frames]
    kwargs = {
        "save_all": True,
        "append_images": images[1:],
        "loop": loop,
        "duration": list(durations) if durations else 100,
    }
    if path.suffix.lower() == ".gif":
        kwargs["disposal"] = 2
    images[0].save(path, **kwargs)
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "buffer_from_image",
    "buffer_to_image",
    "load_image",
    "save_image",
    "is_animated",
    "load_frames",
    "save_frames",
    "is_image_file",
]
