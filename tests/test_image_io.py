"""Tests for Pillow load/save helpers."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from pixel_art.image_io import (
    buffer_from_image,
    buffer_to_image,
    is_animated,
    is_image_file,
    load_frames,
    load_image,
    save_frames,
    save_image,
)
from tests.helpers import random_buffer


def test_png_round_trip(tmp_path: Path):
    buf = random_buffer(7, 5, seed=41)
    written = save_image(tmp_path / "out.png", buf)
    assert written.exists()
    assert load_image(written) == buf


def test_save_forces_png_suffix(tmp_path: Path):
    written = save_image(tmp_path / "out.jpg", random_buffer(2, 2))
    assert written.suffix == ".png"


def test_rgb_image_gets_opaque_alpha():
    im = Image.new("RGB", (3, 2), (10, 20, 30))
    buf = buffer_from_image(im)
    assert buf.pixel(2, 1) == (10, 20, 30, 255)
    assert buffer_to_image(buf).mode == "RGBA"


def test_animated_round_trip(tmp_path: Path):
    frames = [
        random_buffer(6, 4, seed=42, opaque=True),
        random_buffer(6, 4, seed=43, opaque=True),
        random_buffer(6, 4, seed=44, opaque=True),
    ]
    written = save_frames(tmp_path / "anim.gif", frames, [50, 60, 70])
    assert is_animated(written)
    loaded, durations = load_frames(written)
    assert len(loaded) == 3
    assert all((f.width, f.height) == (6, 4) for f in loaded)
    assert len(durations) == 3


def test_single_frame_saved_as_png(tmp_path: Path):
    written = save_frames(tmp_path / "one.gif", [random_buffer(2, 2)])
    assert written.suffix == ".png"
    assert not is_animated(written)


def test_is_image_file(tmp_path: Path):
    good = save_image(tmp_path / "a.png", random_buffer(2, 2))
    bad = tmp_path / "b.png"
    bad.write_bytes(b"not an image")
    assert is_image_file(good)
    assert not is_image_file(bad)


def test_exif_orientation_applied_to_stills_and_frames(tmp_path: Path):
    src = tmp_path / "rotated.png"
    pixels = np.zeros((2, 4, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    pixels[0, 0, :3] = (255, 0, 0)
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 CW on display
    Image.fromarray(pixels).save(src, exif=exif)

    still = load_image(src)
    frames, _durations = load_frames(src)
    assert (still.width, still.height) == (2, 4)
    assert frames[0] == still
    # top-left red pixel ends up top-right
    assert still.pixel(1, 0) == (255, 0, 0, 255)
