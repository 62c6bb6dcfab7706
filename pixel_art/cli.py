# pixel_art/cli.py
"""
pixel_art.cli
Convert images (or a folder of images) to pixel art.

Usage:
  pixel-art INPUT [OUTPUT] --block-size B --palette-size N [--grayscale] [--invert]
            [--hue-lock H] [--dither none|ordered|error_diffusion|atkinson]
            [--dither-strength S] [--pattern NAME]
            [--palette HEX,HEX,... | --palette-from IMAGE]
            [--cells] [--scale K] [--workers W] [--debug]

Input:
  Any Pillow-readable image. Alpha is preserved. Animated GIF/WebP inputs are
  converted frame by frame with the same settings.

Output:
  PNG (GIF for animations). If OUTPUT is omitted, writes <stem>_pixel.png next
  to INPUT, or into --outdir when given.

Palette:
  By default each image gets its own median-cut palette of --palette-size
  colours. --palette fixes the colours; --palette-from builds the palette
  from another image and reuses it for every input.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .constants import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_PALETTE_SIZE,
    DEFAULT_PATTERN,
    DITHER_PATTERNS,
    IMAGE_EXTS,
    OUTPUT_SUFFIX,
)
from .core_types import DitherMode, Palette, PipelineConfig, PixelBuffer, rgb_to_hex
from .errors import PixelArtError
from .image_io import (
    is_animated,
    is_image_file,
    load_frames,
    load_image,
    save_frames,
    save_image,
)
from .pipeline import ConversionResult, convert_with_palette
from .pixelate import expand_cells, reduce_to_cells
from .quantize import build_palette, palette_usage, sort_palette_by_hsv
from .utils import (
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_percentage,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
    warn,
)

# CLI args & small helpers


def _default_workers() -> int:
    """Leave a few cores free for the system; returns a sensible worker count."""
    n = os.cpu_count() or 4
    reserve = 1 if n <= 6 else 2 if n <= 12 else 3 if n <= 18 else 4
    return max(1, n - reserve)


def _dither_choice(value: str) -> DitherMode:
    try:
        return DitherMode.parse(value)
    except PixelArtError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixel-art",
        description="Pixelate, recolour and dither image(s) into pixel art.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "dst", type=Path, nargs="?", default=None, help="Output file (single input only)"
    )
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "-b", "--block-size", type=int, default=DEFAULT_BLOCK_SIZE, help="Cell size in pixels"
    )
    parser.add_argument(
        "-p", "--palette-size", type=int, default=DEFAULT_PALETTE_SIZE, help="Palette entries"
    )
    parser.add_argument("--grayscale", action="store_true", help="Luma grayscale")
    parser.add_argument("--invert", action="store_true", help="Invert colours")
    parser.add_argument(
        "--hue-lock", type=float, default=None, help="Force every pixel to this hue (degrees)"
    )
    parser.add_argument(
        "--dither",
        type=_dither_choice,
        default=DitherMode.NONE,
        help="none | ordered | error_diffusion (floyd-steinberg) | atkinson",
    )
    parser.add_argument(
        "--dither-strength",
        type=float,
        default=1.0,
        help="0..2; scales the ordered threshold and the diffused error",
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="Ordered pattern: " + ", ".join(DITHER_PATTERNS),
    )
    fixed = parser.add_mutually_exclusive_group()
    fixed.add_argument(
        "--palette", default=None, help="Fixed palette, e.g. '#000,#ff0044,#ffffff'"
    )
    fixed.add_argument(
        "--palette-from",
        type=Path,
        default=None,
        help="Build the palette from this image and use it for every input",
    )
    parser.add_argument(
        "--cells", action="store_true", help="Write one pixel per cell instead of full size"
    )
    parser.add_argument(
        "--scale", type=int, default=1, help="Nearest-neighbour upscale of the written image"
    )
    parser.add_argument(
        "--workers", type=int, default=_default_workers(), help="Internal workers"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose stage details")
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        block_size=args.block_size,
        palette_size=args.palette_size,
        grayscale=args.grayscale,
        invert=args.invert,
        hue_lock=args.hue_lock,
        dither_mode=args.dither,
        dither_strength=args.dither_strength,
        dither_pattern=args.pattern,
    )


def palette_from_args(args: argparse.Namespace, config: PipelineConfig) -> Optional[Palette]:
    """Fixed palette requested on the command line, or None for per-image palettes."""
    if args.palette is not None:
        return Palette.from_hex(args.palette)
    if args.palette_from is not None:
        return build_palette(load_image(args.palette_from), config.palette_size)
    return None


def _convert(
    buffer: PixelBuffer,
    config: PipelineConfig,
    *,
    cells: bool,
    palette: Optional[Palette],
    workers: int,
    debug: bool,
) -> ConversionResult:
    """
    Convert one buffer. With cells, the cell means are converted as a
    one-pixel-per-cell image, so palette choice and dithering happen at the
    written resolution.
    """
    if cells:
        buffer = reduce_to_cells(buffer, config.block_size)
        config = replace(config, block_size=1)
    return convert_with_palette(
        buffer, config, workers=workers, palette=palette, debug=debug
    )


def _upscale(image: PixelBuffer, scale: int) -> PixelBuffer:
    if scale <= 1:
        return image
    return expand_cells(image, scale, image.width * scale, image.height * scale)


def _report_palette(image: PixelBuffer, palette: Palette) -> None:
    usage = palette_usage(image, palette)
    total = int(usage.sum()) or 1
    by_colour = dict(zip(palette.colors, usage.tolist()))
    log(f"Palette ({len(palette)} colours):")
    for rgb in sort_palette_by_hsv(palette):
        count = by_colour[rgb]
        log(f"  {rgb_to_hex(rgb)}: {count:,}  ({format_percentage(count / total)})")


# Per-file processing


def _output_path(src: Path, dst: Optional[Path], outdir: Optional[Path], animated: bool) -> Path:
    if dst is not None:
        return dst
    suffix = ".gif" if animated else ".png"
    name = f"{src.stem}{OUTPUT_SUFFIX}{suffix}"
    return (outdir / name) if outdir else src.with_name(name)


def process_single_image(
    src: Path,
    dst: Optional[Path],
    outdir: Optional[Path],
    config: PipelineConfig,
    *,
    cells: bool,
    scale: int,
    workers: int,
    debug: bool,
    palette: Optional[Palette] = None,
) -> Path:
    """
    Process one file end-to-end:
      load -> convert (at cell resolution with cells) -> upscale -> save -> report.
    """
    t_start = time.perf_counter()
    print_banner(src.name)
    animated = is_animated(src)
    out_path = _output_path(src, dst, outdir, animated)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    def _run(buffer: PixelBuffer) -> ConversionResult:
        return _convert(
            buffer, config, cells=cells, palette=palette, workers=workers, debug=debug
        )

    if animated:
        frames, durations = load_frames(src)
        if debug:
            debug_log(
                key_value_pairs_to_string(
                    [("Frames", len(frames)), ("Size", f"{frames[0].width}x{frames[0].height}")]
                )
            )
        outputs = [_upscale(_run(frame).image, scale) for frame in frames]
        written = save_frames(out_path, outputs, durations)
        log(f"Wrote {written.name} | frames={len(outputs)} | size={outputs[0].width}x{outputs[0].height}")
    else:
        buffer = load_image(src)
        if debug:
            opaque = int(np.count_nonzero(buffer.alpha == 255))
            debug_log(
                key_value_pairs_to_string(
                    [("Loaded", f"{buffer.width}x{buffer.height}"), ("Alpha=255", opaque)]
                )
            )
        t_conv0 = time.perf_counter()
        result = _run(buffer)
        t_conv1 = time.perf_counter()
        out = _upscale(result.image, scale)
        written = save_image(out_path, out)
        log(f"Wrote {written.name} | size={out.width}x{out.height} | palette_size={len(result.palette)}")
        _report_palette(result.image, result.palette)
        if debug:
            debug_log(f"convert {format_seconds_compact(t_conv1 - t_conv0)}")

    log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")
    return written


def _collect_inputs(src: Path) -> List[Path]:
    files: List[Path] = []
    for p in sorted(src.iterdir(), key=lambda p: p.name.lower()):
        if not p.is_file() or p.suffix.lower() not in IMAGE_EXTS:
            continue
        if p.stem.endswith(OUTPUT_SUFFIX):
            continue
        if not is_image_file(p):
            warn(f"skipping unreadable image: {p.name}")
            continue
        files.append(p)
    return files


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point. Returns the process exit code:
      0 success
      1 bad option, unreadable image or conversion error
      2 missing input path, or OUTPUT given with a folder input
    """
    enable_line_buffered_stdout()
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args).validate()
    except PixelArtError as exc:
        error(str(exc))
        return 1

    print_config_line(
        "run",
        [
            ("Block", config.block_size),
            ("Palette", config.palette_size),
            ("Grayscale", config.grayscale),
            ("Invert", config.invert),
            ("Hue lock", "-" if config.hue_lock is None else config.hue_lock),
            ("Dither", config.dither_mode.value),
            ("Strength", config.dither_strength),
            ("Pattern", config.dither_pattern),
            ("Workers", args.workers),
        ],
        debug=False,
    )

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2
    if args.palette_from is not None and not args.palette_from.exists():
        error(f"not found: {args.palette_from}")
        return 2

    try:
        palette = palette_from_args(args, config)
    except (PixelArtError, OSError) as exc:
        error(f"palette: {exc}")
        return 1
    if palette is not None:
        log(f"Fixed palette: {' '.join(palette.hex_codes())}")

    if src.is_dir():
        if args.dst is not None:
            error("OUTPUT cannot be used with a folder input; use --outdir")
            return 2
        targets = _collect_inputs(src)
        if not targets:
            warn(f"no images found in {src}")
        if args.debug:
            debug_log(key_value_pairs_to_string([("Images", len(targets))]))
    else:
        targets = [src]

    failures = 0
    for path in targets:
        try:
            process_single_image(
                path,
                args.dst,
                args.outdir,
                config,
                cells=args.cells,
                scale=max(1, args.scale),
                workers=max(1, args.workers),
                debug=args.debug,
                palette=palette,
            )
        except (PixelArtError, OSError) as exc:
            # UnidentifiedImageError is an OSError
            error(f"{path.name}: {exc}")
            failures += 1
    return 1 if failures else 0


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
