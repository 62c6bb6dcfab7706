# pixel_art/utils.py
from __future__ import annotations

"""
Shared utilities for pixel_art.

Includes row partitioning and threaded row-chunk execution used by the
per-pixel stages, time formatting, and tidy logging.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Tuple

import numpy as np

from .constants import MIN_ROWS_PER_WORKER


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_total_duration_compact(seconds: float) -> str:
    """Compact total duration: 'Mm Ss', 'Ss.s', or 'ms'."""
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        rem = int(round(seconds - 60 * minutes))
        return f"{minutes}m {rem}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


# Row partitioning / threading


def split_rows_into_parts(
    height: int, parts: int, align: int = 1
) -> List[Tuple[int, int]]:
    """
    Partition range [0, height) into ~parts contiguous [start, end) row spans.
    Every start is a multiple of align, so cell rows are never cut in two.
    """
    if height <= 0:
        return []
    parts = max(1, int(parts))
    align = max(1, int(align))
    step = (height + parts - 1) // parts
    step = ((step + align - 1) // align) * align
    return [(start, min(start + step, height)) for start in range(0, height, step)]


def run_row_chunks(
    func: Callable[[np.ndarray], np.ndarray],
    arr: np.ndarray,
    workers: int,
    *,
    align: int = 1,
    min_rows: int = MIN_ROWS_PER_WORKER,
) -> np.ndarray:
    """
    Apply func to row bands of arr on a thread pool and stack the results.

    func must be row-local (output row i depends only on input rows of its band).
    With workers <= 1 or few rows, func runs once on the whole array.
    """
    height = int(arr.shape[0])
    if workers <= 1 or height < 2 * max(1, min_rows):
        return func(arr)

    chunks = split_rows_into_parts(height, workers, align=align)
    if len(chunks) <= 1:
        return func(arr)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(func, arr[s:e]) for s, e in chunks]
        parts = [f.result() for f in futures]
    return np.concatenate(parts, axis=0)


#  CLI / progress logging


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Helps live progress printing in terminals that expose .reconfigure().
    """
    import sys

    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
            pass


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def format_percentage(x: float, decimals: int = 1) -> str:
    """Format a 0..1 share as a percentage."""
    return f"{x * 100.0:.{decimals}f}%"


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [run] Block: 8  Palette: 16  Dither: ordered  Workers: 4
    Routes to debug() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    import sys

    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    # formatting
    "format_seconds_compact",
    "format_total_duration_compact",
    "format_bool_on_off",
    "format_number_compact",
    "format_percentage",
    "key_value_pairs_to_string",
    # rows / threading
    "split_rows_into_parts",
    "run_row_chunks",
    # logging / progress
    "enable_line_buffered_stdout",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
