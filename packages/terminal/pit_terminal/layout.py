"""Fit an image window onto the terminal's character grid."""

from __future__ import annotations

import logging

from .models import DisplayTarget


logger = logging.getLogger("pit.terminal")

DEFAULT_CHAR_RATIO = 1.5
DEFAULT_RESERVED_ROWS = 2


def usable_rows(terminal_rows: int, reserved_rows: int = DEFAULT_RESERVED_ROWS) -> int:
    rows = terminal_rows - reserved_rows
    return rows if rows > 0 else 1


def _rows_for_cols(cols: int, image_ratio: float, char_ratio: float) -> int:
    return int((cols / image_ratio) / char_ratio)


def _cols_for_rows(rows: int, image_ratio: float, char_ratio: float) -> int:
    return int((rows * char_ratio) * image_ratio)


def _fit(
    window_w: int,
    window_h: int,
    zoom: float,
    terminal_cols: int,
    max_rows: int,
    char_ratio: float,
) -> tuple[int, int]:
    image_ratio = window_w / window_h
    terminal_ratio = terminal_cols / (max_rows * char_ratio)

    if image_ratio > terminal_ratio:
        cols = int(terminal_cols * zoom)
        rows = _rows_for_cols(cols, image_ratio, char_ratio)
    else:
        rows = int(max_rows * zoom)
        cols = _cols_for_rows(rows, image_ratio, char_ratio)

    cols = max(cols, 1)
    rows = max(rows, 1)

    if cols > terminal_cols:
        cols = terminal_cols
        rows = max(_rows_for_cols(cols, image_ratio, char_ratio), 1)
    if rows > max_rows:
        rows = max_rows
        cols = max(_cols_for_rows(rows, image_ratio, char_ratio), 1)
    return cols, rows


def _from_overrides(
    window_w: int,
    window_h: int,
    width: int,
    height: int,
    char_ratio: float,
) -> tuple[int, int]:
    cols = width if width > 0 else 1
    rows = height if height > 0 else 1
    if width > 0 and height <= 0:
        rows = int(window_h * (cols / window_w) / char_ratio)
    elif height > 0 and width <= 0:
        cols = int(window_w * (rows / window_h) * char_ratio)
    return max(cols, 1), max(rows, 1)


def solve_display_size(
    window_w: int,
    window_h: int,
    zoom: float,
    terminal_cols: int,
    terminal_rows: int,
    char_ratio: float = DEFAULT_CHAR_RATIO,
    width: int | None = None,
    height: int | None = None,
    reserved_rows: int = DEFAULT_RESERVED_ROWS,
) -> DisplayTarget:
    """Compute how many character cells the window should occupy.

    ``char_ratio`` is the height/width ratio of one character cell. Explicit
    ``width``/``height`` values win over auto-sizing; when only one is given
    the other follows the window's aspect ratio. The result never exceeds the
    terminal width or its height minus ``reserved_rows``.
    """
    terminal_cols = max(terminal_cols, 1)
    max_rows = usable_rows(terminal_rows, reserved_rows)
    width = width or 0
    height = height or 0

    if window_w <= 0 or window_h <= 0:
        logger.warning(
            "Invalid image window dimensions, using full terminal: %dx%d", terminal_cols, max_rows
        )
        return DisplayTarget(cols=terminal_cols, rows=max_rows)

    if width > 0 or height > 0:
        cols, rows = _from_overrides(window_w, window_h, width, height, char_ratio)
        logger.info("User specified dimensions: %dx%d (calculated: %dx%d)", width, height, cols, rows)
    else:
        cols, rows = _fit(window_w, window_h, zoom, terminal_cols, max_rows, char_ratio)
        logger.info(
            "Calculated display dimensions: %dx%d (window: %dx%d, zoom: %.2f, char H/W ratio: %.2f)",
            cols,
            rows,
            window_w,
            window_h,
            zoom,
            char_ratio,
        )

    cols = max(min(cols, terminal_cols), 1)
    rows = max(min(rows, max_rows), 1)
    return DisplayTarget(cols=cols, rows=rows)
