"""Flip, rotate and bilinear resampling of packed pixel buffers.

Every operator returns a new :class:`PixelBuffer`; the input is never
modified, so the caller can drop its reference as soon as the result
arrives.
"""

from __future__ import annotations

import sys

import numpy as np

from .errors import BufferSizeError
from .models import PixelBuffer, ViewWindow


def flip_horizontal(buffer: PixelBuffer) -> PixelBuffer:
    return PixelBuffer.from_array(buffer.to_array()[:, ::-1, :])


def flip_vertical(buffer: PixelBuffer) -> PixelBuffer:
    return PixelBuffer.from_array(buffer.to_array()[::-1, :, :])


def rotate_90_cw(buffer: PixelBuffer) -> PixelBuffer:
    # out[y, x] = in[h - 1 - x, y]; width and height swap.
    return PixelBuffer.from_array(np.rot90(buffer.to_array(), k=-1, axes=(0, 1)))


def rotate_180(buffer: PixelBuffer) -> PixelBuffer:
    return PixelBuffer.from_array(buffer.to_array()[::-1, ::-1, :])


def checked_size(*factors: int) -> int:
    """Multiply buffer dimensions, refusing results beyond ``sys.maxsize``."""
    total = 1
    for factor in factors:
        total *= factor
    if total > sys.maxsize:
        raise BufferSizeError(
            "Image too large: {} (max: {})".format("x".join(str(f) for f in factors), sys.maxsize)
        )
    return total


def _sample_axis(start: int, span: int, count: int, limit: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    pos = start + np.arange(count, dtype=np.float64) * (span / count)
    lo = np.floor(pos).astype(np.intp)
    frac = pos - lo
    hi = np.clip(lo + 1, 0, limit - 1)
    lo = np.clip(lo, 0, limit - 1)
    return lo, hi, frac


def resample_bilinear(buffer: PixelBuffer, window: ViewWindow, new_w: int, new_h: int) -> PixelBuffer:
    """Resample ``window`` of ``buffer`` to ``new_w`` x ``new_h`` pixels.

    Neighbors that fall outside the source are clamped to its edge rather
    than wrapped, so windows touching the border stay well defined.
    """
    if new_w <= 0 or new_h <= 0 or window.w <= 0 or window.h <= 0:
        raise ValueError(
            f"Invalid resample request: window {window.w}x{window.h} -> {new_w}x{new_h}"
        )
    if not window.fits(buffer.width, buffer.height):
        raise ValueError(
            f"Window {window.w}x{window.h}+{window.x}+{window.y} outside {buffer.width}x{buffer.height} buffer"
        )
    checked_size(new_w, new_h, buffer.channels)

    src = buffer.to_array()
    x1, x2, dx = _sample_axis(window.x, window.w, new_w, buffer.width)
    y1, y2, dy = _sample_axis(window.y, window.h, new_h, buffer.height)

    dx = dx[np.newaxis, :, np.newaxis]
    dy = dy[:, np.newaxis, np.newaxis]

    # Gather on the uint8 view; only output-sized arrays are widened.
    p11 = src[np.ix_(y1, x1)].astype(np.float64)
    p21 = src[np.ix_(y1, x2)].astype(np.float64)
    p12 = src[np.ix_(y2, x1)].astype(np.float64)
    p22 = src[np.ix_(y2, x2)].astype(np.float64)

    top = p11 * (1.0 - dx) + p21 * dx
    bottom = p12 * (1.0 - dx) + p22 * dx
    value = top * (1.0 - dy) + bottom * dy

    out = np.clip(value + 0.5, 0, 255).astype(np.uint8)
    return PixelBuffer.from_array(out)
