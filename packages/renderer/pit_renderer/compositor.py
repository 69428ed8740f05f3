"""Alpha compositing and row-by-row streaming of encoded cells."""

from __future__ import annotations

import sys
from typing import BinaryIO, Iterator

import numpy as np

from .color import RESET, ColorEncoder
from .errors import BufferSizeError
from .models import BLACK, BackgroundColor, PixelBuffer
from .transform import checked_size


ROW_MARGIN = 32
ROW_END = RESET + b"\n"


def composite(buffer: PixelBuffer, background: BackgroundColor = BLACK) -> np.ndarray:
    """Return an opaque ``(height, width, 3)`` RGB array.

    Four-channel buffers are blended over ``background``; three-channel
    buffers pass through untouched.
    """
    arr = buffer.to_array()
    if not buffer.has_alpha:
        return arr[:, :, :3]

    alpha = arr[:, :, 3:4].astype(np.float64) / 255.0
    bg = np.array([background.r, background.g, background.b], dtype=np.float64)
    blended = arr[:, :, :3].astype(np.float64) * alpha + bg * (1.0 - alpha)
    return np.clip(blended, 0, 255).astype(np.uint8)


def row_capacity(cols: int, encoder: ColorEncoder) -> int:
    cells = checked_size(cols, encoder.max_cell_bytes)
    if cells > sys.maxsize - ROW_MARGIN:
        raise BufferSizeError(f"Row buffer too large: {cols} columns (max: {sys.maxsize})")
    return cells + ROW_MARGIN


def iter_rows(
    buffer: PixelBuffer,
    encoder: ColorEncoder,
    background: BackgroundColor = BLACK,
) -> Iterator[bytes]:
    capacity = row_capacity(buffer.width, encoder)
    rgb = composite(buffer, background)

    for row in rgb:
        line = bytearray(capacity)
        pos = 0
        for r, g, b in row.tolist():
            pos = encoder.encode_into(line, pos, r, g, b)
        line[pos : pos + len(ROW_END)] = ROW_END
        pos += len(ROW_END)
        yield bytes(line[:pos])


def render(
    buffer: PixelBuffer,
    encoder: ColorEncoder,
    out: BinaryIO,
    background: BackgroundColor = BLACK,
) -> int:
    written = 0
    for line in iter_rows(buffer, encoder, background):
        out.write(line)
        out.flush()
        written += len(line)
    return written
