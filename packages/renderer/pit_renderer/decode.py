"""Image file decoding into packed RGB/RGBA pixel buffers."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .models import PixelBuffer


_ALPHA_MODES = ("RGBA", "LA", "PA", "La", "RGBa")
# Single-band modes wider than 8 bits; samples are 16-bit range.
_WIDE_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N", "F")


def _narrow_to_8bit(image: Image.Image) -> Image.Image:
    samples = np.asarray(image, dtype=np.float64)
    gray = np.clip(np.floor(samples / 256.0), 0, 255).astype(np.uint8)
    return Image.fromarray(gray)


def image_to_pixel_buffer(image: Image.Image) -> PixelBuffer:
    if image.mode in _WIDE_MODES:
        image = _narrow_to_8bit(image)
    has_alpha = image.mode in _ALPHA_MODES or (image.mode == "P" and "transparency" in image.info)
    target = "RGBA" if has_alpha else "RGB"
    if image.mode != target:
        image = image.convert(target)
    width, height = image.size
    return PixelBuffer(width=width, height=height, channels=len(target), data=image.tobytes())


def _describe(kind: str, path: str, reason: str) -> str:
    if kind == "missing":
        return f"Image file not found: '{path}'."
    if kind == "unsupported":
        return f"Unsupported image format or corrupt file header for '{path}'."
    if kind == "too_large":
        return f"Image dimensions exceed internal limits for '{path}'."
    return f"Failed to load image '{path}': {reason}"


def _decode_error(path: str, exc: Exception) -> DecodeError:
    if isinstance(exc, FileNotFoundError):
        kind = "missing"
    elif isinstance(exc, UnidentifiedImageError):
        kind = "unsupported"
    elif isinstance(exc, Image.DecompressionBombError):
        kind = "too_large"
    else:
        kind = "unknown"
    return DecodeError(_describe(kind, path, str(exc) or "Unknown error"), kind=kind, path=path)


@contextmanager
def open_pixels(path: str | Path) -> Iterator[PixelBuffer]:
    """Decode ``path`` and yield its pixels for the duration of the block.

    The underlying file is closed on every exit path, including a decode
    failure after the header was read.
    """
    name = str(path)
    try:
        image = Image.open(name)
    except (OSError, Image.DecompressionBombError) as exc:
        raise _decode_error(name, exc) from exc

    with image:
        try:
            image.load()
            buffer = image_to_pixel_buffer(image)
        except (OSError, Image.DecompressionBombError) as exc:
            raise _decode_error(name, exc) from exc
        yield buffer
