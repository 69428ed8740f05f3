"""Renderer package: pixel buffers, transforms, color encoding and output."""

from .color import ColorEncoder, EncoderCache, default_cache, rgb_to_16, rgb_to_256
from .compositor import composite, iter_rows, render
from .decode import image_to_pixel_buffer, open_pixels
from .errors import BufferSizeError, DecodeError, RenderError
from .models import BLACK, WHITE, BackgroundColor, PixelBuffer, ViewWindow
from .transform import flip_horizontal, flip_vertical, resample_bilinear, rotate_90_cw, rotate_180

__all__ = [
    "BLACK",
    "BackgroundColor",
    "BufferSizeError",
    "ColorEncoder",
    "DecodeError",
    "EncoderCache",
    "PixelBuffer",
    "RenderError",
    "ViewWindow",
    "WHITE",
    "composite",
    "default_cache",
    "flip_horizontal",
    "flip_vertical",
    "image_to_pixel_buffer",
    "iter_rows",
    "open_pixels",
    "render",
    "resample_bilinear",
    "rgb_to_16",
    "rgb_to_256",
    "rotate_180",
    "rotate_90_cw",
]
