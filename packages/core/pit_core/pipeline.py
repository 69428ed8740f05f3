"""Decode, orient, window, fit, resample and render one image."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

import psutil

from pit_renderer import (
    BLACK,
    BackgroundColor,
    ColorEncoder,
    PixelBuffer,
    ViewWindow,
    flip_horizontal,
    flip_vertical,
    open_pixels,
    render,
    resample_bilinear,
    rotate_90_cw,
    rotate_180,
)
from pit_terminal import DEFAULT_CHAR_RATIO, DEFAULT_RESERVED_ROWS, DisplayTarget, TerminalProbe, solve_display_size

from .logging_setup import get_logger


MEMORY_GROWTH_FACTOR = 5


@dataclass(frozen=True)
class ViewOptions:
    width: int = 0
    height: int = 0
    zoom: float = 1.0
    offset_x: int = 0
    offset_y: int = 0
    flip_h: bool = False
    flip_v: bool = False
    rotate: int = 0
    background: BackgroundColor = field(default=BLACK)


@dataclass(frozen=True)
class RenderReport:
    source_width: int
    source_height: int
    channels: int
    window: ViewWindow
    target: DisplayTarget
    bytes_written: int


def normalize_rotation(degrees: int) -> int:
    """Round down to a multiple of 90 and fold into 0, 90, 180 or 270."""
    remainder = degrees % 90
    if remainder:
        get_logger().warning(
            "Rotation degrees must be a multiple of 90. Using %d.", degrees - remainder
        )
        degrees -= remainder
    return degrees % 360


def apply_orientation(buffer: PixelBuffer, flip_h: bool, flip_v: bool, rotation: int) -> PixelBuffer:
    """Apply flips, then rotation. ``rotation`` must already be normalized."""
    if flip_h:
        buffer = flip_horizontal(buffer)
    if flip_v:
        buffer = flip_vertical(buffer)
    if rotation == 180:
        buffer = rotate_180(buffer)
    elif rotation in (90, 270):
        for _ in range(rotation // 90):
            buffer = rotate_90_cw(buffer)
    return buffer


def select_window(img_w: int, img_h: int, zoom: float, offset_x: int, offset_y: int) -> ViewWindow:
    """Pick the visible source rectangle for a zoom level and pan offset.

    Zoom above 1.0 shows a smaller part of the image; the rectangle is
    always pulled back inside the image bounds.
    """
    if not math.isfinite(zoom) or zoom <= 0:
        zoom = 1.0
    # Clamp as floats; a tiny zoom overflows the quotient to infinity.
    src_w = int(min(max(img_w / zoom, 1), img_w))
    src_h = int(min(max(img_h / zoom, 1), img_h))

    src_x = max(offset_x, 0)
    src_y = max(offset_y, 0)
    if src_x + src_w > img_w:
        src_x = img_w - src_w
    if src_y + src_h > img_h:
        src_y = img_h - src_h
    return ViewWindow(x=max(src_x, 0), y=max(src_y, 0), w=src_w, h=src_h)


def warn_if_large(buffer: PixelBuffer, threshold_mb: int = 100) -> None:
    estimated = buffer.width * buffer.height * buffer.channels * MEMORY_GROWTH_FACTOR
    available = psutil.virtual_memory().available
    if estimated > threshold_mb * 1024 * 1024 or estimated > available:
        get_logger().warning(
            "Large image detected (%dx%d). Estimated memory usage: %.2f MB (available: %.2f MB). "
            "Consider using --width/--height to limit output size.",
            buffer.width,
            buffer.height,
            estimated / (1024 * 1024),
            available / (1024 * 1024),
        )


class RenderPipeline:
    """Runs one image through every stage, keeping a single live buffer."""

    def __init__(
        self,
        encoder: ColorEncoder,
        probe: TerminalProbe,
        char_ratio: float = DEFAULT_CHAR_RATIO,
        reserved_rows: int = DEFAULT_RESERVED_ROWS,
        large_image_warn_mb: int = 100,
    ) -> None:
        self.encoder = encoder
        self.probe = probe
        self.char_ratio = char_ratio
        self.reserved_rows = reserved_rows
        self.large_image_warn_mb = large_image_warn_mb
        self.logger = get_logger()

    def layout(self, window: ViewWindow, options: ViewOptions) -> DisplayTarget:
        terminal = self.probe.size()
        # Zoom already shrank the window, so the fit itself runs at 1.0.
        return solve_display_size(
            window.w,
            window.h,
            zoom=1.0,
            terminal_cols=terminal.cols,
            terminal_rows=terminal.rows,
            char_ratio=self.char_ratio,
            width=options.width,
            height=options.height,
            reserved_rows=self.reserved_rows,
        )

    def render_buffer(self, source: PixelBuffer, options: ViewOptions, out: BinaryIO) -> RenderReport:
        rotation = normalize_rotation(options.rotate)
        buffer = apply_orientation(source, options.flip_h, options.flip_v, rotation)

        window = select_window(buffer.width, buffer.height, options.zoom, options.offset_x, options.offset_y)
        self.logger.info(
            "Source rectangle for resize: x=%d, y=%d, w=%d, h=%d (from image %dx%d)",
            window.x,
            window.y,
            window.w,
            window.h,
            buffer.width,
            buffer.height,
        )

        target = self.layout(window, options)
        self.logger.info("Final display dimensions for rendering: %dx%d", target.cols, target.rows)

        buffer = resample_bilinear(buffer, window, target.cols, target.rows)
        written = render(buffer, self.encoder, out, background=options.background)
        return RenderReport(
            source_width=source.width,
            source_height=source.height,
            channels=source.channels,
            window=window,
            target=target,
            bytes_written=written,
        )

    def render_file(self, path: str | Path, options: ViewOptions, out: BinaryIO) -> RenderReport:
        with open_pixels(path) as source:
            self.logger.info(
                "Loaded '%s': %dx%d, %d channels", path, source.width, source.height, source.channels
            )
            warn_if_large(source, self.large_image_warn_mb)
            return self.render_buffer(source, options, out)
