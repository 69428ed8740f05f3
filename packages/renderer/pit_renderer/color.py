"""ANSI background-color cell encoding for 16, 256 and 24-bit terminals."""

from __future__ import annotations

import functools
from dataclasses import dataclass

from pit_terminal.models import ColorDepth


RESET = b"\033[0m"
GLYPH = b" "

# Worst-case bytes per encoded cell, glyph included.
MAX_CELL_BYTES: dict[ColorDepth, int] = {
    ColorDepth.TRUECOLOR: 21,
    ColorDepth.INDEXED_256: 13,
    ColorDepth.INDEXED_16: 9,
    ColorDepth.UNKNOWN: 2,
}


def rgb_to_256(r: int, g: int, b: int) -> int:
    if r == g == b:
        if r < 3:
            return 16
        if r > 252:
            return 231
        return min(255, 232 + (r - 3) // 10)

    ri = min(5, (r * 6) // 256)
    gi = min(5, (g * 6) // 256)
    bi = min(5, (b * 6) // 256)
    return 16 + ri * 36 + gi * 6 + bi


def rgb_to_16(r: int, g: int, b: int) -> int:
    intensity = 8 if (r > 128 or g > 128 or b > 128) else 0
    return intensity + (4 if r > 128 else 0) + (2 if g > 128 else 0) + (1 if b > 128 else 0)


def sgr_16(index: int) -> bytes:
    if index < 8:
        return b"\033[4%dm" % index
    return b"\033[10%dm" % (index - 8)


def sgr_256(index: int) -> bytes:
    return b"\033[48;5;%dm" % index


def sgr_truecolor(r: int, g: int, b: int) -> bytes:
    return b"\033[48;2;%d;%d;%dm" % (r, g, b)


@dataclass(frozen=True)
class EncoderCache:
    palette_16: tuple[bytes, ...]
    palette_256: tuple[bytes, ...]

    @classmethod
    def build(cls) -> "EncoderCache":
        return cls(
            palette_16=tuple(sgr_16(i) + GLYPH for i in range(16)),
            palette_256=tuple(sgr_256(i) + GLYPH for i in range(256)),
        )


@functools.lru_cache(maxsize=1)
def default_cache() -> EncoderCache:
    return EncoderCache.build()


class ColorEncoder:
    """Turns an RGB triple into one terminal cell at a fixed color depth."""

    def __init__(self, depth: ColorDepth, cache: EncoderCache | None = None) -> None:
        self.depth = depth
        self.cache = cache or default_cache()

    @property
    def max_cell_bytes(self) -> int:
        return MAX_CELL_BYTES[self.depth]

    def encode(self, r: int, g: int, b: int) -> bytes:
        depth = self.depth
        if depth is ColorDepth.TRUECOLOR:
            return sgr_truecolor(r, g, b) + GLYPH
        if depth is ColorDepth.INDEXED_256:
            index = rgb_to_256(r, g, b)
            try:
                return self.cache.palette_256[index]
            except IndexError:
                return sgr_256(index) + GLYPH
        if depth is ColorDepth.INDEXED_16:
            index = rgb_to_16(r, g, b)
            try:
                return self.cache.palette_16[index]
            except IndexError:
                return sgr_16(index) + GLYPH
        return GLYPH

    def encode_into(self, buf: bytearray, pos: int, r: int, g: int, b: int) -> int:
        cell = self.encode(r, g, b)
        end = pos + len(cell)
        buf[pos:end] = cell
        return end
