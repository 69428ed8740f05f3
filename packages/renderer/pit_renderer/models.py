"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class PixelBuffer:
    """Packed 8-bit pixels, row-major, ``channels`` bytes per pixel."""

    width: int
    height: int
    channels: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid buffer dimensions: {self.width}x{self.height}")
        if self.channels not in (3, 4):
            raise ValueError(f"Unsupported channel count: {self.channels}")
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise ValueError(f"Buffer length {len(self.data)} does not match {expected}")

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def to_array(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype=np.uint8).reshape((self.height, self.width, self.channels))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelBuffer":
        if arr.ndim != 3:
            raise ValueError("Pixel array must have shape (height, width, channels)")
        height, width, channels = arr.shape
        data = np.ascontiguousarray(arr, dtype=np.uint8).tobytes()
        return cls(width=width, height=height, channels=channels, data=data)


@dataclass(frozen=True)
class ViewWindow:
    x: int
    y: int
    w: int
    h: int

    def fits(self, width: int, height: int) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.w >= 1
            and self.h >= 1
            and self.x + self.w <= width
            and self.y + self.h <= height
        )

    @classmethod
    def full(cls, buffer: PixelBuffer) -> "ViewWindow":
        return cls(x=0, y=0, w=buffer.width, h=buffer.height)


@dataclass(frozen=True)
class BackgroundColor:
    r: int
    g: int
    b: int

    @classmethod
    def named(cls, name: str) -> "BackgroundColor | None":
        return NAMED_BACKGROUNDS.get(name.strip().lower())


BLACK = BackgroundColor(0, 0, 0)
WHITE = BackgroundColor(255, 255, 255)

NAMED_BACKGROUNDS: dict[str, BackgroundColor] = {
    "black": BLACK,
    "white": WHITE,
}
