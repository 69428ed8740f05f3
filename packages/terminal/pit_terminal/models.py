"""Typed models for terminal geometry and color capability."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ColorDepth(str, Enum):
    UNKNOWN = "none"
    INDEXED_16 = "16"
    INDEXED_256 = "256"
    TRUECOLOR = "truecolor"

    @property
    def label(self) -> str:
        return {
            ColorDepth.TRUECOLOR: "24-bit true color",
            ColorDepth.INDEXED_256: "256 colors",
            ColorDepth.INDEXED_16: "16 colors",
        }.get(self, "unknown")


@dataclass(frozen=True)
class TerminalGeometry:
    cols: int
    rows: int


@dataclass(frozen=True)
class DisplayTarget:
    cols: int
    rows: int
