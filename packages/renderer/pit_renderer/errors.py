"""Render pipeline failures."""

from __future__ import annotations


class RenderError(Exception):
    pass


class BufferSizeError(RenderError):
    """A buffer size computation would exceed the addressable size."""


class DecodeError(RenderError):
    def __init__(self, message: str, kind: str = "unknown", path: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = path
