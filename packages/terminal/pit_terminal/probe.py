"""Terminal size and color support detection."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from typing import Callable, Mapping, TextIO

from .models import ColorDepth, TerminalGeometry


logger = logging.getLogger("pit.terminal")

TERMS_256 = (
    "xterm-256color",
    "screen-256color",
    "tmux-256color",
    "rxvt-unicode-256color",
    "eterm-256color",
)
TERMS_16 = ("xterm", "screen", "vt100", "ansi", "linux")

CommandRunner = Callable[[list[str]], "str | None"]


def _run_command(cmd: list[str]) -> str | None:
    if shutil.which(cmd[0]) is None:
        return None
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=2, check=False)
    except (OSError, subprocess.SubprocessError):
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout


def _positive_int(raw: str | None) -> int:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return 0
    return value if value > 0 else 0


def detect_color_depth(environ: Mapping[str, str], platform: str = sys.platform) -> ColorDepth:
    if platform == "win32":
        # Windows Terminal and VS Code both accept 24-bit sequences.
        return ColorDepth.TRUECOLOR

    colorterm = environ.get("COLORTERM", "")
    if "truecolor" in colorterm or "24bit" in colorterm:
        return ColorDepth.TRUECOLOR
    if environ.get("KONSOLE_PROFILE_NAME") or environ.get("KONSOLE_VERSION"):
        return ColorDepth.TRUECOLOR
    if "iTerm" in environ.get("TERM_PROGRAM", ""):
        return ColorDepth.TRUECOLOR

    term = environ.get("TERM", "")
    if term:
        if any(name in term for name in TERMS_256):
            return ColorDepth.INDEXED_256
        if any(name in term for name in TERMS_16):
            return ColorDepth.INDEXED_16

    return ColorDepth.INDEXED_16


class TerminalProbe:
    """Inspects the controlling terminal once and caches what it finds.

    Size lookup tries, in order: a direct query on the output stream, the
    ``COLUMNS``/``LINES`` environment variables, the ``tput`` helper, and
    finally the configured fallback geometry.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        stream: TextIO | None = None,
        runner: CommandRunner | None = None,
        platform: str = sys.platform,
        fallback: TerminalGeometry = TerminalGeometry(cols=80, rows=24),
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._stream = stream
        self._runner = runner or _run_command
        self._platform = platform
        self.fallback = fallback
        self._size: TerminalGeometry | None = None
        self._depth: ColorDepth | None = None

    def _query_stream(self) -> tuple[int, int]:
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            size = os.get_terminal_size(stream.fileno())
        except (AttributeError, ValueError, OSError):
            return 0, 0
        return size.columns, size.lines

    def _query_environment(self) -> tuple[int, int]:
        cols = _positive_int(self._environ.get("COLUMNS"))
        rows = _positive_int(self._environ.get("LINES"))
        if cols and rows:
            return cols, rows
        return 0, 0

    def _query_tput(self) -> tuple[int, int]:
        return (
            _positive_int(self._runner(["tput", "cols"])),
            _positive_int(self._runner(["tput", "lines"])),
        )

    def size(self) -> TerminalGeometry:
        if self._size is not None:
            return self._size

        cols, rows = self._query_stream()
        if cols <= 0 or rows <= 0:
            cols, rows = self._query_environment()
        if (cols <= 0 or rows <= 0) and self._platform != "win32":
            cols, rows = self._query_tput()

        if cols <= 0:
            cols = self.fallback.cols
        if rows <= 0:
            rows = self.fallback.rows

        self._size = TerminalGeometry(cols=cols, rows=rows)
        logger.info("Detected terminal size: %dx%d", cols, rows)
        return self._size

    def color_depth(self) -> ColorDepth:
        if self._depth is None:
            self._depth = detect_color_depth(self._environ, self._platform)
            logger.info("Detected terminal color mode: %s", self._depth.label)
        return self._depth
