"""Persistent viewer settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1

COLOR_DEPTH_CHOICES = ("auto", "none", "16", "256", "truecolor")
BACKGROUND_CHOICES = ("black", "white")


@dataclass
class DisplayConfig:
    char_ratio: float = 1.5
    reserved_rows: int = 2
    background: str = "black"


@dataclass
class TerminalConfig:
    color_depth: str = "auto"
    fallback_cols: int = 80
    fallback_rows: int = 24


@dataclass
class DiagnosticsConfig:
    log_to_file: bool = False
    keep_log_files: int = 7
    large_image_warn_mb: int = 100


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    display: DisplayConfig = field(default_factory=DisplayConfig)
    terminal: TerminalConfig = field(default_factory=TerminalConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Pit"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Pit"
    return Path.home() / ".config" / "pit"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: Any):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_display(cfg: AppConfig) -> None:
    try:
        ratio = float(cfg.display.char_ratio)
    except (TypeError, ValueError):
        ratio = DisplayConfig.char_ratio
    cfg.display.char_ratio = max(0.25, min(8.0, ratio))
    cfg.display.reserved_rows = max(0, int(cfg.display.reserved_rows))
    if str(cfg.display.background).lower() not in BACKGROUND_CHOICES:
        cfg.display.background = "black"
    cfg.display.background = str(cfg.display.background).lower()


def _normalize_terminal(cfg: AppConfig) -> None:
    if str(cfg.terminal.color_depth) not in COLOR_DEPTH_CHOICES:
        cfg.terminal.color_depth = "auto"
    cfg.terminal.fallback_cols = max(1, int(cfg.terminal.fallback_cols))
    cfg.terminal.fallback_rows = max(1, int(cfg.terminal.fallback_rows))


def _normalize_diagnostics(cfg: AppConfig) -> None:
    cfg.diagnostics.log_to_file = bool(cfg.diagnostics.log_to_file)
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))
    cfg.diagnostics.large_image_warn_mb = max(1, int(cfg.diagnostics.large_image_warn_mb))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        display=_merge(DisplayConfig, data.get("display", {})),
        terminal=_merge(TerminalConfig, data.get("terminal", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
    )

    _normalize_display(cfg)
    _normalize_terminal(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
