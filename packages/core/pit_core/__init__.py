"""Core services: settings, logging and the render pipeline."""

from .config import AppConfig, config_path, load_config, save_config
from .pipeline import (
    RenderPipeline,
    RenderReport,
    ViewOptions,
    apply_orientation,
    normalize_rotation,
    select_window,
)

__all__ = [
    "AppConfig",
    "RenderPipeline",
    "RenderReport",
    "ViewOptions",
    "apply_orientation",
    "config_path",
    "load_config",
    "normalize_rotation",
    "save_config",
    "select_window",
]
