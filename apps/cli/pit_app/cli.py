"""Command-line entrypoint for rendering an image in the terminal."""

from __future__ import annotations

import argparse
import math
import os
import sys
from importlib import metadata
from typing import BinaryIO

from pit_core import AppConfig, RenderPipeline, ViewOptions, config_path, load_config, save_config
from pit_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from pit_renderer import BLACK, BackgroundColor, ColorEncoder, DecodeError, RenderError
from pit_terminal import ColorDepth, TerminalGeometry, TerminalProbe, detect_color_depth


def _installed_version() -> str:
    try:
        return metadata.version("pit")
    except metadata.PackageNotFoundError:
        return "0.5.0"


def _help_epilog(cfg: AppConfig) -> str:
    depth = detect_color_depth(os.environ)
    return "\n".join(
        [
            "Terminal character aspect ratio:",
            f"  Current assumed ratio (height/width): {cfg.display.char_ratio:.2f}.",
            "  Adjust display.char_ratio in the settings file or pass --char-ratio",
            "  if images appear stretched or squashed.",
            "",
            f"Detected terminal color mode: {depth.label}",
            f"Settings file: {config_path()}",
        ]
    )


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {raw!r}") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {raw!r}")
    return value


def build_parser(cfg: AppConfig | None = None) -> argparse.ArgumentParser:
    cfg = cfg or AppConfig()
    parser = argparse.ArgumentParser(
        prog="pit",
        description="PIT - Phono in Terminal. Render an image with ANSI colors.",
        epilog=_help_epilog(cfg),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="*", metavar="image-file", help="Image to render")
    parser.add_argument("--width", "-w", type=int, default=0, help="Output width in columns, overrides auto-sizing")
    parser.add_argument("--height", "-H", type=int, default=0, help="Output height in rows, overrides auto-sizing")
    parser.add_argument(
        "--zoom",
        type=float,
        default=1.0,
        help="Zoom level. 1.0 fits the terminal, 2.0 shows a smaller portion, 0.5 a larger one",
    )
    parser.add_argument("--offset-x", type=int, default=0, help="Horizontal pan in image pixels")
    parser.add_argument("--offset-y", type=int, default=0, help="Vertical pan in image pixels")
    parser.add_argument("--flip-h", action="store_true", help="Flip image horizontally")
    parser.add_argument("--flip-v", action="store_true", help="Flip image vertically")
    parser.add_argument("--rotate", type=int, default=0, help="Rotate clockwise by 90, 180 or 270 degrees")
    parser.add_argument(
        "--bg",
        default=cfg.display.background,
        help="Background for transparent pixels: black or white (default: %(default)s)",
    )
    parser.add_argument(
        "--color-depth",
        choices=["auto", "none", "16", "256", "truecolor"],
        default=cfg.terminal.color_depth,
        help="Force a color depth instead of detecting it",
    )
    parser.add_argument("--char-ratio", type=_positive_float, default=None, help="Character cell height/width ratio")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline details to stderr")
    parser.add_argument("--init-config", action="store_true", help="Write the default settings file and exit")
    parser.add_argument("--version", "-v", action="version", version=f"PIT v{_installed_version()}")
    return parser


def resolve_background(name: str) -> BackgroundColor:
    color = BackgroundColor.named(name)
    if color is None:
        get_logger().warning("Unsupported background color '%s'. Using default black.", name)
        return BLACK
    return color


def resolve_color_depth(choice: str, probe: TerminalProbe) -> ColorDepth:
    if choice == "auto":
        return probe.color_depth()
    return ColorDepth(choice)


def view_options(args: argparse.Namespace) -> ViewOptions:
    zoom = args.zoom
    if not math.isfinite(zoom) or zoom <= 0:
        get_logger().warning("Zoom must be a positive number, got %s. Using 1.0.", zoom)
        zoom = 1.0
    return ViewOptions(
        width=args.width,
        height=args.height,
        zoom=zoom,
        offset_x=args.offset_x,
        offset_y=args.offset_y,
        flip_h=args.flip_h,
        flip_v=args.flip_v,
        rotate=args.rotate,
        background=resolve_background(args.bg),
    )


def cmd_init_config(cfg: AppConfig) -> int:
    path = config_path()
    if path.exists():
        print(path)
        return 0
    print(save_config(cfg, path))
    return 0


def cmd_render(
    args: argparse.Namespace,
    cfg: AppConfig,
    parser: argparse.ArgumentParser,
    probe: TerminalProbe | None = None,
    out: BinaryIO | None = None,
) -> int:
    logger = get_logger()
    if not args.files:
        logger.error("No image file specified.")
        parser.print_help(sys.stderr)
        return 1
    filename = args.files[0]
    for extra in args.files[1:]:
        logger.warning("Multiple image files specified. Using '%s' and ignoring '%s'.", filename, extra)

    probe = probe or TerminalProbe(
        fallback=TerminalGeometry(cols=cfg.terminal.fallback_cols, rows=cfg.terminal.fallback_rows)
    )
    depth = resolve_color_depth(args.color_depth, probe)
    pipeline = RenderPipeline(
        encoder=ColorEncoder(depth),
        probe=probe,
        char_ratio=args.char_ratio or cfg.display.char_ratio,
        reserved_rows=cfg.display.reserved_rows,
        large_image_warn_mb=cfg.diagnostics.large_image_warn_mb,
    )

    try:
        pipeline.render_file(filename, view_options(args), out or sys.stdout.buffer)
    except DecodeError as exc:
        logger.error("%s", exc)
        return 1
    except RenderError as exc:
        logger.error("Failed to prepare image for display: %s", exc)
        return 1
    except MemoryError:
        logger.error("Failed to allocate memory while rendering '%s'.", filename)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(log_to_file=cfg.diagnostics.log_to_file, keep_files=cfg.diagnostics.keep_log_files)
    parser = build_parser(cfg)
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    install_crash_hooks()

    if args.init_config:
        return cmd_init_config(cfg)
    return cmd_render(args, cfg, parser)


if __name__ == "__main__":
    raise SystemExit(main())
