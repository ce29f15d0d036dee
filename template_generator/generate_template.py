#!/usr/bin/env python3
"""
generate_template.py - Render a printable dot, line, or graph-paper template.

Settings come from the built-in defaults, then an optional YAML file, then
command-line flags. Page dimensions, spacing and margins are given in the
chosen unit; dot/line size is always in pixels.

Usage:
    # Letter-size dot grid, quarter-inch spacing (defaults)
    generate-template --out template.png

    # A4 graph paper in millimeters, previewed without saving
    generate-template --unit mm --width 210 --height 297 --style graph \
        --distance 5 --size 1 --margin 10 --preview --no_save

    # Settings from a file, with one override
    generate-template --config configs/template.yaml --color "#3366cc"
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from template_generator.export import DEFAULT_FILENAME, save_png
from template_generator.renderer import GridStyle, InvalidParameter, render
from template_generator.utils import (
    EXIT_GENERAL_ERROR,
    EXIT_INVALID_PARAMETER,
    EXIT_SUCCESS,
    TemplateConfig,
    Unit,
    load_template_config,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a printable dot, line, or graph-paper PNG template.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with template settings (flags below override it)",
    )
    parser.add_argument(
        "--unit",
        choices=[u.value for u in Unit],
        default=None,
        help="Unit for width, height, distance and margin",
    )
    parser.add_argument(
        "--pixels_per_unit", "--pixels-per-unit",
        type=float,
        default=None,
        help="Pixels per unit (defaults: px=1, in=100, mm=5)",
    )
    parser.add_argument("--width", type=float, default=None, help="Page width in units")
    parser.add_argument("--height", type=float, default=None, help="Page height in units")
    parser.add_argument(
        "--style",
        choices=[s.value for s in GridStyle],
        default=None,
        help="Grid style",
    )
    parser.add_argument(
        "--distance",
        type=float,
        default=None,
        help="Units between consecutive dots or lines",
    )
    parser.add_argument(
        "--size",
        type=float,
        default=None,
        help="Dot radius or line thickness in pixels",
    )
    parser.add_argument("--color", default=None, help="Dot/line color (hex or color name)")
    parser.add_argument("--background_color", "--background-color", default=None, help="Background color")
    parser.add_argument("--margin", type=float, default=None, help="Margin on every side, in units")
    parser.add_argument(
        "--out",
        type=Path,
        default=Path(DEFAULT_FILENAME),
        help="Output PNG path",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Open the rendered template in the system image viewer",
    )
    parser.add_argument(
        "--no_save", "--no-save",
        action="store_true",
        help="Do not write the PNG (useful with --preview)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> TemplateConfig:
    """Layer command-line flags over the config file (or the defaults)."""
    config = load_template_config(args.config) if args.config else TemplateConfig()
    return config.with_overrides(
        unit=args.unit,
        pixels_per_unit=args.pixels_per_unit,
        width=args.width,
        height=args.height,
        style=args.style,
        distance=args.distance,
        size=args.size,
        color=args.color,
        background_color=args.background_color,
        margin=args.margin,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )

    if args.config is not None and not args.config.exists():
        logger.error(f"Template config not found: {args.config}")
        return EXIT_GENERAL_ERROR

    try:
        config = resolve_config(args)
        request = config.to_request()
        image = render(request)
    except InvalidParameter as e:
        logger.error(f"Invalid template settings: {e}")
        return EXIT_INVALID_PARAMETER

    logger.info(f"Rendered {request.width}x{request.height}px {GridStyle.parse(request.style).value} template")

    if args.preview:
        image.show()

    if not args.no_save:
        save_png(image, args.out)

    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
