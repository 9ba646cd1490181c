"""Render subtitle bands beneath an image file.

Usage:
    python -m scripts.render_subtitles --image photo.jpg --text "Hello\\nWorld" [--band-height 80] [--line-gap 10]

Numeric options are parsed with the same fallback rules as the editor: an
unparseable value silently becomes its default. The PNG is written to --out,
or to subtitle-export-<unix-ms>.png inside --out-dir.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from services.draw_params import normalize_draw_parameters
from services.image_io import (
    EmptyCanvasError,
    InvalidImageError,
    export_png,
    load_source_image,
    register_heif_opener,
)
from services.render_session import render_subtitles

logger = logging.getLogger("render_subtitles")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stack subtitle bands beneath an image.")
    parser.add_argument("--image", required=True, help="Source image path.")
    parser.add_argument("--text", default=None, help="Subtitle text; use a literal \\n to separate lines.")
    parser.add_argument("--text-file", default=None, help="Read subtitle text from a UTF-8 file instead.")
    parser.add_argument("--band-height", default=None, help="Band height in px (default 80).")
    parser.add_argument("--font-size", default=None, help="Font size in px (default 32).")
    parser.add_argument("--font-color", default=None, help="Fill color, e.g. #ffffff.")
    parser.add_argument("--stroke-color", default=None, help="Outline color, e.g. #000000.")
    parser.add_argument("--stroke-width", default=None, help="Outline width in px (default 0 = no outline).")
    parser.add_argument("--line-gap", default=None, help="Gap between bands in px (default 0).")
    parser.add_argument("--out", default=None, help="Output PNG path.")
    parser.add_argument("--out-dir", default=".", help="Directory for the default export filename.")
    return parser


def _read_text(args: argparse.Namespace) -> Optional[str]:
    if args.text_file:
        return Path(args.text_file).read_text(encoding="utf-8")
    if args.text is not None:
        return args.text.replace("\\n", "\n")
    return None


def main(argv: Optional[list[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    register_heif_opener()
    try:
        source = load_source_image(Path(args.image))
    except InvalidImageError as e:
        logger.error("Could not read %s: %s", args.image, e)
        return 2

    raw = {
        "band_height": args.band_height,
        "font_size": args.font_size,
        "font_color": args.font_color,
        "stroke_color": args.stroke_color,
        "stroke_width": args.stroke_width,
        "line_gap": args.line_gap,
        "text": _read_text(args),
    }
    params = normalize_draw_parameters(raw)
    canvas = render_subtitles(source, params)
    try:
        exported = export_png(canvas)
    except EmptyCanvasError as e:
        logger.error("Could not export %s: %s", args.image, e)
        return 2

    out_path = Path(args.out) if args.out else Path(args.out_dir) / exported.filename
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(exported.data)

    logger.info(
        "Wrote %s (%sx%s, %s line(s), source %sx%s)",
        out_path,
        exported.width,
        exported.height,
        params.line_count,
        source.width,
        source.height,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
