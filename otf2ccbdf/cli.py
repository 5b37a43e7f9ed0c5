#!/usr/bin/env python3
"""
otf2ccbdf — convert an OTF/TTF font to a dual-width (half/full cell) BDF.

Every glyph in U+0000..U+FFFF is rendered with FreeType at the requested
pixel size and stored either in a half-width cell (size / 2 pixels wide)
or a full-width cell (size pixels wide), which is what terminal emulators
expect from a CJK-capable bitmap font.

Usage:
  otf2ccbdf -out MyFont-16.bdf MyFont-Regular.otf
  otf2ccbdf -size 24 -out MyFont-24.bdf -preview MyFont-24.png MyFont-Regular.ttf

Dependencies:
  pip install freetype-py Pillow
"""

from __future__ import annotations

import argparse
import logging
import sys

import freetype

from .bdf import DEFAULT_SIZE, convert_file
from .errors import ConversionError
from .face import HINTING_FLAGS

logger = logging.getLogger("otf2ccbdf")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="otf2ccbdf",
        description="Convert an OTF/TTF font to a half/full-width BDF font.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("input", help="OTF/TTF file to convert to BDF.")
    parser.add_argument("-out", "--out", dest="out", required=True, help="Output .bdf file path.")
    parser.add_argument("-size", "--size", dest="size", type=int, default=DEFAULT_SIZE,
                        help=f"Font size in pixels, must be even (default: {DEFAULT_SIZE}).")
    parser.add_argument("-hinting", "--hinting", dest="hinting", choices=sorted(HINTING_FLAGS), default="full",
                        help="FreeType hinting mode (default: full).")
    parser.add_argument("-preview", "--preview", dest="preview",
                        help="Also write a PNG specimen sheet of the converted glyphs.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-pass details.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")

    if args.size <= 0 or args.size % 2 != 0:
        parser.error("-size must be a positive multiple of 2")

    try:
        metrics = convert_file(args.input, args.out, args.size, args.hinting, args.preview)
    except (ConversionError, OSError, freetype.FT_Exception) as err:
        logger.error("%s", err)
        return 1

    logger.info("Written: %s (%d glyphs, average width %d)", args.out, metrics.glyph_count, metrics.average_width)
    return 0


if __name__ == "__main__":
    sys.exit(main())
