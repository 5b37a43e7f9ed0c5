"""
raster.py — codepoint scanning, width classification and glyph rendering.

Every glyph is forced into one of two cells: half-width (size / 2) or
full-width (size), both `size` pixels tall. A glyph whose rounded advance
exceeds the half-width goes in the full-width cell.
"""

from __future__ import annotations

import logging
from collections import namedtuple
from typing import Callable, Iterable, Iterator, Optional

from .bitimg import PackedBitmap
from .errors import EmptyFontError
from .face import Point, round_fixed

logger = logging.getLogger(__name__)

# Basic Multilingual Plane only
MAX_CODEPOINT = 0xFFFF

RenderedGlyph = namedtuple("RenderedGlyph", ["codepoint", "width", "bitmap"])


class CellGeometry(namedtuple("CellGeometry", ["half_width", "full_width", "height"])):
    __slots__ = ()

    @classmethod
    def for_size(cls, size: int) -> "CellGeometry":
        return cls(size // 2, size, size)


def scan_codepoints(face, predicate: Optional[Callable[[int], bool]] = None) -> Iterator[tuple[int, int]]:
    """
    Yield (codepoint, advance) for every codepoint in 0..0xFFFF the face can
    render, in ascending order. Each call starts a fresh scan.
    """
    for cp in range(MAX_CODEPOINT + 1):
        advance, present = face.advance(cp)
        if not present:
            continue
        if predicate is not None and not predicate(cp):
            continue
        yield cp, advance


def is_full_width(advance: int, half_width: int) -> bool:
    """An advance equal to the half-width still fits the half cell."""
    return round_fixed(advance) > half_width


class GlyphRasterizer:
    """Renders glyphs into two reusable cell bitmaps."""

    def __init__(self, face, cells: CellGeometry, ascent: int):
        self.face = face
        self.cells = cells
        self.ascent = ascent
        self.half_bitmap = PackedBitmap(cells.half_width, cells.height)
        self.full_bitmap = PackedBitmap(cells.full_width, cells.height)

    def select(self, advance: int) -> tuple[int, PackedBitmap]:
        if is_full_width(advance, self.cells.half_width):
            return self.cells.full_width, self.full_bitmap
        return self.cells.half_width, self.half_bitmap

    def render(self, codepoint: int, advance: int) -> RenderedGlyph:
        """
        Draw one glyph on its baseline. The returned bitmap is shared and is
        overwritten by the next glyph of the same width.
        """
        width, bitmap = self.select(advance)
        bitmap.clear()
        self.face.draw_glyph(codepoint, bitmap, Point(0, self.ascent))
        return RenderedGlyph(codepoint, width, bitmap)


class FontMetrics(namedtuple("FontMetrics", ["glyph_count", "width_sum"])):
    __slots__ = ()

    @property
    def average_width(self) -> int:
        """Average cell width in tenths of a pixel, as the XLFD wants it."""
        if self.glyph_count == 0:
            raise EmptyFontError("cannot average the width of zero glyphs")
        return self.width_sum * 10 // self.glyph_count


def collect_metrics(pairs: Iterable[tuple[int, int]], cells: CellGeometry) -> FontMetrics:
    glyph_count = 0
    width_sum = 0
    for _cp, advance in pairs:
        glyph_count += 1
        if is_full_width(advance, cells.half_width):
            width_sum += cells.full_width
        else:
            width_sum += cells.half_width

    if glyph_count == 0:
        raise EmptyFontError(f"font defines no glyphs in U+0000..U+{MAX_CODEPOINT:04X}")
    logger.debug("Metrics pass: %d glyphs, width sum %d", glyph_count, width_sum)
    return FontMetrics(glyph_count, width_sum)
