"""
bdf.py — BDF 2.1 writer and the OTF/TTF → BDF conversion driver.

Output layout (header once, then one record per glyph):

  STARTFONT 2.1
  FONT -FreeType-<family>-Medium-R-Normal--<pixel>-<point>-72-72-C-<avg>-ISO10646-1
  SIZE <size> 72 72
  FONTBOUNDINGBOX <full> <height> 0 <-descent>
  CHARS <count>

  STARTCHAR U+XXXX
  ENCODING <decimal>
  DWIDTH <cell> 0
  BBX <cell> <height> 0 <-descent>
  BITMAP
  <height rows of hex>
  ENDCHAR
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, TextIO

from .errors import ConversionError, FontError
from .face import DEFAULT_DPI, Font, open_face, read_font, round_fixed
from .preview import SpecimenSheet
from .raster import CellGeometry, FontMetrics, GlyphRasterizer, RenderedGlyph, collect_metrics, scan_codepoints

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 16
UNKNOWN_FAMILY = "Unknown"

HEADER_TEMPLATE = (
    "STARTFONT 2.1\n"
    "FONT -FreeType-{name}-Medium-R-Normal--{pixel_size}-{point_size}-72-72-C-{average_width}-ISO10646-1\n"
    "SIZE {size} 72 72\n"
    "FONTBOUNDINGBOX {width} {height} 0 {descent}\n"
    "CHARS {chars}\n"
)

GLYPH_TEMPLATE = (
    "\n"
    "STARTCHAR U+{codepoint:04X}\n"
    "ENCODING {codepoint}\n"
    "DWIDTH {width} 0\n"
    "BBX {width} {height} 0 {descent}\n"
    "BITMAP\n"
    "{bitmap}"
    "ENDCHAR\n"
)


def pixel_size(size: int) -> int:
    """XLFD PIXEL_SIZE for a size given in points at 72 DPI."""
    return int(size * 10 * 72 / 722.7 + 0.5)


def point_size(size: int) -> int:
    return size * 10


class BDFWriter:
    """Writes the header exactly once, then glyph records."""

    def __init__(self, stream: TextIO, cells: CellGeometry, descent: int):
        self.stream = stream
        self.cells = cells
        self.descent = descent
        self._header_written = False

    def write_header(self, name: str, size: int, metrics: FontMetrics) -> None:
        if self._header_written:
            raise ConversionError("BDF header already written")
        self.stream.write(HEADER_TEMPLATE.format(
            name=name,
            pixel_size=pixel_size(size),
            point_size=point_size(size),
            average_width=metrics.average_width,
            size=size,
            width=self.cells.full_width,
            height=self.cells.height,
            descent=-self.descent,
            chars=metrics.glyph_count,
        ))
        self._header_written = True

    def write_glyph(self, glyph: RenderedGlyph) -> None:
        if not self._header_written:
            raise ConversionError("BDF glyph written before header")
        bitmap = "".join(f"{row}\n" for row in glyph.bitmap.hex_rows())
        self.stream.write(GLYPH_TEMPLATE.format(
            codepoint=glyph.codepoint,
            width=glyph.width,
            height=self.cells.height,
            descent=-self.descent,
            bitmap=bitmap,
        ))


class BDFConverter:
    """Converts one opened font to a dual-width BDF at a fixed pixel size."""

    def __init__(self, font: Font, size: int = DEFAULT_SIZE, hinting: str = "full"):
        try:
            name = font.family_name()
        except FontError as err:
            logger.warning('Failed to get family name, so fell back to "%s": %s', UNKNOWN_FAMILY, err)
            name = UNKNOWN_FAMILY
        self.name = name
        self.face = open_face(font, size, DEFAULT_DPI, hinting)
        self.size = size
        self.cells = CellGeometry.for_size(size)
        ascent, descent = self.face.metrics()
        self.ascent = round_fixed(ascent)
        self.descent = round_fixed(descent)

    def metrics(self) -> FontMetrics:
        return collect_metrics(scan_codepoints(self.face), self.cells)

    def write(self, stream: TextIO, metrics: FontMetrics, specimen=None) -> None:
        writer = BDFWriter(stream, self.cells, self.descent)
        writer.write_header(self.name, self.size, metrics)
        rasterizer = GlyphRasterizer(self.face, self.cells, self.ascent)
        for cp, advance in scan_codepoints(self.face):
            glyph = rasterizer.render(cp, advance)
            writer.write_glyph(glyph)
            if specimen is not None:
                specimen.add(glyph)

    def convert(self, out_path: str | Path, preview: Optional[str | Path] = None) -> FontMetrics:
        """
        Write the BDF to `out_path`. The file only appears once it is
        complete; a failed run leaves nothing behind.
        """
        out_path = Path(out_path)
        metrics = self.metrics()
        logger.info("%s: %d glyphs at %dpx (ascent %d, descent %d)",
                    self.name, metrics.glyph_count, self.size, self.ascent, self.descent)

        specimen = None
        if preview is not None:
            specimen = SpecimenSheet(self.cells)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{out_path.name}.", suffix=".tmp", dir=out_path.parent)
        try:
            with open(fd, "w", encoding="ascii", errors="replace", newline="\n") as f:
                self.write(f, metrics, specimen)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, out_path)
        except BaseException:
            os.unlink(tmp_name)
            raise

        if specimen is not None:
            specimen.save(preview)
            logger.info("Preview: %s (%d glyphs)", preview, len(specimen))
        return metrics


def convert_file(in_path: str | Path, out_path: str | Path, size: int = DEFAULT_SIZE,
                 hinting: str = "full", preview: Optional[str | Path] = None) -> FontMetrics:
    """Convert an OTF/TTF file on disk to a BDF file."""
    with read_font(in_path) as font:
        return BDFConverter(font, size, hinting).convert(out_path, preview)
