"""
face.py — FreeType binding used as the outline font engine.

Everything that touches outline data goes through here: parsing the font
file, sizing it, querying advances and vertical metrics, and rendering a
glyph into a PackedBitmap. Values coming back from FreeType are 26.6 fixed
point (1/64 pixel) unless noted.
"""

from __future__ import annotations

import io
import logging
from collections import namedtuple
from pathlib import Path

import freetype

from .bitimg import PackedBitmap
from .errors import FontError

logger = logging.getLogger(__name__)

DEFAULT_DPI = 72

HINTING_FLAGS = {
    "full": freetype.FT_LOAD_DEFAULT,
    "none": freetype.FT_LOAD_NO_HINTING,
}

Point = namedtuple("Point", ["x", "y"])


def round_fixed(val: int) -> int:
    """Round a 26.6 fixed-point value to whole pixels, halves up."""
    return (val + 32) >> 6


class Font:
    """A parsed font file. Owns the FreeType face handle."""

    def __init__(self, ft_face: "freetype.Face"):
        self._ft_face = ft_face

    def __enter__(self) -> "Font":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        # FreeType releases the face once the last reference is dropped
        self._ft_face = None

    @property
    def ft_face(self) -> "freetype.Face":
        if self._ft_face is None:
            raise FontError("font has been closed")
        return self._ft_face

    def family_name(self) -> str:
        raw = self.ft_face.family_name
        if not raw:
            raise FontError("font has no family name")
        if isinstance(raw, str):
            return raw
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise FontError(f"undecodable family name: {err}") from err


def load_font(data: bytes) -> Font:
    """Parse OTF/TTF bytes."""
    try:
        ft_face = freetype.Face(io.BytesIO(data))
    except freetype.FT_Exception as err:
        raise FontError(f"cannot parse font: {err}") from err
    return Font(ft_face)


def read_font(path: str | Path) -> Font:
    return load_font(Path(path).read_bytes())


class Face:
    """A font opened at one pixel size, DPI and hinting mode."""

    def __init__(self, font: Font, size: int, dpi: int, load_flags: int):
        self.font = font
        self.size = size
        self.dpi = dpi
        self.load_flags = load_flags

    def _glyph_index(self, codepoint: int) -> int:
        return self.font.ft_face.get_char_index(codepoint)

    def advance(self, codepoint: int) -> tuple[int, bool]:
        """Return (advance, present) for a codepoint."""
        index = self._glyph_index(codepoint)
        if index == 0:
            return 0, False
        ft_face = self.font.ft_face
        try:
            ft_face.load_glyph(index, self.load_flags)
        except freetype.FT_Exception:
            return 0, False
        return ft_face.glyph.advance.x, True

    def metrics(self) -> tuple[int, int]:
        """Return (ascent, descent), both as non-negative distances."""
        size = self.font.ft_face.size
        return size.ascender, -size.descender

    def draw_glyph(self, codepoint: int, target: PackedBitmap, pen: Point) -> None:
        """
        Render one glyph with its origin at `pen` (whole pixels). A glyph
        FreeType cannot render leaves the target untouched.
        """
        index = self._glyph_index(codepoint)
        if index == 0:
            return
        ft_face = self.font.ft_face
        try:
            ft_face.load_glyph(index, self.load_flags | freetype.FT_LOAD_RENDER)
        except freetype.FT_Exception as err:
            logger.warning("Cannot render U+%04X, leaving it blank: %s", codepoint, err)
            return

        slot = ft_face.glyph
        bitmap = slot.bitmap
        width, rows = bitmap.width, bitmap.rows
        if width == 0 or rows == 0:
            return

        if bitmap.pixel_mode == freetype.FT_PIXEL_MODE_MONO:
            coverage = _expand_mono(bitmap.buffer, width, rows, bitmap.pitch)
            pitch = width
        elif bitmap.pixel_mode == freetype.FT_PIXEL_MODE_GRAY:
            coverage = bitmap.buffer
            pitch = bitmap.pitch
        else:
            logger.warning("Unsupported pixel mode %d for U+%04X, leaving it blank", bitmap.pixel_mode, codepoint)
            return

        target.draw_coverage(pen.x + slot.bitmap_left, pen.y - slot.bitmap_top,
                             width, rows, pitch, coverage)


def _expand_mono(buf, width: int, rows: int, pitch: int) -> list[int]:
    """Expand a 1-bit FreeType bitmap to one 0/255 sample per pixel."""
    out = []
    for y in range(rows):
        base = y * pitch
        for x in range(width):
            out.append(255 if buf[base + (x >> 3)] & (0x80 >> (x & 7)) else 0)
    return out


def open_face(font: Font, size: int, dpi: int = DEFAULT_DPI, hinting: str = "full") -> Face:
    if size <= 0:
        raise FontError(f"invalid font size {size}")
    if hinting not in HINTING_FLAGS:
        raise FontError(f"unknown hinting mode {hinting!r}")
    try:
        font.ft_face.set_char_size(0, size << 6, dpi, dpi)
    except freetype.FT_Exception as err:
        raise FontError(f"cannot open face at size {size}, {dpi} DPI: {err}") from err
    return Face(font, size, dpi, HINTING_FLAGS[hinting])
