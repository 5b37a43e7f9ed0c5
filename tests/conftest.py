from __future__ import annotations

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from otf2ccbdf.errors import FontError

UNITS_PER_EM = 1024


def _glyph(rect):
    pen = TTGlyphPen(None)
    if rect is not None:
        x0, y0, x1, y1 = rect
        # Clockwise outer contour
        pen.moveTo((x0, y0))
        pen.lineTo((x0, y1))
        pen.lineTo((x1, y1))
        pen.lineTo((x1, y0))
        pen.closePath()
    return pen.glyph()


def build_font(path, glyphs, family="TestCell", ascent=768, descent=256):
    """
    Write a TrueType font to `path`. `glyphs` maps codepoint to
    (advance, rect or None), in font units with 1024 units per em.
    """
    names = {cp: f"uni{cp:04X}" for cp in glyphs}
    order = [".notdef"] + [names[cp] for cp in sorted(glyphs)]

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.setupGlyphOrder(order)
    fb.setupCharacterMap({cp: names[cp] for cp in glyphs})
    outlines = {".notdef": _glyph(None)}
    for cp, (_advance, rect) in glyphs.items():
        outlines[names[cp]] = _glyph(rect)
    fb.setupGlyf(outlines)

    glyf = fb.font["glyf"]
    metrics = {".notdef": (UNITS_PER_EM // 2, 0)}
    for cp, (advance, _rect) in glyphs.items():
        metrics[names[cp]] = (advance, getattr(glyf[names[cp]], "xMin", 0))
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=ascent, descent=-descent)
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=ascent, sTypoDescender=-descent, sTypoLineGap=0,
                usWinAscent=ascent, usWinDescent=descent)
    fb.setupPost()
    fb.save(str(path))
    return path


@pytest.fixture
def two_glyph_font(tmp_path):
    """'A' fills a full cell at 16px, '!' is exactly half-width."""
    return build_font(tmp_path / "TestCell.ttf", {
        0x41: (1024, (64, 0, 960, 768)),
        0x21: (512, (192, 256, 320, 768)),
    })


class FakeFace:
    """In-memory stand-in for face.Face with advances given in 26.6."""

    def __init__(self, advances, ascent=12 << 6, descent=4 << 6, solid=()):
        self.advances = dict(advances)
        self.ascent = ascent
        self.descent = descent
        self.solid = set(solid)
        self.queried = []
        self.drawn = []

    def advance(self, codepoint):
        self.queried.append(codepoint)
        if codepoint in self.advances:
            return self.advances[codepoint], True
        return 0, False

    def metrics(self):
        return self.ascent, self.descent

    def draw_glyph(self, codepoint, target, pen):
        self.drawn.append((codepoint, pen))
        if codepoint in self.solid:
            for y in range(target.height):
                for x in range(target.width):
                    target.set_pixel(x, y, True)


class FakeFont:
    def __init__(self, family="Fake"):
        self.family = family

    def family_name(self):
        if self.family is None:
            raise FontError("font has no family name")
        return self.family
