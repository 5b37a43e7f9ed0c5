import itertools

import pytest

from conftest import FakeFace
from otf2ccbdf.errors import EmptyFontError
from otf2ccbdf.face import Point, round_fixed
from otf2ccbdf.raster import (
    MAX_CODEPOINT,
    CellGeometry,
    FontMetrics,
    GlyphRasterizer,
    collect_metrics,
    is_full_width,
    scan_codepoints,
)

CELLS = CellGeometry.for_size(16)


def test_cell_geometry():
    assert CELLS == (8, 16, 16)


@pytest.mark.parametrize("value,expected", [(0, 0), (31, 0), (32, 1), (64, 1), (8 * 64 + 31, 8), (8 * 64 + 32, 9)])
def test_round_fixed(value, expected):
    assert round_fixed(value) == expected


@pytest.mark.parametrize("advance,full", [
    (7 * 64, False),
    (8 * 64, False),
    (8 * 64 + 31, False),
    (8 * 64 + 32, True),
    (9 * 64, True),
    (16 * 64, True),
])
def test_is_full_width(advance, full):
    assert is_full_width(advance, CELLS.half_width) is full


def test_scan_is_ascending_and_restartable():
    face = FakeFace({0x4E00: 1024, 0x41: 512, 0x21: 320, 0xFFFF: 512, 0x10000: 1024})
    first = list(scan_codepoints(face))
    second = list(scan_codepoints(face))
    assert first == second
    assert [cp for cp, _ in first] == [0x21, 0x41, 0x4E00, 0xFFFF]
    assert first[1] == (0x41, 512)


def test_scan_visits_the_whole_bmp_once():
    face = FakeFace({})
    assert list(scan_codepoints(face)) == []
    assert face.queried == list(range(MAX_CODEPOINT + 1))


def test_scan_predicate():
    face = FakeFace({0x21: 320, 0x41: 512, 0x42: 512})
    assert [cp for cp, _ in scan_codepoints(face, lambda cp: cp != 0x41)] == [0x21, 0x42]


def test_scan_early_termination():
    face = FakeFace({0x21: 320, 0x41: 512, 0x42: 512})
    assert [cp for cp, _ in itertools.islice(scan_codepoints(face), 2)] == [0x21, 0x41]
    assert max(face.queried) == 0x41


def test_collect_metrics():
    pairs = [(0x21, 8 * 64), (0x41, 16 * 64), (0x4E00, 12 * 64)]
    metrics = collect_metrics(pairs, CELLS)
    assert metrics == FontMetrics(3, 8 + 16 + 16)
    assert metrics.average_width == (40 * 10) // 3


def test_collect_metrics_all_half_width():
    metrics = collect_metrics([(cp, 6 * 64) for cp in range(0x20, 0x7F)], CELLS)
    assert metrics.average_width == 80


def test_collect_metrics_empty_font():
    with pytest.raises(EmptyFontError):
        collect_metrics([], CELLS)
    with pytest.raises(EmptyFontError):
        FontMetrics(0, 0).average_width


def test_rasterizer_selects_and_reuses_cells():
    face = FakeFace({}, solid={0x41})
    rasterizer = GlyphRasterizer(face, CELLS, ascent=12)

    wide = rasterizer.render(0x41, 16 * 64)
    assert wide.width == 16
    assert wide.bitmap is rasterizer.full_bitmap
    assert list(wide.bitmap.hex_rows()) == ["FFFF"] * 16

    narrow = rasterizer.render(0x21, 8 * 64)
    assert narrow.width == 8
    assert narrow.bitmap is rasterizer.half_bitmap

    # A blank glyph reusing the full cell must not see the previous ink
    blank = rasterizer.render(0x3000, 16 * 64)
    assert blank.bitmap is wide.bitmap
    assert list(blank.bitmap.hex_rows()) == ["0000"] * 16


def test_rasterizer_pen_sits_on_the_baseline():
    face = FakeFace({})
    GlyphRasterizer(face, CELLS, ascent=13).render(0x41, 16 * 64)
    assert face.drawn == [(0x41, Point(0, 13))]
