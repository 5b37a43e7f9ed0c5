"""Render converted glyph cells to a PNG specimen sheet."""

from __future__ import annotations

from pathlib import Path

from PIL import Image

from .bitimg import PackedBitmap
from .raster import CellGeometry, RenderedGlyph

# Gap between cells, filled with mid gray so cell edges stay visible
_GAP = 1
_GAP_SHADE = 96


def bitmap_to_image(bitmap: PackedBitmap) -> Image.Image:
    stride = bitmap.row_stride
    payload = bytes(bitmap.raw_bytes())
    pixels = bytearray(bitmap.width * bitmap.height)
    for y in range(bitmap.height):
        base = y * stride
        for x in range(bitmap.width):
            bit = (payload[base + (x // 8)] >> (7 - (x % 8))) & 1
            pixels[y * bitmap.width + x] = 255 if bit else 0
    return Image.frombytes("L", (bitmap.width, bitmap.height), bytes(pixels))


class SpecimenSheet:
    """Collects rendered glyphs and lays them out on a fixed grid."""

    def __init__(self, cells: CellGeometry, columns: int = 32, limit: int = 512):
        self.cells = cells
        self.columns = columns
        self.limit = limit
        self._images: list[Image.Image] = []

    def __len__(self) -> int:
        return len(self._images)

    def add(self, glyph: RenderedGlyph) -> None:
        # The glyph bitmap is reused by the rasterizer, so copy it out now
        if len(self._images) < self.limit:
            self._images.append(bitmap_to_image(glyph.bitmap))

    def save(self, path: str | Path) -> None:
        count = max(len(self._images), 1)
        columns = min(self.columns, count)
        rows = (count + columns - 1) // columns
        pitch_x = self.cells.full_width + _GAP
        pitch_y = self.cells.height + _GAP
        sheet = Image.new("L", (columns * pitch_x + _GAP, rows * pitch_y + _GAP), _GAP_SHADE)
        for i, image in enumerate(self._images):
            col, row = i % columns, i // columns
            sheet.paste(image, (_GAP + col * pitch_x, _GAP + row * pitch_y))
        sheet.save(Path(path), format="PNG", optimize=True)
