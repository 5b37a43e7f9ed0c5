"""
bitimg.py — 1-bit packed monochrome surface.

Pixels are stored row-major, 8 per byte, MSB first (the same packing a BDF
BITMAP row uses), so a glyph cell can be dumped to hex without repacking.
1 is foreground (white ink), 0 is background.
"""

from __future__ import annotations

from typing import Iterator, Sequence, Union

Color = Union[bool, int, Sequence[int]]

_BIT_MASKS = tuple(0x80 >> i for i in range(8))
_INV_MASKS = tuple(~(0x80 >> i) & 0xFF for i in range(8))

# Gray level above which a pixel is foreground
_THRESHOLD = 127


def to_bit(color: Color) -> bool:
    """Quantize a color to a single bit.

    A bool is already a bit and round-trips unchanged. An int is an 8-bit
    gray level. A tuple is (r, g, b[, a]) with 8-bit channels, converted to
    gray using the ITU-R 601 luma weights.
    """
    if isinstance(color, bool):
        return color
    if isinstance(color, int):
        return color > _THRESHOLD
    r, g, b = color[0], color[1], color[2]
    gray = (19595 * r + 38470 * g + 7471 * b + (1 << 15)) >> 16
    return gray > _THRESHOLD


class PackedBitmap:
    """Fixed-size monochrome surface backed by a packed bytearray."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"bitmap size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._row_stride = (width + 7) // 8
        self._buffer = bytearray(self._row_stride * height)

    def __repr__(self) -> str:
        return f"PackedBitmap({self.width}, {self.height})"

    @property
    def row_stride(self) -> int:
        return self._row_stride

    def raw_bytes(self) -> memoryview:
        """Read-only view of the packed buffer."""
        return memoryview(self._buffer).toreadonly()

    def clear(self) -> None:
        # Slice assignment keeps the same buffer object
        self._buffer[:] = bytes(len(self._buffer))

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        idx = y * self._row_stride + (x >> 3)
        if idx < 0 or idx >= len(self._buffer):
            return
        if to_bit(color):
            self._buffer[idx] |= _BIT_MASKS[x & 7]
        else:
            self._buffer[idx] &= _INV_MASKS[x & 7]

    def get_pixel(self, x: int, y: int) -> bool:
        idx = y * self._row_stride + (x >> 3)
        if idx < 0 or idx >= len(self._buffer):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} bitmap")
        return bool(self._buffer[idx] & _BIT_MASKS[x & 7])

    def rows(self) -> Iterator[bytes]:
        stride = self._row_stride
        for start in range(0, len(self._buffer), stride):
            yield bytes(self._buffer[start:start + stride])

    def hex_rows(self) -> Iterator[str]:
        """Each row as uppercase hex, two characters per byte."""
        for row in self.rows():
            yield row.hex().upper()

    def draw_coverage(self, x0: int, y0: int, width: int, rows: int,
                      pitch: int, coverage: Sequence[int]) -> None:
        """
        Composite white ink through an 8-bit coverage mask.

        The mask is `rows` lines of `width` samples, `pitch` bytes apart,
        placed with its top-left corner at (x0, y0). Samples are blended
        over the current pixel and thresholded the way to_bit() does. White
        over existing ink stays ink, so only background pixels can change.
        Parts of the mask outside the surface are clipped.
        """
        buf = self._buffer
        stride = self._row_stride
        x_start = max(0, -x0)
        x_end = min(width, self.width - x0)
        y_start = max(0, -y0)
        y_end = min(rows, self.height - y0)
        for my in range(y_start, y_end):
            base = my * pitch
            row = (y0 + my) * stride
            for mx in range(x_start, x_end):
                if coverage[base + mx] > _THRESHOLD:
                    x = x0 + mx
                    buf[row + (x >> 3)] |= _BIT_MASKS[x & 7]
