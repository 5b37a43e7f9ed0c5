"""Convert OTF/TTF outline fonts to dual-width BDF bitmap fonts."""

from .bdf import BDFConverter, BDFWriter, convert_file
from .bitimg import PackedBitmap
from .errors import ConversionError, EmptyFontError, FontError

__version__ = "0.1.0"

__all__ = [
    "BDFConverter",
    "BDFWriter",
    "ConversionError",
    "EmptyFontError",
    "FontError",
    "PackedBitmap",
    "convert_file",
]
