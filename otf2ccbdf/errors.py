"""Exceptions raised while converting an outline font to BDF."""


class ConversionError(Exception):
    """Base class for every failure that aborts a conversion."""


class FontError(ConversionError):
    """The font could not be parsed, sized or queried by the font engine."""


class EmptyFontError(ConversionError):
    """The font defines no glyph in the scanned codepoint range."""
