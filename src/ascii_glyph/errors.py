class AsciiGlyphError(Exception):
    """Base class for codec failures."""


class RasterFormatError(AsciiGlyphError, ValueError):
    """Raster does not satisfy the codec preconditions."""


class GlyphNotFoundError(AsciiGlyphError, LookupError):
    def __init__(self, char):
        super().__init__("Found no glyph for %r (%d)" % (char, ord(char)))
        self.char = char


class EmptyGlyphLibraryError(AsciiGlyphError):
    """Glyph library holds no signatures."""
