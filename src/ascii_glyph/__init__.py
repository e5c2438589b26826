"""Grayscale image <-> ASCII art codec based on 9-quadrant glyph brightness signatures."""
from .codec import (
    DecodeMode,
    average_block_image,
    decode_from_ascii,
    delta_image,
    encode_to_ascii,
    glyph_preview_image,
)
from .errors import AsciiGlyphError, EmptyGlyphLibraryError, GlyphNotFoundError, RasterFormatError
from .glyphs import GlyphLibrary, GlyphLibraryCache, GlyphSignature, build_glyph_library
from .matcher import Strategy, match
from .quadrants import BlockProfile

__version__ = "1.0.0"

__all__ = [
    "AsciiGlyphError",
    "BlockProfile",
    "DecodeMode",
    "EmptyGlyphLibraryError",
    "GlyphLibrary",
    "GlyphLibraryCache",
    "GlyphNotFoundError",
    "GlyphSignature",
    "RasterFormatError",
    "Strategy",
    "average_block_image",
    "build_glyph_library",
    "decode_from_ascii",
    "delta_image",
    "encode_to_ascii",
    "glyph_preview_image",
    "match",
]
