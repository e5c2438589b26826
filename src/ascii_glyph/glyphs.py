"""
Glyph signature table.

Every character of the configured range is rendered once (white on black,
no antialiasing) and reduced to the same 9-quadrant brightness profile that
image blocks are reduced to. Ink is dark: unset pixels count as 255, set
pixels as 0.
"""
import logging
import threading
from collections import OrderedDict

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .errors import EmptyGlyphLibraryError, GlyphNotFoundError
from .quadrants import (
    BLOCK_SIZE,
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    QUADRANT_COUNT,
    QUADRANT_LOOKUP,
    BlockProfile,
)

logger = logging.getLogger(__name__)

FONT_SIZE_PT = 8
FONT_X_OFFSET = 1
FONT_BASELINE_Y = 7
CANVAS_SIZE = 32

FONT_CANDIDATES = (
    "DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "LiberationMono-Regular.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "cour.ttf",
    "C:/Windows/Fonts/cour.ttf",
    "/System/Library/Fonts/Menlo.ttc",
)

FIRST_CODE = 32
MAX_CODE_7BIT = 127
MAX_CODE_8BIT = 255
# DEL and non-breaking space
EXCLUDED_CODES = frozenset((127, 160))


class GlyphSignature:
    """Brightness profile of a single rendered character. Immutable."""

    __slots__ = ("char", "average_brightness", "quadrants")

    def __init__(self, char, average_brightness, quadrants):
        quadrants = tuple(int(q) for q in quadrants)
        if len(quadrants) != QUADRANT_COUNT:
            raise ValueError("Expected %d quadrants, got %d" % (QUADRANT_COUNT, len(quadrants)))
        if not BRIGHTNESS_MIN <= average_brightness <= BRIGHTNESS_MAX:
            raise ValueError("Invalid brightness: %r {%d}" % (char, average_brightness))
        if sum(quadrants) > QUADRANT_COUNT * BRIGHTNESS_MAX:
            raise ValueError("Invalid quadrant brightness: %r %s" % (char, list(quadrants)))
        object.__setattr__(self, "char", char)
        object.__setattr__(self, "average_brightness", int(average_brightness))
        object.__setattr__(self, "quadrants", quadrants)

    @classmethod
    def from_pixels(cls, char, pixels):
        """Build from a 9x9 array of brightness values."""
        profile = BlockProfile.from_sums(_quadrant_sums(pixels))
        return cls(char, profile.average_brightness, profile.quadrants)

    def __setattr__(self, name, value):
        raise AttributeError("GlyphSignature is immutable")

    def __eq__(self, other):
        if not isinstance(other, GlyphSignature):
            return NotImplemented
        return (self.char, self.average_brightness, self.quadrants) == \
            (other.char, other.average_brightness, other.quadrants)

    def __hash__(self):
        return hash((self.char, self.average_brightness, self.quadrants))

    def __repr__(self):
        return "'%s' {%d} => %s" % (self.char, self.average_brightness, list(self.quadrants))


def _quadrant_sums(pixels):
    flat = np.asarray(pixels, dtype=np.int64).reshape(-1)
    return np.bincount(QUADRANT_LOOKUP, weights=flat, minlength=QUADRANT_COUNT).astype(np.int64)


class GlyphLibrary:
    """
    Signatures of one character range, bucketed by average brightness.

    Buckets keep insertion order, which the matcher's tie-break fold relies on.
    """

    def __init__(self, signatures, extended=False):
        self.extended = extended
        self._buckets = {}
        self._by_char = OrderedDict()
        self.darkest = None
        self.brightest = None
        for signature in signatures:
            self._add(signature)
        if not self._by_char:
            raise EmptyGlyphLibraryError("Glyph library contains no signatures")
        for brightness, bucket in self._buckets.items():
            self._buckets[brightness] = tuple(bucket)

    @classmethod
    def from_signatures(cls, signatures, extended=False):
        return cls(list(signatures), extended=extended)

    def _add(self, signature):
        if self.darkest is None or signature.average_brightness < self.darkest.average_brightness:
            self.darkest = signature
        if self.brightest is None or signature.average_brightness > self.brightest.average_brightness:
            self.brightest = signature
        self._buckets.setdefault(signature.average_brightness, []).append(signature)
        self._by_char.setdefault(signature.char, signature)

    def bucket(self, brightness):
        """Signatures whose average brightness equals ``brightness`` (may be empty)."""
        return self._buckets.get(brightness, ())

    def lookup(self, char):
        try:
            return self._by_char[char]
        except KeyError:
            raise GlyphNotFoundError(char) from None

    def __contains__(self, char):
        return char in self._by_char

    def __iter__(self):
        return iter(self._by_char.values())

    def __len__(self):
        return len(self._by_char)

    @property
    def chars(self):
        return "".join(self._by_char)

    def brightness_levels(self):
        return sorted(self._buckets)


def character_range(use_extended_ascii=False):
    max_code = MAX_CODE_8BIT if use_extended_ascii else MAX_CODE_7BIT
    return [chr(code) for code in range(FIRST_CODE, max_code) if code not in EXCLUDED_CODES]


def load_glyph_font(font_path=None, size=FONT_SIZE_PT):
    """Monospace font for glyph rendering, falling back to Pillow's default."""
    candidates = (font_path,) if font_path else FONT_CANDIDATES
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    if font_path:
        raise OSError("cannot open font %s" % font_path)
    logger.warning("No monospace TrueType font found, using Pillow's default font")
    return ImageFont.load_default()


def render_glyph(char, font):
    """Render ``char`` and return the 9x9 brightness block (ink = 0, background = 255)."""
    canvas = Image.new("L", (CANVAS_SIZE, CANVAS_SIZE), 0)
    draw = ImageDraw.Draw(canvas)
    # monochrome rendering, no text antialiasing
    draw.fontmode = "1"
    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((FONT_X_OFFSET, FONT_BASELINE_Y), char, fill=255, font=font, anchor="ls")
    else:
        draw.text((FONT_X_OFFSET, 0), char, fill=255, font=font)
    cell = np.asarray(canvas)[:BLOCK_SIZE, :BLOCK_SIZE]
    # exact equality with the background colour marks an unset pixel
    return np.where(cell == 0, BRIGHTNESS_MAX, BRIGHTNESS_MIN).astype(np.uint8)


def build_glyph_library(use_extended_ascii=False, font=None):
    """Render every character of the selected range into a new ``GlyphLibrary``."""
    if font is None:
        font = load_glyph_font()
    signatures = []
    for char in character_range(use_extended_ascii):
        signatures.append(GlyphSignature.from_pixels(char, render_glyph(char, font)))
    library = GlyphLibrary(signatures, extended=use_extended_ascii)
    logger.debug("Built glyph library: %d glyphs, %d brightness levels, darkest %r, brightest %r",
                 len(library), len(library.brightness_levels()), library.darkest, library.brightest)
    return library


class GlyphLibraryCache:
    """
    Lazily built, shared glyph library.

    Concurrent first use builds the table once; changing the character range
    swaps in a completely built replacement.
    """

    def __init__(self, use_extended_ascii=False, font=None):
        self._lock = threading.Lock()
        self._use_extended_ascii = use_extended_ascii
        self._font = font
        self._library = None

    @property
    def use_extended_ascii(self):
        return self._use_extended_ascii

    @use_extended_ascii.setter
    def use_extended_ascii(self, value):
        with self._lock:
            self._use_extended_ascii = bool(value)

    def get(self):
        library = self._library
        if library is not None and library.extended == self._use_extended_ascii:
            return library
        with self._lock:
            library = self._library
            if library is None or library.extended != self._use_extended_ascii:
                library = build_glyph_library(self._use_extended_ascii, self._font)
                self._library = library
            return library
