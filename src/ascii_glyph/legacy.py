"""
Legacy 8x8 converter.

Blocks are binarised against a single threshold and split into 4 quadrants
of 4x4 pixels; glyphs are compared by the number of set pixels per
quadrant. Blocks at the right/bottom edge are clipped to the image.
"""
import logging
from collections import namedtuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .errors import EmptyGlyphLibraryError
from .glyphs import FIRST_CODE, MAX_CODE_7BIT, load_glyph_font
from .matcher import reduce_bucket, tie_break
from .quadrants import as_raster

logger = logging.getLogger(__name__)

LEGACY_BLOCK_SIZE = 8
LEGACY_HALF = LEGACY_BLOCK_SIZE // 2
LEGACY_FONT_SIZE_PT = 7
LEGACY_X_OFFSET = 2
LEGACY_BASELINE_Y = 6
DEFAULT_THRESHOLD = 0x70

LegacyGlyph = namedtuple("LegacyGlyph", "char pixels_set quadrants")


class LegacyGlyphLibrary:
    def __init__(self, glyphs):
        self._buckets = {}
        for glyph in glyphs:
            self._buckets.setdefault(glyph.pixels_set, []).append(glyph)
        if not self._buckets:
            raise EmptyGlyphLibraryError("Legacy glyph library contains no glyphs")
        levels = sorted(self._buckets)
        self.emptiest = self._buckets[levels[0]][0]
        self.fullest = self._buckets[levels[-1]][0]

    def bucket(self, pixels_set):
        return self._buckets.get(pixels_set, ())

    def match(self, quadrants):
        total = sum(quadrants)
        exact = self.bucket(total)
        if exact:
            return reduce_bucket(exact, quadrants)
        dx = 1
        while total - dx > 0 and total + dx <= LEGACY_BLOCK_SIZE * LEGACY_BLOCK_SIZE:
            upper = reduce_bucket(self.bucket(total + dx), quadrants)
            lower = reduce_bucket(self.bucket(total - dx), quadrants)
            if upper is not None and lower is not None:
                return tie_break(upper, lower, quadrants)
            if upper is not None:
                return upper
            if lower is not None:
                return lower
            dx += 1
        if total - dx <= 0:
            return self.emptiest
        return self.fullest


def _quadrant_counts(mask):
    """Set-pixel count per 4x4 quadrant of an (up to) 8x8 boolean mask."""
    return (
        int(mask[:LEGACY_HALF, :LEGACY_HALF].sum()),
        int(mask[:LEGACY_HALF, LEGACY_HALF:].sum()),
        int(mask[LEGACY_HALF:, :LEGACY_HALF].sum()),
        int(mask[LEGACY_HALF:, LEGACY_HALF:].sum()),
    )


def build_legacy_library(font=None):
    if font is None:
        font = load_glyph_font(size=LEGACY_FONT_SIZE_PT)
    glyphs = []
    canvas = Image.new("L", (32, 32), 0)
    draw = ImageDraw.Draw(canvas)
    draw.fontmode = "1"
    for code in range(FIRST_CODE, MAX_CODE_7BIT):
        char = chr(code)
        draw.rectangle((0, 0, 31, 31), fill=0)
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text((LEGACY_X_OFFSET, LEGACY_BASELINE_Y), char, fill=255, font=font, anchor="ls")
        else:
            draw.text((LEGACY_X_OFFSET, 0), char, fill=255, font=font)
        mask = np.asarray(canvas)[:LEGACY_BLOCK_SIZE, :LEGACY_BLOCK_SIZE] != 0
        quadrants = _quadrant_counts(mask)
        glyphs.append(LegacyGlyph(char, sum(quadrants), quadrants))
    logger.debug("Built legacy glyph library: %d glyphs", len(glyphs))
    return LegacyGlyphLibrary(glyphs)


def encode_legacy(raster, library, threshold=DEFAULT_THRESHOLD, invert=True):
    """
    Convert a raster of any size to text on 8x8 blocks.

    With ``invert`` pixels at or below ``threshold`` count as ink, otherwise
    pixels above it do.
    """
    raster = as_raster(raster)
    if invert:
        mask = raster <= threshold
    else:
        mask = raster > threshold
    height, width = raster.shape
    lines = []
    for y in range(0, height, LEGACY_BLOCK_SIZE):
        line = []
        for x in range(0, width, LEGACY_BLOCK_SIZE):
            block = mask[y:y + LEGACY_BLOCK_SIZE, x:x + LEGACY_BLOCK_SIZE]
            line.append(library.match(_quadrant_counts(block)).char)
        lines.append("".join(line))
    return "\n".join(lines)
