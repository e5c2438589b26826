"""Tests for the legacy 8x8 / 4-quadrant converter."""

import numpy as np
import pytest

from ascii_glyph.errors import EmptyGlyphLibraryError
from ascii_glyph.legacy import LegacyGlyph, LegacyGlyphLibrary, build_legacy_library, encode_legacy


@pytest.fixture(scope="module")
def legacy_library():
    return build_legacy_library()


def test_blank_image_is_spaces(legacy_library):
    raster = np.full((16, 24), 255, dtype=np.uint8)
    assert encode_legacy(raster, legacy_library) == "   \n   "


def test_blocks_clip_at_image_bounds(legacy_library):
    raster = np.full((10, 13), 255, dtype=np.uint8)
    lines = encode_legacy(raster, legacy_library).split("\n")
    assert len(lines) == 2
    assert all(len(line) == 2 for line in lines)


def test_full_block_uses_fullest_glyph(legacy_library):
    raster = np.zeros((8, 8), dtype=np.uint8)
    assert encode_legacy(raster, legacy_library) == legacy_library.fullest.char


def test_no_invert_counts_bright_pixels(legacy_library):
    raster = np.zeros((8, 8), dtype=np.uint8)
    assert encode_legacy(raster, legacy_library, invert=False) == " "


def test_match_by_pixel_count():
    lib = LegacyGlyphLibrary([
        LegacyGlyph(" ", 0, (0, 0, 0, 0)),
        LegacyGlyph("'", 4, (4, 0, 0, 0)),
        LegacyGlyph(".", 4, (0, 0, 4, 0)),
        LegacyGlyph("#", 40, (10, 10, 10, 10)),
    ])
    assert lib.match((0, 0, 3, 1)).char == "."
    assert lib.match((5, 0, 0, 0)).char == "'"
    assert lib.match((9, 9, 9, 9)).char == "#"
    assert lib.match((16, 16, 16, 16)).char == "#"


def test_empty_legacy_library():
    with pytest.raises(EmptyGlyphLibraryError):
        LegacyGlyphLibrary([])
