"""Tests for the shared block geometry and block statistics."""

from collections import Counter

import numpy as np
import pytest
from PIL import Image

from ascii_glyph.errors import RasterFormatError
from ascii_glyph.quadrants import (
    QUADRANT_LOOKUP,
    BlockProfile,
    as_raster,
    block_profiles,
    check_block_width,
    clip_brightness,
    extract_block_profile,
    grid_size,
    quadrant_fill,
)
from tests.conftest import uniform


def test_lookup_is_row_major_3x3():
    assert len(QUADRANT_LOOKUP) == 81
    assert QUADRANT_LOOKUP[:9] == (0, 0, 0, 1, 1, 1, 2, 2, 2)
    assert QUADRANT_LOOKUP[3 * 9] == 3
    assert QUADRANT_LOOKUP[4 * 9 + 4] == 4
    assert QUADRANT_LOOKUP[80] == 8
    assert Counter(QUADRANT_LOOKUP) == {q: 9 for q in range(9)}


@pytest.mark.parametrize("value, black, white, expected", [
    (250, 0, 200, 255),
    (200, 0, 200, 255),
    (10, 20, 255, 0),
    (20, 20, 255, 0),
    (120, 20, 200, 120),
    (100, 150, 100, 255),
])
def test_clip_brightness(value, black, white, expected):
    assert clip_brightness(value, black, white) == expected


def test_uniform_block_profile():
    profile = extract_block_profile(uniform(100), 0, 0)
    assert profile == BlockProfile(100, [100] * 9)


def test_out_of_bounds_pixels_are_white():
    raster = np.zeros((5, 9), dtype=np.uint8)
    profile = extract_block_profile(raster, 0, 0)
    assert profile.quadrants == (0, 0, 0, 85, 85, 85, 255, 255, 255)
    assert profile.average_brightness == 113


def test_custom_pixel_reader_is_used():
    raster = uniform(0)
    profile = extract_block_profile(raster, 0, 0, read_pixel=lambda x, y: 90)
    assert profile.average_brightness == 90


def test_block_profiles_match_single_block_extraction(rng):
    raster = rng.integers(0, 256, size=(22, 27), dtype=np.uint8)
    grid = block_profiles(raster, black_threshold=40, white_threshold=210)
    assert grid.shape == (3, 3, 10)
    for row in range(3):
        for col in range(3):
            expected = extract_block_profile(raster, col * 9, row * 9,
                                             black_threshold=40, white_threshold=210)
            values = grid[row, col]
            assert BlockProfile(values[0], values[1:]) == expected


def test_grid_size_rounds_up():
    assert grid_size(np.zeros((10, 18), dtype=np.uint8)) == (2, 2)
    assert grid_size(np.zeros((9, 9), dtype=np.uint8)) == (1, 1)


def test_width_must_be_multiple_of_nine():
    with pytest.raises(RasterFormatError):
        check_block_width(np.zeros((9, 10), dtype=np.uint8))


def test_as_raster_accepts_grayscale_image():
    raster = as_raster(Image.new("L", (18, 9), 42))
    assert raster.shape == (9, 18)
    assert raster.dtype == np.uint8


@pytest.mark.parametrize("bad", [
    Image.new("RGB", (9, 9)),
    np.zeros((9, 9), dtype=np.float32),
    np.zeros((9, 9, 3), dtype=np.uint8),
    [[0] * 9] * 9,
])
def test_as_raster_rejects_other_formats(bad):
    with pytest.raises(RasterFormatError):
        as_raster(bad)


def test_quadrant_fill_layout():
    tile = quadrant_fill([10, 20, 30, 40, 50, 60, 70, 80, 90])
    assert tile.shape == (9, 9)
    assert tile[0, 0] == 10
    assert tile[2, 8] == 30
    assert tile[4, 4] == 50
    assert tile[8, 0] == 70
    assert tile[8, 8] == 90
