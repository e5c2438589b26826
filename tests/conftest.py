"""Shared test fixtures."""

import numpy as np
import pytest

from ascii_glyph.glyphs import GlyphLibrary, GlyphSignature, build_glyph_library


def make_signature(char, quadrants):
    """Synthetic signature; average follows from the quadrant values."""
    return GlyphSignature(char, sum(quadrants) // 9, quadrants)


def uniform(value, height=9, width=9):
    return np.full((height, width), value, dtype=np.uint8)


@pytest.fixture(scope="session")
def library():
    return build_glyph_library(use_extended_ascii=False)


@pytest.fixture(scope="session")
def extended_library():
    return build_glyph_library(use_extended_ascii=True)


@pytest.fixture
def sparse_library():
    """Only two brightness levels: 40 and 200."""
    return GlyphLibrary.from_signatures([
        make_signature("#", [40] * 9),
        make_signature(".", [200] * 9),
    ])


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
