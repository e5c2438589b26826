"""Tests for caller-side image preparation."""

import numpy as np
import pytest
from PIL import Image

from ascii_glyph.preprocess import block_aligned_size, lift_shadows, prepare_image, stretch_contrast


def test_block_aligned_size():
    assert block_aligned_size((100, 50)) == (99, 49)
    assert block_aligned_size((100, 50), width=200) == (198, 99)
    assert block_aligned_size((4, 4)) == (9, 9)


def test_prepare_image_is_grayscale_and_aligned():
    img = prepare_image(Image.new("RGB", (100, 60), (255, 0, 0)), width=50)
    assert img.mode == "L"
    assert img.size[0] == 45
    assert img.size[0] % 9 == 0


def test_prepare_image_keeps_aligned_size():
    img = prepare_image(Image.new("L", (27, 10), 77))
    assert img.size == (27, 10)
    assert np.asarray(img)[0, 0] == 77


def test_invert():
    img = prepare_image(Image.new("L", (9, 9), 255), invert=True)
    assert (np.asarray(img) == 0).all()


def test_lift_shadows_curve():
    levels = np.array([0.0, 40 / 255.0, 1.0])
    lifted = lift_shadows(levels)
    assert lifted[0] == 0.0
    assert lifted[1] > levels[1]
    # highlights are compressed below full white
    assert lifted[2] == pytest.approx(1 / 1.5)


def test_stretch_contrast_keeps_mean():
    levels = np.array([0.2, 0.4, 0.6])
    stretched = stretch_contrast(levels, 2.0)
    assert stretched == pytest.approx([0.0, 0.4, 0.8])
    assert stretch_contrast(np.full(4, 0.3), 3.0) == pytest.approx([0.3] * 4)


def test_prepare_image_auto_brightens_dark_image():
    img = prepare_image(Image.new("L", (9, 9), 40), auto=True)
    assert img.mode == "L"
    assert (np.asarray(img) > 40).all()


def test_prepare_image_contrast_on_uniform_image():
    img = prepare_image(Image.new("L", (9, 9), 120), contrast=2.0)
    assert (np.asarray(img) == 120).all()
