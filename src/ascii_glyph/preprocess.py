"""Caller-side image preparation: grayscale, tone curve, brightness/contrast, resize."""
import numpy as np
from PIL import Image, ImageEnhance, ImageOps

from .quadrants import BLOCK_SIZE


def lift_shadows(levels, gamma=0.7, exposure=0.5):
    """
    Tone curve on 0..1 levels: ``v ** gamma`` then ``v / (v + exposure)``.

    gamma < 1 brightens dark areas, a small exposure compresses highlights.
    """
    lifted = np.power(levels, gamma)
    return lifted / (lifted + exposure)


def stretch_contrast(levels, contrast):
    """Scale 0..1 levels away from (or towards) their mean."""
    mean = levels.mean()
    return mean + (levels - mean) * contrast


def block_aligned_size(size, width=None):
    """
    (width, height) with the width rounded down to a multiple of 9.

    ``width`` defaults to the current one; height keeps the aspect ratio.
    """
    w, h = size
    target = w if width is None else int(width)
    new_w = max(BLOCK_SIZE, (target // BLOCK_SIZE) * BLOCK_SIZE)
    new_h = max(1, int(h * new_w / float(w)))
    return new_w, new_h


def prepare_image(image, width=None, invert=False, brightness=1.0, contrast=1.0,
                  auto=False, gamma=0.7, exposure=0.5):
    """Return an 'L' image whose width is a multiple of 9, ready for encoding."""
    img = image.convert("L")
    if invert:
        img = ImageOps.invert(img)
    if brightness != 1.0:
        img = ImageEnhance.Brightness(img).enhance(brightness)

    if auto or contrast != 1.0:
        levels = np.asarray(img, dtype=np.float64) / 255.0
        if auto:
            levels = lift_shadows(levels, gamma, exposure)
        if contrast != 1.0:
            levels = stretch_contrast(levels, contrast)
        levels = np.rint(np.clip(levels, 0.0, 1.0) * 255.0)
        img = Image.fromarray(levels.astype(np.uint8))

    new_size = block_aligned_size(img.size, width)
    if new_size != img.size:
        img = img.resize(new_size, Image.BICUBIC)
    return img
