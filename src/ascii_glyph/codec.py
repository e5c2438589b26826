"""
Image <-> text conversion on 9x9 pixel blocks.

Encoding reduces every block to a ``BlockProfile`` and picks the glyph whose
signature matches best; decoding paints each character's signature back as
a 9x9 cell.
"""
import enum
import logging

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .errors import RasterFormatError
from .matcher import Strategy, match
from .quadrants import (
    BLOCK_SIZE,
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    BlockProfile,
    as_raster,
    block_profiles,
    check_block_width,
    quadrant_fill,
    split_blocks,
)

logger = logging.getLogger(__name__)

DELTA_LABEL_POSITION = (25, 25)
DELTA_LABEL_COLOR = 255
# ASCII whitespace, no C1 controls or NBSP
BLANK_CHARS = " \t\n\x0b\x0c\r\x1c\x1d\x1e\x1f"


class DecodeMode(enum.Enum):
    FLAT = "flat"
    QUADRANT = "quadrant"

    def __str__(self):
        return self.value


def check_threshold(name, value):
    if not BRIGHTNESS_MIN <= int(value) <= BRIGHTNESS_MAX:
        raise ValueError("%s must be within 0..255, got %r" % (name, value))
    return int(value)


def _match_grid(raster, library, black_threshold, white_threshold, strategy):
    """Yield one list of matched signatures per block row."""
    profiles = block_profiles(raster, black_threshold, white_threshold)
    cache = {}
    for row in profiles:
        matched = []
        for values in row:
            key = tuple(int(v) for v in values)
            signature = cache.get(key)
            if signature is None:
                signature = match(BlockProfile(key[0], key[1:]), library, strategy)
                cache[key] = signature
            matched.append(signature)
        yield matched


def crop_lines(lines):
    """Strip trailing spaces per line and drop the leading run of blank lines."""
    lines = [line.rstrip(" ") for line in lines]
    start = 0
    while start < len(lines) and not lines[start].strip(BLANK_CHARS):
        start += 1
    return lines[start:]


def encode_to_ascii(raster, library, black_threshold=BRIGHTNESS_MIN, white_threshold=BRIGHTNESS_MAX,
                    strategy=Strategy.BAND_SEARCH, crop=True):
    """
    Convert a grayscale raster to text, one character per 9x9 block.

    The raster width must be a multiple of 9; a partial last block row is
    padded with white. Lines are joined with ``\\n`` and there is no
    trailing newline.
    """
    raster = as_raster(raster)
    check_block_width(raster)
    black_threshold = check_threshold("black_threshold", black_threshold)
    white_threshold = check_threshold("white_threshold", white_threshold)

    lines = ["".join(sig.char for sig in row)
             for row in _match_grid(raster, library, black_threshold, white_threshold, strategy)]
    if crop:
        lines = crop_lines(lines)
    logger.debug("Encoded %dx%d raster into %d lines (strategy=%s, crop=%s)",
                 raster.shape[1], raster.shape[0], len(lines), Strategy(strategy), crop)
    return "\n".join(lines)


def pad_text(text):
    lines = text.split("\n")
    # a final newline does not start another row
    while len(lines) > 1 and lines[-1] == "":
        lines.pop()
    width = max(len(line) for line in lines)
    return [line.ljust(width) for line in lines], width


def decode_from_ascii(text, library, mode=DecodeMode.QUADRANT):
    """Reconstruct an approximate raster from text produced with ``library``."""
    mode = DecodeMode(mode)
    lines, width = pad_text(text)
    image = np.empty((len(lines) * BLOCK_SIZE, width * BLOCK_SIZE), dtype=np.uint8)
    tiles = {}
    for row, line in enumerate(lines):
        y = row * BLOCK_SIZE
        for col, char in enumerate(line):
            tile = tiles.get(char)
            if tile is None:
                signature = library.lookup(char)
                if mode is DecodeMode.FLAT:
                    tile = np.full((BLOCK_SIZE, BLOCK_SIZE), signature.average_brightness, dtype=np.uint8)
                else:
                    tile = quadrant_fill(signature.quadrants)
                tiles[char] = tile
            x = col * BLOCK_SIZE
            image[y:y + BLOCK_SIZE, x:x + BLOCK_SIZE] = tile
    logger.debug("Decoded %d lines x %d columns (%s)", len(lines), width, mode)
    return image


def _paint_blocks(shape, values):
    """Fill each 9x9 block with ``values[row, col]`` and crop to ``shape``."""
    cells = np.repeat(np.repeat(values.astype(np.uint8), BLOCK_SIZE, axis=0), BLOCK_SIZE, axis=1)
    return np.ascontiguousarray(cells[:shape[0], :shape[1]])


def average_block_image(raster):
    """Paint every 9x9 block with its mean brightness (no thresholds)."""
    raster = as_raster(raster)
    check_block_width(raster)
    blocks = split_blocks(raster.astype(np.int64))
    return _paint_blocks(raster.shape, blocks.sum(axis=2) // (BLOCK_SIZE * BLOCK_SIZE))


def glyph_preview_image(raster, library, black_threshold=BRIGHTNESS_MIN, white_threshold=BRIGHTNESS_MAX,
                        strategy=Strategy.BAND_SEARCH):
    """Paint every block with the average brightness of the glyph it encodes to."""
    raster = as_raster(raster)
    check_block_width(raster)
    black_threshold = check_threshold("black_threshold", black_threshold)
    white_threshold = check_threshold("white_threshold", white_threshold)
    rows = [[sig.average_brightness for sig in row]
            for row in _match_grid(raster, library, black_threshold, white_threshold, strategy)]
    values = np.array(rows, dtype=np.int64).reshape(len(rows), raster.shape[1] // BLOCK_SIZE)
    return _paint_blocks(raster.shape, values)


def delta_image(first, second, annotate=False):
    """
    Absolute per-pixel difference of two rasters of equal width.

    The result is as tall as the shorter input. The average delta is sampled
    at the top-left pixel of every 9x9 block; with ``annotate`` it is also
    written onto the image.
    """
    first = as_raster(first)
    second = as_raster(second)
    if first.shape[1] != second.shape[1]:
        raise RasterFormatError("Width mismatch: %d <-> %d" % (first.shape[1], second.shape[1]))
    height = min(first.shape[0], second.shape[0])
    diff = np.abs(first[:height].astype(np.int16) - second[:height].astype(np.int16)).astype(np.uint8)

    samples = diff[::BLOCK_SIZE, ::BLOCK_SIZE]
    average_delta = float(samples.mean()) if samples.size else 0.0
    logger.info("Avg. delta: %s", average_delta)

    if annotate:
        canvas = Image.fromarray(diff)
        draw = ImageDraw.Draw(canvas)
        draw.text(DELTA_LABEL_POSITION, "Avg. delta: %s" % average_delta,
                  fill=DELTA_LABEL_COLOR, font=ImageFont.load_default())
        diff = np.array(canvas)
    return diff, average_delta
