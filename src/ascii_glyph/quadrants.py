"""
9x9 block geometry shared by glyph rendering, block extraction and decoding.

A block is split into 9 quadrants of 3x3 pixels, numbered row-major:

    0 1 2
    3 4 5
    6 7 8
"""
import numpy as np

from .errors import RasterFormatError

BLOCK_SIZE = 9
QUADRANT_SIZE = 3
QUADRANT_COUNT = 9
PIXELS_PER_QUADRANT = QUADRANT_SIZE * QUADRANT_SIZE
PIXELS_PER_BLOCK = BLOCK_SIZE * BLOCK_SIZE

BRIGHTNESS_MIN = 0
BRIGHTNESS_MAX = 255


def _build_quadrant_lookup():
    lookup = []
    for ry in range(BLOCK_SIZE):
        for rx in range(BLOCK_SIZE):
            lookup.append((ry // QUADRANT_SIZE) * QUADRANT_SIZE + rx // QUADRANT_SIZE)
    return tuple(lookup)


# pixel index (y * 9 + x) -> quadrant
QUADRANT_LOOKUP = _build_quadrant_lookup()

# one-hot (81, 9) form of QUADRANT_LOOKUP for vectorised sums
_QUADRANT_MATRIX = np.zeros((PIXELS_PER_BLOCK, QUADRANT_COUNT), dtype=np.int64)
_QUADRANT_MATRIX[np.arange(PIXELS_PER_BLOCK), QUADRANT_LOOKUP] = 1


class BlockProfile:
    """Average brightness of a block plus its 9 quadrant averages."""

    __slots__ = ("average_brightness", "quadrants")

    def __init__(self, average_brightness, quadrants):
        self.average_brightness = int(average_brightness)
        self.quadrants = tuple(int(q) for q in quadrants)

    @classmethod
    def from_sums(cls, quadrant_sums):
        total = sum(int(s) for s in quadrant_sums)
        return cls(total // PIXELS_PER_BLOCK,
                   [int(s) // PIXELS_PER_QUADRANT for s in quadrant_sums])

    def key(self):
        return (self.average_brightness,) + self.quadrants

    def __eq__(self, other):
        if not isinstance(other, BlockProfile):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def __repr__(self):
        return "BlockProfile(%d, %s)" % (self.average_brightness, list(self.quadrants))


def clip_brightness(value, black_threshold=BRIGHTNESS_MIN, white_threshold=BRIGHTNESS_MAX):
    if value >= white_threshold:
        return BRIGHTNESS_MAX
    if value <= black_threshold:
        return BRIGHTNESS_MIN
    return value


def as_raster(image):
    """Return ``image`` as a 2-D uint8 array, rejecting anything else."""
    mode = getattr(image, "mode", None)
    if mode is not None:
        if mode != "L":
            raise RasterFormatError("Expected a single-channel 8-bit image, got mode %r" % mode)
        image = np.asarray(image)
    if not isinstance(image, np.ndarray):
        raise RasterFormatError("Expected a numpy array or PIL image, got %s" % type(image).__name__)
    if image.ndim != 2 or image.dtype != np.uint8:
        raise RasterFormatError(
            "Expected a 2-D uint8 raster, got %d-D %s" % (image.ndim, image.dtype))
    return image


def check_block_width(raster):
    width = raster.shape[1]
    if width % BLOCK_SIZE != 0:
        raise RasterFormatError("Image width must be a multiple of %d (got %d)" % (BLOCK_SIZE, width))


def grid_size(raster):
    """Number of (rows, columns) of blocks covering ``raster``."""
    height, width = raster.shape
    return -(-height // BLOCK_SIZE), -(-width // BLOCK_SIZE)


def extract_block_profile(raster, x, y, read_pixel=None,
                          black_threshold=BRIGHTNESS_MIN, white_threshold=BRIGHTNESS_MAX):
    """
    Profile of the 9x9 block anchored at pixel (x, y).

    Pixels outside the raster count as pure background (255); pixels inside
    are clipped against the thresholds before being summed.
    """
    height, width = raster.shape
    if read_pixel is None:
        def read_pixel(px, py):
            return int(raster[py, px])

    sums = [0] * QUADRANT_COUNT
    ptr = 0
    for py in range(y, y + BLOCK_SIZE):
        for px in range(x, x + BLOCK_SIZE):
            if px >= width or py >= height:
                brightness = BRIGHTNESS_MAX
            else:
                brightness = clip_brightness(read_pixel(px, py), black_threshold, white_threshold)
            sums[QUADRANT_LOOKUP[ptr]] += brightness
            ptr += 1
    return BlockProfile.from_sums(sums)


def pad_to_blocks(raster, fill=BRIGHTNESS_MAX):
    rows, cols = grid_size(raster)
    height, width = raster.shape
    pad_h = rows * BLOCK_SIZE - height
    pad_w = cols * BLOCK_SIZE - width
    if pad_h == 0 and pad_w == 0:
        return raster
    return np.pad(raster, ((0, pad_h), (0, pad_w)), mode="constant", constant_values=fill)


def split_blocks(raster):
    """(rows, cols, 81) view of a raster padded to whole blocks, pixels row-major."""
    padded = pad_to_blocks(raster)
    rows, cols = padded.shape[0] // BLOCK_SIZE, padded.shape[1] // BLOCK_SIZE
    blocks = padded.reshape(rows, BLOCK_SIZE, cols, BLOCK_SIZE).swapaxes(1, 2)
    return blocks.reshape(rows, cols, PIXELS_PER_BLOCK)


def clip_raster(raster, black_threshold=BRIGHTNESS_MIN, white_threshold=BRIGHTNESS_MAX):
    clipped = raster.astype(np.int64)
    white = clipped >= white_threshold
    black = ~white & (clipped <= black_threshold)
    clipped[white] = BRIGHTNESS_MAX
    clipped[black] = BRIGHTNESS_MIN
    return clipped


def block_profiles(raster, black_threshold=BRIGHTNESS_MIN, white_threshold=BRIGHTNESS_MAX):
    """
    Vectorised ``extract_block_profile`` over every block of ``raster``.

    Returns a (rows, cols, 10) int array: column 0 is the average
    brightness, columns 1..9 the quadrant averages.
    """
    # clip before padding so padded pixels stay at 255
    clipped = clip_raster(raster, black_threshold, white_threshold)
    blocks = split_blocks(clipped)
    sums = blocks @ _QUADRANT_MATRIX
    out = np.empty(sums.shape[:2] + (QUADRANT_COUNT + 1,), dtype=np.int64)
    out[..., 0] = sums.sum(axis=2) // PIXELS_PER_BLOCK
    out[..., 1:] = sums // PIXELS_PER_QUADRANT
    return out


def quadrant_fill(quadrants):
    """9x9 uint8 tile painting each pixel with its quadrant's brightness."""
    values = np.asarray(quadrants, dtype=np.uint8)
    return values[np.asarray(QUADRANT_LOOKUP)].reshape(BLOCK_SIZE, BLOCK_SIZE)
