"""Block profile -> glyph matching."""
import enum

from .quadrants import BRIGHTNESS_MAX


class Strategy(enum.Enum):
    # nearest brightness band first, widening symmetrically
    BAND_SEARCH = "band"
    # folds every bucket at avg, avg+1, avg+2 ... into one candidate
    ACCUMULATING_SEARCH = "accumulating"

    def __str__(self):
        return self.value


def tie_break(first, second, target):
    """
    Return whichever of two signatures is closer to ``target`` in more quadrants.

    A quadrant scores only when one side is strictly closer. Equal scores
    go to ``first``.
    """
    score1 = 0
    score2 = 0
    for q1, q2, wanted in zip(first.quadrants, second.quadrants, target):
        d1 = abs(q1 - wanted)
        d2 = abs(q2 - wanted)
        if d1 < d2:
            score1 += 1
        elif d2 < d1:
            score2 += 1
    return second if score2 > score1 else first


def reduce_bucket(candidates, target):
    best = None
    for signature in candidates:
        best = signature if best is None else tie_break(best, signature, target)
    return best


def band_search(profile, library):
    average = profile.average_brightness
    target = profile.quadrants
    exact = library.bucket(average)
    if exact:
        return reduce_bucket(exact, target)

    dx = 1
    while average - dx > 0 and average + dx <= BRIGHTNESS_MAX:
        upper = reduce_bucket(library.bucket(average + dx), target)
        lower = reduce_bucket(library.bucket(average - dx), target)
        if upper is not None and lower is not None:
            return tie_break(upper, lower, target)
        if upper is not None:
            return upper
        if lower is not None:
            return lower
        dx += 1
    if average - dx <= 0:
        return library.darkest
    return library.brightest


def accumulating_search(profile, library):
    average = profile.average_brightness
    target = profile.quadrants
    best = None
    dx = 0
    while average - dx > 0 and average + dx <= BRIGHTNESS_MAX:
        bucket = library.bucket(average + dx)
        if bucket:
            if best is None:
                best = reduce_bucket(bucket, target)
            else:
                best = reduce_bucket(bucket + (best,), target)
        dx += 1
    if best is not None:
        return best
    if average - dx <= 0:
        return library.darkest
    return library.brightest


_STRATEGIES = {
    Strategy.BAND_SEARCH: band_search,
    Strategy.ACCUMULATING_SEARCH: accumulating_search,
}


def match(profile, library, strategy=Strategy.BAND_SEARCH):
    """Best matching ``GlyphSignature`` for ``profile``; never fails on a non-empty library."""
    return _STRATEGIES[Strategy(strategy)](profile, library)
