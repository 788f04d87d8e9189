"""Mathematical helper functions used across the codebase."""

import math


def round_half_up(x: float, ndigits: int = 0) -> float:
    """Round with ties going up (2.5 -> 3), unlike the builtin banker's rounding."""
    factor = 10 ** ndigits
    return math.floor(x * factor + 0.5) / factor


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between lo and hi, mapping NaN/inf to lo."""
    if math.isnan(x) or math.isinf(x):
        return lo
    return max(lo, min(hi, x))
