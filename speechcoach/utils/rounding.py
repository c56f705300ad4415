import math


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; the dashboard uses Math.round
    return int(math.floor(x + 0.5))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))
