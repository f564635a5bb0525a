import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (``2.5 -> 3``)."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
