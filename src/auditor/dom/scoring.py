import math
from typing import Tuple

# Score returned for a signal whose population is empty: nothing to violate.
EMPTY_POPULATION_SCORE = 100


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def safe_ratio(numerator: int, denominator: int, empty: float = 1.0) -> float:
    """numerator / denominator, or `empty` when the denominator population is empty."""
    if denominator <= 0:
        return empty
    return numerator / denominator


def ratio_score(numerator: int, denominator: int) -> int:
    """
    Converts a compliance ratio to a 0-100 sub-score.
    An empty population scores EMPTY_POPULATION_SCORE.
    """
    if denominator <= 0:
        return EMPTY_POPULATION_SCORE
    return clamp_score(numerator / denominator * 100)


def weighted_score(*parts: Tuple[float, float]) -> int:
    """Combines (sub_score, weight) pairs into one clamped, half-up rounded score."""
    return clamp_score(math.fsum(score * weight for score, weight in parts))


def percent(ratio: float) -> int:
    return round_half_up(ratio * 100)
