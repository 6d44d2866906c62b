"""Four-tier classification of coverage percentages."""

import math
from typing import Tuple

# (threshold, status, color), highest threshold first
COVERAGE_TIERS: Tuple[Tuple[float, str, str], ...] = (
    (95, "excellent", "#4c1"),
    (80, "good", "#dfb317"),
    (60, "fair", "#fe7d37"),
    (0, "poor", "#e05d44"),
)

ERROR_COLOR = "#e05d44"


def _tier(percentage: float) -> Tuple[float, str, str]:
    for tier in COVERAGE_TIERS:
        if percentage >= tier[0]:
            return tier
    return COVERAGE_TIERS[-1]


def coverage_status(percentage: float) -> str:
    """Status name for a coverage percentage."""
    return _tier(percentage)[1]


def coverage_color(percentage: float) -> str:
    """Badge color for a coverage percentage."""
    return _tier(percentage)[2]


def round_one(value: float) -> float:
    """Round half up to one decimal."""
    return math.floor(value * 10 + 0.5) / 10


def round_percent(numerator: int, denominator: int) -> float:
    """numerator/denominator as a percentage with one decimal; 0.0 for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return round_one(numerator / denominator * 100)
