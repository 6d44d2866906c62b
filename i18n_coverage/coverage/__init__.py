"""Coverage computation and classification."""

from .calculator import CoverageCalculator, format_coverage_text, is_base_language
from .status import coverage_color, coverage_status, round_percent

__all__ = [
    "CoverageCalculator",
    "format_coverage_text",
    "is_base_language",
    "coverage_color",
    "coverage_status",
    "round_percent",
]
