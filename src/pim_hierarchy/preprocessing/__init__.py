# preprocessing/__init__.py

"""
Value parsing helpers: numeric strings and inline units of measure.
"""

from .numeric_units import (
    canonical_unit,
    find_value_unit,
    numeric_ratio,
    parse_inline_value_unit,
    safe_to_float,
)

__all__ = [
    "canonical_unit",
    "find_value_unit",
    "numeric_ratio",
    "parse_inline_value_unit",
    "safe_to_float",
]
