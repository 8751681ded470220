# analysis/uom_patterns.py

"""
Unit-of-measure suggestions for dimension and weight columns.

For every header that names a dimension or weight (and is not itself a
unit column) a 10-value sample is inspected:

    embedded units   "12kg", "30 cm"   -> split value and unit, convert
    separate column  "Weight UoM"      -> convert from that column's unit
    plain numbers    "12", "30.5"      -> unit unknown, needs confirmation
"""

from __future__ import annotations
from collections import Counter
from typing import List, Optional, Sequence, Tuple

import logging

from ..core.column_profiler import TableProfile
from ..core.keywords import DEFAULT_KEYWORDS, KeywordRules
from ..core.models import UomConversion, UomSuggestion
from ..core.text_utils import header_tokens
from ..core.trace import Trace, record
from ..preprocessing.numeric_units import (
    CONVERSION_TARGETS,
    canonical_unit,
    extract_units,
    is_numeric_value,
)

logger = logging.getLogger(__name__)


SAMPLE_SIZE = 10


def conversion_suggestions(unit: str, header: str) -> Tuple[UomConversion, ...]:
    """
    Conversion targets for a canonical unit; new properties are named
    ``{header}_{target}``.
    """
    return tuple(
        UomConversion(target_uom=target, new_property_name=f"{header}_{target}")
        for target in CONVERSION_TARGETS.get(unit, ())
    )


def _most_common(items: Sequence[str]) -> Optional[str]:
    """Most frequent item; ties go to the first one seen."""
    if not items:
        return None
    counts = Counter(items)
    best = max(counts.values())
    return next(i for i in items if counts[i] == best)


def _column_unit(header: str, profile: TableProfile) -> Optional[str]:
    """Canonical unit held by a unit column: its most common value."""
    return canonical_unit(_most_common([v.lower() for v in profile.text_values(header)]))


def find_uom_column(
    header: str,
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
) -> Optional[str]:
    """
    Separate unit column for ``header``: prefer one whose own header
    mentions the measured header ("Weight UoM" for "Weight"), else the
    first unit column. Only columns whose most common value is a known
    length or weight unit count, so "Units per Case" is never one.
    """
    unit_columns = [
        h for h in profile.unique_headers
        if h != header and keywords.is_uom_column(h) and _column_unit(h, profile)
    ]
    if not unit_columns:
        return None

    measured = set(header_tokens(header))
    for h in unit_columns:
        if measured & set(header_tokens(h)):
            return h
    return unit_columns[0]


def detect_uom_pattern(
    header: str,
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
) -> Optional[UomSuggestion]:
    """
    UoM suggestion for a single dimension/weight column, or None.
    """
    sample = profile.text_values(header)[:SAMPLE_SIZE]
    if not sample:
        return None

    # 1) units embedded in the values
    detected = _most_common(extract_units(sample))
    if detected is not None:
        return UomSuggestion(
            header=header,
            detected_uom=detected,
            suggested_split=True,
            suggested_conversions=conversion_suggestions(detected, header),
            source="embedded",
        )

    # 2) separate unit column
    uom_column = find_uom_column(header, profile, keywords)
    if uom_column is not None:
        unit = _column_unit(uom_column, profile)
        return UomSuggestion(
            header=header,
            detected_uom=unit,
            suggested_split=False,
            suggested_conversions=conversion_suggestions(unit, header),
            source=f"column:{uom_column}",
        )

    # 3) plain numbers without any unit signal
    if all(is_numeric_value(v) for v in profile.text_values(header)):
        return UomSuggestion(
            header=header,
            detected_uom="unknown",
            suggested_split=False,
            needs_confirmation=True,
            source="none",
        )

    return None


def detect_uom_patterns(
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
    trace: Optional[Trace] = None,
) -> Tuple[UomSuggestion, ...]:
    suggestions: List[UomSuggestion] = []
    for header in profile.unique_headers:
        if keywords.is_uom_column(header):
            continue
        if not keywords.uom_header_hits(header):
            continue
        suggestion = detect_uom_pattern(header, profile, keywords)
        if suggestion is not None:
            suggestions.append(suggestion)
            record(
                trace,
                "uom",
                f"UoM suggestion for '{header}'",
                detected_uom=suggestion.detected_uom,
                source=suggestion.source,
            )
    return tuple(suggestions)
