# analysis/property_types.py

"""
Property data type recommendations.

Each column is run through a fixed chain of classifiers; the first one that
accepts the column wins:

    yes_no -> date -> number -> picklist -> digital_asset -> url
           -> html -> rich_text -> string

Every recommendation carries a confidence and a one-line rationale so the
caller can explain the choice.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

import logging
import warnings

import pandas as pd
import regex as re

from ..core.column_profiler import TableProfile
from ..core.keywords import DEFAULT_KEYWORDS, KeywordRules
from ..core.models import PropertyRecommendation
from ..core.text_utils import has_keyword
from ..core.trace import Trace, record
from ..preprocessing.numeric_units import numeric_ratio

logger = logging.getLogger(__name__)


YES_NO_MAX_UNIQUE = 5
DATE_MIN_RATIO = 0.7
NUMBER_MIN_RATIO = 0.9
NUMBER_MIN_UNIQUE = 10
PICKLIST_MAX_UNIQUE = 50
PICKLIST_MAX_CARDINALITY = 0.3
PICKLIST_LARGE = 20
DIGITAL_ASSET_MIN_RATIO = 0.6
URL_MIN_RATIO = 0.7
HTML_MIN_RATIO = 0.5
RICH_TEXT_MIN_AVG_LENGTH = 200

DATE_PATTERNS = [
    re.compile(r'^\d{4}-\d{2}-\d{2}'),                  # ISO date (2024-01-15)
    re.compile(r'^\d{4}/\d{2}/\d{2}'),                  # Alternative ISO (2024/01/15)
    re.compile(r'^\d{1,2}/\d{1,2}/\d{2,4}$'),           # US date (1/15/24, 01/15/2024)
    re.compile(r'^\d{1,2}[-.]\d{1,2}[-.]\d{2,4}$'),     # EU date (15-01-2024, 15.01.2024)
    re.compile(r'^\d{8}$'),                             # YYYYMMDD
    re.compile(r'^[A-Za-z]{3,9}\.?\s+\d{1,2},?\s+\d{4}$'),  # Month DD, YYYY
    re.compile(r'^\d{1,2}\s+[A-Za-z]{3,9}\.?\s+\d{4}$'),    # DD Month YYYY
]

_URL = re.compile(r'^(?:https?://|www\.)\S+$', re.IGNORECASE)
_MEDIA_URL = re.compile(
    r'^(?:https?://|www\.)\S+\.(?:jpe?g|png|gif|webp|svg|bmp|tiff?|pdf|mp4|mov|avi|webm)(?:[?#]\S*)?$',
    re.IGNORECASE,
)
_HTML_TAG = re.compile(r'<\s*/?\s*[A-Za-z][^<>]*>')


# ============================================================
# Value predicates
# ============================================================

def _ratio(values: Sequence[str], pattern: "re.Pattern") -> float:
    if not values:
        return 0.0
    return sum(1 for v in values if pattern.search(v)) / len(values)


def date_parse_ratio(values: Sequence[str]) -> float:
    """
    Share of values that look like dates: a known date layout, or a string
    pandas can parse as a datetime.
    """
    if not values:
        return 0.0

    unmatched = [v for v in values if not any(p.match(v) for p in DATE_PATTERNS)]
    matched = len(values) - len(unmatched)

    if unmatched:
        # Only strings that carry a date separator or a month name are
        # offered to the parser; plain numbers would read as epochs.
        candidates = pd.Series(
            [v for v in unmatched if re.search(r'[-/.:\s]|\p{L}{3,}', v)], dtype=object
        )
        if not candidates.empty:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                parsed = pd.to_datetime(candidates, errors="coerce", format="mixed")
            matched += int(parsed.notna().sum())

    return matched / len(values)


def _first_seen(values: Sequence[str], limit: int) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))[:limit]


# ============================================================
# Classifier chain
# ============================================================

def infer_property_type(
    header: str,
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
) -> PropertyRecommendation:
    """
    Recommend a PIM data type for one column.
    """
    stat = profile.stat(header)
    values = profile.text_values(header)

    if not values:
        return PropertyRecommendation(
            header=header,
            data_type="string",
            is_picklist=False,
            confidence=0.3,
            rationale="Column has no values; defaulting to string",
        )

    distinct = _first_seen(values, len(values))

    # yes / no
    vocabulary = set(keywords.yes_no_vocabulary)
    if len(distinct) <= YES_NO_MAX_UNIQUE and all(v.lower() in vocabulary for v in distinct):
        return PropertyRecommendation(
            header=header,
            data_type="yes_no",
            is_picklist=False,
            confidence=0.95,
            rationale=f"Only boolean-like values: {', '.join(distinct)}",
        )

    # date
    if has_keyword(header, keywords.date_header_keywords):
        ratio = date_parse_ratio(values)
        if ratio > DATE_MIN_RATIO:
            return PropertyRecommendation(
                header=header,
                data_type="date",
                is_picklist=False,
                confidence=round(ratio, 4),
                rationale=f"Date-like header and {ratio:.0%} of values parse as dates",
            )

    # number
    ratio = numeric_ratio(values)
    if ratio > NUMBER_MIN_RATIO and stat.unique_count > NUMBER_MIN_UNIQUE:
        return PropertyRecommendation(
            header=header,
            data_type="number",
            is_picklist=False,
            confidence=0.9,
            rationale=f"{ratio:.0%} of values are numeric across {stat.unique_count} distinct values",
        )

    # picklist
    if stat.unique_count <= PICKLIST_MAX_UNIQUE and stat.cardinality < PICKLIST_MAX_CARDINALITY:
        options = _first_seen(values, PICKLIST_MAX_UNIQUE)
        return PropertyRecommendation(
            header=header,
            data_type="picklist",
            is_picklist=True,
            confidence=0.8 if len(options) > PICKLIST_LARGE else 0.9,
            rationale=f"{stat.unique_count} distinct values repeat across {stat.total_count} rows",
            picklist_values=options,
        )

    # links and markup
    ratio = _ratio(values, _MEDIA_URL)
    if ratio > DIGITAL_ASSET_MIN_RATIO:
        return PropertyRecommendation(
            header=header,
            data_type="digital_asset",
            is_picklist=False,
            confidence=0.85,
            rationale=f"{ratio:.0%} of values are links to media files",
        )

    ratio = _ratio(values, _URL)
    if ratio > URL_MIN_RATIO:
        return PropertyRecommendation(
            header=header,
            data_type="url",
            is_picklist=False,
            confidence=0.85,
            rationale=f"{ratio:.0%} of values are URLs",
        )

    ratio = _ratio(values, _HTML_TAG)
    if ratio > HTML_MIN_RATIO:
        return PropertyRecommendation(
            header=header,
            data_type="html",
            is_picklist=False,
            confidence=0.8,
            rationale=f"{ratio:.0%} of values contain HTML tags",
        )

    # long text
    avg_len = sum(len(v) for v in values) / len(values)
    if avg_len > RICH_TEXT_MIN_AVG_LENGTH or any(("\n" in v or "\t" in v) for v in values):
        return PropertyRecommendation(
            header=header,
            data_type="rich_text",
            is_picklist=False,
            confidence=0.7,
            rationale=f"Long or multi-line text (average {avg_len:.0f} characters)",
        )

    return PropertyRecommendation(
        header=header,
        data_type="string",
        is_picklist=False,
        confidence=0.5,
        rationale="No specific pattern detected",
    )


def infer_property_types(
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
    trace: Optional[Trace] = None,
) -> Tuple[PropertyRecommendation, ...]:
    """
    One recommendation per (unique) header, in column order.
    """
    recommendations: List[PropertyRecommendation] = [
        infer_property_type(h, profile, keywords) for h in profile.unique_headers
    ]

    counts: dict = {}
    for rec in recommendations:
        counts[rec.data_type] = counts.get(rec.data_type, 0) + 1
    record(trace, "property_types", "Inferred property types", counts=counts)

    return tuple(recommendations)
