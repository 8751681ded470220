# analysis/data_quality.py

"""
Data quality warnings. Warnings only: the data is never modified.

Checks:
    duplicate          repeated values in identifier columns        (high)
    normalization      values differing only by case               (medium)
    missing_hierarchy  blanks in hierarchy columns          (high / medium)
    outlier            values outside 1.5 IQR in numeric columns      (low)

Row numbers in ``affected_rows`` are 0-based indices into the input rows.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence

import logging

import numpy as np

from ..core.column_profiler import TableProfile
from ..core.keywords import DEFAULT_KEYWORDS, KeywordRules
from ..core.models import ValidationReport, ValidationWarning
from ..core.text_utils import cell_text
from ..core.trace import Trace, record
from ..preprocessing.numeric_units import to_numeric_series

logger = logging.getLogger(__name__)


CATEGORICAL_MIN_DISTINCT = 2
CATEGORICAL_MAX_DISTINCT = 50
MISSING_HIGH_RATIO = 0.1
OUTLIER_MIN_VALUES = 10
OUTLIER_NUMERIC_RATIO = 0.8
OUTLIER_MAX_RATIO = 0.1
IQR_FACTOR = 1.5
MAX_EXAMPLES = 3


def _rows_by_value(profile: TableProfile, header: str) -> Dict[str, List[int]]:
    rows: Dict[str, List[int]] = {}
    for i, v in enumerate(profile.column(header)):
        text = cell_text(v)
        if text is not None:
            rows.setdefault(text, []).append(i)
    return rows


# ============================================================
# Checks
# ============================================================

def detect_duplicates(
    profile: TableProfile,
    hierarchy_headers: Sequence[str] = (),
    keywords: KeywordRules = DEFAULT_KEYWORDS,
) -> List[ValidationWarning]:
    """
    Identifier columns below the parent levels should not repeat.
    """
    skip = set(hierarchy_headers)
    warnings: List[ValidationWarning] = []
    for header in profile.unique_headers:
        if header in skip or not keywords.is_unique_key(header):
            continue

        duplicates = [(v, rows) for v, rows in _rows_by_value(profile, header).items() if len(rows) > 1]
        if not duplicates:
            continue

        affected = sorted(i for _, rows in duplicates for i in rows)
        examples = tuple(
            f"{v!r} in rows {', '.join(str(i) for i in rows[:3])}"
            for v, rows in duplicates[:MAX_EXAMPLES]
        )
        warnings.append(
            ValidationWarning(
                type="duplicate",
                severity="high",
                title=f"Duplicate {header} values detected",
                message=f"Found {len(duplicates)} duplicate values in '{header}' affecting {len(affected)} products",
                affected_rows=tuple(affected),
                suggestion=f"Make sure each product has a unique {header}.",
                examples=examples,
            )
        )
    return warnings


def detect_inconsistencies(profile: TableProfile) -> List[ValidationWarning]:
    """
    Categorical columns with values that only differ by letter case.
    """
    warnings: List[ValidationWarning] = []
    for header in profile.unique_headers:
        by_value = _rows_by_value(profile, header)
        if not CATEGORICAL_MIN_DISTINCT <= len(by_value) <= CATEGORICAL_MAX_DISTINCT:
            continue

        groups: Dict[str, List[str]] = {}
        for value in by_value:
            groups.setdefault(value.lower(), []).append(value)
        inconsistent = [variants for variants in groups.values() if len(variants) > 1]
        if not inconsistent:
            continue

        affected = sorted(i for variants in inconsistent for v in variants for i in by_value[v])
        examples = tuple(
            f"{', '.join(repr(v) for v in variants)} -> suggest {variants[0]!r}"
            for variants in inconsistent[:MAX_EXAMPLES]
        )
        warnings.append(
            ValidationWarning(
                type="normalization",
                severity="medium",
                title=f"Inconsistent values in '{header}'",
                message=f"Found {len(inconsistent)} groups of values with inconsistent capitalization",
                affected_rows=tuple(affected),
                suggestion="Normalize these values to one spelling.",
                examples=examples,
            )
        )
    return warnings


def detect_missing_hierarchy_values(
    profile: TableProfile,
    hierarchy_headers: Sequence[str],
) -> List[ValidationWarning]:
    warnings: List[ValidationWarning] = []
    if profile.row_count == 0:
        return warnings

    known = set(profile.unique_headers)
    for header in dict.fromkeys(hierarchy_headers):
        if header not in known:
            continue
        missing = [int(i) for i in np.flatnonzero(~profile.present_mask(header).to_numpy())]
        if not missing:
            continue
        share = len(missing) / profile.row_count
        warnings.append(
            ValidationWarning(
                type="missing_hierarchy",
                severity="high" if share > MISSING_HIGH_RATIO else "medium",
                title=f"Missing values in hierarchy field '{header}'",
                message=f"{len(missing)} products ({share:.1%}) are missing values in '{header}'",
                affected_rows=tuple(missing),
                suggestion="Fill in the missing values or treat these products as standalone.",
            )
        )
    return warnings


def detect_outliers(profile: TableProfile) -> List[ValidationWarning]:
    """
    Values outside [Q1 - 1.5 IQR, Q3 + 1.5 IQR], reported only when fewer
    than 10% of the rows are affected.
    """
    warnings: List[ValidationWarning] = []
    for header in profile.unique_headers:
        present = profile.values(header)
        numbers = to_numeric_series(present).dropna()
        if len(numbers) < OUTLIER_MIN_VALUES or len(numbers) < len(present) * OUTLIER_NUMERIC_RATIO:
            continue

        ordered = np.sort(numbers.to_numpy())
        q1 = ordered[int(len(ordered) * 0.25)]
        q3 = ordered[int(len(ordered) * 0.75)]
        iqr = q3 - q1
        low, high = q1 - IQR_FACTOR * iqr, q3 + IQR_FACTOR * iqr

        per_row = to_numeric_series(profile.column(header)).to_numpy()
        flagged = np.flatnonzero(~np.isnan(per_row) & ((per_row < low) | (per_row > high)))
        if len(flagged) == 0 or len(flagged) >= profile.row_count * OUTLIER_MAX_RATIO:
            continue

        warnings.append(
            ValidationWarning(
                type="outlier",
                severity="low",
                title=f"Potential outliers in '{header}'",
                message=f"Found {len(flagged)} values outside the typical range [{low:g}, {high:g}]",
                affected_rows=tuple(int(i) for i in flagged),
                suggestion="Check these values for data entry errors.",
                examples=tuple(f"{per_row[i]:g}" for i in flagged[:5]),
            )
        )
    return warnings


# ============================================================
# Public: validate_data
# ============================================================

def validate_data(
    profile: TableProfile,
    hierarchy_headers: Sequence[str] = (),
    keywords: KeywordRules = DEFAULT_KEYWORDS,
    trace: Optional[Trace] = None,
) -> ValidationReport:
    """
    Run every data quality check.

    Parameters
    ----------
    profile :
        Profile of the analysed table.
    hierarchy_headers :
        Members of the non-terminal levels.
    """
    warnings: List[ValidationWarning] = []
    warnings += detect_duplicates(profile, hierarchy_headers, keywords)
    warnings += detect_inconsistencies(profile)
    warnings += detect_missing_hierarchy_values(profile, hierarchy_headers)
    warnings += detect_outliers(profile)

    report = ValidationReport(warnings=tuple(warnings))
    record(
        trace,
        "data_quality",
        f"{report.total_issues} data quality warnings",
        critical=report.critical_issues,
    )
    return report
