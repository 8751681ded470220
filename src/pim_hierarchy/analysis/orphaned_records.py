# analysis/orphaned_records.py

"""
Rows with missing, incomplete or anomalous hierarchy data.

    missing hierarchy value   -> severity "high"
    incomplete path           -> severity "medium" (unless already high)
    numeric outlier (> 3 sd)  -> reported, severity unchanged ("low" alone)

At most MAX_ORPHANS rows are returned: the most severe ones, earliest rows
first among equals, listed in row order.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import logging

import numpy as np

from ..core.column_profiler import TableProfile
from ..core.models import SEVERITY_RANK, HierarchyLevel, OrphanedRecord
from ..core.trace import Trace, record
from ..preprocessing.numeric_units import to_numeric_series

logger = logging.getLogger(__name__)


MAX_ORPHANS = 50
OUTLIER_SIGMA = 3.0
NUMERIC_MIN_RATIO = 0.9
NUMERIC_MIN_VALUES = 3


@dataclass(frozen=True)
class _NumericColumn:
    header: str
    values: np.ndarray      # float per row, NaN where blank / non-numeric
    mean: float
    std: float


def hierarchy_columns(hierarchy: Sequence[HierarchyLevel]) -> Tuple[str, ...]:
    """
    Every member of every non-terminal level, top level first.
    """
    return tuple(h for level in hierarchy[:-1] for h in level.members)


def _numeric_columns(profile: TableProfile) -> List[_NumericColumn]:
    """
    Columns where at least 90% of the non-blank values are numeric, with
    enough spread to measure outliers against.
    """
    columns: List[_NumericColumn] = []
    for header in profile.unique_headers:
        present = profile.values(header)
        if len(present) < NUMERIC_MIN_VALUES:
            continue
        parsed = to_numeric_series(present)
        if parsed.notna().mean() < NUMERIC_MIN_RATIO:
            continue
        finite = parsed.dropna().to_numpy()
        if len(finite) < NUMERIC_MIN_VALUES:
            continue
        std = float(np.std(finite))
        if std <= 0:
            continue
        per_row = to_numeric_series(profile.column(header)).to_numpy()
        columns.append(_NumericColumn(header, per_row, float(np.mean(finite)), std))
    return columns


def _format_value(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def detect_orphaned_records(
    hierarchy: Sequence[HierarchyLevel],
    profile: TableProfile,
    trace: Optional[Trace] = None,
) -> Tuple[OrphanedRecord, ...]:
    """
    Flag rows with hierarchy gaps or numeric outliers.

    Parameters
    ----------
    hierarchy :
        Final hierarchy; the terminal level is not part of the path.
    profile :
        Profile of the analysed table.

    Returns
    -------
    Tuple of OrphanedRecord in row order, at most MAX_ORPHANS.
    """
    path_columns = hierarchy_columns(hierarchy)
    numeric = _numeric_columns(profile)

    masks: Dict[str, np.ndarray] = {
        h: profile.present_mask(h).to_numpy() for h in path_columns
    }

    found: List[OrphanedRecord] = []
    for row in range(profile.row_count):
        issues: List[str] = []
        severity = "low"

        missing = [h for h in path_columns if not masks[h][row]]
        for h in missing:
            issues.append(f"Missing value for hierarchy field: {h}")
            severity = "high"

        if missing:
            issues.append("Incomplete hierarchy path")
            if severity == "low":
                severity = "medium"

        for col in numeric:
            value = col.values[row]
            if np.isnan(value):
                continue
            if abs(value - col.mean) > OUTLIER_SIGMA * col.std:
                issues.append(f"Outlier value in {col.header}: {_format_value(value)}")

        if issues:
            found.append(OrphanedRecord(row_index=row, issues=tuple(issues), severity=severity))

    if len(found) > MAX_ORPHANS:
        ranked = sorted(found, key=lambda o: (-SEVERITY_RANK[o.severity], o.row_index))
        found = sorted(ranked[:MAX_ORPHANS], key=lambda o: o.row_index)

    record(
        trace,
        "orphaned_records",
        f"Flagged {len(found)} rows",
        hierarchy_columns=list(path_columns),
        numeric_columns=[c.header for c in numeric],
    )
    return tuple(found)
