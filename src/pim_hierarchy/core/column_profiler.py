# core/column_profiler.py

"""
Column profiling.

Builds a TableProfile from the raw (headers, rows) pair:

    - validates that the table is rectangular (fail fast, downstream
      stages index cells by position)
    - holds the rows as a pandas DataFrame with positional columns, so
      duplicate header names do not collide
    - computes one ColumnStat per column: distinct / non-blank counts,
      cardinality, completeness and the composite hierarchy score

The hierarchy score needs both factors: cardinality alone cannot tell a
sparsely filled "rare but unique" column from a reliably repeating
category column.
"""

# Type hints
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple

import logging

# External dependencies
import pandas as pd

# Internal dependencies
from .config import AnalysisConfig
from .exceptions import ValidationError
from .models import ColumnStat
from .text_utils import cell_text, is_blank

logger = logging.getLogger(__name__)


# ============================================================
#      Scoring
# ============================================================

def hierarchy_score(cardinality: float, completeness: float) -> int:
    """
    Composite suitability of a column as a taxonomy level.

    Well-filled columns (>= 80%) are ranked by repetition; half-filled
    columns get a flat 40; sparse columns can never be top-level.
    """
    if completeness >= 0.8:
        if cardinality <= 0.05:
            return 100
        if cardinality <= 0.30:
            return 75
        if cardinality <= 0.70:
            return 50
        return 25
    if completeness >= 0.5:
        return 40
    return 10


def classify_cardinality(cardinality: float, total_count: int, config: AnalysisConfig) -> str:
    """
    Descriptive cardinality band relative to the configured thresholds.
    """
    if total_count == 0:
        return "empty"
    if cardinality >= config.sku_threshold:
        return "sku"
    if cardinality <= config.parent_threshold:
        return "parent"
    if config.children_min <= cardinality <= config.children_max:
        return "child"
    return "attribute"


# ============================================================
#      TableProfile
# ============================================================

class TableProfile:
    """
    Read-only view of the input table plus its column statistics.

    Columns are addressed by header name. When a header name repeats, the
    occurrence with the highest cardinality represents it, the first one on
    ties.
    """

    def __init__(
        self,
        headers: Sequence[str],
        frame: pd.DataFrame,
        stats: Tuple[ColumnStat, ...],
    ):
        self._headers: Tuple[str, ...] = tuple(headers)
        self._frame = frame
        self._stats = stats

        index: Dict[str, int] = {}
        for i, h in enumerate(self._headers):
            if h not in index or stats[i].cardinality > stats[index[h]].cardinality:
                index[h] = i
        self._index = index
        self._stat_by_header = {h: stats[i] for h, i in index.items()}

        # Blank mask, one boolean column per position
        self._present = pd.DataFrame(
            {i: ~frame[i].map(is_blank).astype(bool) for i in range(len(self._headers))},
            index=frame.index,
        )

    # --------------------------------------------------------
    # Basic accessors
    # --------------------------------------------------------

    @property
    def headers(self) -> Tuple[str, ...]:
        return self._headers

    @property
    def unique_headers(self) -> Tuple[str, ...]:
        return tuple(self._index)

    @property
    def row_count(self) -> int:
        return len(self._frame)

    @property
    def column_stats(self) -> Tuple[ColumnStat, ...]:
        return self._stats

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame

    def position(self, header: str) -> int:
        return self._index[header]

    def stat(self, header: str) -> ColumnStat:
        return self._stat_by_header[header]

    # --------------------------------------------------------
    # Column values
    # --------------------------------------------------------

    def column(self, header: str) -> pd.Series:
        """All cells of the column, blanks included."""
        return self._frame[self._index[header]]

    def present_mask(self, header: str) -> pd.Series:
        return self._present[self._index[header]]

    def values(self, header: str) -> pd.Series:
        """Non-blank cells of the column, in row order."""
        return self.column(header)[self.present_mask(header)]

    def text_values(self, header: str) -> List[str]:
        return [cell_text(v) for v in self.values(header)]

    def cell(self, row: int, header: str) -> Any:
        return self._frame.iat[row, self._index[header]]

    def grain_count(self, headers: Sequence[str]) -> int:
        """
        Number of distinct non-blank value tuples across the given columns.
        Rows that are blank in every one of the columns are ignored.
        """
        cols = [self._index[h] for h in dict.fromkeys(headers) if h in self._index]
        if not cols or self.row_count == 0:
            return 0
        any_present = self._present[cols].any(axis=1)
        if not any_present.any():
            return 0
        sub = self._frame.loc[any_present, cols].map(cell_text)
        return int(len(sub.drop_duplicates()))


# ============================================================
#      Public: profile_table
# ============================================================

def _validate_table(headers: Sequence[Any], rows: Sequence[Sequence[Any]]) -> None:
    if isinstance(headers, (str, bytes)):
        raise ValidationError("headers must be a sequence of column names, not a string")
    for i, h in enumerate(headers):
        if not isinstance(h, str):
            raise ValidationError(
                f"Header at position {i} is not a string: {h!r}",
                details={"header_index": i},
            )

    n = len(headers)
    for row_index, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or not hasattr(row, "__len__"):
            raise ValidationError(
                f"Row {row_index} is not a sequence of cells", row_index=row_index
            )
        if len(row) != n:
            raise ValidationError(
                f"Row {row_index} has {len(row)} cells but there are {n} headers",
                row_index=row_index,
                details={"expected": n, "actual": len(row)},
            )


def profile_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    config: Optional[AnalysisConfig] = None,
) -> TableProfile:
    """
    Validate the table and compute per-column statistics.

    Parameters
    ----------
    headers :
        Column names, aligned with every row by position. Need not be unique.
    rows :
        Cells may be None, NaN, strings or numbers.
    config :
        Thresholds used for the descriptive ColumnStat.classification band.

    Returns
    -------
    TableProfile

    Raises
    ------
    ValidationError
        When a row's length differs from the header count.
    """
    config = config or AnalysisConfig()
    _validate_table(headers, rows)

    n_cols = len(headers)
    frame = pd.DataFrame(
        [list(r) for r in rows],
        columns=list(range(n_cols)),
        dtype=object,
    )
    row_count = len(frame)

    stats: List[ColumnStat] = []
    for i, header in enumerate(headers):
        present = frame[i][~frame[i].map(is_blank).astype(bool)]
        total_count = int(len(present))
        unique_count = int(present.map(cell_text).nunique()) if total_count else 0
        cardinality = unique_count / total_count if total_count else 0.0
        completeness = total_count / row_count if row_count else 0.0

        stats.append(
            ColumnStat(
                header=header,
                index=i,
                unique_count=unique_count,
                total_count=total_count,
                cardinality=cardinality,
                completeness=completeness,
                hierarchy_score=hierarchy_score(cardinality, completeness),
                classification=classify_cardinality(cardinality, total_count, config),
            )
        )

    duplicates = sorted({h for h in headers if list(headers).count(h) > 1})
    if duplicates:
        logger.debug("Duplicate headers collapse to their first occurrence: %s", duplicates)

    logger.debug("Profiled %d columns over %d rows", n_cols, row_count)
    return TableProfile(headers, frame, tuple(stats))
