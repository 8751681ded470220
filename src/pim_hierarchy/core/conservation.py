# core/conservation.py

"""
Column conservation check.

Every input header must appear in exactly one level, either as the Record
ID, the Record Name or one of the level's headers. Missing columns are
healed by appending them to the terminal level; surplus placements are
only reported (the builder's de-duplication should make them impossible).
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

import logging

from .models import HierarchyLevel
from .trace import Trace, record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConservationReport:
    missing: Tuple[str, ...] = ()
    duplicates: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing and not self.duplicates

    @property
    def healed(self) -> bool:
        return bool(self.missing)


def enforce_conservation(
    levels: Sequence[HierarchyLevel],
    headers: Sequence[str],
    trace: Optional[Trace] = None,
) -> Tuple[Tuple[HierarchyLevel, ...], ConservationReport]:
    """
    Check that the union of level members equals the set of headers.

    Parameters
    ----------
    levels :
        Hierarchy as built, terminal level last.
    headers :
        Input headers, in table order (duplicates are collapsed).

    Returns
    -------
    (levels, report)
        ``levels`` is a new tuple when columns had to be appended.
    """
    levels = tuple(levels)
    unique_headers = list(dict.fromkeys(headers))

    placed = Counter(h for level in levels for h in level.members)
    missing = tuple(h for h in unique_headers if h not in placed)
    duplicates = tuple(h for h, n in placed.items() if n > 1)

    if duplicates:
        logger.warning("Columns placed on more than one level: %s", list(duplicates))
        record(trace, "conservation", "Columns placed more than once", columns=list(duplicates))

    if missing and levels:
        terminal = levels[-1]
        levels = levels[:-1] + (replace(terminal, headers=terminal.headers + missing),)
        record(
            trace,
            "conservation",
            "Appended missing columns to the terminal level",
            columns=list(missing),
        )
    elif not missing:
        record(trace, "conservation", "All columns placed exactly once" if not duplicates else "No missing columns")

    return levels, ConservationReport(missing=missing, duplicates=duplicates)
