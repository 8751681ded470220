# core/hierarchy.py

"""
Hierarchy construction.

Turns level buckets into an ordered list of levels:

    1. keep Level 1 / Level 2 only when they reach the member floor,
       otherwise defer their columns to the level below
    2. relocate item-level columns (identifiers, measurements, logistics,
       nutrition, dates, variant axes, forced headers) to the terminal level
    3. de-duplicate bottom-up (the lowest level keeps a contested column)
    4. provisional identity assignment
    5. consolidate: merge levels below the floor into the next level,
       de-duplicating after each merge
    6. final identity assignment on the consolidated levels

The terminal level is always named "SKU-Level Properties". The result has
at most three levels.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import logging

from .column_profiler import TableProfile
from .config import AnalysisConfig
from .level_classifier import LevelBuckets
from .models import TERMINAL_LEVEL_NAME, HierarchyLevel
from .record_identity import assign_identities
from .trace import Trace, record

logger = logging.getLogger(__name__)


NON_TERMINAL_NAMES = ("Parent Level", "Child Level")

# Tables too narrow to give two levels the configured floor get one member
# per this many columns instead.
COLUMNS_PER_LEVEL = 4


Pool = Tuple[str, ...]


@dataclass(frozen=True)
class HierarchyDraft:
    """
    Output of build_hierarchy.

    Attributes
    ----------
    levels :
        Final, consolidated levels with their identities.
    provisional :
        Levels as first built, before consolidation.
    min_members :
        The member floor that was applied.
    relocated :
        Columns moved to the terminal level as item-level attributes.
    merged_levels :
        Number of levels merged away during consolidation.
    """

    levels: Tuple[HierarchyLevel, ...]
    provisional: Tuple[HierarchyLevel, ...]
    min_members: int
    relocated: Tuple[str, ...] = ()
    merged_levels: int = 0


# ============================================================
# Helpers
# ============================================================

def effective_min_members(config: AnalysisConfig, n_headers: int) -> int:
    """
    Member floor for non-terminal levels.

    The configured value applies whenever a parent level and the terminal
    level could both reach it. Narrower tables use one member per
    COLUMNS_PER_LEVEL columns so they can still express a parent level.
    """
    configured = config.min_properties_per_level
    if n_headers >= 2 * configured:
        return configured
    return max(1, min(configured, n_headers // COLUMNS_PER_LEVEL))


def level_names(n_levels: int) -> List[str]:
    if n_levels <= 0:
        return []
    return list(NON_TERMINAL_NAMES[: n_levels - 1]) + [TERMINAL_LEVEL_NAME]


def _order(pool: Sequence[str], profile: TableProfile, terminal: bool) -> Pool:
    unique = list(dict.fromkeys(pool))
    if terminal:
        return tuple(sorted(unique, key=profile.position))
    return tuple(
        sorted(unique, key=lambda h: (profile.stat(h).cardinality, profile.position(h)))
    )


def _reorder(pools: Sequence[Pool], profile: TableProfile) -> List[Pool]:
    last = len(pools) - 1
    return [_order(p, profile, i == last) for i, p in enumerate(pools)]


def deduplicate_pools(pools: Sequence[Pool]) -> List[Pool]:
    """
    Remove a column from every level above the lowest level that holds it.
    """
    seen: set = set()
    out: List[Pool] = []
    for pool in reversed(pools):
        kept = tuple(h for h in dict.fromkeys(pool) if h not in seen)
        seen.update(kept)
        out.append(kept)
    return list(reversed(out))


def _pools_from_levels(levels: Sequence[HierarchyLevel]) -> List[Pool]:
    return [level.members for level in levels]


# ============================================================
# Build steps
# ============================================================

def initial_pools(
    buckets: LevelBuckets,
    min_members: int,
    trace: Optional[Trace] = None,
) -> List[Pool]:
    """
    Level 1 and Level 2 survive only when they reach ``min_members``;
    columns of a dropped level are deferred to the next level's pool.
    """
    pools: List[Pool] = []
    deferred: Tuple[str, ...] = ()

    if len(buckets.level_1) >= min_members:
        pools.append(buckets.level_1)
    else:
        deferred = buckets.level_1
        if deferred:
            record(trace, "hierarchy", "Level 1 below floor, deferred", columns=list(deferred))

    level_2 = deferred + buckets.level_2
    if len(level_2) >= min_members:
        pools.append(level_2)
        deferred = ()
    else:
        deferred = level_2
        if deferred:
            record(trace, "hierarchy", "Level 2 below floor, deferred", columns=list(deferred))

    pools.append(deferred + buckets.sku)
    return pools


def relocate_item_level_columns(
    pools: Sequence[Pool],
    config: AnalysisConfig,
    trace: Optional[Trace] = None,
) -> Tuple[List[Pool], Tuple[str, ...]]:
    """
    Move item-level columns from every non-terminal pool to the terminal pool.
    """
    forced = set(config.forced_sku_headers)
    rules = config.keywords
    moved: List[str] = []
    out: List[Pool] = []

    for pool in pools[:-1]:
        keep = []
        for h in pool:
            groups = rules.item_level_groups(h)
            if h in forced or groups:
                moved.append(h)
                record(
                    trace,
                    "hierarchy",
                    f"Relocated '{h}' to the terminal level",
                    groups=list(groups) if groups else ["forced"],
                )
            else:
                keep.append(h)
        out.append(tuple(keep))

    out.append(tuple(pools[-1]) + tuple(moved))
    return out, tuple(moved)


def consolidate_pools(
    pools: Sequence[Pool],
    min_members: int,
    profile: TableProfile,
    trace: Optional[Trace] = None,
) -> Tuple[List[Pool], int]:
    """
    Merge every non-terminal pool smaller than ``min_members`` into the pool
    below it, de-duplicating after each merge.
    """
    pools = list(pools)
    merged = 0
    i = 0
    while i < len(pools) - 1:
        if len(pools[i]) < min_members:
            record(
                trace,
                "hierarchy",
                f"Merged level {i + 1} into the level below",
                members=len(pools[i]),
                min_members=min_members,
            )
            pools[i + 1] = pools[i + 1] + pools[i]
            del pools[i]
            pools = _reorder(deduplicate_pools(pools), profile)
            merged += 1
            continue
        i += 1

    # The terminal level is mandatory: an empty one is replaced by the
    # lowest remaining level.
    if len(pools) > 1 and not pools[-1]:
        pools = pools[:-1]
        record(trace, "hierarchy", "Terminal level empty, lowest level becomes terminal")
        pools = _reorder(pools, profile)

    return [p for p in pools if p], merged


def _named(pools: Sequence[Pool]) -> List[Tuple[str, Pool]]:
    return list(zip(level_names(len(pools)), pools))


# ============================================================
# Public: build_hierarchy
# ============================================================

def build_hierarchy(
    buckets: LevelBuckets,
    profile: TableProfile,
    config: AnalysisConfig,
    trace: Optional[Trace] = None,
) -> HierarchyDraft:
    """
    Build the consolidated hierarchy for the given level buckets.
    """
    rules = config.keywords
    min_members = effective_min_members(config, len(profile.unique_headers))
    record(trace, "hierarchy", "Member floor", min_members=min_members)

    pools = initial_pools(buckets, min_members, trace)
    pools, relocated = relocate_item_level_columns(pools, config, trace)
    pools = _reorder(deduplicate_pools(pools), profile)

    nonempty = [p for p in pools if p]
    provisional = assign_identities(
        _named(nonempty), profile, rules, phase="provisional", trace=trace
    )

    pools, merged = consolidate_pools(
        _pools_from_levels(provisional), min_members, profile, trace
    )
    pools = _reorder(deduplicate_pools(pools), profile)

    levels = assign_identities(_named(pools), profile, rules, phase="final", trace=trace)

    before = {(lv.record_id, lv.record_name) for lv in provisional}
    for lv in levels:
        if (lv.record_id, lv.record_name) not in before:
            record(
                trace,
                "record_identity",
                f"Re-assignment changed level {lv.level} identity",
                record_id=lv.record_id,
                record_name=lv.record_name,
            )

    logger.debug("Built hierarchy with %d levels", len(levels))
    return HierarchyDraft(
        levels=levels,
        provisional=provisional,
        min_members=min_members,
        relocated=relocated,
        merged_levels=merged,
    )
