# analysis/presets.py

"""
Alternative hierarchy presets.

    Recommended     the primary result
    Flat            every column on one record (only when that differs)
    Parent-Variant  two levels: mirrors the primary when it has parents,
                    otherwise built from the level-calibre columns
    Multi-Level     Family / Model / Variant, only with at least three
                    level-1 calibre and one level-2 calibre columns

Every preset goes through identity assignment and the conservation check,
so each one places every column exactly once.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

import logging

from ..core.column_profiler import TableProfile
from ..core.config import AnalysisConfig
from ..core.conservation import enforce_conservation
from ..core.level_classifier import is_level_1_calibre, is_level_2_calibre
from ..core.models import TERMINAL_LEVEL_NAME, HierarchyAlternative, HierarchyLevel
from ..core.record_identity import assign_identities
from ..core.trace import Trace, record

logger = logging.getLogger(__name__)


MODEL_TYPES = {1: "standalone", 2: "parent_variant", 3: "multi_level"}

MULTI_LEVEL_MIN_LEVEL_1 = 3
MULTI_LEVEL_MIN_LEVEL_2 = 1


def model_type_for(levels: Sequence[HierarchyLevel]) -> str:
    return MODEL_TYPES.get(min(len(levels), 3), "standalone")


# ============================================================
# Helpers
# ============================================================

def _grouping_columns(profile: TableProfile, config: AnalysisConfig) -> Tuple[List[str], List[str]]:
    """
    Level-1 and level-2 calibre columns that are neither item-level hints
    nor forced onto the SKU level, each ordered by ascending cardinality.
    """
    forced = set(config.forced_sku_headers)
    rules = config.keywords
    level_1, level_2 = [], []
    for h in profile.unique_headers:
        stat = profile.stat(h)
        if h in forced or rules.is_item_level(h):
            continue
        if stat.total_count == 0 or stat.cardinality >= config.sku_threshold:
            continue
        if is_level_1_calibre(stat):
            level_1.append(stat)
        elif is_level_2_calibre(stat, config):
            level_2.append(stat)

    def ordered(stats):
        return [s.header for s in sorted(stats, key=lambda s: (s.cardinality, s.index))]

    return ordered(level_1), ordered(level_2)


def _build(
    pools: Sequence[Tuple[str, Sequence[str]]],
    profile: TableProfile,
    config: AnalysisConfig,
) -> Tuple[HierarchyLevel, ...]:
    """
    Identity assignment plus conservation for a preset's column pools.
    The last pool collects every column no earlier pool claimed; a preset
    that leaves it empty is not built.
    """
    claimed = {h for _, members in pools[:-1] for h in members}
    last_name, last_members = pools[-1]
    rest = [h for h in profile.unique_headers if h not in claimed and h not in last_members]
    terminal = tuple(last_members) + tuple(rest)
    if not terminal:
        return ()
    pools = [(n, tuple(m)) for n, m in pools[:-1] if m] + [(last_name, terminal)]
    levels = assign_identities(pools, profile, config.keywords, phase="preset")
    levels, _ = enforce_conservation(levels, profile.headers)
    return levels


# ============================================================
# Public: generate_presets
# ============================================================

def generate_presets(
    primary: Sequence[HierarchyLevel],
    primary_confidence: float,
    profile: TableProfile,
    config: AnalysisConfig,
    trace: Optional[Trace] = None,
) -> Tuple[HierarchyAlternative, ...]:
    """
    Parameters
    ----------
    primary :
        The engine's final hierarchy.
    primary_confidence :
        Confidence of the primary result, reused by the Recommended preset.

    Returns
    -------
    Tuple of HierarchyAlternative, Recommended first.
    """
    primary = tuple(primary)
    presets: List[HierarchyAlternative] = [
        HierarchyAlternative(
            name="Recommended",
            hierarchy=primary,
            confidence=primary_confidence,
            reasoning="Structure inferred from column cardinality and completeness",
            model_type=model_type_for(primary),
        )
    ]
    if not profile.unique_headers:
        return tuple(presets)

    # Flat
    if len(primary) > 1:
        flat = _build([(TERMINAL_LEVEL_NAME, ())], profile, config)
        presets.append(
            HierarchyAlternative(
                name="Flat",
                hierarchy=flat,
                confidence=0.5,
                reasoning="Every column on a single product record, no parent levels",
                model_type="standalone",
            )
        )

    level_1, level_2 = _grouping_columns(profile, config)

    # Parent-Variant
    if len(primary) >= 2:
        parent_variant = _build(
            [("Parent Level", primary[0].members), (TERMINAL_LEVEL_NAME, ())],
            profile,
            config,
        )
        reasoning = "Top level of the recommended structure as parent, everything else per variant"
        confidence = 0.7
    elif level_1 or level_2:
        parent_variant = _build(
            [("Parent Level", level_1 + level_2), (TERMINAL_LEVEL_NAME, ())],
            profile,
            config,
        )
        reasoning = "Repeating, well-filled columns grouped as parent, everything else per variant"
        confidence = 0.6
    else:
        parent_variant = ()

    if len(parent_variant) == 2:
        presets.append(
            HierarchyAlternative(
                name="Parent-Variant",
                hierarchy=parent_variant,
                confidence=confidence,
                reasoning=reasoning,
                model_type="parent_variant",
            )
        )

    # Multi-Level
    multi: Tuple[HierarchyLevel, ...] = ()
    if len(level_1) >= MULTI_LEVEL_MIN_LEVEL_1 and len(level_2) >= MULTI_LEVEL_MIN_LEVEL_2:
        multi = _build(
            [("Family", level_1), ("Model", level_2), ("Variant", ())],
            profile,
            config,
        )

    if len(multi) == 3:
        presets.append(
            HierarchyAlternative(
                name="Multi-Level",
                hierarchy=multi,
                confidence=0.65,
                reasoning="Family, model and variant levels from strongly and moderately repeating columns",
                model_type="multi_level",
            )
        )

    record(trace, "presets", "Generated presets", names=[p.name for p in presets])
    return tuple(presets)
