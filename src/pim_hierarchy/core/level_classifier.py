# core/level_classifier.py

"""
Buckets columns into candidate hierarchy levels.

At most two named levels are proposed on top of the mandatory terminal
(SKU) level: simple Parent + SKU models are preferred unless the data
clearly supports a middle tier.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .column_profiler import TableProfile
from .config import AnalysisConfig
from .models import ColumnStat, ProductDomain
from .text_utils import has_keyword
from .trace import Trace, record


LEVEL_1_MIN_SCORE = 75
LEVEL_1_MIN_COMPLETENESS = 0.85
LEVEL_2_MIN_SCORE = 50
LEVEL_2_MIN_COMPLETENESS = 0.80


@dataclass(frozen=True)
class LevelBuckets:
    """
    Candidate columns per level.

    level_1 / level_2 are ordered by ascending cardinality (most repetitive
    first); sku keeps column order. ``demoted`` lists apparel variant
    columns that would otherwise have been level candidates.
    """

    level_1: Tuple[str, ...]
    level_2: Tuple[str, ...]
    sku: Tuple[str, ...]
    demoted: Tuple[str, ...] = ()


def is_level_1_calibre(stat: ColumnStat) -> bool:
    return (
        stat.hierarchy_score >= LEVEL_1_MIN_SCORE
        and stat.completeness >= LEVEL_1_MIN_COMPLETENESS
    )


def is_level_2_calibre(stat: ColumnStat, config: AnalysisConfig) -> bool:
    return (
        LEVEL_2_MIN_SCORE <= stat.hierarchy_score < LEVEL_1_MIN_SCORE
        and stat.completeness >= LEVEL_2_MIN_COMPLETENESS
        and stat.cardinality < config.children_min
    )


def classify_levels(
    profile: TableProfile,
    config: AnalysisConfig,
    domain: Optional[ProductDomain] = None,
    trace: Optional[Trace] = None,
) -> LevelBuckets:
    """
    Assign every (unique) header to level 1, level 2 or the SKU level.

    Rules, first match wins:
      1. explicitly forced SKU header
      2. no values at all
      3. cardinality >= sku_threshold
      4. apparel variant axis (size, colour, fit, ...) in an Apparel table
      5. level-1 calibre: score >= 75 and completeness >= 0.85
      6. level-2 calibre: 50 <= score < 75, completeness >= 0.80,
         cardinality < children_min
      7. everything else
    """
    forced = set(config.forced_sku_headers)
    apparel = domain is not None and domain.type == "Apparel"

    level_1: List[ColumnStat] = []
    level_2: List[ColumnStat] = []
    sku: List[str] = []
    demoted: List[str] = []

    for header in profile.unique_headers:
        stat = profile.stat(header)

        if header in forced:
            sku.append(header)
            continue
        if stat.total_count == 0 or stat.cardinality >= config.sku_threshold:
            sku.append(header)
            continue

        calibre_1 = is_level_1_calibre(stat)
        calibre_2 = is_level_2_calibre(stat, config)

        if apparel and (calibre_1 or calibre_2) and has_keyword(
            header, config.keywords.apparel_variant_keywords
        ):
            demoted.append(header)
            sku.append(header)
            continue

        if calibre_1:
            level_1.append(stat)
        elif calibre_2:
            level_2.append(stat)
        else:
            sku.append(header)

    def by_cardinality(stats: List[ColumnStat]) -> Tuple[str, ...]:
        return tuple(s.header for s in sorted(stats, key=lambda s: (s.cardinality, s.index)))

    buckets = LevelBuckets(
        level_1=by_cardinality(level_1),
        level_2=by_cardinality(level_2),
        sku=tuple(sku),
        demoted=tuple(demoted),
    )
    record(
        trace,
        "level_classifier",
        "Classified columns into level buckets",
        level_1=list(buckets.level_1),
        level_2=list(buckets.level_2),
        sku=list(buckets.sku),
        demoted=list(buckets.demoted),
    )
    return buckets
