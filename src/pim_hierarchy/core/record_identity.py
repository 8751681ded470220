# core/record_identity.py

"""
Record ID / Record Name selection per hierarchy level.

Every level needs a Record ID, so the ID ladder always ends with an
answer (the first candidate, unconditionally). A Record Name is optional:
when every candidate scores negative the name stays unset rather than
pointing at a logistics, unit, date or code column.

Identity assignment runs twice in the builder:

    provisional   on the levels as first built
    final         on the consolidated levels (merges can bring a better
                  Name candidate into a level)

Both phases are the same pure function, assign_identities().
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple

import logging
import math

import regex as re

from .column_profiler import TableProfile
from .keywords import KeywordRules
from .models import HierarchyLevel
from .text_utils import has_keyword, normalize_header
from .trace import Trace, record

logger = logging.getLogger(__name__)


TAXONOMY_CODE_HEADER = re.compile(r"^(?:l\d+|level\s*\d+)$", re.IGNORECASE)
NUMERIC_CODE_VALUE = re.compile(r"^\d{1,6}$")
CODE_HEADER = re.compile(r"^[A-Za-z0-9_]{2,6}$")

MIN_FILL = 0.70
MIN_UNIQUENESS = 0.95

EXACT_NAME_BONUS = 100
DESCRIPTION_BONUS = 50
MAX_LENGTH_PENALTY = 40
EXCLUSION_PENALTY = 200


# ============================================================
#   Column measurements
# ============================================================

def _fill(profile: TableProfile, header: str) -> float:
    return profile.stat(header).completeness


def _uniqueness(profile: TableProfile, header: str, grain: Optional[int]) -> float:
    """
    Distinct values of the column relative to the level's grain.

    On the terminal level the grain is the column's own non-blank count
    (plain cardinality). On a parent level it is the number of distinct
    records of that level, so a Category column is "unique" when each
    category record carries its own value.
    """
    stat = profile.stat(header)
    if grain is None:
        return stat.cardinality
    if grain <= 0:
        return 0.0
    return min(1.0, stat.unique_count / grain)


def _is_numeric_code(profile: TableProfile, header: str) -> bool:
    values = profile.text_values(header)
    return bool(values) and all(NUMERIC_CODE_VALUE.match(v) for v in values)


def _is_code_header(header: str, rules: KeywordRules) -> bool:
    token = header.strip()
    return bool(CODE_HEADER.match(token)) and (token.isupper() or rules.is_id_named(token))


# ============================================================
#   Record ID
# ============================================================

def select_record_id(
    candidates: Sequence[str],
    profile: TableProfile,
    rules: KeywordRules,
    *,
    terminal: bool,
    reserved_names: Iterable[str] = (),
    grain: Optional[int] = None,
) -> Tuple[str, str]:
    """
    Pick the Record ID for a level.

    Parameters
    ----------
    candidates :
        The level's columns, in level order.
    terminal :
        True for the SKU level: explicit product identifiers win first.
    reserved_names :
        Columns already chosen as another level's Record Name.
    grain :
        Distinct records of the level (None on the terminal level).

    Returns
    -------
    (header, reason)
    """
    if not candidates:
        raise ValueError("select_record_id needs at least one candidate column")

    reserved = set(reserved_names)
    pool = [h for h in candidates if h not in reserved]
    eligible = [h for h in pool if not rules.is_id_excluded(h)]

    def fill(h: str) -> float:
        return _fill(profile, h)

    def unique(h: str) -> float:
        return _uniqueness(profile, h, grain)

    if terminal:
        for group in rules.sku_identifier_priority:
            for h in eligible:
                if profile.stat(h).total_count and has_keyword(h, group):
                    return h, f"product identifier keyword '{group[0]}'"

    for h in eligible:
        if TAXONOMY_CODE_HEADER.match(h.strip()):
            return h, "taxonomy level code"

    for h in eligible:
        if unique(h) >= MIN_UNIQUENESS and _is_numeric_code(profile, h):
            return h, "numeric code"

    for h in eligible:
        if (
            _is_code_header(h, rules)
            and fill(h) >= MIN_FILL
            and unique(h) >= MIN_UNIQUENESS
        ):
            return h, "short code column"

    id_named = [h for h in eligible if rules.is_id_named(h)]
    for h in id_named:
        if fill(h) >= MIN_FILL and unique(h) >= MIN_UNIQUENESS:
            return h, "identifier column"

    # Fallback ladder
    for h in id_named:
        if fill(h) >= MIN_FILL:
            return h, "identifier column (uniqueness relaxed)"
    for h in id_named:
        if unique(h) >= MIN_UNIQUENESS:
            return h, "identifier column (fill relaxed)"
    if id_named:
        return id_named[0], "identifier keyword"
    if eligible:
        return eligible[0], "first eligible column"
    if pool:
        return pool[0], "first column"
    return candidates[0], "first column"


# ============================================================
#   Record Name
# ============================================================

def _average_length(profile: TableProfile, header: str) -> float:
    values = profile.text_values(header)
    if not values:
        return 0.0
    return sum(len(v) for v in values) / len(values)


def score_record_name(
    header: str,
    profile: TableProfile,
    rules: KeywordRules,
    reserved_names: Iterable[str] = (),
) -> float:
    """
    Suitability of a column as a human-readable Record Name.
    """
    if header in set(reserved_names):
        return -math.inf
    if profile.stat(header).total_count == 0:
        return -math.inf

    score = 0.0
    if normalize_header(header) == "name":
        score = EXACT_NAME_BONUS
    else:
        for keyword, bonus in rules.name_bonuses:
            if has_keyword(header, (keyword,)):
                score = max(score, bonus)

    if has_keyword(header, rules.description_keywords):
        penalty = min(MAX_LENGTH_PENALTY, _average_length(profile, header) / 10)
        score = max(score, DESCRIPTION_BONUS - penalty)

    if rules.is_name_excluded(header):
        score -= EXCLUSION_PENALTY

    return score


def select_record_name(
    candidates: Sequence[str],
    profile: TableProfile,
    rules: KeywordRules,
    *,
    record_id: Optional[str] = None,
    reserved_names: Iterable[str] = (),
) -> Optional[str]:
    """
    Highest-scoring candidate with a positive score, or None.
    """
    reserved = set(reserved_names)
    best: Optional[str] = None
    best_score = 0.0
    for h in candidates:
        if h == record_id:
            continue
        score = score_record_name(h, profile, rules, reserved)
        if score > best_score:
            best, best_score = h, score
    return best


# ============================================================
#   Level assembly
# ============================================================

def assign_identities(
    pools: Sequence[Tuple[str, Sequence[str]]],
    profile: TableProfile,
    rules: KeywordRules,
    *,
    phase: str = "final",
    trace: Optional[Trace] = None,
) -> Tuple[HierarchyLevel, ...]:
    """
    Turn (level name, member columns) pools into HierarchyLevel objects.

    Levels are numbered in pool order; the last pool is the terminal level.
    Empty pools must be removed by the caller.
    """
    levels: List[HierarchyLevel] = []
    used_names: List[str] = []
    last = len(pools) - 1

    for i, (name, members) in enumerate(pools):
        members = list(dict.fromkeys(members))
        terminal = i == last
        grain = None if terminal else profile.grain_count(members)

        record_id, reason = select_record_id(
            members,
            profile,
            rules,
            terminal=terminal,
            reserved_names=used_names,
            grain=grain,
        )
        record_name = select_record_name(
            members,
            profile,
            rules,
            record_id=record_id,
            reserved_names=used_names,
        )
        if record_name is not None:
            used_names.append(record_name)

        headers = tuple(h for h in members if h not in (record_id, record_name))
        levels.append(
            HierarchyLevel(
                level=i + 1,
                name=name,
                headers=headers,
                record_id=record_id,
                record_name=record_name,
            )
        )
        record(
            trace,
            "record_identity",
            f"{phase}: level {i + 1} identity",
            record_id=record_id,
            reason=reason,
            record_name=record_name,
        )

    return tuple(levels)
