# core/text_utils.py

"""
Text utilities shared by every classification stage.

This module provides:

    - Header normalization (camelCase / snake_case / punctuation aware)
    - Keyword matching on token boundaries, so that short keywords such
      as "id" or "lot" do not fire inside "width" or "slot"
    - Cell helpers: blank detection and stable text rendering
"""

# Type hints
from __future__ import annotations
from typing import Any, Iterable, List, Optional

# External dependencies
import math
from functools import lru_cache

import pandas as pd
import regex as re


# ============================================================
#   Header tokenization
# ============================================================

_CAMEL_TOKEN = re.compile(r"\p{Lu}+(?=\p{Lu}\p{Ll})|\p{Lu}?\p{Ll}+|\p{Lu}+|\d+")


def header_tokens(header: Any) -> List[str]:
    """
    Split a column header into lower-cased word tokens.

    "ProductID"      -> ["product", "id"]
    "net_weight_kg"  -> ["net", "weight", "kg"]
    "L2 Description" -> ["l", "2", "description"]
    """
    tokens: List[str] = []
    for chunk in re.split(r"[^\p{L}\p{N}]+", str(header)):
        if not chunk:
            continue
        tokens.extend(t.lower() for t in _CAMEL_TOKEN.findall(chunk))
    return tokens


def normalize_header(header: Any) -> str:
    """
    Space-joined header tokens, used as the haystack for keyword matching.
    """
    return " ".join(header_tokens(header))


# ============================================================
#   Keyword matching
# ============================================================

@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> "re.Pattern":
    kw = normalize_header(keyword)
    # Allow simple plurals ("weights", "boxes") but nothing glued on.
    return re.compile(rf"(?<![\p{{L}}\p{{N}}]){re.escape(kw)}(?:s|es)?(?![\p{{L}}\p{{N}}])")


def _haystack(header: Any) -> str:
    """
    Camel-split tokens, plus the plain lower-cased chunks when they differ
    ("Weight UoM" -> "weight uo m | weight uom").
    """
    split = normalize_header(header)
    plain = " ".join(
        c.lower() for c in re.split(r"[^\p{L}\p{N}]+", str(header)) if c
    )
    return split if plain == split else f"{split} | {plain}"


def keyword_hits(header: Any, keywords: Iterable[str]) -> List[str]:
    """
    Return the keywords that occur in the header on token boundaries.
    """
    haystack = _haystack(header)
    if not haystack:
        return []
    return [kw for kw in keywords if kw and _keyword_pattern(kw).search(haystack)]


def has_keyword(header: Any, keywords: Iterable[str]) -> bool:
    haystack = _haystack(header)
    if not haystack:
        return False
    return any(kw and _keyword_pattern(kw).search(haystack) for kw in keywords)


def is_taxonomy_level_code(header: Any) -> bool:
    """
    True for headers such as "L1", "L2 Description", "Level 3" or "level_2_code".
    """
    s = str(header).strip().lower()
    return bool(re.match(r"^(?:l|level)[\s_\-]*\d+(?![\p{L}\p{N}])", s))


# ============================================================
#   Cell helpers
# ============================================================

def is_blank(value: Any) -> bool:
    """
    A cell is blank when it is None, NaN, or a string that is empty after stripping.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> Optional[str]:
    """
    Render a cell as stripped text; integral floats lose their ".0".
    Returns None for blank cells.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
