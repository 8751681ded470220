# analysis/taxonomy.py

"""
Taxonomy views of an analysed table.

    generate_taxonomy_paths      distinct parent-level paths with product counts
    build_taxonomy_tree          nested category tree over the best columns
    build_custom_taxonomy_tree   same, over caller-chosen columns
    tree_to_ascii                text rendering of a tree
    map_properties_to_hierarchy  which level owns each property, with its type
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

import logging

import regex as re

from ..core.column_profiler import TableProfile
from ..core.keywords import DEFAULT_KEYWORDS, KeywordRules
from ..core.models import (
    AnalysisResult,
    HierarchyLevel,
    PropertyHierarchyMapping,
    TaxonomyPath,
    TaxonomyTreeNode,
)
from ..core.text_utils import cell_text, has_keyword
from ..core.trace import Trace, record

logger = logging.getLogger(__name__)


UNKNOWN = "Unknown"
MAX_TREE_LEVELS = 4
SKIPPED_TREE_VALUES = {"unknown", "n/a", "null", "undefined"}
SHORT_CODE_HEADER = re.compile(r"^[A-Za-z]\d+$")


# ============================================================
# Taxonomy paths
# ============================================================

def generate_taxonomy_paths(
    hierarchy: Sequence[HierarchyLevel],
    profile: TableProfile,
    trace: Optional[Trace] = None,
) -> Tuple[TaxonomyPath, ...]:
    """
    Group rows by the Record ID values of the non-terminal levels.

    Blank values become "Unknown". Paths are sorted by product count,
    descending; equal counts keep first-appearance order. A hierarchy
    without parent levels has no taxonomy paths.
    """
    parents = list(hierarchy[:-1])
    if not parents or profile.row_count == 0:
        return ()

    properties = hierarchy[-1].members
    columns = [
        [cell_text(v) or UNKNOWN for v in profile.column(level.record_id)]
        for level in parents
    ]

    counts: Dict[Tuple[str, ...], int] = {}
    for path in zip(*columns):
        counts[path] = counts.get(path, 0) + 1

    ordered = sorted(counts.items(), key=lambda item: -item[1])
    paths = tuple(
        TaxonomyPath(path=path, product_count=n, properties=properties)
        for path, n in ordered
    )
    record(trace, "taxonomy", f"{len(paths)} distinct taxonomy paths")
    return paths


# ============================================================
# Taxonomy tree
# ============================================================

class _Branch:
    """Mutable node used while walking rows; frozen at the end."""

    def __init__(self, name: str, level: int):
        self.name = name
        self.level = level
        self.count = 0
        self.children: Dict[str, "_Branch"] = {}

    def child(self, name: str) -> "_Branch":
        node = self.children.get(name)
        if node is None:
            node = _Branch(name, self.level + 1)
            self.children[name] = node
        return node

    def freeze(self, taxonomy_properties: Tuple[str, ...] = ()) -> TaxonomyTreeNode:
        kids = sorted(self.children.values(), key=lambda b: -b.count)
        return TaxonomyTreeNode(
            name=self.name,
            level=self.level,
            product_count=self.count,
            children=tuple(k.freeze() for k in kids),
            taxonomy_properties=taxonomy_properties,
        )


def _tree_value(value) -> Optional[str]:
    text = cell_text(value)
    if text is None or text.lower() in SKIPPED_TREE_VALUES:
        return None
    return text


def _walk_rows(columns: Sequence[str], profile: TableProfile) -> _Branch:
    root = _Branch("Root", 0)
    root.count = profile.row_count
    if not columns:
        return root

    cells = [profile.column(h).tolist() for h in columns]
    for row in zip(*cells):
        node = root
        for value in row:
            name = _tree_value(value)
            # Rows with a gap stop here, no placeholder branches.
            if name is None:
                break
            node = node.child(name)
            node.count += 1
    return root


def score_tree_column(
    header: str,
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
) -> float:
    """
    Preference of a column as a tree level: short, name-like text beats
    codes and long phrases.
    """
    score = 0.0
    for kws, points in keywords.tree_scores:
        if has_keyword(header, kws):
            score += points
    if SHORT_CODE_HEADER.match(header.strip()):
        score -= 30

    rows = profile.row_count
    if rows == 0:
        return score

    texts = [cell_text(v) for v in profile.column(header)]
    text_like = sum(1 for t in texts if t is not None and re.search(r"[A-Za-z]", t))
    score += text_like / rows * 50

    avg_words = sum(len(t.split()) for t in texts if t is not None) / rows
    if avg_words <= 2:
        score += 100
    elif avg_words <= 3:
        score += 50
    elif avg_words > 5:
        score -= 80
    return score


def build_taxonomy_tree(
    hierarchy: Sequence[HierarchyLevel],
    profile: TableProfile,
    keywords: KeywordRules = DEFAULT_KEYWORDS,
    trace: Optional[Trace] = None,
) -> TaxonomyTreeNode:
    """
    Category tree over the (up to four) best-scoring parent-level columns.
    Measurement, unit and date columns never form tree levels.
    """
    if len(hierarchy) <= 1:
        return TaxonomyTreeNode(
            name="Standalone Products", level=0, product_count=profile.row_count
        )

    candidates = [
        h for level in hierarchy[:-1] for h in level.members
        if not has_keyword(h, keywords.tree_exclusions)
    ]
    scored = sorted(
        candidates, key=lambda h: -score_tree_column(h, profile, keywords)
    )
    columns = tuple(scored[:MAX_TREE_LEVELS])

    tree = _walk_rows(columns, profile).freeze(taxonomy_properties=columns)
    record(trace, "taxonomy", "Built taxonomy tree", columns=list(columns))
    return tree


def build_custom_taxonomy_tree(
    columns: Sequence[str],
    profile: TableProfile,
) -> TaxonomyTreeNode:
    """
    Category tree over caller-chosen columns, in the given order. An
    unknown column ends every path at that level.
    """
    columns = tuple(columns)
    known = set(profile.unique_headers)
    usable: List[str] = []
    for h in columns:
        if h not in known:
            break
        usable.append(h)
    return _walk_rows(usable, profile).freeze(taxonomy_properties=columns)


def tree_to_ascii(node: TaxonomyTreeNode, prefix: str = "", is_last: bool = True) -> str:
    """
    Render a tree with box-drawing connectors, one node per line:

        ├── Shoes (40 products)
        │   └── Running (25 products)
        └── Bags (12 products)
    """
    out = ""
    if node.level > 0:
        connector = "└── " if is_last else "├── "
        out += f"{prefix}{connector}{node.name} ({node.product_count} products)\n"
    elif node.name != "Root":
        out += f"{node.name} ({node.product_count} products)\n"

    child_prefix = prefix + ("    " if is_last else "│   ") if node.level > 0 else ""
    for i, child in enumerate(node.children):
        out += tree_to_ascii(child, child_prefix, i == len(node.children) - 1)
    return out


# ============================================================
# Property -> level mapping
# ============================================================

def map_properties_to_hierarchy(result: AnalysisResult) -> Tuple[PropertyHierarchyMapping, ...]:
    """
    One entry per column: the level that owns it plus its recommended type.
    """
    by_header = {r.header: r for r in result.property_recommendations}
    mappings: List[PropertyHierarchyMapping] = []
    for level in result.hierarchy:
        for h in level.members:
            rec = by_header.get(h)
            mappings.append(
                PropertyHierarchyMapping(
                    property_name=h,
                    data_type=rec.data_type if rec else "string",
                    belongs_to_level=level.name,
                    is_picklist=rec.is_picklist if rec else False,
                    picklist_values=rec.picklist_values if rec else (),
                )
            )
    return tuple(mappings)
