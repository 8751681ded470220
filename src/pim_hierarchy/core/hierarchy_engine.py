# core/hierarchy_engine.py

from __future__ import annotations
from typing import Any, Mapping, Optional, Sequence, Union

import logging

from .column_profiler import TableProfile, profile_table
from .config import AnalysisConfig
from .conservation import ConservationReport, enforce_conservation
from .domain_classifier import detect_product_domain
from .hierarchy import HierarchyDraft, build_hierarchy
from .level_classifier import LevelBuckets, classify_levels
from .models import AnalysisResult, HierarchyLevel, ProductDomain, TaxonomyTreeNode
from .trace import Trace, record

from ..analysis.data_quality import validate_data
from ..analysis.orphaned_records import detect_orphaned_records, hierarchy_columns
from ..analysis.presets import generate_presets, model_type_for
from ..analysis.property_types import infer_property_types
from ..analysis.taxonomy import (
    build_custom_taxonomy_tree,
    build_taxonomy_tree,
    generate_taxonomy_paths,
)
from ..analysis.uom_patterns import detect_uom_patterns

logger = logging.getLogger(__name__)


ConfigLike = Union[AnalysisConfig, Mapping[str, Any], None]

BASE_CONFIDENCE = {2: 0.75, 3: 0.85}
STANDALONE_CONFIDENCE = 0.5
DEGENERATE_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.95


def _as_config(config: ConfigLike) -> AnalysisConfig:
    if config is None:
        return AnalysisConfig()
    if isinstance(config, AnalysisConfig):
        return config
    return AnalysisConfig.from_dict(config)


def score_confidence(
    levels: Sequence[HierarchyLevel],
    profile: TableProfile,
    config: AnalysisConfig,
    domain: ProductDomain,
    buckets: LevelBuckets,
    conservation: ConservationReport,
) -> float:
    """
    Confidence in the proposed structure.

    Standalone results stay between 0.3 and 0.6: 0.3 when the table has
    no rows or no column repeats enough to group on, 0.5 otherwise.
    Multi-level results start at 0.75 (two levels) or 0.85 (three) and
    gain 0.05 for a strongly repeating top-level Record ID and 0.05 for
    apparel variant columns kept on the SKU level. Healing a conservation
    defect costs 0.1.
    """
    if len(levels) <= 1:
        groupable = any(s.hierarchy_score >= 50 and s.total_count for s in profile.column_stats)
        score = STANDALONE_CONFIDENCE if profile.row_count and groupable else DEGENERATE_CONFIDENCE
    else:
        score = BASE_CONFIDENCE.get(len(levels), BASE_CONFIDENCE[3])
        if profile.stat(levels[0].record_id).cardinality <= config.parent_threshold:
            score += 0.05
        if domain.type == "Apparel" and buckets.demoted:
            score += 0.05

    if conservation.healed:
        score -= 0.1

    return round(min(max(score, 0.0), MAX_CONFIDENCE), 4)


class HierarchyEngine:
    """
    Hierarchy inference pipeline.

    Responsibilities:
        - Profile the columns of a product table
        - Propose parent / child / SKU levels with Record ID and Name per level
        - Guarantee every column lands on exactly one level
        - Recommend property types and unit-of-measure handling
        - Flag orphaned rows and data quality issues
        - Derive taxonomy paths, a taxonomy tree and alternative presets

    The engine holds only its configuration; every analyze() call is a
    pure function of (headers, rows, config).
    """

    # ============================================================
    # Initialization
    # ============================================================

    def __init__(self, config: ConfigLike = None):
        self._config = _as_config(config)

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def with_config(self, config: ConfigLike = None, **overrides: Any) -> "HierarchyEngine":
        """
        New engine with a replaced config and/or individual threshold overrides.
        """
        base = self._config if config is None else _as_config(config)
        return HierarchyEngine(base.with_overrides(**overrides) if overrides else base)

    # ============================================================
    # Full analysis
    # ============================================================

    def analyze(self, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> AnalysisResult:
        """
        Run every stage on the table.

        Parameters
        ----------
        headers :
            Column names, aligned with every row by position.
        rows :
            Table body; cells may be None, NaN, strings or numbers.

        Returns
        -------
        AnalysisResult

        Raises
        ------
        ValidationError
            When a row's length differs from the header count.
        """
        config = self._config
        rules = config.keywords
        trace = Trace()

        # -----------------------------
        # Structure
        # -----------------------------
        profile = profile_table(headers, rows, config)
        record(
            trace,
            "profile",
            "Profiled table",
            rows=profile.row_count,
            columns=len(profile.headers),
        )

        domain = detect_product_domain(headers, rows, rules, trace=trace)
        buckets = classify_levels(profile, config, domain, trace=trace)

        if profile.unique_headers:
            draft = build_hierarchy(buckets, profile, config, trace=trace)
        else:
            draft = HierarchyDraft(levels=(), provisional=(), min_members=0)

        levels, conservation = enforce_conservation(draft.levels, headers, trace=trace)

        confidence = score_confidence(levels, profile, config, domain, buckets, conservation)
        model_type = model_type_for(levels)
        record(trace, "engine", "Scored structure", confidence=confidence, model_type=model_type)

        # -----------------------------
        # Attribute-level findings
        # -----------------------------
        recommendations = infer_property_types(profile, rules, trace=trace)
        uom = detect_uom_patterns(profile, rules, trace=trace)
        orphans = detect_orphaned_records(levels, profile, trace=trace)

        # -----------------------------
        # Taxonomy views
        # -----------------------------
        paths = generate_taxonomy_paths(levels, profile, trace=trace)
        tree = build_taxonomy_tree(levels, profile, rules, trace=trace)
        presets = generate_presets(levels, confidence, profile, config, trace=trace)
        validation = validate_data(profile, hierarchy_columns(levels), rules, trace=trace)

        logger.debug(
            "Analysis finished: %d levels, confidence %.2f, %d trace entries",
            len(levels), confidence, len(trace),
        )

        return AnalysisResult(
            column_stats=profile.column_stats,
            hierarchy=levels,
            properties=levels[-1].headers if levels else (),
            confidence=confidence,
            product_domain=domain,
            model_type=model_type,
            uom_suggestions=uom,
            property_recommendations=recommendations,
            orphaned_records=orphans,
            taxonomy_paths=paths,
            alternatives=presets,
            taxonomy_tree=tree,
            validation=validation,
            config=config,
            trace=trace.entries(),
        )

    # ============================================================
    # Custom taxonomy
    # ============================================================

    def custom_taxonomy_tree(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        columns: Sequence[str],
    ) -> TaxonomyTreeNode:
        """
        Taxonomy tree over caller-chosen columns instead of the inferred ones.
        """
        profile = profile_table(headers, rows, self._config)
        return build_custom_taxonomy_tree(columns, profile)


def analyze(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    config: ConfigLike = None,
) -> AnalysisResult:
    """
    Module-level shortcut for ``HierarchyEngine(config).analyze(headers, rows)``.
    """
    return HierarchyEngine(config).analyze(headers, rows)
