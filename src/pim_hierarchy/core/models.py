# core/models.py

"""
Result types produced by the engine.

Every type is a frozen dataclass holding tuples, so a result can be
compared with ``==``: re-running an analysis on the same input yields an
equal result.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from .config import AnalysisConfig


TERMINAL_LEVEL_NAME = "SKU-Level Properties"

SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2}


# ============================================================
# Column statistics
# ============================================================

@dataclass(frozen=True)
class ColumnStat:
    header: str
    index: int
    unique_count: int
    total_count: int
    cardinality: float
    completeness: float
    hierarchy_score: int
    classification: str


# ============================================================
# Hierarchy
# ============================================================

@dataclass(frozen=True)
class HierarchyLevel:
    """
    One level of the proposed data model.

    ``record_id`` and ``record_name`` are never repeated in ``headers``;
    ``members`` lists every column the level owns.
    """

    level: int
    name: str
    headers: Tuple[str, ...]
    record_id: str
    record_name: Optional[str] = None

    @property
    def members(self) -> Tuple[str, ...]:
        identity = (self.record_id,) if self.record_name is None else (self.record_id, self.record_name)
        return identity + self.headers

    @property
    def member_count(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class ProductDomain:
    type: str
    confidence: float
    indicators: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HierarchyAlternative:
    name: str
    hierarchy: Tuple[HierarchyLevel, ...]
    confidence: float
    reasoning: str
    model_type: str

    @property
    def properties(self) -> Tuple[str, ...]:
        return self.hierarchy[-1].headers if self.hierarchy else ()


# ============================================================
# Attribute-level findings
# ============================================================

@dataclass(frozen=True)
class PropertyRecommendation:
    header: str
    data_type: str
    is_picklist: bool
    confidence: float
    rationale: str
    picklist_values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UomConversion:
    target_uom: str
    new_property_name: str


@dataclass(frozen=True)
class UomSuggestion:
    header: str
    detected_uom: str
    suggested_split: bool
    suggested_conversions: Tuple[UomConversion, ...] = ()
    needs_confirmation: bool = False
    source: str = "embedded"


@dataclass(frozen=True)
class OrphanedRecord:
    row_index: int
    issues: Tuple[str, ...]
    severity: str

    @property
    def spreadsheet_row(self) -> int:
        """Row number as shown in a spreadsheet (header row + 1-based)."""
        return self.row_index + 2


# ============================================================
# Taxonomy
# ============================================================

@dataclass(frozen=True)
class TaxonomyPath:
    path: Tuple[str, ...]
    product_count: int
    properties: Tuple[str, ...]


@dataclass(frozen=True)
class TaxonomyTreeNode:
    name: str
    level: int
    product_count: int
    children: Tuple["TaxonomyTreeNode", ...] = ()
    taxonomy_properties: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PropertyHierarchyMapping:
    property_name: str
    data_type: str
    belongs_to_level: str
    is_picklist: bool
    picklist_values: Tuple[str, ...] = ()


# ============================================================
# Data quality warnings
# ============================================================

@dataclass(frozen=True)
class ValidationWarning:
    type: str
    severity: str
    title: str
    message: str
    affected_rows: Tuple[int, ...]
    suggestion: str
    examples: Tuple[str, ...] = ()

    @property
    def affected_count(self) -> int:
        return len(self.affected_rows)


@dataclass(frozen=True)
class ValidationReport:
    warnings: Tuple[ValidationWarning, ...] = ()

    @property
    def total_issues(self) -> int:
        return len(self.warnings)

    @property
    def critical_issues(self) -> int:
        return sum(1 for w in self.warnings if w.severity == "high")


# ============================================================
# Diagnostics
# ============================================================

@dataclass(frozen=True)
class TraceEntry:
    stage: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict, hash=False)


# ============================================================
# Aggregate result
# ============================================================

@dataclass(frozen=True)
class AnalysisResult:
    column_stats: Tuple[ColumnStat, ...]
    hierarchy: Tuple[HierarchyLevel, ...]
    properties: Tuple[str, ...]
    confidence: float
    product_domain: ProductDomain
    model_type: str
    uom_suggestions: Tuple[UomSuggestion, ...]
    property_recommendations: Tuple[PropertyRecommendation, ...]
    orphaned_records: Tuple[OrphanedRecord, ...]
    taxonomy_paths: Tuple[TaxonomyPath, ...]
    alternatives: Tuple[HierarchyAlternative, ...]
    taxonomy_tree: TaxonomyTreeNode
    validation: ValidationReport
    config: AnalysisConfig
    trace: Tuple[TraceEntry, ...] = ()

    @property
    def terminal_level(self) -> HierarchyLevel:
        return self.hierarchy[-1]

    @property
    def record_id_suggestion(self) -> Optional[str]:
        return self.terminal_level.record_id if self.hierarchy else None

    @property
    def record_name_suggestion(self) -> Optional[str]:
        return self.terminal_level.record_name if self.hierarchy else None

    def trace_for(self, stage: str) -> Tuple[TraceEntry, ...]:
        return tuple(e for e in self.trace if e.stage == stage)

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain-dict view for export collaborators (JSON / PDF report builders).
        """
        out = {
            f: asdict(getattr(self, f))
            if hasattr(getattr(self, f), "__dataclass_fields__")
            else [asdict(x) for x in getattr(self, f)]
            for f in (
                "column_stats", "hierarchy", "product_domain", "uom_suggestions",
                "property_recommendations", "orphaned_records", "taxonomy_paths",
                "taxonomy_tree", "validation", "trace",
            )
        }
        out["alternatives"] = [
            {
                "name": alt.name,
                "hierarchy": [asdict(level) for level in alt.hierarchy],
                "confidence": alt.confidence,
                "reasoning": alt.reasoning,
                "model_type": alt.model_type,
            }
            for alt in self.alternatives
        ]
        out["properties"] = list(self.properties)
        out["confidence"] = self.confidence
        out["model_type"] = self.model_type
        out["config"] = self.config.to_dict()
        out["record_id_suggestion"] = self.record_id_suggestion
        out["record_name_suggestion"] = self.record_name_suggestion
        return out
