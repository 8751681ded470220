"""
Core processing modules for the PIM hierarchy inference engine.

This package contains:

    - hierarchy_engine      → Unified pipeline (analyze)
    - column_profiler       → Per-column cardinality / completeness / score
    - domain_classifier     → Keyword-scored product domain
    - level_classifier      → Level-1 / Level-2 / SKU buckets
    - hierarchy             → Level construction and consolidation
    - record_identity       → Record ID / Record Name per level
    - conservation          → Every column placed exactly once
    - keywords, text_utils  → Shared vocabulary and header matching
    - config, models        → Immutable configuration and result types
"""

from .hierarchy_engine import HierarchyEngine, analyze
from .config import AnalysisConfig
from .exceptions import ConfigurationError, PimHierarchyError, ValidationError
from .keywords import DEFAULT_KEYWORDS, KeywordRules
from .models import (
    AnalysisResult,
    ColumnStat,
    HierarchyAlternative,
    HierarchyLevel,
    OrphanedRecord,
    ProductDomain,
    PropertyHierarchyMapping,
    PropertyRecommendation,
    TaxonomyPath,
    TaxonomyTreeNode,
    TraceEntry,
    UomConversion,
    UomSuggestion,
    ValidationReport,
    ValidationWarning,
    TERMINAL_LEVEL_NAME,
)
from .column_profiler import TableProfile, profile_table
from .trace import Trace
