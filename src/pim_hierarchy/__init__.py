"""
PIM hierarchy inference.

    from pim_hierarchy import analyze

    result = analyze(headers, rows, {"minPropertiesPerLevel": 4})
    result.hierarchy          # levels, terminal "SKU-Level Properties" last
    result.record_id_suggestion

Nothing in this package configures logging or executes on import.
"""

from .core import (
    AnalysisConfig,
    AnalysisResult,
    ConfigurationError,
    HierarchyEngine,
    HierarchyLevel,
    PimHierarchyError,
    ValidationError,
    analyze,
)
from .analysis import map_properties_to_hierarchy, tree_to_ascii

__version__ = "0.1.0"

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "ConfigurationError",
    "HierarchyEngine",
    "HierarchyLevel",
    "PimHierarchyError",
    "ValidationError",
    "analyze",
    "map_properties_to_hierarchy",
    "tree_to_ascii",
]
