# analysis/__init__.py

"""
Attribute-level and taxonomy analyses run on top of the inferred hierarchy:
property types, units of measure, orphaned rows, taxonomy paths and trees,
alternative presets and data quality warnings.

This package exposes only the reusable analysis functions; the full
pipeline lives in core.hierarchy_engine.
"""

from .property_types import infer_property_types
from .uom_patterns import detect_uom_patterns
from .orphaned_records import detect_orphaned_records
from .taxonomy import (
    build_custom_taxonomy_tree,
    build_taxonomy_tree,
    generate_taxonomy_paths,
    map_properties_to_hierarchy,
    tree_to_ascii,
)
from .presets import generate_presets
from .data_quality import validate_data

__all__ = [
    "infer_property_types",
    "detect_uom_patterns",
    "detect_orphaned_records",
    "build_custom_taxonomy_tree",
    "build_taxonomy_tree",
    "generate_taxonomy_paths",
    "map_properties_to_hierarchy",
    "tree_to_ascii",
    "generate_presets",
    "validate_data",
]
