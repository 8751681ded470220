# core/exceptions.py

"""
Exception hierarchy for the hierarchy inference engine.

Only malformed input and invalid configuration raise. Degenerate data,
missing record identities and conservation defects are resolved inside
the engine and surface as low confidence or trace entries instead.
"""

from __future__ import annotations
from typing import Any, Dict, Optional


class PimHierarchyError(Exception):
    """
    Base exception for all engine errors.

    Attributes
    ----------
    message :
        Human-readable error description.
    details :
        Structured context (row index, offending key, ...) for callers
        that want to present the error themselves.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = dict(details) if details else {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }


class ValidationError(PimHierarchyError):
    """Raised when the input table is not rectangular or headers are malformed."""

    def __init__(
        self,
        message: str,
        row_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details) if details else {}
        if row_index is not None:
            merged["row_index"] = row_index
        super().__init__(message, merged)
        self.row_index = row_index


class ConfigurationError(PimHierarchyError):
    """Raised when an AnalysisConfig is constructed with invalid values."""
