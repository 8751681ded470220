# core/config.py

"""
Immutable analysis configuration.

Thresholds are never held in module-level variables: every stage receives
the AnalysisConfig of the current call. Re-analysis with different
thresholds means building a new config (``config.with_overrides(...)``).
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, Mapping, Tuple

from .exceptions import ConfigurationError
from .keywords import DEFAULT_KEYWORDS, KeywordRules


# camelCase keys used by the ingestion / UI collaborators
_CAMEL_KEYS = {
    "parentThreshold": "parent_threshold",
    "childrenMin": "children_min",
    "childrenMax": "children_max",
    "skuThreshold": "sku_threshold",
    "minPropertiesPerLevel": "min_properties_per_level",
    "forcedSkuHeaders": "forced_sku_headers",
}


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Thresholds and overrides for one analysis run.

    Attributes
    ----------
    parent_threshold :
        Cardinality at or below which a column is a strong parent/taxonomy
        candidate (e.g. "Category", "Brand").
    children_min :
        Upper cardinality bound for Level-2 candidates.
    children_max :
        Upper bound of the "child" cardinality band reported on ColumnStat.
    sku_threshold :
        Cardinality at or above which a column always lands on the terminal level.
    min_properties_per_level :
        Non-terminal levels with fewer members are merged into the level below.
    forced_sku_headers :
        Headers the caller wants on the terminal level regardless of statistics.
    keywords :
        Shared vocabulary for all header heuristics.
    """

    parent_threshold: float = 0.02
    children_min: float = 0.50
    children_max: float = 0.75
    sku_threshold: float = 0.98
    min_properties_per_level: int = 6
    forced_sku_headers: Tuple[str, ...] = ()
    keywords: KeywordRules = field(default=DEFAULT_KEYWORDS, compare=False)

    def __post_init__(self):
        for name in ("parent_threshold", "children_min", "children_max", "sku_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(
                    f"{name} must be a number, got {value!r}", {"field": name}
                )
            if not 0.0 <= float(value) <= 1.0:
                raise ConfigurationError(
                    f"{name} must be between 0 and 1, got {value}", {"field": name}
                )
            object.__setattr__(self, name, float(value))

        if self.children_min > self.children_max:
            raise ConfigurationError(
                "children_min must not exceed children_max",
                {"children_min": self.children_min, "children_max": self.children_max},
            )

        mpl = self.min_properties_per_level
        if isinstance(mpl, bool) or not isinstance(mpl, int) or mpl < 1:
            raise ConfigurationError(
                f"min_properties_per_level must be a positive integer, got {mpl!r}",
                {"field": "min_properties_per_level"},
            )

        forced = self.forced_sku_headers
        if isinstance(forced, str):
            forced = (forced,)
        object.__setattr__(self, "forced_sku_headers", tuple(str(h) for h in (forced or ())))

    # --------------------------------------------------------
    # Construction helpers
    # --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "AnalysisConfig":
        """
        Build a config from a mapping using either the camelCase interface
        keys (``parentThreshold``, ``forcedSkuHeaders``, ...) or snake_case.
        Missing keys keep their defaults; unknown keys raise.
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown configuration key: {key!r}", {"key": key})
            kwargs[name] = value
        return cls(**kwargs)

    def with_overrides(self, **changes: Any) -> "AnalysisConfig":
        return replace(self, **changes)

    def with_forced_sku_headers(self, headers: Iterable[str]) -> "AnalysisConfig":
        return replace(self, forced_sku_headers=tuple(headers))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent_threshold": self.parent_threshold,
            "children_min": self.children_min,
            "children_max": self.children_max,
            "sku_threshold": self.sku_threshold,
            "min_properties_per_level": self.min_properties_per_level,
            "forced_sku_headers": list(self.forced_sku_headers),
        }
