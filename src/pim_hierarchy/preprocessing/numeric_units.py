# preprocessing/numeric_units.py

import pandas as pd
import numpy as np
import regex as re
from typing import Dict, Tuple, List, Optional, Any, Iterable


# =========================
# 1. Numeric strings
# =========================

# Pure integer/float: no commas, optional decimal point
_DECIMAL = re.compile(r'^[+-]?\d+(?:\.\d+)?$')

# Thousands pattern: 1-3 digits, then one or more ",ddd" groups, optional .decimals
# Examples: "1,234", "12,345,678", "-1,234.56"
_THOUSANDS = re.compile(r'^[+-]?\d{1,3}(?:,\d{3})+(?:\.\d+)?$')


def safe_to_float(x: Any) -> float:
    """
    Best-effort conversion to float for comparison purposes.
    Handles ints/floats, decimal strings, and thousands-style strings.
    Returns np.nan if not convertible.
    """
    if isinstance(x, bool):
        return np.nan

    if isinstance(x, (int, float, np.number)):
        return float(x)

    if isinstance(x, str):
        s = x.strip()
        if not s:
            return np.nan

        if _THOUSANDS.match(s):
            s = s.replace(',', '')
        elif not _DECIMAL.match(s):
            # As a last resort, try a generic float ("1e3", "-.5"); reject "nan"/"inf"
            try:
                value = float(s)
            except ValueError:
                return np.nan
            return value if np.isfinite(value) else np.nan

        try:
            return float(s)
        except ValueError:
            return np.nan

    return np.nan


def is_numeric_value(x: Any) -> bool:
    return not np.isnan(safe_to_float(x))


def to_numeric_series(values: Iterable[Any]) -> pd.Series:
    """
    Map values through safe_to_float; unparseable entries become NaN.
    The index of a pandas Series input is preserved.
    """
    if isinstance(values, pd.Series):
        return values.map(safe_to_float).astype(float)
    return pd.Series([safe_to_float(v) for v in values], dtype=float)


def numeric_ratio(values: Iterable[Any]) -> float:
    """
    Share of values that parse as numbers (0.0 for no values).
    """
    series = to_numeric_series(values)
    if series.empty:
        return 0.0
    return float(series.notna().mean())


# =========================
# 2. Inline "value unit" parser
# =========================

# Same numeric patterns as above, decimal comma allowed
_NUM_DECIMAL = re.compile(r'^[+-]?\d+(?:[.,]\d+)?$')
_NUM_THOUSANDS = re.compile(r'^[+-]?\d{1,3}(?:,\d{3})+(?:[.,]\d+)?$')

# Unit must start with a letter (or a quote sign for inches), to avoid ".5" / "0" etc.
_INLINE_VALUE_UNIT_PATTERN = re.compile(
    r'^\s*([-+]?\d+(?:[.,]\d+)?)\s*([A-Za-z"″][^\s,;]*)\s*$'
)


def parse_inline_value_unit(x: Any) -> Tuple[Optional[float], Optional[str]]:
    """
    If x looks like 'number unit' (e.g. '132 mm', '45mm', '84 in', '12"'),
    return (value: float, unit: str). Otherwise return (None, None).

    - Skips pure numeric strings and thousands-style numeric strings.
    """
    if not isinstance(x, str):
        return None, None

    s = x.strip()
    if not s:
        return None, None

    # 1) Skip pure numeric / thousands-style
    if _NUM_DECIMAL.match(s) or _NUM_THOUSANDS.match(s):
        return None, None

    # 2) Now try to match "number + unit"
    m = _INLINE_VALUE_UNIT_PATTERN.match(s)
    if not m:
        return None, None

    raw_val, unit = m.groups()
    raw_val = raw_val.replace(',', '.')  # decimal comma -> dot
    try:
        value = float(raw_val)
    except ValueError:
        return None, None

    return value, unit


# =========================
# 3. Unit vocabulary
# =========================

# Spelling variants -> canonical unit
UNIT_ALIASES: Dict[str, str] = {
    "in": "inch", "inch": "inch", "inches": "inch", '"': "inch", "″": "inch",
    "cm": "cm", "centimeter": "cm", "centimeters": "cm", "centimetre": "cm", "centimetres": "cm",
    "mm": "mm", "millimeter": "mm", "millimeters": "mm", "millimetre": "mm", "millimetres": "mm",
    "m": "m", "meter": "m", "meters": "m", "metre": "m", "metres": "m",
    "kg": "kg", "kgs": "kg", "kilo": "kg", "kilos": "kg", "kilogram": "kg", "kilograms": "kg",
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "oz": "oz", "ounce": "oz", "ounces": "oz",
    "g": "g", "gr": "g", "gram": "g", "grams": "g",
}

# Canonical unit -> suggested conversion targets
CONVERSION_TARGETS: Dict[str, Tuple[str, ...]] = {
    "inch": ("cm", "mm"),
    "cm": ("inch", "mm"),
    "mm": ("inch", "cm"),
    "kg": ("lb", "g"),
    "lb": ("kg",),
    "oz": ("g",),
    "g": ("oz", "kg"),
    "m": ("cm", "inch"),
}


def canonical_unit(unit: Any) -> Optional[str]:
    """
    Canonical name of a unit token ("Inches" -> "inch", "KG" -> "kg"),
    or None when the token is not a known length/weight unit.
    """
    if unit is None:
        return None
    token = str(unit).strip().lower().rstrip(".")
    if not token:
        return None
    return UNIT_ALIASES.get(token)


# "number unit" anywhere in a longer text ("approx. 12 kg net")
_EMBEDDED_VALUE_UNIT_PATTERN = re.compile(
    r'(?<![\p{L}\d.,])(\d+(?:[.,]\d+)?)\s*(["″]|\p{L}+\.?)(?!\p{L})'
)


def find_value_unit(x: Any) -> Tuple[Optional[float], Optional[str]]:
    """
    Locate a known length/weight unit attached to a number in x.

    Tries the strict 'number unit' form first, then searches longer
    strings. Returns (value, canonical unit) or (None, None).
    """
    value, unit = parse_inline_value_unit(x)
    canon = canonical_unit(unit)
    if canon is not None:
        return value, canon

    if not isinstance(x, str):
        return None, None

    for m in _EMBEDDED_VALUE_UNIT_PATTERN.finditer(x):
        canon = canonical_unit(m.group(2))
        if canon is not None:
            return float(m.group(1).replace(',', '.')), canon

    return None, None


def extract_units(values: Iterable[Any]) -> List[str]:
    """
    Canonical units of the values that carry a known unit, in order.
    """
    units: List[str] = []
    for x in values:
        _, canon = find_value_unit(x)
        if canon is not None:
            units.append(canon)
    return units
