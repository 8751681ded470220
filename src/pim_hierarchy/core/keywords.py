# core/keywords.py

"""
Shared keyword tables.

Every heuristic that looks at header names reads its vocabulary from a
single KeywordRules instance, which travels inside AnalysisConfig. Stages
never define their own copies of these lists.

Matching is done with text_utils.keyword_hits, i.e. on token boundaries of
the normalized header ("GrossWeightKg" -> "gross weight kg").
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from .text_utils import has_keyword, is_taxonomy_level_code, keyword_hits


Keywords = Tuple[str, ...]


# ------------------------------------------------------------
# Product domains
# ------------------------------------------------------------

_DOMAIN_KEYWORDS: Tuple[Tuple[str, Keywords], ...] = (
    ("Electronics", (
        "processor", "ram", "gb", "cpu", "gpu", "screen", "battery", "wifi",
        "bluetooth", "voltage", "watt", "mhz", "ghz", "storage", "ssd", "hdd",
    )),
    ("Apparel", (
        "size", "color", "fabric", "material", "sleeve", "collar", "fit",
        "waist", "inseam", "cotton", "polyester", "xl", "small", "medium", "large",
    )),
    ("Food", (
        "flavor", "ingredients", "nutrition", "calories", "protein", "carbs",
        "serving", "allergen", "organic", "vegan", "gluten", "dairy", "expiry",
        "shelf life",
    )),
    ("Furniture", (
        "wood", "upholstery", "assembly", "seat", "drawer", "shelf", "table",
        "chair", "sofa", "cabinet", "desk", "finish", "veneer",
    )),
)

# ------------------------------------------------------------
# Record identity
# ------------------------------------------------------------

_ID_KEYWORDS: Keywords = (
    "id", "code", "key", "identifier", "ref", "reference", "nr", "num", "number",
)

# Never a Record ID: dates, free text and measurements.
_ID_EXCLUSIONS: Keywords = (
    "unit", "uom", "measure", "weight", "height", "width", "depth", "length",
    "size", "date", "time", "created", "modified", "updated", "valid", "expiry",
    "description", "desc", "text", "comment", "note", "material",
)

# Terminal level: explicit product identifiers, highest priority first.
_SKU_IDENTIFIER_PRIORITY: Tuple[Keywords, ...] = (
    ("sku",),
    ("zun",),
    ("gtin",),
    ("ean", "barcode"),
    ("zuc",),
    ("upc", "article", "item id"),
)

_NAME_BONUSES: Tuple[Tuple[str, int], ...] = (
    ("name", 80),
    ("title", 40),
    ("label", 35),
    ("brand", 30),
)

_DESCRIPTION_KEYWORDS: Keywords = ("description", "desc")

# Columns whose values should be unique per product (duplicate check).
_UNIQUE_KEY_KEYWORDS: Keywords = (
    "sku", "id", "ean", "upc", "gtin", "code", "reference", "case", "pallet",
    "zuc", "zun", "barcode", "article",
)

# Never a Record Name: logistics, units, identifiers, dates, technical fields.
_NAME_EXCLUSIONS: Keywords = _ID_KEYWORDS + (
    "sku", "ean", "gtin", "upc", "barcode", "zun", "zuc", "article",
    "uom", "unit", "weight", "height", "width", "depth", "length", "size",
    "volume", "dimension", "quantity", "qty", "pallet", "case", "package",
    "packaging", "stock", "inventory", "date", "time", "created", "modified",
    "updated", "expiry", "valid", "price", "cost", "temperature",
    "specification", "spec", "url", "image", "status", "flag",
)

# ------------------------------------------------------------
# Item-level hints (always relocated to the terminal level)
# ------------------------------------------------------------

_ITEM_LEVEL_HINTS: Tuple[Tuple[str, Keywords], ...] = (
    ("identifiers", (
        "sku", "ean", "gtin", "upc", "barcode", "material number", "product id",
        "article number", "item id", "zuc", "zun", "asin", "isbn", "gln", "ndc",
        "plu", "item reference", "supplier item", "trade item",
    )),
    ("measurements", (
        "weight", "height", "width", "length", "depth", "volume", "capacity",
        "uom", "unit of measure", "dimension", "density", "net content",
        "diameter", "thickness", "serving size",
    )),
    ("logistics", (
        "quantity", "qty", "stock", "inventory", "warehouse", "pallet",
        "package", "packaging", "cases per", "units per", "lead time",
        "delivery", "batch", "lot", "serial", "case", "moq", "minimum order",
        "order multiple", "incoterms", "freight class", "stacking factor",
        "pack type", "inner pack", "outer pack",
    )),
    ("nutrition", (
        "nutrition", "nutritional", "calories", "protein", "carbohydrate",
        "fat", "allergen", "allergy", "ingredient", "gluten", "vitamin",
        "sugar", "salt", "sodium", "fiber", "fibre", "kcal", "flavour", "flavor",
    )),
    ("technical", (
        "specification", "compliance", "certification", "temperature",
        "shelf life", "price", "cost", "msrp", "storage conditions",
        "country of origin", "target market", "date", "expiry", "expiration",
        "best before", "valid from", "valid to", "validity", "created on",
        "discontinued", "safety data sheet",
    )),
    ("variant_axes", ("color", "colour", "size")),
)

_APPAREL_VARIANT_KEYWORDS: Keywords = ("size", "color", "colour", "fit", "waist", "inseam")

# ------------------------------------------------------------
# Units of measure and property types
# ------------------------------------------------------------

_UOM_HEADER_KEYWORDS: Keywords = (
    "width", "height", "length", "depth", "weight", "size", "dimension",
    "diameter", "thickness",
)

_UOM_COLUMN_KEYWORDS: Keywords = ("uom", "unit")

_DATE_HEADER_KEYWORDS: Keywords = (
    "date", "time", "created", "modified", "updated", "expiry", "expiration",
    "valid", "timestamp", "best before", "dob",
)

_YES_NO_VOCABULARY: Keywords = ("yes", "no", "true", "false", "y", "n", "1", "0")

# ------------------------------------------------------------
# Taxonomy tree column scoring
# ------------------------------------------------------------

_TREE_EXCLUSIONS: Keywords = (
    "uom", "unit", "measure", "measurement", "dimension", "weight", "height",
    "width", "depth", "length", "size", "zuc", "zun", "numerator",
    "denominator", "date", "time", "created", "modified", "valid", "expiry",
)

_TREE_SCORES: Tuple[Tuple[Keywords, int], ...] = (
    (("name", "description", "title"), 100),
    (("category", "sector", "division"), 80),
    (("brand", "type", "class"), 60),
    (("code", "id", "number"), -50),
)


@dataclass(frozen=True)
class KeywordRules:
    """
    Vocabulary used by the classification stages.

    Callers may pass a customised instance through AnalysisConfig
    (e.g. ``dataclasses.replace(DEFAULT_KEYWORDS, apparel_variant_keywords=(...))``).
    """

    domain_keywords: Tuple[Tuple[str, Keywords], ...] = _DOMAIN_KEYWORDS
    id_keywords: Keywords = _ID_KEYWORDS
    id_exclusions: Keywords = _ID_EXCLUSIONS
    sku_identifier_priority: Tuple[Keywords, ...] = _SKU_IDENTIFIER_PRIORITY
    name_bonuses: Tuple[Tuple[str, int], ...] = _NAME_BONUSES
    description_keywords: Keywords = _DESCRIPTION_KEYWORDS
    name_exclusions: Keywords = _NAME_EXCLUSIONS
    unique_key_keywords: Keywords = _UNIQUE_KEY_KEYWORDS
    item_level_hints: Tuple[Tuple[str, Keywords], ...] = _ITEM_LEVEL_HINTS
    apparel_variant_keywords: Keywords = _APPAREL_VARIANT_KEYWORDS
    uom_header_keywords: Keywords = _UOM_HEADER_KEYWORDS
    uom_column_keywords: Keywords = _UOM_COLUMN_KEYWORDS
    date_header_keywords: Keywords = _DATE_HEADER_KEYWORDS
    yes_no_vocabulary: Keywords = _YES_NO_VOCABULARY
    tree_exclusions: Keywords = _TREE_EXCLUSIONS
    tree_scores: Tuple[Tuple[Keywords, int], ...] = field(default=_TREE_SCORES)

    # --------------------------------------------------------
    # Predicates used across stages
    # --------------------------------------------------------

    def is_id_named(self, header: str) -> bool:
        return has_keyword(header, self.id_keywords)

    def is_id_excluded(self, header: str) -> bool:
        return has_keyword(header, self.id_exclusions)

    def is_unique_key(self, header: str) -> bool:
        return has_keyword(header, self.unique_key_keywords) and not self.is_id_excluded(header)

    def is_name_excluded(self, header: str) -> bool:
        return has_keyword(header, self.name_exclusions)

    def item_level_groups(self, header: str) -> Tuple[str, ...]:
        """
        Item-level hint groups the header belongs to. Taxonomy level codes
        ("L1", "Level 2 Desc") are never item-level.
        """
        if is_taxonomy_level_code(header):
            return ()
        return tuple(
            group for group, kws in self.item_level_hints if has_keyword(header, kws)
        )

    def is_item_level(self, header: str) -> bool:
        return bool(self.item_level_groups(header))

    def is_uom_column(self, header: str) -> bool:
        return has_keyword(header, self.uom_column_keywords)

    def uom_header_hits(self, header: str) -> Tuple[str, ...]:
        return tuple(keyword_hits(header, self.uom_header_keywords))


DEFAULT_KEYWORDS = KeywordRules()
