"""
Shared fixtures: small hand-built tables for exact expectations and a
seeded synthetic catalogue for whole-pipeline properties.
"""

from typing import List, Tuple

import numpy as np
import pytest

from pim_hierarchy.core.column_profiler import profile_table


Table = Tuple[List[str], List[list]]


# ---------------------------------------------------------------------
# Synthetic catalogue
# ---------------------------------------------------------------------

CATEGORIES = [
    "Pens", "Pencils", "Markers", "Notebooks", "Binders", "Folders",
    "Envelopes", "Sticky Notes", "Labels", "Staplers", "Tape", "Scissors",
]
SUPPLIERS = ["Acme Office", "Paperworks", "Northwind", "Contoso"]
COLORS = ["blue", "black", "red", "green"]
MATERIALS = ["plastic", "metal", "paper", "cardboard"]


def build_catalogue(n_rows: int = 240, seed: int = 42) -> Table:
    """
    Product master with repeating category/supplier columns, unique ids
    and names, inline-unit measurements, flags and sparse attributes.
    """
    rng = np.random.RandomState(seed)
    headers = [
        "product_id", "product_name", "category_name", "supplier_name",
        "description", "net_weight", "width", "is_active", "color",
        "material", "attr_001", "attr_002",
    ]
    rows = []
    for i in range(n_rows):
        category = CATEGORIES[rng.randint(len(CATEGORIES))]
        supplier = SUPPLIERS[rng.randint(len(SUPPLIERS))]
        rows.append([
            f"P{i:05d}",
            f"{category} item {i}",
            category,
            supplier,
            f"{category} from {supplier}, {rng.randint(1, 500)} pack",
            f"{rng.randint(5, 900)} g",
            f"{round(rng.uniform(10, 300), 1)} mm" if rng.rand() < 0.9 else None,
            "yes" if rng.rand() < 0.8 else "no",
            COLORS[rng.randint(len(COLORS))],
            MATERIALS[rng.randint(len(MATERIALS))] if rng.rand() < 0.95 else "",
            f"value {rng.randint(30)}" if rng.rand() < 0.3 else None,
            float(rng.randint(100)) if rng.rand() < 0.2 else np.nan,
        ])
    return headers, rows


@pytest.fixture
def catalogue() -> Table:
    return build_catalogue()


# ---------------------------------------------------------------------
# Scenario tables
# ---------------------------------------------------------------------

@pytest.fixture
def standalone_table() -> Table:
    """Every column unique, nothing repeats."""
    headers = ["ProductID", "Color", "Weight"]
    rows = [
        ["P001", "Red", "1.5"],
        ["P002", "Blue", "2"],
        ["P003", "Green", "0.5"],
        ["P004", "Black", "3"],
        ["P005", "White", "1"],
    ]
    return headers, rows


@pytest.fixture
def two_level_table() -> Table:
    """100 rows, five categories, unique SKU and Name, four colours."""
    categories = ["Shoes", "Bags", "Hats", "Belts", "Socks"]
    colors = ["Red", "Blue", "Green", "Black"]
    headers = ["Category", "SKU", "Name", "Color"]
    rows = [
        [categories[i % 5], f"SKU-{i:04d}", f"Product {i}", colors[i % 4]]
        for i in range(100)
    ]
    return headers, rows


@pytest.fixture
def three_level_table() -> Table:
    """
    Division > Department > Category nest strictly, Model repeats
    moderately (40 values over 100 rows), SKU and Description are unique.
    """
    headers = ["Division", "Department", "Category", "Model", "SKU", "Description"]
    rows = []
    for i in range(100):
        category = i % 10
        department = category % 4
        division = department % 2
        rows.append([
            f"Div {division}",
            f"Dept {department}",
            f"Cat {category}",
            f"Model {i % 40}",
            f"SKU{i:04d}",
            f"Short text {i}",
        ])
    return headers, rows


@pytest.fixture
def two_level_profile(two_level_table):
    headers, rows = two_level_table
    return profile_table(headers, rows)
