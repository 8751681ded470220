"""
Tests for taxonomy paths, taxonomy trees and their text rendering.
"""

from pim_hierarchy.analysis.taxonomy import (
    UNKNOWN,
    build_custom_taxonomy_tree,
    build_taxonomy_tree,
    generate_taxonomy_paths,
    score_tree_column,
    tree_to_ascii,
)
from pim_hierarchy.core.column_profiler import profile_table
from pim_hierarchy.core.models import TERMINAL_LEVEL_NAME, HierarchyLevel, TaxonomyTreeNode


PARENT = HierarchyLevel(level=1, name="Parent Level", headers=("Brand",), record_id="Category")
TERMINAL = HierarchyLevel(level=2, name=TERMINAL_LEVEL_NAME, headers=(), record_id="SKU")

HEADERS = ["Category", "Brand", "SKU"]
ROWS = [
    ["Shoes", "Nike", "S1"],
    ["Shoes", "Nike", "S2"],
    ["Bags", "Nike", "S3"],
    ["Shoes", "Puma", "S4"],
    ["Bags", "Nike", "S5"],
    ["Shoes", "Nike", "S6"],
]


class TestTaxonomyPaths:

    def test_paths_counted_and_sorted(self, two_level_table):
        headers, rows = two_level_table
        levels = (
            HierarchyLevel(level=1, name="Parent Level", headers=(), record_id="Category"),
            HierarchyLevel(
                level=2, name=TERMINAL_LEVEL_NAME, headers=("Color",), record_id="SKU", record_name="Name"
            ),
        )
        paths = generate_taxonomy_paths(levels, profile_table(headers, rows))

        assert [p.path for p in paths] == [("Shoes",), ("Bags",), ("Hats",), ("Belts",), ("Socks",)]
        assert all(p.product_count == 20 for p in paths)
        assert paths[0].properties == ("SKU", "Name", "Color")

    def test_larger_groups_first(self):
        paths = generate_taxonomy_paths((PARENT, TERMINAL), profile_table(HEADERS, ROWS))
        assert [(p.path, p.product_count) for p in paths] == [(("Shoes",), 4), (("Bags",), 2)]

    def test_blank_values_become_unknown(self):
        rows = ROWS + [[None, "Nike", "S7"]]
        paths = generate_taxonomy_paths((PARENT, TERMINAL), profile_table(HEADERS, rows))
        assert paths[-1].path == (UNKNOWN,)
        assert paths[-1].product_count == 1

    def test_no_parent_levels_no_paths(self):
        single = HierarchyLevel(level=1, name=TERMINAL_LEVEL_NAME, headers=("Category", "Brand"), record_id="SKU")
        assert generate_taxonomy_paths((single,), profile_table(HEADERS, ROWS)) == ()


class TestTaxonomyTree:

    def test_tree_over_parent_columns(self):
        tree = build_taxonomy_tree((PARENT, TERMINAL), profile_table(HEADERS, ROWS))

        assert tree.name == "Root"
        assert tree.product_count == 6
        assert tree.taxonomy_properties == ("Category", "Brand")
        shoes, bags = tree.children
        assert (shoes.name, shoes.level, shoes.product_count) == ("Shoes", 1, 4)
        assert [(c.name, c.product_count) for c in shoes.children] == [("Nike", 3), ("Puma", 1)]
        assert [(c.name, c.product_count) for c in bags.children] == [("Nike", 2)]

    def test_standalone_tree(self):
        single = HierarchyLevel(level=1, name=TERMINAL_LEVEL_NAME, headers=("Category",), record_id="SKU")
        tree = build_taxonomy_tree((single,), profile_table(HEADERS, ROWS))
        assert tree == TaxonomyTreeNode(name="Standalone Products", level=0, product_count=6)

    def test_measurement_columns_never_form_levels(self):
        headers = ["Category", "Weight", "SKU"]
        rows = [["Shoes", "1 kg", "S1"], ["Bags", "2 kg", "S2"]]
        parent = HierarchyLevel(level=1, name="Parent Level", headers=("Weight",), record_id="Category")
        tree = build_taxonomy_tree((parent, TERMINAL), profile_table(headers, rows))
        assert tree.taxonomy_properties == ("Category",)

    def test_name_like_columns_score_higher_than_codes(self):
        profile = profile_table(
            ["Category", "Group Code"],
            [["Shoes", "1001"], ["Bags", "1002"]],
        )
        assert score_tree_column("Category", profile) > score_tree_column("Group Code", profile)

    def test_custom_tree_skips_placeholder_values(self):
        rows = ROWS + [["N/A", "Nike", "S7"], ["Bags", "unknown", "S8"]]
        tree = build_custom_taxonomy_tree(["Category", "Brand"], profile_table(HEADERS, rows))

        assert tree.product_count == 8
        assert [c.name for c in tree.children] == ["Shoes", "Bags"]
        bags = tree.children[1]
        assert bags.product_count == 3
        assert sum(c.product_count for c in bags.children) == 2

    def test_custom_tree_stops_at_unknown_column(self):
        tree = build_custom_taxonomy_tree(["Category", "Nope", "Brand"], profile_table(HEADERS, ROWS))
        assert tree.taxonomy_properties == ("Category", "Nope", "Brand")
        assert all(c.children == () for c in tree.children)


class TestTreeToAscii:

    def test_connectors(self):
        tree = TaxonomyTreeNode(
            name="Root",
            level=0,
            product_count=6,
            children=(
                TaxonomyTreeNode(
                    name="Shoes",
                    level=1,
                    product_count=4,
                    children=(
                        TaxonomyTreeNode(name="Nike", level=2, product_count=3),
                        TaxonomyTreeNode(name="Puma", level=2, product_count=1),
                    ),
                ),
                TaxonomyTreeNode(
                    name="Bags",
                    level=1,
                    product_count=2,
                    children=(TaxonomyTreeNode(name="Nike", level=2, product_count=2),),
                ),
            ),
        )
        assert tree_to_ascii(tree) == (
            "├── Shoes (4 products)\n"
            "│   ├── Nike (3 products)\n"
            "│   └── Puma (1 products)\n"
            "└── Bags (2 products)\n"
            "    └── Nike (2 products)\n"
        )

    def test_named_root_gets_a_line(self):
        node = TaxonomyTreeNode(name="Standalone Products", level=0, product_count=5)
        assert tree_to_ascii(node) == "Standalone Products (5 products)\n"
