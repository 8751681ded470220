"""
End-to-end tests for HierarchyEngine / analyze().

Scenario tests pin exact outcomes on small tables; the property tests run
on the seeded synthetic catalogue and a set of threshold variations.
"""

import json

import pytest

from pim_hierarchy import (
    AnalysisConfig,
    HierarchyEngine,
    ValidationError,
    analyze,
    map_properties_to_hierarchy,
    tree_to_ascii,
)
from pim_hierarchy.core.hierarchy import effective_min_members
from pim_hierarchy.core.models import TERMINAL_LEVEL_NAME

from conftest import build_catalogue


CONFIG_VARIANTS = [
    AnalysisConfig(),
    AnalysisConfig(min_properties_per_level=1),
    AnalysisConfig(min_properties_per_level=2, sku_threshold=0.9),
    AnalysisConfig(children_min=0.3, children_max=0.9),
    AnalysisConfig(forced_sku_headers=("category_name",)),
]


class TestScenarios:

    def test_standalone(self, standalone_table):
        headers, rows = standalone_table
        result = analyze(headers, rows)

        assert len(result.hierarchy) == 1
        level = result.hierarchy[0]
        assert level.name == TERMINAL_LEVEL_NAME
        assert level.record_id == "ProductID"
        assert result.confidence <= 0.6
        assert result.model_type == "standalone"
        assert result.taxonomy_paths == ()
        assert result.taxonomy_tree.name == "Standalone Products"

    def test_two_level(self, two_level_table):
        headers, rows = two_level_table
        result = analyze(headers, rows)

        assert len(result.hierarchy) == 2
        parent, terminal = result.hierarchy
        assert parent.record_id == "Category"
        assert terminal.record_id == "SKU"
        assert terminal.record_name == "Name"
        assert "Color" in terminal.headers
        assert result.properties == ("Color",)
        assert result.record_id_suggestion == "SKU"
        assert result.record_name_suggestion == "Name"
        assert result.model_type == "parent_variant"
        assert result.confidence == 0.75

    def test_uom_split(self):
        headers = ["SKU", "Weight"]
        rows = [[f"S{i}", f"{i + 1}kg"] for i in range(12)]
        result = analyze(headers, rows)

        weight = [s for s in result.uom_suggestions if s.header == "Weight"]
        assert len(weight) == 1
        assert weight[0].detected_uom == "kg"
        assert weight[0].suggested_split
        assert len(weight[0].suggested_conversions) >= 1

    def test_orphaned_row(self, two_level_table):
        headers, rows = two_level_table
        rows[10][0] = None
        result = analyze(headers, rows)

        assert result.hierarchy[0].record_id == "Category"
        orphan = [o for o in result.orphaned_records if o.row_index == 10]
        assert len(orphan) == 1
        assert orphan[0].severity == "high"
        assert any("Category" in issue for issue in orphan[0].issues)

    def test_type_inference(self):
        headers = ["SKU", "Active", "Finish"]
        rows = [
            [f"S{i}", ["yes", "no", "yes"][i % 3], ["Matte", "Gloss", "Satin"][i % 3]]
            for i in range(100)
        ]
        result = analyze(headers, rows)
        by_header = {r.header: r for r in result.property_recommendations}

        assert by_header["Active"].data_type == "yes_no"
        assert by_header["Active"].confidence >= 0.9
        assert by_header["Finish"].data_type == "picklist"
        assert set(by_header["Finish"].picklist_values) == {"Matte", "Gloss", "Satin"}

    def test_three_level(self, three_level_table):
        headers, rows = three_level_table
        result = analyze(headers, rows)

        assert result.model_type == "multi_level"
        assert [lv.record_id for lv in result.hierarchy] == ["Division", "Model", "SKU"]
        assert result.confidence == 0.9
        assert len(result.taxonomy_paths) == 40


class TestProperties:
    """Invariants that hold for any input and any configuration."""

    @pytest.fixture(params=range(len(CONFIG_VARIANTS)))
    def analysed(self, request, catalogue):
        headers, rows = catalogue
        config = CONFIG_VARIANTS[request.param]
        return headers, config, analyze(headers, rows, config)

    def test_conservation(self, analysed):
        headers, _, result = analysed
        members = [h for lv in result.hierarchy for h in lv.members]
        assert sorted(members) == sorted(headers)

    def test_mandatory_record_id(self, analysed):
        _, _, result = analysed
        assert result.hierarchy
        assert all(lv.record_id for lv in result.hierarchy)
        for lv in result.hierarchy:
            assert lv.record_id not in lv.headers
            assert lv.record_name is None or lv.record_name not in lv.headers
            assert lv.record_name != lv.record_id

    def test_record_names_unique(self, analysed):
        _, _, result = analysed
        names = [lv.record_name for lv in result.hierarchy if lv.record_name is not None]
        assert len(names) == len(set(names))

    def test_threshold_monotonicity(self, analysed):
        _, config, result = analysed
        terminal = set(result.terminal_level.members)
        for stat in result.column_stats:
            if stat.total_count and stat.cardinality >= config.sku_threshold:
                assert stat.header in terminal
        for header in config.forced_sku_headers:
            assert header in terminal

    def test_consolidation_floor(self, analysed):
        headers, config, result = analysed
        floor = effective_min_members(config, len(headers))
        for lv in result.hierarchy[:-1]:
            assert lv.member_count >= floor
        if len(set(headers)) >= 2 * config.min_properties_per_level:
            for lv in result.hierarchy[:-1]:
                assert lv.member_count >= config.min_properties_per_level

    def test_at_most_three_levels(self, analysed):
        _, _, result = analysed
        assert 1 <= len(result.hierarchy) <= 3
        assert result.hierarchy[-1].name == TERMINAL_LEVEL_NAME
        assert [lv.level for lv in result.hierarchy] == list(range(1, len(result.hierarchy) + 1))

    def test_confidence_range(self, analysed):
        _, _, result = analysed
        assert 0.0 <= result.confidence <= 0.95

    def test_orphan_cap(self, analysed):
        _, _, result = analysed
        assert len(result.orphaned_records) <= 50
        indices = [o.row_index for o in result.orphaned_records]
        assert indices == sorted(indices)


class TestEngineBehaviour:

    def test_idempotent(self, catalogue):
        headers, rows = catalogue
        engine = HierarchyEngine()
        assert engine.analyze(headers, rows) == engine.analyze(headers, rows)

    def test_same_seed_same_result(self):
        first = analyze(*build_catalogue(seed=7))
        second = analyze(*build_catalogue(seed=7))
        assert first == second

    def test_dict_config(self, two_level_table):
        headers, rows = two_level_table
        result = analyze(headers, rows, {"minPropertiesPerLevel": 3, "skuThreshold": 0.95})
        assert result.config.min_properties_per_level == 3
        assert result.config.sku_threshold == 0.95

    def test_with_config_returns_new_engine(self, two_level_table):
        headers, rows = two_level_table
        engine = HierarchyEngine()
        forced = engine.with_config(forced_sku_headers=("Category",))

        assert engine.config.forced_sku_headers == ()
        assert len(engine.analyze(headers, rows).hierarchy) == 2
        assert len(forced.analyze(headers, rows).hierarchy) == 1

    def test_ragged_rows_raise(self):
        with pytest.raises(ValidationError) as exc_info:
            analyze(["A", "B"], [["1", "2"], ["3", "4"], ["5"]])
        assert exc_info.value.row_index == 2

    def test_repeated_header_follows_its_unique_column(self):
        headers = ["Category", "SKU", "Category"]
        rows = [[f"Cat {i % 4}", f"S{i:03d}", f"C-{i}"] for i in range(20)]
        result = analyze(headers, rows)

        assert "Category" in result.terminal_level.members
        assert all(lv.record_id != "Category" for lv in result.hierarchy[:-1])
        for stat in result.column_stats:
            if stat.cardinality >= result.config.sku_threshold:
                assert stat.header in result.terminal_level.members

    def test_zero_rows(self):
        result = analyze(["SKU", "Name"], [])
        assert len(result.hierarchy) == 1
        assert result.confidence == 0.3
        assert result.orphaned_records == ()
        assert result.taxonomy_paths == ()

    def test_zero_headers(self):
        result = analyze([], [])
        assert result.hierarchy == ()
        assert result.properties == ()
        assert result.record_id_suggestion is None
        assert result.confidence == 0.3

    def test_trace_covers_every_stage(self, two_level_table):
        headers, rows = two_level_table
        result = analyze(headers, rows)
        stages = {e.stage for e in result.trace}
        assert {
            "profile", "domain", "level_classifier", "hierarchy", "record_identity",
            "conservation", "engine", "property_types", "orphaned_records",
            "taxonomy", "presets", "data_quality",
        } <= stages
        assert result.trace_for("conservation")[0].message == "All columns placed exactly once"

    def test_to_dict_is_json_serialisable(self, catalogue):
        headers, rows = catalogue
        payload = analyze(headers, rows).to_dict()
        text = json.dumps(payload)
        assert '"hierarchy"' in text
        assert payload["config"]["sku_threshold"] == 0.98
        assert payload["record_id_suggestion"] == "product_id"

    def test_custom_taxonomy_tree(self, two_level_table):
        headers, rows = two_level_table
        tree = HierarchyEngine().custom_taxonomy_tree(headers, rows, ["Category", "Color"])
        assert tree.product_count == 100
        assert len(tree.children) == 5
        assert tree.taxonomy_properties == ("Category", "Color")


class TestReportHelpers:

    def test_property_mapping(self, two_level_table):
        headers, rows = two_level_table
        result = analyze(headers, rows)
        mapping = {m.property_name: m for m in map_properties_to_hierarchy(result)}

        assert set(mapping) == set(headers)
        assert mapping["Category"].belongs_to_level == "Parent Level"
        assert mapping["Color"].belongs_to_level == TERMINAL_LEVEL_NAME
        assert mapping["Color"].data_type == "picklist"
        assert mapping["Color"].is_picklist

    def test_ascii_tree(self, two_level_table):
        headers, rows = two_level_table
        text = tree_to_ascii(analyze(headers, rows).taxonomy_tree)
        lines = text.splitlines()
        assert len(lines) == 5
        assert lines[0] == "├── Shoes (20 products)"
        assert lines[-1] == "└── Socks (20 products)"
