"""
Tests for Record ID / Record Name selection.
"""

import math

import pytest

from pim_hierarchy.core.column_profiler import profile_table
from pim_hierarchy.core.keywords import DEFAULT_KEYWORDS
from pim_hierarchy.core.models import TERMINAL_LEVEL_NAME
from pim_hierarchy.core.record_identity import (
    assign_identities,
    score_record_name,
    select_record_id,
    select_record_name,
)
from pim_hierarchy.core.trace import Trace


RULES = DEFAULT_KEYWORDS


@pytest.fixture
def wide_profile():
    headers = [
        "EAN", "SKU", "Name", "Title", "Weight", "Pallet Qty", "Colour",
        "Group", "MATNR", "L2", "Category", "Category Code", "Description",
        "Brand", "Product Code",
    ]
    rows = []
    for i in range(50):
        rows.append([
            f"40000{i:05d}",
            f"SKU-{i:03d}",
            f"Product {i}",
            f"Title {i}",
            f"{i + 1} kg",
            str(i % 3 + 1),
            ["Red", "Blue"][i % 2],
            str(i + 1),
            f"A{i}",
            f"L2-{i}",
            f"Cat {i % 5}",
            f"C{i % 5}",
            f"Short text {i}",
            f"Brand {i % 7}",
            f"P{i:04d}",
        ])
    return profile_table(headers, rows)


class TestSelectRecordId:

    def test_terminal_prefers_sku_over_earlier_ean(self, wide_profile):
        record_id, reason = select_record_id(
            ["EAN", "SKU", "Name"], wide_profile, RULES, terminal=True
        )
        assert record_id == "SKU"
        assert "sku" in reason

    def test_terminal_falls_to_next_identifier_group(self, wide_profile):
        record_id, _ = select_record_id(["Name", "EAN"], wide_profile, RULES, terminal=True)
        assert record_id == "EAN"

    def test_taxonomy_level_code_first(self, wide_profile):
        record_id, reason = select_record_id(
            ["Category", "L2"], wide_profile, RULES, terminal=False
        )
        assert record_id == "L2"
        assert reason == "taxonomy level code"

    def test_numeric_code(self, wide_profile):
        record_id, reason = select_record_id(["Title", "Group"], wide_profile, RULES, terminal=False)
        assert (record_id, reason) == ("Group", "numeric code")

    def test_short_code_column(self, wide_profile):
        record_id, reason = select_record_id(["Title", "MATNR"], wide_profile, RULES, terminal=False)
        assert (record_id, reason) == ("MATNR", "short code column")

    def test_uniqueness_is_measured_against_level_grain(self, wide_profile):
        members = ["Category", "Category Code"]
        grain = wide_profile.grain_count(members)
        assert grain == 5

        record_id, reason = select_record_id(
            members, wide_profile, RULES, terminal=False, grain=grain
        )
        assert (record_id, reason) == ("Category Code", "identifier column")

        # Against plain cardinality the code column repeats
        _, reason = select_record_id(members, wide_profile, RULES, terminal=False)
        assert reason == "identifier column (uniqueness relaxed)"

    def test_exclusions_are_skipped(self, wide_profile):
        record_id, reason = select_record_id(
            ["Weight", "Colour"], wide_profile, RULES, terminal=False
        )
        assert (record_id, reason) == ("Colour", "first eligible column")

    def test_reserved_name_is_skipped(self, wide_profile):
        record_id, _ = select_record_id(
            ["MATNR", "Product Code"], wide_profile, RULES,
            terminal=False, reserved_names=["MATNR"],
        )
        assert record_id == "Product Code"

    def test_always_returns_a_column(self, wide_profile):
        record_id, reason = select_record_id(["Weight", "Description"], wide_profile, RULES, terminal=False)
        assert record_id == "Weight"
        assert reason == "first column"

    def test_empty_candidates_raise(self, wide_profile):
        with pytest.raises(ValueError):
            select_record_id([], wide_profile, RULES, terminal=True)


class TestRecordName:

    def test_exact_name_beats_keywords(self, wide_profile):
        assert score_record_name("Name", wide_profile, RULES) == 100
        assert score_record_name("Title", wide_profile, RULES) == 40
        assert score_record_name("Brand", wide_profile, RULES) == 30

    def test_description_length_penalty(self, wide_profile):
        score = score_record_name("Description", wide_profile, RULES)
        assert 40 < score < 50

    def test_excluded_columns_score_negative(self, wide_profile):
        assert score_record_name("Weight", wide_profile, RULES) < 0
        assert score_record_name("Product Code", wide_profile, RULES) < 0

    def test_reserved_is_minus_infinity(self, wide_profile):
        assert score_record_name("Name", wide_profile, RULES, ["Name"]) == -math.inf

    def test_select_best_positive(self, wide_profile):
        name = select_record_name(["Brand", "Title", "Name", "SKU"], wide_profile, RULES, record_id="SKU")
        assert name == "Name"

    def test_no_suitable_name_stays_unset(self, wide_profile):
        assert select_record_name(["Weight", "Pallet Qty", "EAN"], wide_profile, RULES) is None

    def test_reserved_name_is_never_reused(self, wide_profile):
        name = select_record_name(["Name", "Title"], wide_profile, RULES, reserved_names=["Name"])
        assert name == "Title"

    def test_record_id_is_never_the_name(self, wide_profile):
        assert select_record_name(["Name"], wide_profile, RULES, record_id="Name") is None


class TestAssignIdentities:

    def test_levels_numbered_and_identities_removed_from_headers(self, wide_profile):
        trace = Trace()
        levels = assign_identities(
            [
                ("Parent Level", ["Category", "Category Code", "Brand"]),
                (TERMINAL_LEVEL_NAME, ["EAN", "SKU", "Name", "Weight"]),
            ],
            wide_profile,
            RULES,
            phase="provisional",
            trace=trace,
        )
        parent, terminal = levels
        assert (parent.level, terminal.level) == (1, 2)
        assert parent.record_id == "Category Code"
        assert parent.record_name == "Brand"
        assert parent.headers == ("Category",)

        assert terminal.record_id == "SKU"
        assert terminal.record_name == "Name"
        assert terminal.headers == ("EAN", "Weight")
        assert terminal.members == ("SKU", "Name", "EAN", "Weight")

        messages = [e.message for e in trace.entries()]
        assert messages == ["provisional: level 1 identity", "provisional: level 2 identity"]

    def test_names_are_unique_across_levels(self, wide_profile):
        levels = assign_identities(
            [("Parent Level", ["Category", "Title"]), (TERMINAL_LEVEL_NAME, ["SKU", "Title"])],
            wide_profile,
            RULES,
        )
        names = [lv.record_name for lv in levels if lv.record_name is not None]
        assert names == ["Title"]
