"""
Tests for Pydantic models.

Tests record defaults, policy validation, and JSON serialization.
"""

import pytest
from pydantic import ValidationError

from airwayfit.models.outputs import CanonicalKey, MatchView, ResultRow, Verdict
from airwayfit.models.policy import GroupBy, MatchPolicy, Selection, load_policy
from airwayfit.models.records import DEFAULT_ETT_TYPE, DeviceRecord


class TestDeviceRecord:
    """Tests for DeviceRecord model."""

    def test_minimal_record(self):
        record = DeviceRecord(name="Hi-Lo")

        assert record.manufacturer is None
        assert record.internal_mm is None
        assert record.type == DEFAULT_ETT_TYPE

    def test_absent_name_becomes_empty(self):
        assert DeviceRecord(name=None).name == ""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_type_defaults(self, value):
        assert DeviceRecord(name="Hi-Lo", type=value).type == DEFAULT_ETT_TYPE

    def test_malformed_diameter_kept_raw(self):
        record = DeviceRecord(name="Hi-Lo", internal_mm="seven", external_mm=[1, 2])

        assert record.internal_mm == "seven"
        assert record.external_mm == [1, 2]

    def test_frozen(self):
        record = DeviceRecord(name="Hi-Lo")

        with pytest.raises(ValidationError):
            record.name = "Other"


class TestMatchPolicy:
    """Tests for MatchPolicy model."""

    def test_defaults(self):
        policy = MatchPolicy()

        assert policy.tolerance_mm == 0.5
        assert policy.inclusive_boundary is True
        assert policy.strict_tolerance is False
        assert policy.show_non_fitting is True
        assert policy.best_per_diameter is True
        assert policy.max_per_group == 2
        assert policy.group_by == GroupBy.ETT_NAME

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValidationError):
            MatchPolicy(tolerance_mm=-0.1)

    def test_zero_cap_rejected(self):
        with pytest.raises(ValidationError):
            MatchPolicy(max_per_group=0)

    def test_unknown_group_rejected(self):
        with pytest.raises(ValidationError):
            MatchPolicy(group_by="brand")

    def test_group_by_from_string(self):
        assert MatchPolicy(group_by="category").group_by == GroupBy.CATEGORY

    def test_load_policy(self, write_json):
        path = write_json("policy.json", {"tolerance_mm": 1.0, "max_per_group": None})

        policy = load_policy(path)

        assert policy.tolerance_mm == 1.0
        assert policy.max_per_group is None

    def test_json_roundtrip(self):
        policy = MatchPolicy(tolerance_mm=0.25, group_by=GroupBy.CATEGORY)

        assert MatchPolicy.model_validate_json(policy.model_dump_json()) == policy


class TestOutputs:
    """Tests for output models."""

    def test_canonical_key_hashable(self):
        keys = {CanonicalKey(name="i-gel", manufacturer="intersurgical") for _ in range(3)}

        assert len(keys) == 1

    def test_selection_defaults(self):
        selection = Selection(brand=CanonicalKey(name="i-gel"))

        assert selection.size is None
        assert selection.ett_names == []

    def test_row_labels(self):
        row = ResultRow(
            size_mm=7.0, type="cuffed", outer_diameter_mm=10.2,
            model="Hi-Lo", manufacturer="Medtronic", verdict=Verdict.TIGHT,
        )

        assert row.size_label == "7.0"
        assert row.outer_label == "10.20"

    def test_missing_values_render_as_dash(self):
        row = ResultRow(type="standard", model="Hi-Lo", manufacturer="", verdict=Verdict.UNKNOWN)

        assert row.size_label == "-"
        assert row.outer_label == "-"

    def test_verdict_serializes_to_value(self):
        view = MatchView(rows=[
            ResultRow(size_mm=7.0, type="cuffed", model="Hi-Lo", manufacturer="", verdict=Verdict.NO_FIT),
        ])

        assert view.model_dump(mode="json")["rows"][0]["verdict"] == "no-fit"
