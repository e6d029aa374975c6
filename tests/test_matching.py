"""
Tests for fit evaluation, ranking and the matching pipeline.

Tests cover:
- Verdict thresholds and policy variants
- Tolerance clamping
- Per-diameter reduction and top-N ranking
- Presentation order
- End-to-end matching, including empty and malformed input
"""

import pytest

from airwayfit.catalog.loader import load_catalogs
from airwayfit.matching.evaluator import (
    classify_gap,
    clamp_tolerance,
    compute_gap,
    evaluate_fit,
    evaluate_pair,
)
from airwayfit.matching.pipeline import choose_sad_record, run_match
from airwayfit.matching.ranking import best_per_diameter, select_ranked, top_by_diameter
from airwayfit.models.outputs import NO_CANDIDATES_MESSAGE, CanonicalKey, Verdict
from airwayfit.models.policy import GroupBy, MatchPolicy, Selection
from airwayfit.models.records import Catalogs, DeviceRecord


def _pairs(results):
    return [(r.ett_inner_mm, r.outer_mm) for r in results]


@pytest.fixture
def narrow_lumen_etts() -> list[DeviceRecord]:
    """One tube family whose two largest sizes do not pass a 9.0 mm lumen."""
    return [
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=7.5, external_mm=10.2),
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=7.0, external_mm=9.5),
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=6.5, external_mm=8.9),
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=6.0, external_mm=8.2),
    ]


@pytest.fixture
def wide_sad() -> DeviceRecord:
    """A SAD every ranking tube passes comfortably."""
    return DeviceRecord(name="Wide", manufacturer="Acme", internal_mm=12.0, size="Size 4")


# =============================================================================
# Test: Fit Evaluation
# =============================================================================

class TestClassifyGap:
    """Test the verdict thresholds."""

    @pytest.mark.parametrize("gap,tolerance,expected", [
        (0.6, 0.5, Verdict.FIT),
        (0.5, 0.5, Verdict.FIT),
        (0.4, 0.5, Verdict.TIGHT),
        (0.0, 0.5, Verdict.TIGHT),
        (-0.1, 0.5, Verdict.NO_FIT),
        (0.0, 0.0, Verdict.FIT),
        (-0.01, 0.0, Verdict.NO_FIT),
        (3.0, 2.0, Verdict.FIT),
    ])
    def test_default_thresholds(self, gap, tolerance, expected):
        assert classify_gap(gap, tolerance) == expected

    def test_unknown_gap(self):
        assert classify_gap(None, 0.5) == Verdict.UNKNOWN
        assert classify_gap(float("nan"), 0.5) == Verdict.UNKNOWN

    def test_strict_tolerance_has_no_tight_state(self):
        policy = MatchPolicy(strict_tolerance=True)

        assert classify_gap(0.4, 0.5, policy) == Verdict.NO_FIT
        assert classify_gap(0.5, 0.5, policy) == Verdict.FIT

    def test_exclusive_boundary(self):
        policy = MatchPolicy(inclusive_boundary=False)

        assert classify_gap(0.5, 0.5, policy) == Verdict.TIGHT
        assert classify_gap(0.51, 0.5, policy) == Verdict.FIT

    def test_negative_tolerance_clamped(self):
        assert clamp_tolerance(-1.0) == 0.0
        assert clamp_tolerance(None) == 0.0
        assert classify_gap(0.0, -1.0) == Verdict.FIT


class TestEvaluateFit:
    """Test parsing plus classification."""

    def test_scenario_gaps(self):
        """10.0 mm lumen, 0.5 mm tolerance against three tube ODs."""
        results = [evaluate_fit(10.0, od, 0.5) for od in (9.6, 9.4, 10.1)]

        assert [v for _, v in results] == [Verdict.TIGHT, Verdict.FIT, Verdict.NO_FIT]
        assert [g for g, _ in results] == pytest.approx([0.4, 0.6, -0.1])

    def test_unparseable_diameter_is_unknown_not_no_fit(self):
        assert evaluate_fit("n/a", 9.0, 0.5) == (None, Verdict.UNKNOWN)
        assert evaluate_fit(10.0, "abc", 0.5) == (None, Verdict.UNKNOWN)

    def test_text_diameters(self):
        gap, verdict = evaluate_fit("10 mm", "9.0", 0.5)

        assert gap == pytest.approx(1.0)
        assert verdict == Verdict.FIT

    def test_gap_rounding_keeps_boundary_inclusive(self):
        assert compute_gap(9.3, 8.8) == 0.5
        assert classify_gap(compute_gap(9.3, 8.8), 0.5) == Verdict.FIT

    def test_evaluate_pair(self, wide_sad):
        ett = DeviceRecord(name="Hi-Lo", internal_mm="7.5", external_mm=10.2)

        result = evaluate_pair(wide_sad, ett, MatchPolicy(tolerance_mm=2.0))

        assert result.inner_mm == 12.0
        assert result.ett_inner_mm == 7.5
        assert result.gap_mm == pytest.approx(1.8)
        assert result.verdict == Verdict.TIGHT
        assert result.tolerance_mm == 2.0


# =============================================================================
# Test: Ranking
# =============================================================================

class TestRanking:
    """Test per-group reduction and ordering."""

    def test_best_per_diameter_then_top_two(self, wide_sad, ranking_etts):
        results = [evaluate_pair(wide_sad, e) for e in ranking_etts]

        selected = select_ranked(results, MatchPolicy(best_per_diameter=True, max_per_group=2))

        assert _pairs(selected) == [(7.5, 9.8), (7.0, 9.0)]

    def test_without_per_diameter_reduction(self, wide_sad, ranking_etts):
        results = [evaluate_pair(wide_sad, e) for e in ranking_etts]

        selected = select_ranked(results, MatchPolicy(best_per_diameter=False, max_per_group=2))

        assert _pairs(selected) == [(7.5, 9.8), (7.5, 10.2)]

    def test_uncapped(self, wide_sad, ranking_etts):
        results = [evaluate_pair(wide_sad, e) for e in ranking_etts]

        selected = select_ranked(results, MatchPolicy(best_per_diameter=False, max_per_group=None))

        assert _pairs(selected) == [(7.5, 9.8), (7.5, 10.2), (7.0, 9.0)]

    def test_cap_of_one(self, wide_sad, ranking_etts):
        results = [evaluate_pair(wide_sad, e) for e in ranking_etts]

        selected = select_ranked(results, MatchPolicy(max_per_group=1))

        assert _pairs(selected) == [(7.5, 9.8)]

    def test_helpers(self, wide_sad, ranking_etts):
        results = [evaluate_pair(wide_sad, e) for e in ranking_etts]

        assert _pairs(best_per_diameter(results)) == [(7.5, 9.8), (7.0, 9.0)]
        assert _pairs(top_by_diameter(results, 1)) == [(7.5, 9.8)]

    def test_hide_non_fitting(self, sample_sads, scenario_etts):
        sad = sample_sads[0]
        results = [evaluate_pair(sad, e) for e in scenario_etts]

        shown = select_ranked(results, MatchPolicy(show_non_fitting=True))
        hidden = select_ranked(results, MatchPolicy(show_non_fitting=False))

        assert [r.ett.name for r in shown] == ["Tube A", "Tube B", "Tube C"]
        assert [r.ett.name for r in hidden] == ["Tube A", "Tube B"]

    def test_group_by_category(self, sample_sads, scenario_etts):
        sad = sample_sads[0]
        results = [evaluate_pair(sad, e) for e in scenario_etts]

        selected = select_ranked(results, MatchPolicy(group_by=GroupBy.CATEGORY, max_per_group=1))

        assert [(r.ett.type, r.ett.name) for r in selected] == [
            ("cuffed", "Tube A"),
            ("standard", "Tube C"),
        ]

    def test_non_fitting_rows_do_not_use_up_cap(self, narrow_lumen_etts):
        sad = DeviceRecord(name="Narrow", manufacturer="Acme", internal_mm=9.0)
        results = [evaluate_pair(sad, e) for e in narrow_lumen_etts]

        selected = select_ranked(results, MatchPolicy(max_per_group=2))

        assert [(r.ett_inner_mm, r.verdict) for r in selected] == [
            (7.5, Verdict.NO_FIT),
            (7.0, Verdict.NO_FIT),
            (6.5, Verdict.TIGHT),
            (6.0, Verdict.FIT),
        ]

    def test_cap_applies_to_passing_rows(self, narrow_lumen_etts):
        sad = DeviceRecord(name="Narrow", manufacturer="Acme", internal_mm=9.0)
        results = [evaluate_pair(sad, e) for e in narrow_lumen_etts]

        shown = select_ranked(results, MatchPolicy(max_per_group=1))
        hidden = select_ranked(results, MatchPolicy(max_per_group=1, show_non_fitting=False))

        assert [r.ett_inner_mm for r in shown] == [7.5, 7.0, 6.5]
        assert [r.ett_inner_mm for r in hidden] == [6.5]

    def test_presentation_order_is_total(self, wide_sad):
        etts = [
            DeviceRecord(name="beta", manufacturer="Z", internal_mm=7.0, external_mm=9.0),
            DeviceRecord(name="Alpha", manufacturer="Y", internal_mm=6.0, external_mm=8.0),
            DeviceRecord(name="Alpha", manufacturer="X", internal_mm=7.0, external_mm=9.5),
            DeviceRecord(name="Alpha", manufacturer="W", internal_mm=7.0, external_mm=9.1),
        ]
        results = [evaluate_pair(wide_sad, e) for e in etts]
        policy = MatchPolicy(best_per_diameter=False, max_per_group=None)

        first = select_ranked(results, policy)
        second = select_ranked(list(reversed(results)), policy)

        expected = [("Alpha", 7.0, 9.1), ("Alpha", 7.0, 9.5), ("Alpha", 6.0, 8.0), ("beta", 7.0, 9.0)]
        assert [(r.ett.name, r.ett_inner_mm, r.outer_mm) for r in first] == expected
        assert [(r.ett.name, r.ett_inner_mm, r.outer_mm) for r in second] == expected


# =============================================================================
# Test: Pipeline
# =============================================================================

class TestRunMatch:
    """End-to-end tests for run_match."""

    def test_scenario_verdicts(self, scenario_catalogs, auragain_key):
        selection = Selection(brand=auragain_key, size=4)

        view = run_match(scenario_catalogs, selection, MatchPolicy(tolerance_mm=0.5))

        verdicts = {row.model: row.verdict for row in view.rows}
        assert verdicts == {
            "Tube A": Verdict.TIGHT,
            "Tube B": Verdict.FIT,
            "Tube C": Verdict.NO_FIT,
        }
        assert view.sad_inner_mm == 10.0
        assert view.tolerance_mm == 0.5
        assert not view.empty
        assert view.message is None

    def test_row_formatting(self, scenario_catalogs, auragain_key):
        view = run_match(scenario_catalogs, Selection(brand=auragain_key, size=4))

        row = next(r for r in view.rows if r.model == "Tube A")
        assert row.size_label == "7.0"
        assert row.outer_label == "9.60"
        assert row.gap_mm == pytest.approx(0.4)
        assert row.manufacturer == "Acme"
        assert row.type == "cuffed"

    def test_tolerance_change_recomputes(self, scenario_catalogs, auragain_key):
        selection = Selection(brand=auragain_key, size=4)

        view = run_match(scenario_catalogs, selection, MatchPolicy(tolerance_mm=0.0))

        verdicts = {row.model: row.verdict for row in view.rows}
        assert verdicts["Tube A"] == Verdict.FIT

    def test_no_candidates_signal(self, scenario_catalogs, auragain_key):
        selection = Selection(brand=auragain_key, size=3)  # 8.0 mm lumen

        view = run_match(scenario_catalogs, selection, MatchPolicy(show_non_fitting=False))

        assert view.rows == []
        assert view.empty
        assert view.message == NO_CANDIDATES_MESSAGE

    def test_passing_tube_below_failing_sizes_is_not_empty(self, narrow_lumen_etts):
        sads = [DeviceRecord(name="Narrow", manufacturer="Acme", internal_mm=9.0, size=3)]
        catalogs = Catalogs(sads=sads, etts=narrow_lumen_etts)

        view = run_match(catalogs, Selection(brand=CanonicalKey(name="narrow", manufacturer="acme"), size=3))

        assert not view.empty
        assert view.message is None
        assert {r.size_mm: r.verdict for r in view.rows} == {
            7.5: Verdict.NO_FIT,
            7.0: Verdict.NO_FIT,
            6.5: Verdict.TIGHT,
            6.0: Verdict.FIT,
        }

    def test_packaged_catalog_default_policy_finds_passing_tubes(self):
        selection = Selection(brand=CanonicalKey(name="i-gel", manufacturer="intersurgical"), size=3)

        view = run_match(load_catalogs(), selection, MatchPolicy())

        assert not view.empty
        passing = {(r.model, r.size_mm) for r in view.rows if r.verdict in (Verdict.FIT, Verdict.TIGHT)}
        assert ("Mallinckrodt Hi-Lo Oral/Nasal Tracheal Tube", 6.5) in passing
        assert ("Rüsch Super Safety Clear", 6.0) in passing

    def test_ett_name_filter(self, scenario_catalogs, auragain_key):
        selection = Selection(brand=auragain_key, size=4, ett_names=["tube a"])

        view = run_match(scenario_catalogs, selection)

        assert [r.model for r in view.rows] == ["Tube A"]

    def test_smallest_lumen_used_across_records(self, auragain_key, scenario_etts):
        sads = [
            DeviceRecord(name="AuraGain", manufacturer="Ambu", internal_mm=10.0, size=4),
            DeviceRecord(name="AuraGain", manufacturer="Ambu", internal_mm=9.5, size=4),
        ]

        view = run_match(Catalogs(sads=sads, etts=scenario_etts), Selection(brand=auragain_key, size=4))

        assert view.sad_inner_mm == 9.5
        assert any("smallest inner diameter" in n for n in view.notes)

    def test_unknown_sad_diameter(self, auragain_key, scenario_etts):
        sads = [DeviceRecord(name="AuraGain", manufacturer="Ambu", internal_mm="n/a", size=4)]
        catalogs = Catalogs(sads=sads, etts=scenario_etts)

        shown = run_match(catalogs, Selection(brand=auragain_key, size=4))
        hidden = run_match(catalogs, Selection(brand=auragain_key, size=4), MatchPolicy(show_non_fitting=False))

        assert {r.verdict for r in shown.rows} == {Verdict.UNKNOWN}
        assert shown.empty
        assert any("verdicts are unknown" in w for w in shown.warnings)
        assert hidden.rows == []

    def test_malformed_ett_excluded(self, scenario_catalogs, auragain_key):
        etts = scenario_catalogs.etts + [
            DeviceRecord(name="Broken", internal_mm="abc", external_mm=9.0),
            DeviceRecord(name="No OD", internal_mm=6.0, external_mm=None),
        ]
        catalogs = Catalogs(sads=scenario_catalogs.sads, etts=etts)

        view = run_match(catalogs, Selection(brand=auragain_key, size=4))

        models = {r.model: r.verdict for r in view.rows}
        assert "Broken" not in models
        assert models["No OD"] == Verdict.UNKNOWN

    def test_worst_case_rows(self, scenario_catalogs, auragain_key):
        view = run_match(scenario_catalogs, Selection(brand=auragain_key, size=4))

        worst = {w.size_mm: w.verdict for w in view.worst_case}
        assert worst == {6.5: Verdict.FIT, 7.0: Verdict.TIGHT, 7.5: Verdict.NO_FIT}

    def test_unknown_brand(self, scenario_catalogs):
        view = run_match(scenario_catalogs, Selection(brand=CanonicalKey(name="nope")))

        assert view.rows == []
        assert view.empty
        assert view.notes

    def test_empty_catalogs(self):
        view = run_match(Catalogs(), Selection(brand=CanonicalKey(name="auragain", manufacturer="ambu")))

        assert view.rows == []
        assert view.worst_case == []
        assert view.empty
        assert view.message == NO_CANDIDATES_MESSAGE

    def test_geometry_warning_always_present(self):
        view = run_match(Catalogs(), Selection(brand=CanonicalKey(name="x")))

        assert any("NOT a clinical recommendation" in w for w in view.warnings)

    def test_choose_sad_record(self):
        records = [
            DeviceRecord(name="A", internal_mm="n/a"),
            DeviceRecord(name="B", internal_mm=11.0),
            DeviceRecord(name="C", internal_mm="10.5 mm"),
        ]

        assert choose_sad_record(records).name == "C"
        assert choose_sad_record(records[:1]).name == "A"
        assert choose_sad_record([]) is None
