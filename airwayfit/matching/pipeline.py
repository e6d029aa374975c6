"""
Matching pipeline.

One explicit, pure transform:

    (catalogs, selection, policy) -> MatchView

The host decides when to call it (new catalog, new selection, new tolerance)
and gets a fully recomputed view back each time. Nothing is cached between
calls.

WARNING: Geometric fit only. NOT a clinical recommendation.
"""

import logging
from typing import Optional

from airwayfit.canonical.normalizer import canonical_name, display_manufacturer, display_name
from airwayfit.canonical.rules import CanonicalRules
from airwayfit.canonical.sizes import parse_diameter
from airwayfit.catalog.index import find_brand_group, worst_case_outer_diameters
from airwayfit.matching.evaluator import (
    DEFAULT_POLICY,
    classify_gap,
    clamp_tolerance,
    compute_gap,
    evaluate_pair,
)
from airwayfit.matching.ranking import PASSING_VERDICTS, select_ranked
from airwayfit.models.outputs import (
    GEOMETRY_ONLY_WARNING,
    NO_CANDIDATES_MESSAGE,
    FitResult,
    MatchView,
    ResultRow,
    WorstCaseRow,
)
from airwayfit.models.policy import MatchPolicy, Selection
from airwayfit.models.records import Catalogs, DeviceRecord


logger = logging.getLogger(__name__)


def choose_sad_record(candidates: list[DeviceRecord]) -> Optional[DeviceRecord]:
    """
    Pick the SAD record whose lumen is used for matching.

    When several records share a brand and size, the smallest reported inner
    diameter is used. If none parses, the first record is returned and every
    verdict comes out unknown.
    """
    if not candidates:
        return None
    parsed = [(parse_diameter(r.internal_mm), i, r) for i, r in enumerate(candidates)]
    usable = [p for p in parsed if p[0] is not None]
    if not usable:
        return candidates[0]
    return min(usable, key=lambda p: (p[0], p[1]))[2]


def to_row(result: FitResult, rules: Optional[CanonicalRules] = None) -> ResultRow:
    """Presentation row for one fit result."""
    return ResultRow(
        size_mm=None if result.ett_inner_mm is None else round(result.ett_inner_mm, 1),
        type=result.ett.type,
        outer_diameter_mm=None if result.outer_mm is None else round(result.outer_mm, 2),
        model=display_name(result.ett.name, rules),
        manufacturer=display_manufacturer(result.ett.manufacturer, rules),
        verdict=result.verdict,
        gap_mm=None if result.gap_mm is None else round(result.gap_mm, 2),
    )


def _finish(view: MatchView, results: Optional[list[FitResult]] = None) -> MatchView:
    # Every evaluated pairing counts, not only the rows left after capping
    view.empty = not any(r.verdict in PASSING_VERDICTS for r in results or [])
    if view.empty:
        view.message = NO_CANDIDATES_MESSAGE
    return view


def run_match(
    catalogs: Catalogs,
    selection: Selection,
    policy: Optional[MatchPolicy] = None,
    rules: Optional[CanonicalRules] = None,
) -> MatchView:
    """
    Match ETTs against the selected SAD.

    Args:
        catalogs: SAD and ETT records
        selection: Selected SAD brand, optional size, optional ETT names
        policy: Tolerance and ranking flags (defaults if None)
        rules: Canonicalization rules (packaged table if None)

    Returns:
        MatchView. Empty catalogs or an unknown selection give an empty view,
        never an exception.
    """
    policy = policy or DEFAULT_POLICY
    view = MatchView(
        tolerance_mm=clamp_tolerance(policy.tolerance_mm),
        warnings=[GEOMETRY_ONLY_WARNING],
    )

    group = find_brand_group(catalogs.sads, selection.brand, rules)
    if group is None:
        view.notes.append("Selected airway device is not in the catalog")
        return _finish(view)

    candidates = group.records_of_size(selection.size)
    if not candidates:
        view.notes.append(f"No {group.display_name} listed in size {selection.size:g}")
        return _finish(view)

    sad = choose_sad_record(candidates)
    view.sad_inner_mm = parse_diameter(sad.internal_mm)
    if view.sad_inner_mm is None:
        view.warnings.append(
            f"Inner diameter unavailable for {group.display_name}; verdicts are unknown"
        )
    elif len(candidates) > 1:
        view.notes.append(
            f"Using smallest inner diameter ({view.sad_inner_mm:.1f} mm) "
            f"of {len(candidates)} matching records"
        )

    wanted = set(selection.ett_names)
    etts = [
        ett for ett in catalogs.etts
        if not wanted or canonical_name(ett.name, rules) in wanted
    ]

    results = []
    for ett in etts:
        if parse_diameter(ett.internal_mm) is None:
            logger.debug("Excluding ETT %r: unparseable inner diameter %r", ett.name, ett.internal_mm)
            continue
        results.append(evaluate_pair(sad, ett, policy))

    ranked = select_ranked(results, policy, rules)
    view.rows = [to_row(r, rules) for r in ranked]

    for worst in worst_case_outer_diameters(etts):
        gap = compute_gap(view.sad_inner_mm, worst.outer_diameter_mm)
        view.worst_case.append(WorstCaseRow(
            size_mm=worst.size_mm,
            outer_diameter_mm=worst.outer_diameter_mm,
            gap_mm=None if gap is None else round(gap, 2),
            verdict=classify_gap(gap, view.tolerance_mm, policy),
        ))

    logger.debug(
        "Matched %d of %d ETTs against %s (%d rows)",
        len(results), len(etts), group.display_name, len(view.rows),
    )
    return _finish(view, results)
