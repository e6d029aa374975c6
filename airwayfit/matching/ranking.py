"""
Ranking and selection of fit results.

Within each group (ETT display name, or ETT category):

1. optionally drop rows that are no-fit or unknown
2. optionally keep one model per ETT inner diameter, smallest OD first
3. keep the N largest passing inner diameters, smaller OD breaking ties;
   shown no-fit and unknown rows never count against N

Across groups the order is group key, then inner diameter descending, then
outer diameter ascending. Remaining ties fall back to model and manufacturer
names so the output is identical run to run.
"""

import math
from typing import Optional

from airwayfit.canonical.normalizer import display_manufacturer, display_name
from airwayfit.canonical.rules import CanonicalRules
from airwayfit.models.outputs import FitResult, Verdict
from airwayfit.models.policy import GroupBy, MatchPolicy


# Verdicts kept when non-fitting rows are hidden
PASSING_VERDICTS = frozenset({Verdict.FIT, Verdict.TIGHT})


def group_key(
    result: FitResult,
    group_by: GroupBy,
    rules: Optional[CanonicalRules] = None,
) -> str:
    """The ranking group a result belongs to."""
    if group_by == GroupBy.CATEGORY:
        return result.ett.type
    return display_name(result.ett.name, rules)


def _inner_desc(result: FitResult) -> tuple[bool, float]:
    # Missing inner diameters sort last
    if result.ett_inner_mm is None:
        return True, 0.0
    return False, -result.ett_inner_mm


def _outer_asc(result: FitResult) -> float:
    return math.inf if result.outer_mm is None else result.outer_mm


def best_per_diameter(results: list[FitResult]) -> list[FitResult]:
    """
    Keep the smallest-OD result for each distinct ETT inner diameter.

    The first result seen wins an exact tie.
    """
    best: dict[Optional[float], FitResult] = {}
    for result in results:
        current = best.get(result.ett_inner_mm)
        if current is None or _outer_asc(result) < _outer_asc(current):
            best[result.ett_inner_mm] = result
    return list(best.values())


def top_by_diameter(results: list[FitResult], limit: Optional[int]) -> list[FitResult]:
    """
    The largest inner diameters first, smallest OD breaking ties.

    Args:
        results: Results from one group
        limit: Rows to keep; None keeps all
    """
    ordered = sorted(results, key=lambda r: (_inner_desc(r), _outer_asc(r)))
    return ordered if limit is None else ordered[:limit]


def presentation_order(
    results: list[FitResult],
    group_by: GroupBy,
    rules: Optional[CanonicalRules] = None,
) -> list[FitResult]:
    """Sort results into the final total order."""
    def sort_key(result: FitResult):
        key = group_key(result, group_by, rules)
        return (
            key.casefold(),
            key,
            _inner_desc(result),
            _outer_asc(result),
            display_name(result.ett.name, rules).casefold(),
            display_manufacturer(result.ett.manufacturer, rules).casefold(),
        )

    return sorted(results, key=sort_key)


def select_ranked(
    results: list[FitResult],
    policy: MatchPolicy,
    rules: Optional[CanonicalRules] = None,
) -> list[FitResult]:
    """
    Reduce and order fit results under a policy.

    Args:
        results: Evaluated pairings
        policy: Ranking flags (show_non_fitting, best_per_diameter,
            max_per_group, group_by)
        rules: Canonicalization rules used for display-name grouping

    Returns:
        Selected results in presentation order
    """
    if not policy.show_non_fitting:
        results = [r for r in results if r.verdict in PASSING_VERDICTS]

    groups: dict[str, list[FitResult]] = {}
    for result in results:
        groups.setdefault(group_key(result, policy.group_by, rules), []).append(result)

    selected = []
    for members in groups.values():
        if policy.best_per_diameter:
            members = best_per_diameter(members)
        passing = [r for r in members if r.verdict in PASSING_VERDICTS]
        selected.extend(top_by_diameter(passing, policy.max_per_group))
        selected.extend(r for r in members if r.verdict not in PASSING_VERDICTS)

    return presentation_order(selected, policy.group_by, rules)
