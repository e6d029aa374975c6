"""
Fit evaluation.

Classifies the clearance between a SAD lumen (inner diameter D) and an ETT
(outer diameter O) against a tolerance T:

    unknown  D or O is not a usable number (checked first)
    no-fit   gap < 0, or gap < T under strict_tolerance
    tight    0 <= gap < T
    fit      gap >= T

This is the only place these thresholds live. Everything that needs a
verdict calls classify_gap or evaluate_fit.

WARNING: Geometric classification only, NOT a clinical recommendation.
"""

import math
from typing import Any, Optional

from airwayfit.canonical.sizes import parse_diameter
from airwayfit.models.outputs import FitResult, Verdict
from airwayfit.models.policy import MatchPolicy
from airwayfit.models.records import DeviceRecord


# Gaps are compared at micrometre resolution so 10.0 - 9.5 and 9.3 - 8.8
# land on the same side of a 0.5 mm boundary
GAP_DECIMALS = 6

DEFAULT_POLICY = MatchPolicy()


def clamp_tolerance(tolerance: Optional[float]) -> float:
    """Negative, missing or NaN tolerances become zero."""
    if tolerance is None or math.isnan(tolerance) or tolerance < 0:
        return 0.0
    return float(tolerance)


def compute_gap(inner_mm: Optional[float], outer_mm: Optional[float]) -> Optional[float]:
    """inner - outer, rounded; None if either side is missing."""
    if inner_mm is None or outer_mm is None:
        return None
    return round(inner_mm - outer_mm, GAP_DECIMALS)


def classify_gap(
    gap: Optional[float],
    tolerance: float,
    policy: Optional[MatchPolicy] = None,
) -> Verdict:
    """
    Classify a clearance gap.

    Args:
        gap: inner - outer in mm, None when unknown
        tolerance: Required comfortable clearance in mm
        policy: Supplies strict_tolerance and inclusive_boundary

    Returns:
        Verdict
    """
    policy = policy or DEFAULT_POLICY

    if gap is None or not math.isfinite(gap):
        return Verdict.UNKNOWN

    tolerance = clamp_tolerance(tolerance)

    if gap < 0:
        return Verdict.NO_FIT

    clears = gap >= tolerance if policy.inclusive_boundary else gap > tolerance
    if clears:
        return Verdict.FIT

    if policy.strict_tolerance:
        return Verdict.NO_FIT
    return Verdict.TIGHT


def evaluate_fit(
    inner: Any,
    outer: Any,
    tolerance: float,
    policy: Optional[MatchPolicy] = None,
) -> tuple[Optional[float], Verdict]:
    """
    Parse raw diameters and classify them.

    Returns:
        Tuple of (gap_mm or None, verdict)
    """
    gap = compute_gap(parse_diameter(inner), parse_diameter(outer))
    return gap, classify_gap(gap, tolerance, policy)


def evaluate_pair(
    sad: DeviceRecord,
    ett: DeviceRecord,
    policy: Optional[MatchPolicy] = None,
) -> FitResult:
    """
    Evaluate one SAD/ETT pairing under a policy.

    Args:
        sad: The airway device; its internal_mm is the lumen
        ett: The tube; its external_mm must pass the lumen
        policy: Tolerance and boundary flags

    Returns:
        FitResult
    """
    policy = policy or DEFAULT_POLICY
    tolerance = clamp_tolerance(policy.tolerance_mm)

    inner_mm = parse_diameter(sad.internal_mm)
    outer_mm = parse_diameter(ett.external_mm)
    gap = compute_gap(inner_mm, outer_mm)

    return FitResult(
        sad=sad,
        ett=ett,
        tolerance_mm=tolerance,
        inner_mm=inner_mm,
        outer_mm=outer_mm,
        ett_inner_mm=parse_diameter(ett.internal_mm),
        gap_mm=gap,
        verdict=classify_gap(gap, tolerance, policy),
    )
