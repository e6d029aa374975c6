"""
Fit evaluation, ranking and the matching pipeline.

WARNING: Geometric fit only, NOT a clinical recommendation.
"""

from airwayfit.matching.evaluator import (
    classify_gap,
    evaluate_fit,
    evaluate_pair,
    clamp_tolerance,
    compute_gap,
)
from airwayfit.matching.ranking import (
    select_ranked,
    best_per_diameter,
    top_by_diameter,
    presentation_order,
)
from airwayfit.matching.pipeline import run_match, choose_sad_record, to_row

__all__ = [
    "classify_gap",
    "evaluate_fit",
    "evaluate_pair",
    "clamp_tolerance",
    "compute_gap",
    "select_ranked",
    "best_per_diameter",
    "top_by_diameter",
    "presentation_order",
    "run_match",
    "choose_sad_record",
    "to_row",
]
