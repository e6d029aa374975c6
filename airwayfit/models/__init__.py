"""
Pydantic models for device catalogs, matching policy and results.
"""

from airwayfit.models.records import DeviceRecord, Catalogs, DEFAULT_ETT_TYPE
from airwayfit.models.outputs import (
    Verdict,
    CanonicalKey,
    BrandOption,
    EttNameOption,
    SizedRecord,
    BrandGroup,
    WorstCaseSize,
    FitResult,
    ResultRow,
    WorstCaseRow,
    MatchView,
    NO_CANDIDATES_MESSAGE,
)
from airwayfit.models.policy import GroupBy, MatchPolicy, Selection, load_policy

__all__ = [
    "DeviceRecord",
    "Catalogs",
    "DEFAULT_ETT_TYPE",
    "Verdict",
    "CanonicalKey",
    "BrandOption",
    "EttNameOption",
    "SizedRecord",
    "BrandGroup",
    "WorstCaseSize",
    "FitResult",
    "ResultRow",
    "WorstCaseRow",
    "MatchView",
    "NO_CANDIDATES_MESSAGE",
    "GroupBy",
    "MatchPolicy",
    "Selection",
    "load_policy",
]
