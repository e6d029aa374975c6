"""
Airway Fit (airwayfit)

Determines which endotracheal tube (ETT) models can pass through which
supraglottic airway device (SAD), from manufacturer-reported diameters and a
configurable clearance tolerance.

WARNING: This tool classifies geometric fit only. It is NOT a clinical
recommendation and must not replace manufacturer guidance.

Usage:
    python -m airwayfit brands
    python -m airwayfit sizes --name "AuraGain" --manufacturer Ambu
    python -m airwayfit match --name "AuraGain" --manufacturer Ambu --size 4
    python -m airwayfit serve --port 8000
"""

__version__ = "0.1.0"
__author__ = "Airway Fit Project"

from airwayfit.models.records import DeviceRecord, Catalogs
from airwayfit.models.outputs import (
    CanonicalKey,
    Verdict,
    FitResult,
    ResultRow,
    MatchView,
)
from airwayfit.models.policy import MatchPolicy, Selection, GroupBy
from airwayfit.catalog.index import CatalogIndex, build_catalog_index
from airwayfit.matching.pipeline import run_match

__all__ = [
    "DeviceRecord",
    "Catalogs",
    "CanonicalKey",
    "Verdict",
    "FitResult",
    "ResultRow",
    "MatchView",
    "MatchPolicy",
    "Selection",
    "GroupBy",
    "CatalogIndex",
    "build_catalog_index",
    "run_match",
]
