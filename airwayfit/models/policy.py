"""
Matching policy and selection models.

The product has shipped several behaviours for the tolerance boundary, for
hiding rows that do not fit and for ranking. Each one is a flag here instead
of a separate code path.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from airwayfit.models.outputs import CanonicalKey


class GroupBy(str, Enum):
    """How candidate ETTs are grouped before ranking."""
    ETT_NAME = "ett_name"
    CATEGORY = "category"


class MatchPolicy(BaseModel):
    """
    Tolerance and presentation policy.

    Defaults: a gap equal to the tolerance is a fit, rows that do not fit are
    shown with their verdict, one best model per ETT size, two sizes per group.
    """
    tolerance_mm: float = Field(default=0.5, ge=0.0, description="Minimum comfortable clearance in mm")
    strict_tolerance: bool = Field(
        default=False,
        description="Treat any gap below the tolerance as no-fit (no 'tight' state)",
    )
    inclusive_boundary: bool = Field(
        default=True,
        description="A gap exactly equal to the tolerance counts as a fit",
    )
    show_non_fitting: bool = Field(
        default=True,
        description="Keep no-fit and unknown rows in the output with their verdict",
    )
    best_per_diameter: bool = Field(
        default=True,
        description="Keep only the smallest-OD model for each ETT inner diameter in a group",
    )
    max_per_group: Optional[int] = Field(
        default=2,
        ge=1,
        description="Fit and tight rows kept per group, largest inner diameters first; None keeps all. Shown no-fit and unknown rows are not capped",
    )
    group_by: GroupBy = Field(default=GroupBy.ETT_NAME, description="Ranking group key")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "tolerance_mm": 0.5,
                "strict_tolerance": False,
                "inclusive_boundary": True,
                "show_non_fitting": True,
                "best_per_diameter": True,
                "max_per_group": 2,
                "group_by": "ett_name",
            }
        },
    }


class Selection(BaseModel):
    """What the user picked: a SAD brand, optionally a size, optionally ETT names."""
    brand: CanonicalKey = Field(..., description="Canonical SAD key")
    size: Optional[float] = Field(default=None, description="Nominal SAD size; None matches any size")
    ett_names: list[str] = Field(
        default_factory=list,
        description="Canonical ETT name keys to consider; empty means all",
    )


def load_policy(path: Union[str, Path]) -> MatchPolicy:
    """
    Load a MatchPolicy from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If a value is out of range
    """
    with open(path, "r") as f:
        data = json.load(f)
    return MatchPolicy(**data)
