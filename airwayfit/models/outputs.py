"""
Output models for catalog views and fit results.

Everything here is derived from the raw catalogs and is recomputed in full
whenever the catalogs, the selection or the policy change.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from airwayfit.models.records import DeviceRecord


# Signal returned with an empty result set
NO_CANDIDATES_MESSAGE = "No compatible devices at current tolerance"

# Carried by every match view
GEOMETRY_ONLY_WARNING = (
    "Geometric fit only, based on manufacturer-reported diameters. "
    "This is NOT a clinical recommendation."
)


class Verdict(str, Enum):
    """Classification of one SAD/ETT pairing."""
    FIT = "fit"
    TIGHT = "tight"
    NO_FIT = "no-fit"
    UNKNOWN = "unknown"


class CanonicalKey(BaseModel):
    """Normalized (name, manufacturer) identity used for grouping."""
    name: str = Field(default="", description="Canonical device name")
    manufacturer: str = Field(default="", description="Canonical manufacturer")

    model_config = {"frozen": True}

    @property
    def is_groupable(self) -> bool:
        """Records with an empty canonical name are left out of grouping."""
        return bool(self.name)


class BrandOption(BaseModel):
    """One selectable SAD brand/model."""
    key: CanonicalKey
    display_name: str
    display_manufacturer: str


class EttNameOption(BaseModel):
    """One selectable ETT model name."""
    key: str = Field(..., description="Canonical ETT name")
    label: str = Field(..., description="Display label")


class SizedRecord(BaseModel):
    """A SAD record annotated with its parsed nominal size."""
    record: DeviceRecord
    nominal_size: Optional[float] = Field(default=None, description="None when the size is unparseable")


class BrandGroup(BaseModel):
    """All SAD records sharing one canonical key."""
    key: CanonicalKey
    display_name: str
    display_manufacturer: str
    members: list[SizedRecord] = Field(default_factory=list)

    def sizes(self) -> list[float]:
        """Distinct parsed sizes, ascending."""
        return sorted({m.nominal_size for m in self.members if m.nominal_size is not None})

    def records_of_size(self, size: Optional[float]) -> list[DeviceRecord]:
        """Records matching a nominal size; every record when size is None."""
        if size is None:
            return [m.record for m in self.members]
        return [m.record for m in self.members if m.nominal_size == size]


class WorstCaseSize(BaseModel):
    """Largest outer diameter among ETT models sharing a nominal size."""
    size_mm: float
    outer_diameter_mm: float
    model_count: int = Field(..., ge=1)


class FitResult(BaseModel):
    """One evaluated SAD/ETT pairing."""
    sad: DeviceRecord
    ett: DeviceRecord
    tolerance_mm: float = Field(..., ge=0)
    inner_mm: Optional[float] = Field(default=None, description="SAD lumen diameter")
    outer_mm: Optional[float] = Field(default=None, description="ETT outer diameter")
    ett_inner_mm: Optional[float] = Field(default=None, description="ETT bore, used for ranking")
    gap_mm: Optional[float] = Field(default=None, description="inner_mm - outer_mm")
    verdict: Verdict

    model_config = {"frozen": True}


class ResultRow(BaseModel):
    """Presentation row for one selected ETT."""
    size_mm: Optional[float] = Field(default=None, description="ETT inner diameter, 1 decimal")
    type: str
    outer_diameter_mm: Optional[float] = Field(default=None, description="ETT outer diameter, 2 decimals")
    model: str
    manufacturer: str
    verdict: Verdict
    gap_mm: Optional[float] = Field(default=None, description="Clearance, 2 decimals")

    @property
    def size_label(self) -> str:
        return "-" if self.size_mm is None else f"{self.size_mm:.1f}"

    @property
    def outer_label(self) -> str:
        return "-" if self.outer_diameter_mm is None else f"{self.outer_diameter_mm:.2f}"


class WorstCaseRow(BaseModel):
    """Conservative verdict for a nominal ETT size when no model is chosen."""
    size_mm: float
    outer_diameter_mm: float
    gap_mm: Optional[float] = None
    verdict: Verdict


class MatchView(BaseModel):
    """Complete matching result for one selection."""
    rows: list[ResultRow] = Field(default_factory=list)
    empty: bool = Field(default=True, description="True when no row is fit or tight")
    message: Optional[str] = None
    sad_inner_mm: Optional[float] = Field(default=None, description="SAD lumen used for the match")
    tolerance_mm: float = Field(default=0.0, ge=0)
    worst_case: list[WorstCaseRow] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "rows": [
                    {
                        "size_mm": 7.0,
                        "type": "standard",
                        "outer_diameter_mm": 9.4,
                        "model": "Mallinckrodt Hi-Lo",
                        "manufacturer": "Medtronic",
                        "verdict": "fit",
                        "gap_mm": 0.6,
                    }
                ],
                "empty": False,
                "sad_inner_mm": 10.0,
                "tolerance_mm": 0.5,
            }
        }
    }
