"""
Input models for device catalogs.

A DeviceRecord is one raw catalog row, either a supraglottic airway device
(SAD) or an endotracheal tube (ETT). Records are kept exactly as the catalog
reports them; numeric fields are parsed later and a value that does not parse
only excludes the record from matching.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# Tag used when an ETT row has no type
DEFAULT_ETT_TYPE = "standard"


class DeviceRecord(BaseModel):
    """
    One catalog row as reported by the manufacturer.

    Diameters may arrive as numbers or numeric-like text ("9.6", "9.6 mm").
    They are stored untouched so a malformed value never blocks loading.
    """
    name: str = Field(default="", description="Free-text device name, may carry marks and descriptors")
    manufacturer: Optional[str] = Field(default=None, description="Free-text manufacturer, may be misspelled")
    internal_mm: Any = Field(default=None, description="Inner diameter in mm (number or numeric-like text)")
    external_mm: Any = Field(default=None, description="Outer diameter in mm (ETT only)")
    size: Any = Field(default=None, description="SAD size descriptor, e.g. 'Size 4, Medium adult'")
    type: str = Field(default=DEFAULT_ETT_TYPE, description="ETT category tag")
    notes: Optional[str] = Field(default=None, description="Free-text notes")

    model_config = {
        "frozen": True,
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "name": "AuraGain™ Supraglottic Airway Device",
                "manufacturer": "Ambu",
                "internal_mm": 10.0,
                "size": "Size 4, Medium adult, 50-70 kg",
            }
        },
    }

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        """Absent names become the empty string."""
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("manufacturer", "notes", mode="before")
    @classmethod
    def coerce_optional_text(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v: Any) -> str:
        """Blank or missing type falls back to the generic tag."""
        if v is None:
            return DEFAULT_ETT_TYPE
        text = str(v).strip()
        return text or DEFAULT_ETT_TYPE


class Catalogs(BaseModel):
    """The two record sets the matcher works over."""
    sads: list[DeviceRecord] = Field(default_factory=list, description="Supraglottic airway devices")
    etts: list[DeviceRecord] = Field(default_factory=list, description="Endotracheal tubes")

    @property
    def is_empty(self) -> bool:
        return not self.sads and not self.etts
