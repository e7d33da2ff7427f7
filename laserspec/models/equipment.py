from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


LaserType = Literal["Fiber", "CO2", "Solid"]
CoolingType = Literal["Water", "Air"]

# Column order of the import CSV; also the field order of EquipmentRecord.
RECORD_FIELDS: List[str] = [
    "brand",
    "model",
    "laser_type",
    "power_kw",
    "work_area_length",
    "work_area_width",
    "max_cutting_thickness",
    "cutting_speed",
    "positioning_accuracy",
    "repeat_accuracy",
    "beam_quality",
    "wavelength",
    "control_system",
    "cooling_type",
    "power_consumption",
    "dimensions",
    "weight",
    "price_range",
    "manufacturer_url",
    "spec_sheet_url",
    "image_url",
    "description",
    "applications",
    "origin_country",
]


class EquipmentRecord(BaseModel):
    """One scraped machine, shaped like a row of the admin import endpoint.

    Fields the scraper cannot recover are kept so every record carries the
    full import shape; they stay None.
    """

    model_config = ConfigDict(frozen=True)

    brand: str
    model: str
    laser_type: Optional[LaserType] = None
    power_kw: Optional[float] = Field(None, description="Laser source power in kW")
    work_area_length: Optional[int] = Field(None, description="Bed length in mm")
    work_area_width: Optional[int] = Field(None, description="Bed width in mm")
    max_cutting_thickness: Optional[Dict[str, float]] = Field(
        None, description="Material -> max thickness in mm"
    )
    cutting_speed: Optional[Dict[str, float]] = Field(
        None, description="'<material>_<n>mm' -> speed in m/min"
    )
    positioning_accuracy: Optional[float] = None
    repeat_accuracy: Optional[float] = None
    beam_quality: Optional[float] = None
    wavelength: Optional[int] = Field(None, description="Wavelength in nm")
    control_system: Optional[str] = None
    cooling_type: Optional[CoolingType] = None
    power_consumption: Optional[float] = None
    dimensions: Optional[Dict[str, float]] = None
    weight: Optional[float] = None
    price_range: Optional[str] = None
    manufacturer_url: Optional[str] = None
    spec_sheet_url: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    applications: Optional[List[str]] = None
    origin_country: Optional[str] = None


class ImportSummary(BaseModel):
    success: bool
    inserted: int = 0
    updated: int = 0
