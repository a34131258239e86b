"""
valuation.py (schemas)
- Purpose: Request/response DTOs exchanged with the upstream Valuation API and the UI.
- Design: Upstream speaks camelCase; we keep snake_case attributes with camelCase aliases.
  Status and step values stay raw (any JSON value) here; the pipeline core coerces them.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LandType = Literal["Irrigated", "Dryland", "Pasture", "CRP"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PropertyImprovement(_CamelModel):
    type: Literal["Building", "Barn", "Silo", "Well", "Irrigation System", "Fencing", "Road Access", "Other"]
    description: str = Field(min_length=1)
    valuation_method: Literal["ai", "manual"]
    manual_value: float | None = None
    condition: Literal["Excellent", "Good", "Fair", "Poor"] | None = None


class PropertyForm(_CamelModel):
    """
    Create-valuation request body. Mirrors the upstream property form;
    cross-field checks live in validations/property_validators.py.
    """
    address: str | None = None  # optional for polygon-drawn valuations
    county: str = Field(min_length=1)
    state: str = Field(min_length=1)
    land_type: LandType
    acreage: float = Field(ge=0.1)
    tillable_acres: float | None = Field(default=None, ge=0)
    additional_details: str | None = None
    include_improvements: bool = False
    improvements: list[PropertyImprovement] | None = None

    # Cash rent analysis
    cash_rent_per_acre: float | None = Field(default=None, ge=0, le=1000)
    cap_rate: float | None = Field(default=0.03, ge=0.01, le=0.20)

    # CSR2 and spatial data (populated by map interaction)
    field_id: str | None = None
    field_wkt: str | None = None
    csr2_mean: float | None = None
    csr2_min: float | None = None
    csr2_max: float | None = None
    csr2_count: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    non_tillable_type: Literal["CRP", "Timber", "Other"] | None = None

    # Owner & parcel
    owner_name: str | None = None
    parcel_number: str | None = None

    # Soil data
    mukey: str | None = None
    soil_series: str | None = None
    soil_slope: float | None = None
    soil_drainage: str | None = None
    soil_hydrologic_group: str | None = None
    soil_farmland_class: str | None = None
    soil_texture: str | None = None
    soil_sand_pct: float | None = None
    soil_silt_pct: float | None = None
    soil_clay_pct: float | None = None
    soil_ph: float | None = Field(default=None, alias="soilPH")
    soil_organic_matter: float | None = None
    soil_components: Any | None = None

    def to_upstream(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ValuationResource(_CamelModel):
    """
    Upstream valuation record. Only the fields the pipeline and report need;
    anything else the API sends is ignored.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int | str
    status: Any = "pending"
    current_stage_hint: Any = Field(
        default=None,
        validation_alias=AliasChoices("currentStageHint", "currentStep", "current_stage_hint"),
    )
    created_at: datetime | None = None

    county: str | None = None
    state: str | None = None
    land_type: str | None = None
    acreage: float | None = None

    base_value: float | None = None
    adjusted_value: float | None = None
    total_value: float | None = None
    confidence_score: float | None = None
    ai_reasoning: str | None = None
    market_insight: str | None = None
    breakdown: Any | None = None


class ValuationCreateResponse(BaseModel):
    """
    API response after a valuation is started. Keeps frontend integration simple.
    """
    valuation_id: str
    status_url: str
    pipeline_url: str

    @classmethod
    def for_id(cls, valuation_id) -> "ValuationCreateResponse":
        vid = str(valuation_id)
        return cls(
            valuation_id=vid,
            status_url=f"/api/valuations/{vid}",
            pipeline_url=f"/api/valuations/{vid}/pipeline",
        )
