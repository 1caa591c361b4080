"""
Request Schemas for the Pool Chemistry MCP Server

Every calculator takes one request model; calculators with several modes
take a tagged union keyed on ``mode`` so the mode is always explicit in the
request. Fields are deliberately loose (numbers and plain strings): domain
checks and selector parsing live in the engine modules, which raise the
package's own exceptions.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .mcp_types import ResponseFormat


class CalculatorName(str, Enum):
    """Calculators reachable through run_calculation"""
    VOLUME = "volume"
    DOSAGE = "dosage"
    LSI = "lsi"
    TDS = "tds"
    READINGS = "readings"


class DosageMode(str, Enum):
    TARGET = "target"
    EFFECT = "effect"


class LSIMode(str, Enum):
    CALCULATE = "calculate"
    TARGET_PH = "target_ph"


class PoolRequest(BaseModel):
    """Base class for calculator requests."""
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        description="Output format: 'json' for machine-readable or 'markdown' for human-readable"
    )


# Dimension keys accepted at the top level of a volume request
_DIMENSION_KEYS = (
    "length", "width", "diameter",
    "oval_length", "oval_width", "ovalLength", "ovalWidth",
    "kidney_length", "kidney_width", "kidneyLength", "kidneyWidth",
)


class VolumeRequest(PoolRequest):
    """Input for the volume calculator."""
    shape: str = Field(..., description="rectangular, circular, oval or kidney")
    dimensions: Dict[str, Optional[float]] = Field(
        default_factory=dict,
        description="Plan dimensions in feet, e.g. {'length': 32, 'width': 16}"
    )
    avg_depth: Optional[float] = Field(None, description="Average water depth in feet")

    @model_validator(mode="before")
    @classmethod
    def collect_dimensions(cls, data: Any) -> Any:
        """Allow dimensions next to shape instead of nested under 'dimensions'."""
        if not isinstance(data, dict):
            return data
        loose = {k: data[k] for k in _DIMENSION_KEYS if k in data}
        if not loose:
            return data
        data = {k: v for k, v in data.items() if k not in loose}
        data["dimensions"] = {**loose, **(data.get("dimensions") or {})}
        return data


class DosageTargetRequest(PoolRequest):
    """Amount of product needed to reach target_level."""
    mode: Literal["target"]
    chemical: str = Field(..., description="salt, chlorine, ph, alkalinity, calcium or cya")
    gallons: Optional[float] = Field(None, description="Pool volume in US gallons")
    current_level: Optional[float] = Field(None, description="Current reading")
    target_level: Optional[float] = Field(None, description="Desired reading")
    chemical_type: Optional[str] = Field(
        None,
        description="Chlorine: liquid, powder, granular. pH: soda_ash, muriatic_acid"
    )


class DosageEffectRequest(PoolRequest):
    """Reading expected after adding amount_added of product."""
    mode: Literal["effect"]
    chemical: str = Field(..., description="salt, chlorine, ph, alkalinity, calcium or cya")
    gallons: Optional[float] = Field(None, description="Pool volume in US gallons")
    current_level: Optional[float] = Field(None, description="Current reading")
    amount_added: Optional[float] = Field(None, description="Amount of product added")
    unit: Optional[str] = Field(
        None,
        description="pounds, ounces, bags, gallons or fluid_ounces (must suit the product)"
    )
    chemical_type: Optional[str] = Field(
        None,
        description="Chlorine: liquid, powder, granular. pH: soda_ash, muriatic_acid"
    )


DosageRequest = Annotated[
    Union[DosageTargetRequest, DosageEffectRequest],
    Field(discriminator="mode")
]


class WaterSample(PoolRequest):
    """Water parameters shared by both LSI modes."""
    temperature: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("temperature", "temp_f"),
        description="Water temperature (°F unless temp_unit says otherwise)"
    )
    temp_unit: str = Field("fahrenheit", description="fahrenheit or celsius")
    calcium: Optional[float] = Field(None, description="Calcium hardness in ppm")
    alkalinity: Optional[float] = Field(None, description="Total alkalinity in ppm")
    tds: Optional[float] = Field(None, description="Measured total dissolved solids in ppm")
    estimate_tds: bool = Field(
        False,
        description="Estimate TDS from the other readings (only when tds is not measured)"
    )
    salt_ppm: Optional[float] = Field(0.0, description="Salt level, used only by the TDS estimate")
    cya_ppm: Optional[float] = Field(0.0, description="Cyanuric acid, used only by the TDS estimate")


class LSICalculateRequest(WaterSample):
    """LSI of a water sample."""
    mode: Literal["calculate"]
    ph: Optional[float] = Field(None, description="Measured pH")


class LSITargetPhRequest(WaterSample):
    """pH that yields target_lsi."""
    mode: Literal["target_ph"]
    target_lsi: float = Field(0.0, description="Desired LSI (0 = perfectly balanced)")


LSIRequest = Annotated[
    Union[LSICalculateRequest, LSITargetPhRequest],
    Field(discriminator="mode")
]


class TDSRequest(PoolRequest):
    """Input for the TDS estimate."""
    calcium: Optional[float] = Field(None, description="Calcium hardness in ppm")
    alkalinity: Optional[float] = Field(None, description="Total alkalinity in ppm")
    salt_ppm: Optional[float] = Field(0.0, description="Salt level in ppm")
    cya_ppm: Optional[float] = Field(0.0, description="Cyanuric acid in ppm")


class ReadingsRequest(PoolRequest):
    """Test-kit readings from a service visit."""
    readings: Dict[str, Optional[float]] = Field(
        default_factory=dict,
        description="Readings keyed by ph, free_chlorine, alkalinity, calcium"
    )
    total_chlorine: Optional[float] = Field(
        None,
        description="Total chlorine in ppm; with readings.free_chlorine gives combined chlorine"
    )
