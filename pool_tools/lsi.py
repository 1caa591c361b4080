"""
Langelier Saturation Index (LSI)

Field form of the index used by pool service technicians:

    temp_c = (temp_f - 32) × 5/9
    A = (log10(TDS) - 1) / 10
    B = -13.12 × log10(temp_c + 273) + 34.55
    C = log10(calcium hardness) - 0.4
    D = log10(total alkalinity)
    pHs = 9.3 + A + B - (C + D)
    LSI = pH - pHs

LSI < 0 means the water dissolves calcium carbonate (corrosive, etches
plaster and metal), LSI > 0 means it deposits it (scale). The inverse,
target_pH = target_LSI + pHs, tells the technician which pH to aim for.

Interpretation bands (upper edge inclusive from Balanced upward):
    < -2.0        Highly Corrosive
    -2.0 .. -0.5  Corrosive
    -0.5 .. -0.3  Slightly Corrosive
    -0.3 .. 0.3   Balanced
    0.3 .. 0.5    Slightly Scale-Forming
    0.5 .. 2.0    Scale-Forming
    > 2.0         Highly Scale-Forming
"""

from enum import Enum
from typing import Any, List, Optional, Tuple
import math
import logging

from pydantic import BaseModel, Field

from .core_config import CONFIG
from .exceptions import OutOfRangeError, ValidationError
from .unit_conversions import fahrenheit_to_celsius, round_half_up

logger = logging.getLogger(__name__)


class LSIStatus(str, Enum):
    """LSI interpretation bands, most corrosive first"""
    HIGHLY_CORROSIVE = "Highly Corrosive"
    CORROSIVE = "Corrosive"
    SLIGHTLY_CORROSIVE = "Slightly Corrosive"
    BALANCED = "Balanced"
    SLIGHTLY_SCALE_FORMING = "Slightly Scale-Forming"
    SCALE_FORMING = "Scale-Forming"
    HIGHLY_SCALE_FORMING = "Highly Scale-Forming"


class LSIFactors(BaseModel):
    """Intermediate terms of the pHs equation."""
    A: float = Field(..., description="TDS factor (3 decimals)")
    B: float = Field(..., description="Temperature factor")
    C: float = Field(..., description="Calcium hardness factor")
    D: float = Field(..., description="Alkalinity factor")
    temp_c: float = Field(..., description="Water temperature in °C")


class LSIResult(BaseModel):
    """Saturation index of a water sample."""
    lsi: float = Field(..., description="Langelier Saturation Index")
    pHs: float = Field(..., description="pH at calcium carbonate saturation")
    factors: LSIFactors


class LSIInterpretation(BaseModel):
    """Plain-language reading of an LSI value."""
    status: LSIStatus
    description: str
    recommendations: List[str] = Field(default_factory=list)


class LSITargetResult(BaseModel):
    """pH required to reach a desired LSI."""
    target_lsi: float = Field(..., description="Requested LSI")
    target_ph: float = Field(..., description="pH that yields target_lsi")
    pHs: float = Field(..., description="pH at calcium carbonate saturation")
    factors: LSIFactors
    warnings: List[str] = Field(default_factory=list)


_INTERPRETATIONS = {
    LSIStatus.HIGHLY_CORROSIVE: (
        "Water is extremely aggressive and will cause severe corrosion to "
        "pool equipment, surfaces, and plumbing.",
        [
            "Increase pH",
            "Increase alkalinity",
            "Increase calcium hardness",
            "Consider professional consultation",
        ],
    ),
    LSIStatus.CORROSIVE: (
        "Water is corrosive and may damage pool equipment and surfaces over time.",
        ["Increase pH slightly", "Consider increasing alkalinity", "Check calcium hardness"],
    ),
    LSIStatus.SLIGHTLY_CORROSIVE: (
        "Water has a slight tendency to be corrosive but is close to balanced.",
        ["Monitor closely", "Small pH adjustment may help"],
    ),
    LSIStatus.BALANCED: (
        "Water is well balanced and will not cause corrosion or scaling.",
        ["Maintain current levels", "Continue regular testing"],
    ),
    LSIStatus.SLIGHTLY_SCALE_FORMING: (
        "Water has a slight tendency to form scale but is close to balanced.",
        ["Monitor closely", "Small pH reduction may help"],
    ),
    LSIStatus.SCALE_FORMING: (
        "Water will tend to form scale deposits on surfaces and equipment.",
        ["Reduce pH", "Consider reducing alkalinity", "Check if calcium is too high"],
    ),
    LSIStatus.HIGHLY_SCALE_FORMING: (
        "Water will rapidly form scale deposits and may cause equipment damage.",
        [
            "Reduce pH significantly",
            "Reduce alkalinity",
            "Consider partial drain and refill",
            "Professional consultation recommended",
        ],
    ),
}


def _number(name: str, value: Any) -> float:
    if value is None:
        raise ValidationError(f"{name} is required", field=name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number", field=name, value=value)
    if math.isnan(number):
        raise ValidationError(f"{name} must be a number", field=name, value=value)
    return number


def _check_between(name: str, value: Any, minimum: float, maximum: float) -> float:
    number = _number(name, value)
    if number < minimum or number > maximum:
        raise OutOfRangeError(
            f"{name} must be between {minimum} and {maximum}",
            field=name, value=value, minimum=minimum, maximum=maximum
        )
    return number


def _check_positive(name: str, value: Any) -> float:
    number = _number(name, value)
    if not number > 0 or math.isinf(number):
        raise OutOfRangeError(f"{name} must be greater than 0", field=name, value=value, minimum=0.0)
    return number


def _saturation_ph(temp_f: Any, calcium: Any, alkalinity: Any, tds: Any) -> Tuple[float, LSIFactors]:
    """Validate the water inputs and return (unrounded pHs, rounded factors)."""
    temp = _check_between("temp_f", temp_f, CONFIG.TEMP_F_MIN, CONFIG.TEMP_F_MAX)
    ca = _check_positive("calcium", calcium)
    alk = _check_positive("alkalinity", alkalinity)
    if tds is None:
        raise ValidationError(
            "tds is required",
            field="tds",
            hint="Measure TDS or explicitly request an estimate (estimate_tds=true)"
        )
    dissolved = _check_positive("tds", tds)

    temp_c = fahrenheit_to_celsius(temp)
    a = (math.log10(dissolved) - 1) / 10
    b = CONFIG.LSI_TEMP_SLOPE * math.log10(temp_c + CONFIG.KELVIN_OFFSET) + CONFIG.LSI_TEMP_INTERCEPT
    c = math.log10(ca) - CONFIG.LSI_CALCIUM_OFFSET
    d = math.log10(alk)
    phs = CONFIG.LSI_PHS_CONSTANT + a + b - (c + d)

    logger.debug(
        f"pHs={phs:.4f} (A={a:.4f}, B={b:.4f}, C={c:.4f}, D={d:.4f}, "
        f"T={temp_c:.2f}°C, Ca={ca}, TA={alk}, TDS={dissolved})"
    )

    factors = LSIFactors(
        A=round_half_up(a, 3),
        B=round_half_up(b, 2),
        C=round_half_up(c, 2),
        D=round_half_up(d, 2),
        temp_c=round_half_up(temp_c, 2),
    )
    return phs, factors


def compute_lsi(ph: float, temp_f: float, calcium: float, alkalinity: float, tds: Optional[float]) -> LSIResult:
    """
    Calculate the Langelier Saturation Index of a pool water sample.

    Args:
        ph: Measured pH (6.0 - 9.0)
        temp_f: Water temperature in °F (32 - 120)
        calcium: Calcium hardness in ppm as CaCO3 (> 0)
        alkalinity: Total alkalinity in ppm as CaCO3 (> 0)
        tds: Total dissolved solids in ppm (> 0)

    Returns:
        LSIResult; lsi is taken from the unrounded pHs before rounding

    Raises:
        OutOfRangeError: If an input is outside its valid domain
        ValidationError: If an input is missing (tds in particular)
    """
    measured_ph = _check_between("ph", ph, CONFIG.PH_MIN, CONFIG.PH_MAX)
    phs, factors = _saturation_ph(temp_f, calcium, alkalinity, tds)
    lsi = measured_ph - phs

    return LSIResult(
        lsi=round_half_up(lsi, 2),
        pHs=round_half_up(phs, 2),
        factors=factors,
    )


def compute_target_ph(
    target_lsi: float,
    temp_f: float,
    calcium: float,
    alkalinity: float,
    tds: Optional[float]
) -> LSITargetResult:
    """
    Calculate the pH that brings the water to a desired LSI.

    A target pH outside 6.0 - 9.0 is still returned, with a warning, since
    the other parameters need adjusting first.
    """
    lsi = _number("target_lsi", target_lsi)
    phs, factors = _saturation_ph(temp_f, calcium, alkalinity, tds)
    target_ph = lsi + phs

    warnings = []
    if target_ph < CONFIG.PH_MIN or target_ph > CONFIG.PH_MAX:
        warnings.append(
            f"Target pH {target_ph:.2f} is outside the practical range "
            f"{CONFIG.PH_MIN}-{CONFIG.PH_MAX}; adjust calcium hardness or "
            f"alkalinity instead"
        )
        logger.warning(f"Target pH {target_ph:.2f} for LSI {lsi} is outside the practical range")

    return LSITargetResult(
        target_lsi=lsi,
        target_ph=round_half_up(target_ph, 2),
        pHs=round_half_up(phs, 2),
        factors=factors,
        warnings=warnings,
    )


def classify_lsi(lsi: float) -> LSIStatus:
    """Map an LSI value onto its interpretation band."""
    very_low, low, slightly_low, slightly_high, high, very_high = CONFIG.get_lsi_band_limits()
    if lsi < very_low:
        return LSIStatus.HIGHLY_CORROSIVE
    if lsi < low:
        return LSIStatus.CORROSIVE
    if lsi < slightly_low:
        return LSIStatus.SLIGHTLY_CORROSIVE
    if lsi <= slightly_high:
        return LSIStatus.BALANCED
    if lsi <= high:
        return LSIStatus.SLIGHTLY_SCALE_FORMING
    if lsi <= very_high:
        return LSIStatus.SCALE_FORMING
    return LSIStatus.HIGHLY_SCALE_FORMING


def interpret_lsi(lsi: float) -> LSIInterpretation:
    """Describe an LSI value and list the corrective actions for its band."""
    status = classify_lsi(_number("lsi", lsi))
    description, recommendations = _INTERPRETATIONS[status]
    return LSIInterpretation(
        status=status,
        description=description,
        recommendations=list(recommendations),
    )
