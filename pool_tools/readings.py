"""
Routine test readings

Checks a visit's test-kit readings against the service ranges and derives
combined chlorine (chloramines) from free and total chlorine.
"""

from enum import Enum
from typing import Any, Literal, Union
import math
import logging

from pydantic import BaseModel, Field

from .core_config import CONFIG
from .exceptions import OutOfRangeError, ValidationError
from .unit_conversions import parse_selector, round_half_up

logger = logging.getLogger(__name__)


class ReadingParameter(str, Enum):
    """Readings with a service range"""
    PH = "ph"
    FREE_CHLORINE = "free_chlorine"
    ALKALINITY = "alkalinity"
    CALCIUM = "calcium"


class ReadingAssessment(BaseModel):
    """A reading compared with its service range."""
    parameter: ReadingParameter
    value: float
    minimum: float
    maximum: float
    ideal: float
    status: Literal["low", "ok", "high"]


class CombinedChlorineResult(BaseModel):
    """Combined chlorine and shock need."""
    free_chlorine: float = Field(..., description="Free chlorine in ppm")
    total_chlorine: float = Field(..., description="Total chlorine in ppm")
    combined_chlorine: float = Field(..., description="Total minus free, never negative")
    needs_shock: bool
    is_balanced: bool
    status: str


def _reading(name: str, value: Any) -> float:
    if value is None:
        raise ValidationError(f"{name} is required", field=name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number", field=name, value=value)
    if not number >= 0 or math.isinf(number):
        raise OutOfRangeError(f"{name} cannot be negative", field=name, value=value, minimum=0.0)
    return number


def assess_reading(parameter: Union[str, ReadingParameter], value: float) -> ReadingAssessment:
    """
    Compare a reading with its service range (bounds inclusive).

    Raises:
        UnknownSelectorError: If parameter has no service range
        OutOfRangeError: If value is negative
    """
    param = parse_selector(ReadingParameter, parameter, "parameter")
    reading = _reading(param.value, value)
    minimum, maximum, ideal = CONFIG.get_ideal_ranges()[param.value]

    if reading < minimum:
        status = "low"
    elif reading > maximum:
        status = "high"
    else:
        status = "ok"

    return ReadingAssessment(
        parameter=param,
        value=reading,
        minimum=minimum,
        maximum=maximum,
        ideal=ideal,
        status=status,
    )


def compute_combined_chlorine(free_chlorine: float, total_chlorine: float) -> CombinedChlorineResult:
    """
    Combined chlorine is total minus free chlorine, floored at zero.

    Above 0.5 ppm the pool needs shocking; below it the chlorine is
    balanced; exactly 0.5 ppm is left for monitoring.
    """
    free = _reading("free_chlorine", free_chlorine)
    total = _reading("total_chlorine", total_chlorine)
    combined = max(0.0, total - free)
    threshold = CONFIG.COMBINED_CHLORINE_SHOCK_PPM

    needs_shock = combined > threshold
    is_balanced = combined < threshold
    if needs_shock:
        status = "Pool needs shocking"
    elif is_balanced:
        status = "Chlorine levels balanced"
    else:
        status = "Monitor chlorine levels"

    logger.debug(f"Combined chlorine {combined:.2f} ppm (FC={free}, TC={total}): {status}")

    return CombinedChlorineResult(
        free_chlorine=free,
        total_chlorine=total,
        combined_chlorine=round_half_up(combined, 2),
        needs_shock=needs_shock,
        is_balanced=is_balanced,
        status=status,
    )
