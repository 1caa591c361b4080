"""
TDS Estimator

Fallback estimate of total dissolved solids for when no TDS meter reading
is available:

    tds ≈ calcium × 1.5 + alkalinity × 1.2 + salt + cya + 200

The estimate is only used when a caller explicitly asks for it; it never
replaces a measured value.
"""

from typing import Optional
import logging

from .core_config import CONFIG
from .exceptions import OutOfRangeError, ValidationError
from .unit_conversions import round_half_up

logger = logging.getLogger(__name__)


def _non_negative(name: str, value) -> float:
    if value is None:
        raise ValidationError(f"{name} is required", field=name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number", field=name, value=value)
    if not number >= 0:
        raise OutOfRangeError(f"{name} cannot be negative", field=name, value=value, minimum=0.0)
    return number


def estimate_tds(
    calcium: float,
    alkalinity: float,
    salt_ppm: Optional[float] = 0.0,
    cya_ppm: Optional[float] = 0.0
) -> int:
    """
    Estimate total dissolved solids from routine readings.

    Args:
        calcium: Calcium hardness in ppm
        alkalinity: Total alkalinity in ppm
        salt_ppm: Salt level in ppm (salt pools)
        cya_ppm: Cyanuric acid in ppm

    Returns:
        Estimated TDS in ppm, rounded to the nearest integer
    """
    ca = _non_negative("calcium", calcium)
    alk = _non_negative("alkalinity", alkalinity)
    salt = _non_negative("salt_ppm", salt_ppm or 0.0)
    cya = _non_negative("cya_ppm", cya_ppm or 0.0)

    estimated = (
        ca * CONFIG.TDS_CALCIUM_FACTOR
        + alk * CONFIG.TDS_ALKALINITY_FACTOR
        + salt
        + cya
        + CONFIG.TDS_BACKGROUND_PPM
    )
    logger.debug(f"Estimated TDS {estimated:.1f} ppm (Ca={ca}, TA={alk}, salt={salt}, CYA={cya})")
    return int(round_half_up(estimated))
