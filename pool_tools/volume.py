"""
Pool Volume Calculator

Derives surface area and water volume from a pool's shape, its plan
dimensions and its average depth (all in feet). The gallons figure is the
shared input of every dosage calculation that follows.

Surface area by shape:
- rectangular: length × width
- circular:    π × (diameter / 2)²
- oval:        π × (length / 2) × (width / 2)
- kidney:      0.8 × length × width (empirical freeform footprint)
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import math
import logging

from pydantic import BaseModel, Field

from .core_config import CONFIG
from .exceptions import InvalidDimensionError
from .unit_conversions import cubic_feet_to_gallons, round_half_up

logger = logging.getLogger(__name__)


class PoolShape(str, Enum):
    """Supported pool footprints"""
    RECTANGULAR = "rectangular"
    CIRCULAR = "circular"
    OVAL = "oval"
    KIDNEY = "kidney"


# Dimension keys required per shape, with accepted aliases
SHAPE_DIMENSIONS: Dict[PoolShape, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    PoolShape.RECTANGULAR: (("length", ()), ("width", ())),
    PoolShape.CIRCULAR: (("diameter", ()),),
    PoolShape.OVAL: (
        ("length", ("oval_length", "ovalLength")),
        ("width", ("oval_width", "ovalWidth")),
    ),
    PoolShape.KIDNEY: (
        ("length", ("kidney_length", "kidneyLength")),
        ("width", ("kidney_width", "kidneyWidth")),
    ),
}


class PoolVolumeResult(BaseModel):
    """Pool surface area and volume."""
    shape: PoolShape = Field(..., description="Pool footprint")
    surface_area: float = Field(..., description="Surface area in ft² (2 decimals)")
    cubic_feet: float = Field(..., description="Water volume in ft³ (2 decimals)")
    gallons: int = Field(..., description="Water volume in US gallons (nearest integer)")


def _parse_shape(shape: Union[str, PoolShape, None]) -> PoolShape:
    if isinstance(shape, PoolShape):
        return shape
    normalized = str(shape).strip().lower() if shape is not None else ""
    for member in PoolShape:
        if member.value == normalized:
            return member
    raise InvalidDimensionError(
        f"Invalid pool shape '{shape}'",
        field="shape",
        value=shape,
        hint=f"Use one of: {', '.join(m.value for m in PoolShape)}"
    )


def _positive_dimension(name: str, value: Any) -> float:
    """Validate a single dimension and return it as float."""
    if value is None:
        raise InvalidDimensionError(f"{name} is required", field=name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidDimensionError(f"{name} must be a number", field=name, value=value)
    if not math.isfinite(number) or number <= 0:
        raise InvalidDimensionError(f"{name} must be greater than 0", field=name, value=value)
    return number


def _lookup_dimension(dimensions: Mapping[str, Any], key: str, aliases: Tuple[str, ...]) -> Optional[Any]:
    for candidate in (key,) + aliases:
        if dimensions.get(candidate) is not None:
            return dimensions[candidate]
    return None


def calculate_surface_area(shape: PoolShape, dimensions: Mapping[str, float]) -> float:
    """
    Surface area in ft² for already validated dimensions.

    Args:
        shape: Pool footprint
        dimensions: Validated dimensions keyed by canonical name
    """
    if shape == PoolShape.RECTANGULAR:
        return dimensions["length"] * dimensions["width"]
    if shape == PoolShape.CIRCULAR:
        radius = dimensions["diameter"] / 2
        return math.pi * radius * radius
    if shape == PoolShape.OVAL:
        return math.pi * (dimensions["length"] / 2) * (dimensions["width"] / 2)
    if shape == PoolShape.KIDNEY:
        return CONFIG.KIDNEY_AREA_FACTOR * dimensions["length"] * dimensions["width"]
    raise ValueError(f"Unknown pool shape: {shape}")


def compute_volume(
    shape: Union[str, PoolShape],
    dimensions: Optional[Mapping[str, Any]],
    avg_depth: Any
) -> PoolVolumeResult:
    """
    Calculate pool surface area and volume.

    Args:
        shape: 'rectangular', 'circular', 'oval' or 'kidney'
        dimensions: Plan dimensions in feet ('length'/'width' or 'diameter';
            oval and kidney also accept their prefixed aliases)
        avg_depth: Average water depth in feet

    Returns:
        PoolVolumeResult with surface area, cubic feet and gallons

    Raises:
        InvalidDimensionError: If the shape is unknown or a required
            dimension / avg_depth is missing or not positive
    """
    pool_shape = _parse_shape(shape)
    depth = _positive_dimension("avg_depth", avg_depth)

    dimensions = dimensions or {}
    validated = {}
    for key, aliases in SHAPE_DIMENSIONS[pool_shape]:
        validated[key] = _positive_dimension(key, _lookup_dimension(dimensions, key, aliases))

    surface_area = calculate_surface_area(pool_shape, validated)
    volume_cubic_feet = surface_area * depth
    volume_gallons = cubic_feet_to_gallons(volume_cubic_feet)

    logger.debug(
        f"Pool volume ({pool_shape.value}): area={surface_area:.2f} ft², "
        f"volume={volume_cubic_feet:.2f} ft³ = {volume_gallons:.0f} gal"
    )

    return PoolVolumeResult(
        shape=pool_shape,
        surface_area=round_half_up(surface_area, 2),
        cubic_feet=round_half_up(volume_cubic_feet, 2),
        gallons=int(round_half_up(volume_gallons)),
    )
