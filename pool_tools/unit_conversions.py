"""
Unit Conversion Module for Pool Chemistry MCP Server

Centralizes all unit conversions to ensure consistency and prevent errors.
Provides the closed unit enumerations, volume/mass/temperature conversions,
selector parsing and the presentation step that re-labels dose amounts into
human-scaled units.
"""

from enum import Enum
from typing import Optional, Tuple, Type, TypeVar, Union
import math
from .core_config import CONFIG
from .exceptions import UnknownSelectorError, ValidationError


class DoseUnit(str, Enum):
    """Supported units for a chemical addition"""
    POUNDS = "pounds"
    OUNCES = "ounces"
    BAGS = "bags"  # 40 lb salt bags
    GALLONS = "gallons"
    FLUID_OUNCES = "fluid_ounces"

    @property
    def label(self) -> str:
        """Display label used in results (e.g. 'fluid ounces')."""
        return self.value.replace("_", " ")


class TemperatureUnit(str, Enum):
    """Supported temperature units"""
    FAHRENHEIT = "fahrenheit"
    CELSIUS = "celsius"


E = TypeVar("E", bound=Enum)


def parse_selector(enum_cls: Type[E], value: Union[str, E, None], field: str) -> E:
    """
    Resolve a selector value against a closed enumeration.

    Accepts enum members or their string values, case-insensitively, with
    spaces treated as underscores ('fluid ounces' == 'fluid_ounces').

    Raises:
        ValidationError: If value is missing
        UnknownSelectorError: If value is not a member of enum_cls
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.value

    normalized = str(value).strip().lower().replace(" ", "_").replace("-", "_")
    for member in enum_cls:
        if member.value == normalized:
            return member

    raise UnknownSelectorError(field, value, [m.value for m in enum_cls])


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half up, ties toward +inf (0.125 -> 0.13, -0.125 -> -0.12).

    Results are reported the way the field worksheets round them, which
    differs from Python's round-half-to-even on exact ties.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# =============================================================================
# Volume and mass
# =============================================================================

def cubic_feet_to_gallons(cubic_feet: float) -> float:
    """Convert cubic feet to US gallons."""
    return cubic_feet * CONFIG.GALLONS_PER_CUBIC_FOOT


def gallons_to_liters(gallons: float) -> float:
    """Convert US gallons to liters."""
    return gallons * CONFIG.LITERS_PER_GALLON


def water_mass_grams(gallons: float) -> float:
    """Mass of a body of water in grams (1 kg/L)."""
    return gallons_to_liters(gallons) * CONFIG.GRAMS_PER_LITER


def pounds_to_grams(pounds: float) -> float:
    """Convert pounds to grams."""
    return pounds * CONFIG.GRAMS_PER_POUND


# Factors converting an accepted unit into a base unit
_TO_POUNDS = {
    DoseUnit.POUNDS: 1.0,
    DoseUnit.OUNCES: 1.0 / CONFIG.OUNCES_PER_POUND,
    DoseUnit.BAGS: CONFIG.POUNDS_PER_SALT_BAG,
}
_TO_GALLONS = {
    DoseUnit.GALLONS: 1.0,
    DoseUnit.FLUID_OUNCES: 1.0 / CONFIG.FL_OZ_PER_GALLON,
}
_TO_FLUID_OUNCES = {
    DoseUnit.FLUID_OUNCES: 1.0,
    DoseUnit.GALLONS: CONFIG.FL_OZ_PER_GALLON,
}

_BASE_FACTORS = {
    DoseUnit.POUNDS: _TO_POUNDS,
    DoseUnit.GALLONS: _TO_GALLONS,
    DoseUnit.FLUID_OUNCES: _TO_FLUID_OUNCES,
}


def convert_amount(amount: float, from_unit: DoseUnit, to_unit: DoseUnit) -> float:
    """
    Convert a dose amount into a base unit.

    Args:
        amount: Amount in from_unit
        from_unit: Unit the amount is expressed in
        to_unit: Base unit (pounds, gallons or fluid ounces)

    Returns:
        Amount expressed in to_unit

    Raises:
        ValueError: If the two units do not measure the same quantity
    """
    factors = _BASE_FACTORS.get(to_unit)
    if factors is None or from_unit not in factors:
        raise ValueError(f"Cannot convert {from_unit.value} to {to_unit.value}")
    return amount * factors[from_unit]


def promote_unit(amount: float, unit: DoseUnit) -> Tuple[float, DoseUnit]:
    """
    Re-label a dose amount so it stays in a human-scaled unit.

    128 fl oz and above is shown in gallons; below 1 lb is shown in ounces.
    Every other unit is returned unchanged.
    """
    if unit == DoseUnit.FLUID_OUNCES and amount >= CONFIG.FL_OZ_PER_GALLON:
        return amount / CONFIG.FL_OZ_PER_GALLON, DoseUnit.GALLONS
    if unit == DoseUnit.POUNDS and amount < 1.0:
        return amount * CONFIG.OUNCES_PER_POUND, DoseUnit.OUNCES
    return amount, unit


# =============================================================================
# Temperature
# =============================================================================

def fahrenheit_to_celsius(temp_f: float) -> float:
    """Convert °F to °C."""
    return (temp_f - 32) * 5 / 9


def celsius_to_fahrenheit(temp_c: float) -> float:
    """Convert °C to °F."""
    return temp_c * 9 / 5 + 32


def to_fahrenheit(value: float, unit: Optional[Union[str, TemperatureUnit]] = None) -> float:
    """
    Normalize a temperature reading to °F.

    Args:
        value: Temperature reading
        unit: Unit of the reading (default fahrenheit)
    """
    if unit is None:
        return value
    unit = parse_selector(TemperatureUnit, unit, "temp_unit")
    if unit == TemperatureUnit.CELSIUS:
        return celsius_to_fahrenheit(value)
    return value


# Validation function
def validate_conversions():
    """
    Validate unit conversion functions.
    Called on module import to ensure correctness.
    """
    assert abs(cubic_feet_to_gallons(1) - 7.48052) < 1e-9, "Cubic feet conversion error"
    assert abs(water_mass_grams(1) - 3785.41) < 1e-6, "Water mass conversion error"
    assert abs(convert_amount(2, DoseUnit.BAGS, DoseUnit.POUNDS) - 80) < 1e-9, "Bag conversion error"
    assert abs(convert_amount(1, DoseUnit.GALLONS, DoseUnit.FLUID_OUNCES) - 128) < 1e-9, "Fluid ounce conversion error"
    assert abs(celsius_to_fahrenheit(100) - 212) < 1e-9, "Temperature conversion error"


# Run validation on import
validate_conversions()
