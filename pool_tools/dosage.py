"""
Chemical Dosage Calculators

One linear proportionality model shared by all six balance parameters
(salt, free chlorine, pH, total alkalinity, calcium hardness, cyanuric acid).
Every product is described by a row in PRODUCTS: the level change produced
by one base unit of product in 10,000 gallons of water.

Two modes, always selected explicitly by the caller:

    target: amount = |Δlevel| / target_rate × (gallons / 10,000)
    effect: Δlevel = direction × effect_rate × amount / (gallons / 10,000)

Target and effect rates are equal for every product except the two pH
adjusters, whose target factors (0.0002 lb and 0.0001 gal per pool gallon
per pH unit) are not the inverse of their 0.2 pH per unit effect rates.
Both constants are kept as field worksheets quote them.

Unit re-labelling (fl oz → gal, lb → oz) happens after the math so the
core calculation stays in base units.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Literal, Optional, Tuple, Union
import math
import logging

from pydantic import BaseModel, Field

from .core_config import CONFIG
from .exceptions import InvalidDimensionError, OutOfRangeError, ValidationError
from .unit_conversions import (
    DoseUnit,
    convert_amount,
    gallons_to_liters,
    parse_selector,
    pounds_to_grams,
    promote_unit,
    round_half_up,
    water_mass_grams,
)

logger = logging.getLogger(__name__)


class Chemical(str, Enum):
    """Water balance parameters with a dosage calculator"""
    SALT = "salt"
    CHLORINE = "chlorine"
    PH = "ph"
    ALKALINITY = "alkalinity"
    CALCIUM = "calcium"
    CYANURIC_ACID = "cya"


class ChlorineType(str, Enum):
    """Free chlorine products"""
    LIQUID = "liquid"
    POWDER = "powder"
    GRANULAR = "granular"


class PhChemical(str, Enum):
    """pH adjusters"""
    SODA_ASH = "soda_ash"
    MURIATIC_ACID = "muriatic_acid"


@dataclass(frozen=True)
class LevelDomain:
    """Valid range of a chemistry reading."""
    field: str
    label: str
    minimum: float = 0.0
    maximum: Optional[float] = None

    def check(self, value: float, field: Optional[str] = None) -> float:
        """Validate value against the domain and return it as float."""
        name = field or self.field
        if value is None:
            raise ValidationError(f"{name} is required", field=name)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{name} must be a number", field=name, value=value)
        if math.isnan(number) or number < self.minimum or (
            self.maximum is not None and number > self.maximum
        ):
            if self.maximum is None:
                message = f"{self.label} ({name}) cannot be negative"
            else:
                message = f"{self.label} ({name}) must be between {self.minimum} and {self.maximum}"
            raise OutOfRangeError(
                message, field=name, value=value,
                minimum=self.minimum, maximum=self.maximum
            )
        return number


@dataclass(frozen=True)
class DosingProduct:
    """
    A chemical product and its linear dosing constants.

    Attributes:
        name: Product name shown to the technician
        base_unit: Unit the rates are expressed in
        effect_rate: Level change per base unit per 10k gal (effect mode)
        target_rate: Level change per base unit per 10k gal (target mode)
        direction: +1 raises the level, -1 lowers it
        accepted_units: Units an added amount may be given in
        auto_promote: Re-label target amounts into a human-scaled unit
        no_action_band: |target - current| below this needs no dose
    """
    name: str
    base_unit: DoseUnit
    effect_rate: float
    target_rate: float
    accepted_units: FrozenSet[DoseUnit]
    direction: int = 1
    auto_promote: bool = False
    no_action_band: float = 0.0


_POUND_UNITS = frozenset({DoseUnit.POUNDS, DoseUnit.OUNCES})
_LIQUID_UNITS = frozenset({DoseUnit.GALLONS, DoseUnit.FLUID_OUNCES})

# ppm per lb per 10k gal derived from the exact gram conversion
SALT_PPM_PER_LB = (
    pounds_to_grams(1.0) * 1e6
    / water_mass_grams(CONFIG.REFERENCE_GALLONS)
)

# Δfc = fl oz / (gallons / 1000)  →  ppm per fl oz per 10k gal
LIQUID_CHLORINE_PPM_PER_FL_OZ = (
    1.0 / CONFIG.LIQUID_CHLORINE_FL_OZ_PER_PPM_PER_1K_GAL
    / (CONFIG.REFERENCE_GALLONS / 1000)
)

SALT = DosingProduct(
    name="Pool Salt (Sodium Chloride)",
    base_unit=DoseUnit.POUNDS,
    effect_rate=SALT_PPM_PER_LB,
    target_rate=SALT_PPM_PER_LB,
    accepted_units=frozenset({DoseUnit.POUNDS, DoseUnit.OUNCES, DoseUnit.BAGS}),
)

CHLORINE_PRODUCTS: Dict[ChlorineType, DosingProduct] = {
    ChlorineType.LIQUID: DosingProduct(
        name="Liquid Chlorine",
        base_unit=DoseUnit.FLUID_OUNCES,
        effect_rate=LIQUID_CHLORINE_PPM_PER_FL_OZ,
        target_rate=LIQUID_CHLORINE_PPM_PER_FL_OZ,
        accepted_units=_LIQUID_UNITS,
        auto_promote=True,
    ),
    ChlorineType.POWDER: DosingProduct(
        name="Chlorine Powder",
        base_unit=DoseUnit.POUNDS,
        effect_rate=CONFIG.POWDER_CHLORINE_PPM_PER_LB,
        target_rate=CONFIG.POWDER_CHLORINE_PPM_PER_LB,
        accepted_units=_POUND_UNITS,
        auto_promote=True,
    ),
    ChlorineType.GRANULAR: DosingProduct(
        name="Granular Chlorine",
        base_unit=DoseUnit.POUNDS,
        effect_rate=CONFIG.GRANULAR_CHLORINE_PPM_PER_LB,
        target_rate=CONFIG.GRANULAR_CHLORINE_PPM_PER_LB,
        accepted_units=_POUND_UNITS,
        auto_promote=True,
    ),
}

PH_PRODUCTS: Dict[PhChemical, DosingProduct] = {
    PhChemical.SODA_ASH: DosingProduct(
        name="Soda Ash (Sodium Carbonate)",
        base_unit=DoseUnit.POUNDS,
        effect_rate=CONFIG.SODA_ASH_PH_PER_LB,
        target_rate=1.0 / (CONFIG.SODA_ASH_TARGET_LB_PER_GAL * CONFIG.REFERENCE_GALLONS),
        accepted_units=_POUND_UNITS,
        no_action_band=CONFIG.PH_NO_ACTION_BAND,
    ),
    PhChemical.MURIATIC_ACID: DosingProduct(
        name="Muriatic Acid (31.45%)",
        base_unit=DoseUnit.GALLONS,
        effect_rate=CONFIG.MURIATIC_ACID_PH_PER_GAL,
        target_rate=1.0 / (CONFIG.MURIATIC_ACID_TARGET_GAL_PER_GAL * CONFIG.REFERENCE_GALLONS),
        accepted_units=_LIQUID_UNITS,
        direction=-1,
        no_action_band=CONFIG.PH_NO_ACTION_BAND,
    ),
}

SODIUM_BICARBONATE = DosingProduct(
    name="Sodium Bicarbonate",
    base_unit=DoseUnit.POUNDS,
    effect_rate=CONFIG.SODIUM_BICARBONATE_PPM_PER_LB,
    target_rate=CONFIG.SODIUM_BICARBONATE_PPM_PER_LB,
    accepted_units=_POUND_UNITS,
)

CALCIUM_CHLORIDE = DosingProduct(
    name="Calcium Chloride",
    base_unit=DoseUnit.POUNDS,
    effect_rate=CONFIG.CALCIUM_CHLORIDE_PPM_PER_LB,
    target_rate=CONFIG.CALCIUM_CHLORIDE_PPM_PER_LB,
    accepted_units=_POUND_UNITS,
)

STABILIZER = DosingProduct(
    name="Stabilizer (Cyanuric Acid)",
    base_unit=DoseUnit.POUNDS,
    effect_rate=CONFIG.STABILIZER_PPM_PER_LB,
    target_rate=CONFIG.STABILIZER_PPM_PER_LB,
    accepted_units=_POUND_UNITS,
)

DOMAINS: Dict[Chemical, LevelDomain] = {
    Chemical.SALT: LevelDomain("ppm", "Salt level"),
    Chemical.CHLORINE: LevelDomain("fc", "Free chlorine"),
    Chemical.PH: LevelDomain("ph", "pH", CONFIG.PH_MIN, CONFIG.PH_MAX),
    Chemical.ALKALINITY: LevelDomain("alkalinity", "Total alkalinity"),
    Chemical.CALCIUM: LevelDomain("calcium", "Calcium hardness"),
    Chemical.CYANURIC_ACID: LevelDomain("cya", "Cyanuric acid"),
}

# Chemicals with a product choice, their selector enum and default product
_TYPED_PRODUCTS = {
    Chemical.CHLORINE: (ChlorineType, CHLORINE_PRODUCTS, ChlorineType.GRANULAR),
    Chemical.PH: (PhChemical, PH_PRODUCTS, PhChemical.SODA_ASH),
}

_SINGLE_PRODUCTS = {
    Chemical.SALT: SALT,
    Chemical.ALKALINITY: SODIUM_BICARBONATE,
    Chemical.CALCIUM: CALCIUM_CHLORIDE,
    Chemical.CYANURIC_ACID: STABILIZER,
}


class DosageTargetResult(BaseModel):
    """Amount of product needed to move a reading to its target."""
    mode: Literal["target"] = "target"
    chemical: Chemical = Field(..., description="Balance parameter")
    product: str = Field(..., description="Product to add")
    amount: float = Field(..., description="Amount to add (0 = no action needed)")
    unit: str = Field(..., description="Unit of amount, e.g. 'fluid ounces'")
    pounds: Optional[float] = Field(None, description="Amount in pounds for dry products")
    bags: Optional[float] = Field(None, description="Number of 40 lb bags (salt only)")
    no_action: bool = Field(False, description="True when the reading already meets the target")
    message: Optional[str] = Field(None, description="Explanation when no action is needed")


class DosageEffectResult(BaseModel):
    """Reading expected after adding a known amount of product."""
    mode: Literal["effect"] = "effect"
    chemical: Chemical = Field(..., description="Balance parameter")
    product: str = Field(..., description="Product added")
    current_level: float = Field(..., description="Reading before the addition")
    new_level: float = Field(..., description="Expected reading after the addition")
    change: float = Field(..., description="Expected change in the reading")
    clamped: bool = Field(False, description="True when new_level was clamped to the valid range")


DosageResult = Union[DosageTargetResult, DosageEffectResult]


def resolve_product(
    chemical: Union[str, Chemical],
    chemical_type: Optional[Union[str, Enum]] = None
) -> Tuple[Chemical, DosingProduct]:
    """
    Look up the product used for a chemical.

    Args:
        chemical: Balance parameter
        chemical_type: Product selector for chlorine ('liquid', 'powder',
            'granular') and pH ('soda_ash', 'muriatic_acid')

    Raises:
        UnknownSelectorError: If chemical or chemical_type is unrecognized
        ValidationError: If a type is given for a single-product chemical
    """
    chem = parse_selector(Chemical, chemical, "chemical")

    if chem in _TYPED_PRODUCTS:
        selector_cls, products, default = _TYPED_PRODUCTS[chem]
        selected = default if chemical_type is None else parse_selector(
            selector_cls, chemical_type, "chemical_type"
        )
        return chem, products[selected]

    if chemical_type is not None:
        raise ValidationError(
            f"{chem.value} does not take a chemical_type",
            field="chemical_type",
            value=chemical_type
        )
    return chem, _SINGLE_PRODUCTS[chem]


def _check_gallons(gallons) -> float:
    if gallons is None:
        raise InvalidDimensionError("Pool volume (gallons) is required", field="gallons")
    try:
        number = float(gallons)
    except (TypeError, ValueError):
        raise InvalidDimensionError("Pool volume (gallons) must be a number", field="gallons", value=gallons)
    if not math.isfinite(number) or number <= 0:
        raise InvalidDimensionError(
            "Pool volume must be greater than 0", field="gallons", value=gallons
        )
    return number


def _ph_product_for(current: float, target: float) -> PhChemical:
    """Acid lowers pH, soda ash raises it."""
    return PhChemical.MURIATIC_ACID if target < current else PhChemical.SODA_ASH


def _wrong_direction_message(product: DosingProduct) -> str:
    if product.direction > 0:
        return f"{product.name} cannot lower pH; use muriatic_acid"
    return f"{product.name} cannot raise pH; use soda_ash"


def _no_action_message(chem: Chemical) -> str:
    if chem == Chemical.PH:
        return "No adjustment needed"
    if chem == Chemical.CYANURIC_ACID:
        return "No stabilizer needed"
    return f"No {chem.name.lower().replace('_', ' ')} needed"


def compute_dosage_target(
    chemical: Union[str, Chemical],
    gallons: float,
    current_level: float,
    target_level: float,
    chemical_type: Optional[Union[str, Enum]] = None
) -> DosageTargetResult:
    """
    Calculate the amount of product needed to reach a target reading.

    Args:
        chemical: 'salt', 'chlorine', 'ph', 'alkalinity', 'calcium' or 'cya'
        gallons: Pool volume in US gallons
        current_level: Current reading (ppm, or pH units)
        target_level: Desired reading
        chemical_type: Product selector for chlorine and pH. When omitted
            for pH the product follows the direction of the change: muriatic
            acid to lower, soda ash to raise.

    Returns:
        DosageTargetResult; amount is 0 when the current reading already
        meets or passes the target in the product's direction

    Raises:
        InvalidDimensionError: If gallons is missing or not positive
        OutOfRangeError: If a reading is outside the chemical's domain
        ValidationError: If a selector is missing or unrecognized
    """
    chem, product = resolve_product(chemical, chemical_type)
    volume = _check_gallons(gallons)
    domain = DOMAINS[chem]
    current = domain.check(current_level, f"current_{domain.field}")
    target = domain.check(target_level, f"target_{domain.field}")

    if chem == Chemical.PH and chemical_type is None:
        product = PH_PRODUCTS[_ph_product_for(current, target)]

    # Signed shortfall in the direction this product moves the reading
    shortfall = (target - current) * product.direction
    if shortfall <= 0 or abs(target - current) < product.no_action_band:
        logger.debug(f"{chem.value}: current {current} meets target {target}, no dose")
        message = _no_action_message(chem)
        if chem == Chemical.PH and abs(target - current) >= product.no_action_band:
            message = _wrong_direction_message(product)
        return DosageTargetResult(
            chemical=chem,
            product=product.name,
            amount=0.0,
            unit=product.base_unit.label,
            pounds=0.0 if product.base_unit == DoseUnit.POUNDS else None,
            bags=0.0 if product is SALT else None,
            no_action=True,
            message=message,
        )

    amount_base = shortfall / product.target_rate * (volume / CONFIG.REFERENCE_GALLONS)

    pounds = None
    bags = None
    if product.base_unit == DoseUnit.POUNDS:
        pounds = round_half_up(amount_base, 2)
    if product is SALT:
        bags = round_half_up(amount_base / CONFIG.POUNDS_PER_SALT_BAG, 2)

    amount, unit = amount_base, product.base_unit
    if product.auto_promote:
        amount, unit = promote_unit(amount_base, product.base_unit)

    logger.debug(
        f"{chem.value} target: {current} -> {target} in {volume:.0f} gal "
        f"needs {amount_base:.4f} {product.base_unit.value} of {product.name}"
    )

    return DosageTargetResult(
        chemical=chem,
        product=product.name,
        amount=round_half_up(amount, 2),
        unit=unit.label,
        pounds=pounds,
        bags=bags,
    )


def compute_dosage_effect(
    chemical: Union[str, Chemical],
    gallons: float,
    current_level: float,
    amount_added: float,
    unit: Union[str, DoseUnit],
    chemical_type: Optional[Union[str, Enum]] = None
) -> DosageEffectResult:
    """
    Calculate the reading expected after adding a known amount of product.

    Args:
        chemical: 'salt', 'chlorine', 'ph', 'alkalinity', 'calcium' or 'cya'
        gallons: Pool volume in US gallons
        current_level: Current reading (ppm, or pH units)
        amount_added: Amount of product added
        unit: Unit of amount_added; must be accepted by the product
        chemical_type: Product selector for chlorine and pH

    Returns:
        DosageEffectResult with the new reading (pH clamped to 6.0-9.0)

    Raises:
        InvalidDimensionError: If gallons is missing or not positive
        OutOfRangeError: If the reading or amount is outside its domain
        ValidationError: If a selector or unit is missing or not accepted
    """
    chem, product = resolve_product(chemical, chemical_type)
    volume = _check_gallons(gallons)
    domain = DOMAINS[chem]
    current = domain.check(current_level, f"current_{domain.field}")
    added = LevelDomain("amount_added", "Amount added").check(amount_added)

    dose_unit = parse_selector(DoseUnit, unit, "unit")
    if dose_unit not in product.accepted_units:
        raise ValidationError(
            f"{product.name} cannot be measured in {dose_unit.label}",
            field="unit",
            value=dose_unit.value,
            hint=f"Use one of: {', '.join(sorted(u.value for u in product.accepted_units))}"
        )

    amount_base = convert_amount(added, dose_unit, product.base_unit)
    change = product.direction * product.effect_rate * amount_base / (volume / CONFIG.REFERENCE_GALLONS)
    new_level = current + change

    clamped = False
    if domain.maximum is not None and new_level > domain.maximum:
        new_level, clamped = domain.maximum, True
    elif new_level < domain.minimum:
        new_level, clamped = domain.minimum, True

    logger.debug(
        f"{chem.value} effect: {added} {dose_unit.value} of {product.name} in "
        f"{volume:.0f} gal ({gallons_to_liters(volume):.0f} L) moves {current} -> {new_level:.3f}"
    )

    return DosageEffectResult(
        chemical=chem,
        product=product.name,
        current_level=current,
        new_level=round_half_up(new_level, 2),
        change=round_half_up(new_level - current, 2),
        clamped=clamped,
    )
