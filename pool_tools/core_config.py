"""
Core Configuration Module for Pool Chemistry MCP Server

Centralizes all configuration constants to prevent duplication and divergence.
All unit conventions, dosing rates, domain limits and LSI coefficients are
defined here.
"""

from dataclasses import dataclass
from typing import Dict, Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoreConfig:
    """
    Centralized configuration for the pool chemistry engine.

    This class contains all unit conventions, chemical dosing rates and
    validation limits used throughout the application.
    Using frozen=True ensures these values cannot be modified at runtime.
    """

    # Unit conventions (fixed for compatibility with field worksheets)
    GALLONS_PER_CUBIC_FOOT: float = 7.48052
    LITERS_PER_GALLON: float = 3.78541
    GRAMS_PER_LITER: float = 1000.0     # Water density, 1 kg/L
    GRAMS_PER_POUND: float = 453.592
    FL_OZ_PER_GALLON: float = 128.0
    OUNCES_PER_POUND: float = 16.0
    POUNDS_PER_SALT_BAG: float = 40.0

    # Pool geometry
    KIDNEY_AREA_FACTOR: float = 0.8  # Empirical footprint of freeform/kidney pools

    # Dosing reference volume: rates are quoted per 10,000 gallons
    REFERENCE_GALLONS: float = 10000.0

    # Free chlorine
    LIQUID_CHLORINE_FL_OZ_PER_PPM_PER_1K_GAL: float = 1.0
    POWDER_CHLORINE_PPM_PER_LB: float = 10.0     # per 10k gal
    GRANULAR_CHLORINE_PPM_PER_LB: float = 8.0    # per 10k gal

    # pH (effect mode rates, per 10k gal)
    SODA_ASH_PH_PER_LB: float = 0.2
    MURIATIC_ACID_PH_PER_GAL: float = 0.2
    # pH (target mode factors, amount per gallon of pool water per pH unit)
    SODA_ASH_TARGET_LB_PER_GAL: float = 0.0002
    MURIATIC_ACID_TARGET_GAL_PER_GAL: float = 0.0001
    PH_NO_ACTION_BAND: float = 0.1

    # Balancing chemicals (ppm per lb per 10k gal)
    SODIUM_BICARBONATE_PPM_PER_LB: float = 10.0
    CALCIUM_CHLORIDE_PPM_PER_LB: float = 10.0
    STABILIZER_PPM_PER_LB: float = 10.0

    # Chemistry domains
    PH_MIN: float = 6.0
    PH_MAX: float = 9.0
    TEMP_F_MIN: float = 32.0
    TEMP_F_MAX: float = 120.0

    # Langelier Saturation Index coefficients
    LSI_PHS_CONSTANT: float = 9.3
    LSI_TEMP_SLOPE: float = -13.12
    LSI_TEMP_INTERCEPT: float = 34.55
    LSI_CALCIUM_OFFSET: float = 0.4
    KELVIN_OFFSET: float = 273.0

    # TDS estimate (ppm contributed per ppm of reading, plus background)
    TDS_CALCIUM_FACTOR: float = 1.5
    TDS_ALKALINITY_FACTOR: float = 1.2
    TDS_BACKGROUND_PPM: float = 200.0

    # Combined chlorine above this level calls for a shock treatment
    COMBINED_CHLORINE_SHOCK_PPM: float = 0.5

    def get_ideal_ranges(self) -> Dict[str, Tuple[float, float, float]]:
        """
        Get ideal service ranges for routine test readings.

        Returns:
            Mapping of parameter name to (minimum, maximum, ideal)
        """
        return {
            'ph': (7.2, 7.6, 7.4),
            'free_chlorine': (1.0, 3.0, 2.0),
            'alkalinity': (80.0, 120.0, 100.0),
            'calcium': (200.0, 400.0, 300.0),
        }

    def get_lsi_band_limits(self) -> Tuple[float, ...]:
        """
        Get LSI classification thresholds in ascending order.

        The three negative limits close their band on the left
        (lsi < limit falls below), the three positive limits are inclusive
        upper edges (lsi <= limit falls below).
        """
        return (-2.0, -0.5, -0.3, 0.3, 0.5, 2.0)


# Create singleton instance
CONFIG = CoreConfig()


# Validation functions
def validate_config():
    """
    Validate configuration values are reasonable.
    Called on module import to catch configuration errors early.
    """
    # Check unit conventions
    assert CONFIG.GALLONS_PER_CUBIC_FOOT > 0, "Gallons per cubic foot must be positive"
    assert CONFIG.LITERS_PER_GALLON > 0, "Liters per gallon must be positive"
    assert CONFIG.GRAMS_PER_POUND > 0, "Grams per pound must be positive"
    assert CONFIG.FL_OZ_PER_GALLON > 0, "Fluid ounces per gallon must be positive"
    assert CONFIG.POUNDS_PER_SALT_BAG > 0, "Salt bag weight must be positive"

    # Check dosing rates
    for attr_name in dir(CONFIG):
        if attr_name.endswith('_PER_LB') or attr_name.endswith('_PER_GAL'):
            value = getattr(CONFIG, attr_name)
            assert value > 0, f"{attr_name} must be positive"

    # Check domains
    assert CONFIG.PH_MIN < CONFIG.PH_MAX, "pH range is empty"
    assert CONFIG.TEMP_F_MIN < CONFIG.TEMP_F_MAX, "Temperature range is empty"

    limits = CONFIG.get_lsi_band_limits()
    assert list(limits) == sorted(limits), "LSI band limits must be ascending"

    for name, (low, high, ideal) in CONFIG.get_ideal_ranges().items():
        assert low <= ideal <= high, f"Ideal {name} must sit inside its range"


# Run validation on import
validate_config()
