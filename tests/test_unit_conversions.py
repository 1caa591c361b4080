"""
Tests for unit conversions, selector parsing and dose unit promotion.
"""
import pytest

from pool_tools.exceptions import UnknownSelectorError, ValidationError
from pool_tools.unit_conversions import (
    DoseUnit,
    TemperatureUnit,
    convert_amount,
    cubic_feet_to_gallons,
    fahrenheit_to_celsius,
    parse_selector,
    promote_unit,
    round_half_up,
    to_fahrenheit,
)

pytestmark = pytest.mark.unit


class TestRoundHalfUp:
    """Test suite for half-up rounding."""

    @pytest.mark.parametrize("value,digits,expected", [
        pytest.param(2.5, 0, 3.0, id="integer-tie"),
        pytest.param(0.125, 2, 0.13, id="two-decimal-tie"),
        pytest.param(-0.125, 2, -0.12, id="negative-tie"),
        pytest.param(1.234, 2, 1.23, id="round-down"),
    ])
    def test_ties_round_up(self, value, digits, expected):
        """Test ties round away from zero."""
        assert round_half_up(value, digits) == expected

    def test_differs_from_bankers_rounding(self):
        """Test 2.5 rounds to 3 where round() gives 2."""
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3.0


class TestConversions:
    """Test suite for volume, dose and temperature conversions."""

    def test_cubic_feet(self):
        """Test 2560 ft³ converts to 19,150.13 gal."""
        assert cubic_feet_to_gallons(2560) == pytest.approx(19150.13, abs=0.01)

    @pytest.mark.parametrize("amount,from_unit,to_unit,expected", [
        pytest.param(3, DoseUnit.BAGS, DoseUnit.POUNDS, 120.0, id="bags"),
        pytest.param(8, DoseUnit.OUNCES, DoseUnit.POUNDS, 0.5, id="ounces"),
        pytest.param(2, DoseUnit.GALLONS, DoseUnit.FLUID_OUNCES, 256.0, id="gal-to-floz"),
        pytest.param(64, DoseUnit.FLUID_OUNCES, DoseUnit.GALLONS, 0.5, id="floz-to-gal"),
    ])
    def test_convert_amount(self, amount, from_unit, to_unit, expected):
        """Test conversions within mass and within volume units."""
        assert convert_amount(amount, from_unit, to_unit) == pytest.approx(expected)

    def test_mass_and_volume_do_not_mix(self):
        """Test converting volume to mass raises ValueError."""
        with pytest.raises(ValueError):
            convert_amount(1, DoseUnit.GALLONS, DoseUnit.POUNDS)

    def test_temperature(self):
        """Test °F and °C conversions and the Fahrenheit default."""
        assert fahrenheit_to_celsius(212) == pytest.approx(100.0)
        assert to_fahrenheit(25, "celsius") == pytest.approx(77.0)
        assert to_fahrenheit(78) == 78
        assert to_fahrenheit(78, TemperatureUnit.FAHRENHEIT) == 78


class TestPromoteUnit:
    """Test suite for dose unit promotion."""

    def test_one_gallon_boundary(self):
        """Test 128 fl oz promotes to 1 gal and 127.9 does not."""
        assert promote_unit(128.0, DoseUnit.FLUID_OUNCES) == (1.0, DoseUnit.GALLONS)
        assert promote_unit(127.9, DoseUnit.FLUID_OUNCES) == (127.9, DoseUnit.FLUID_OUNCES)

    def test_one_pound_boundary(self):
        """Test pounds below 1 promote to ounces."""
        assert promote_unit(1.0, DoseUnit.POUNDS) == (1.0, DoseUnit.POUNDS)
        assert promote_unit(0.5, DoseUnit.POUNDS) == (8.0, DoseUnit.OUNCES)

    def test_gallons_untouched(self):
        """Test gallons are never promoted."""
        assert promote_unit(0.25, DoseUnit.GALLONS) == (0.25, DoseUnit.GALLONS)

    def test_label(self):
        """Test unit labels use spaces."""
        assert DoseUnit.FLUID_OUNCES.label == "fluid ounces"


class TestParseSelector:
    """Test suite for selector parsing."""

    @pytest.mark.parametrize("raw", ["fluid_ounces", "fluid ounces", "Fluid Ounces", "fluid-ounces"])
    def test_spellings(self, raw):
        """Test case, space and hyphen variants resolve to one member."""
        assert parse_selector(DoseUnit, raw, "unit") == DoseUnit.FLUID_OUNCES

    def test_member_passes_through(self):
        """Test an enum member is returned unchanged."""
        assert parse_selector(DoseUnit, DoseUnit.BAGS, "unit") is DoseUnit.BAGS

    def test_unknown(self):
        """Test unknown values list the allowed selectors."""
        with pytest.raises(UnknownSelectorError) as exc_info:
            parse_selector(TemperatureUnit, "kelvin", "temp_unit")
        assert exc_info.value.field == "temp_unit"
        assert exc_info.value.allowed == ["fahrenheit", "celsius"]

    def test_missing(self):
        """Test None is reported as required."""
        with pytest.raises(ValidationError, match="unit is required"):
            parse_selector(DoseUnit, None, "unit")
