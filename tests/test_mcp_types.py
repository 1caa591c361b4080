"""
Tests for Markdown rendering of tool responses.
"""
import pytest

from pool_tools.calculator import calculate_dosage, calculate_lsi, calculate_volume
from pool_tools.exceptions import OutOfRangeError
from pool_tools.mcp_types import (
    ResponseFormat,
    format_as_markdown,
    format_dosage_markdown,
    format_lsi_markdown,
    format_volume_markdown,
)

pytestmark = pytest.mark.unit


class TestFormatAsMarkdown:
    """Test suite for the generic Markdown formatter."""

    def test_scalars_and_nested(self):
        """Test scalar fields become bullets and nested dicts become sections."""
        text = format_as_markdown(
            {"estimated_tds": 695, "combined_chlorine": {"needs_shock": True, "status": "Pool needs shocking"}},
            title="Readings",
        )
        assert text.startswith("# Readings")
        assert "- **Estimated Tds**: 695" in text
        assert "## Combined Chlorine" in text
        assert "- **Needs Shock**: yes" in text

    def test_error_dict(self):
        """Test an error dict renders its type, message and hint."""
        error = OutOfRangeError("ph must be between 6.0 and 9.0", field="ph", value=9.5,
                                minimum=6.0, maximum=9.0, hint="Retest the sample").to_dict()
        text = format_as_markdown(error, title="calculate_lsi")
        assert "## Error: OutOfRangeError" in text
        assert "ph must be between 6.0 and 9.0" in text
        assert "**Hint**: Retest the sample" in text

    def test_response_format_values(self):
        """Test ResponseFormat accepts its string values."""
        assert ResponseFormat("markdown") is ResponseFormat.MARKDOWN
        assert ResponseFormat.JSON.value == "json"


class TestCalculatorMarkdown:
    """Test suite for the per-calculator Markdown renderers."""

    def test_volume_table(self, rectangular_pool):
        """Test the volume table rows."""
        text = format_volume_markdown(calculate_volume(rectangular_pool))
        assert "| Volume | 19,150 | gal |" in text
        assert "| Surface Area | 512.00 | ft² |" in text

    def test_dosage_target(self, pool_gallons):
        """Test a salt dose renders pounds and bags."""
        text = format_dosage_markdown(calculate_dosage({
            "mode": "target", "chemical": "salt", "gallons": pool_gallons,
            "current_level": 0, "target_level": 3200,
        }))
        assert text.startswith("# Dosage: salt")
        assert "Add **534.11 pounds**" in text
        assert "bags of 40 lb" in text

    def test_dosage_no_action(self):
        """Test a met target renders its no-action message."""
        text = format_dosage_markdown(calculate_dosage({
            "mode": "target", "chemical": "ph", "gallons": 10000,
            "current_level": 7.4, "target_level": 7.4,
        }))
        assert "**No adjustment needed**" in text

    def test_dosage_effect_clamped(self):
        """Test a clamped pH effect is flagged."""
        text = format_dosage_markdown(calculate_dosage({
            "mode": "effect", "chemical": "ph", "gallons": 10000,
            "current_level": 8.8, "amount_added": 10, "unit": "pounds",
        }))
        assert "to **9.00**" in text
        assert "clamped" in text

    def test_lsi_with_interpretation(self, balanced_water):
        """Test the LSI report carries status, advice and factors."""
        text = format_lsi_markdown(calculate_lsi({"mode": "calculate", **balanced_water}))
        assert "## Balanced" in text
        assert "- Maintain current levels" in text
        assert "| A (TDS) | 0.200 |" in text

    def test_lsi_target_warning(self, balanced_water):
        """Test an out-of-range target pH renders a warnings section."""
        balanced_water.pop("ph")
        text = format_lsi_markdown(calculate_lsi({"mode": "target_ph", "target_lsi": 3.0, **balanced_water}))
        assert "**Target pH** for LSI 3.00" in text
        assert "## Warnings" in text
