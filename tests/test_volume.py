"""
Tests for the pool volume calculator.

Hand calculations use 7.48052 gal/ft³ and the shape areas:
rectangle L×W, circle π(D/2)², oval π(L/2)(W/2), kidney 0.8·L·W.
"""
import math

import pytest

from pool_tools.exceptions import InvalidDimensionError, ValidationError
from pool_tools.volume import PoolShape, calculate_surface_area, compute_volume

pytestmark = pytest.mark.unit


class TestComputeVolume:
    """Volume from shape, dimensions and depth."""

    def test_rectangular_reference_pool(self, rectangular_pool):
        """Test 32 × 16 × 5 ft gives 19,150 gal."""
        result = compute_volume(**rectangular_pool)

        assert result.shape == PoolShape.RECTANGULAR
        assert result.surface_area == 512.0
        assert result.cubic_feet == 2560.0
        # 2560 × 7.48052 = 19150.13
        assert result.gallons == 19150

    def test_circular(self):
        """Test circular area uses the diameter."""
        result = compute_volume("circular", {"diameter": 20}, 4)

        area = math.pi * 10 ** 2
        assert result.surface_area == pytest.approx(area, abs=0.005)
        assert result.cubic_feet == pytest.approx(area * 4, abs=0.005)
        assert result.gallons == 9400

    def test_oval(self):
        """Test oval area as an ellipse on length and width."""
        result = compute_volume("oval", {"length": 30, "width": 15}, 5)

        area = math.pi * 15 * 7.5
        assert result.surface_area == pytest.approx(area, abs=0.005)
        assert result.gallons == round(area * 5 * 7.48052)

    def test_oval_accepts_prefixed_aliases(self):
        """Test oval_length and ovalWidth keys are accepted."""
        plain = compute_volume("oval", {"length": 30, "width": 15}, 5)
        aliased = compute_volume("oval", {"oval_length": 30, "ovalWidth": 15}, 5)
        assert aliased == plain

    def test_kidney_uses_footprint_factor(self):
        """Test kidney area is 0.8 of the bounding rectangle."""
        result = compute_volume("kidney", {"kidney_length": 30, "kidney_width": 15}, 4)

        assert result.surface_area == 360.0
        assert result.cubic_feet == 1440.0
        # 1440 × 7.48052 = 10771.95
        assert result.gallons == 10772

    def test_shape_is_case_insensitive(self, rectangular_pool):
        """Test shape names are matched case-insensitively."""
        rectangular_pool["shape"] = "Rectangular"
        assert compute_volume(**rectangular_pool).gallons == 19150

    def test_volume_scales_linearly_with_depth(self):
        """Test doubling depth doubles volume."""
        shallow = compute_volume("rectangular", {"length": 40, "width": 20}, 3)
        deep = compute_volume("rectangular", {"length": 40, "width": 20}, 6)
        assert deep.cubic_feet == pytest.approx(2 * shallow.cubic_feet)


class TestVolumeValidation:
    """Invalid geometry is rejected before any calculation."""

    @pytest.mark.parametrize("shape,dimensions,depth,field", [
        pytest.param("rectangular", {"length": 32}, 5, "width", id="missing-width"),
        pytest.param("rectangular", {"length": 0, "width": 16}, 5, "length", id="zero-length"),
        pytest.param("circular", {"diameter": -10}, 5, "diameter", id="negative-diameter"),
        pytest.param("oval", {"length": 30, "width": 15}, 0, "avg_depth", id="zero-depth"),
        pytest.param("kidney", {"length": 30, "width": 15}, None, "avg_depth", id="missing-depth"),
        pytest.param("rectangular", {"length": "deep", "width": 16}, 5, "length", id="not-a-number"),
    ])
    def test_bad_dimensions(self, shape, dimensions, depth, field):
        """Test missing, non-positive or non-numeric dimensions name their field."""
        with pytest.raises(InvalidDimensionError) as exc_info:
            compute_volume(shape, dimensions, depth)
        assert exc_info.value.field == field

    def test_unknown_shape(self):
        """Test an unknown shape lists the valid shapes in the hint."""
        with pytest.raises(InvalidDimensionError) as exc_info:
            compute_volume("triangle", {"length": 10, "width": 10}, 4)
        assert exc_info.value.field == "shape"
        assert "rectangular" in exc_info.value.hint

    def test_dimension_error_is_a_validation_error(self):
        """Test InvalidDimensionError derives from ValidationError."""
        with pytest.raises(ValidationError):
            compute_volume("circular", {}, 4)


class TestSurfaceArea:
    """Test suite for calculate_surface_area."""

    def test_circle_matches_oval_with_equal_axes(self):
        """Test a circle equals an oval with equal axes."""
        circle = calculate_surface_area(PoolShape.CIRCULAR, {"diameter": 18.0})
        oval = calculate_surface_area(PoolShape.OVAL, {"length": 18.0, "width": 18.0})
        assert circle == pytest.approx(oval)
