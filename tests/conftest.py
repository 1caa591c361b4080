"""
Shared pytest fixtures for the pool chemistry test suite.

Provides:
- Test markers registration
- Common pool and water sample fixtures
"""
import os
import tempfile

import pytest
from typing import Dict, Any

# Keep the server's log file out of the working tree when tests import it
os.environ.setdefault(
    "POOL_CHEMISTRY_LOG_FILE",
    os.path.join(tempfile.gettempdir(), "pool_chemistry_mcp_tests.log")
)


# =============================================================================
# Pytest Markers Registration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "integration: marks tests going through request dispatch or the MCP layer")
    config.addinivalue_line("markers", "dosage: marks chemical dosage tests")
    config.addinivalue_line("markers", "lsi: marks Langelier Saturation Index tests")


# =============================================================================
# Pool Fixtures
# =============================================================================

@pytest.fixture
def rectangular_pool() -> Dict[str, Any]:
    """32 x 16 ft rectangle, 5 ft average depth (~19,150 gal)."""
    return {
        "shape": "rectangular",
        "dimensions": {"length": 32.0, "width": 16.0},
        "avg_depth": 5.0,
    }


@pytest.fixture
def pool_gallons() -> float:
    """Typical residential pool volume used across dosage tests."""
    return 20000.0


# =============================================================================
# Water Sample Fixtures
# =============================================================================

@pytest.fixture
def balanced_water() -> Dict[str, Any]:
    """Water whose LSI sits within ±0.01 of zero.

    pH 7.5, 78 °F, calcium 300 ppm, alkalinity 100 ppm, TDS 1000 ppm
    gives pHs ≈ 7.50.
    """
    return {
        "ph": 7.5,
        "temp_f": 78.0,
        "calcium": 300.0,
        "alkalinity": 100.0,
        "tds": 1000.0,
    }


@pytest.fixture
def corrosive_water() -> Dict[str, Any]:
    """Soft, cool, low-alkalinity water (LSI ≈ -1.44)."""
    return {
        "ph": 7.0,
        "temp_f": 60.0,
        "calcium": 100.0,
        "alkalinity": 50.0,
        "tds": 500.0,
    }


@pytest.fixture
def scaling_water() -> Dict[str, Any]:
    """Hard, warm, high-pH water (LSI ≈ +1.18)."""
    return {
        "ph": 8.2,
        "temp_f": 90.0,
        "calcium": 500.0,
        "alkalinity": 150.0,
        "tds": 3000.0,
    }
