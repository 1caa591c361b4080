#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Pool Chemistry MCP Server

An STDIO MCP server for residential and commercial pool service.
Provides tools for pool volume, chemical dosing, Langelier Saturation Index
and routine test-reading checks. All calculations are stateless.
"""

import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports
load_dotenv()
if os.path.exists('.env'):
    print(f"Loaded .env file from {os.path.abspath('.env')}", file=sys.stderr)

import json
import logging
from typing import Any, Callable, Dict, Union

from fastmcp import FastMCP

from pool_tools.calculator import (
    assess_readings,
    calculate_dosage,
    calculate_lsi,
    calculate_tds,
    calculate_volume,
)
from pool_tools.exceptions import PoolChemistryError
from pool_tools.mcp_types import (
    ResponseFormat,
    format_as_markdown,
    format_dosage_markdown,
    format_lsi_markdown,
    format_volume_markdown,
)

# Configure logging for MCP - CRITICAL for protocol integrity
# Use a file handler for detailed logs and a stderr handler for warnings/errors only
LOG_FILE = os.environ.get('POOL_CHEMISTRY_LOG_FILE', 'pool_chemistry_mcp.log')
LOG_LEVEL = os.environ.get('POOL_CHEMISTRY_LOG_LEVEL', 'INFO').upper()

file_handler = logging.FileHandler(LOG_FILE)
file_handler.setLevel(LOG_LEVEL)

stderr_handler = logging.StreamHandler(sys.stderr)
# Keep stderr quiet; stdout carries the MCP protocol
stderr_handler.setLevel(logging.WARNING)

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[file_handler, stderr_handler]
)
logger = logging.getLogger(__name__)

# Configuration constants
MAX_REQUEST_SIZE = 64 * 1024  # 64KB max request size

mcp = FastMCP("Pool Chemistry Server")


def _run_tool(
    name: str,
    tool_input: Union[str, Dict[str, Any]],
    calculator: Callable[[Dict[str, Any]], Dict[str, Any]],
    render: Callable[[Dict[str, Any]], str],
) -> Union[Dict[str, Any], str]:
    """
    Shared body of every tool: parse, size-check, calculate, format.

    Returns the result dict, a Markdown string when response_format is
    'markdown', or an error dict {error, message, details?, hint?}.
    """
    # Handle both string and object inputs
    if isinstance(tool_input, str):
        try:
            tool_input = json.loads(tool_input)
        except json.JSONDecodeError:
            return {
                "error": "InvalidJSON",
                "message": "Input must be a valid JSON object or dict",
            }
    if not isinstance(tool_input, dict):
        return {
            "error": "ValidationError",
            "message": "Input must be a JSON object",
        }

    # Validate input size
    input_size = len(json.dumps(tool_input, default=str))
    if input_size > MAX_REQUEST_SIZE:
        return {
            "error": "RequestTooLarge",
            "message": f"Request size {input_size} bytes exceeds maximum {MAX_REQUEST_SIZE} bytes",
            "hint": "Please reduce the size of your request",
        }

    response_format = str(tool_input.get("response_format", ResponseFormat.JSON.value)).lower()
    markdown = response_format == ResponseFormat.MARKDOWN.value

    try:
        output = calculator(tool_input)
    except PoolChemistryError as e:
        logger.info(f"{name} rejected input: {e}")
        error = e.to_dict()
        return format_as_markdown(error, title=name) if markdown else error
    except Exception as e:
        logger.error(f"{name} failed: {e}", exc_info=True)
        return {
            "error": "CalculationFailed",
            "message": str(e),
            "hint": "Check server logs",
        }

    logger.info(f"{name} completed")
    return render(output) if markdown else output


@mcp.tool(
    description="""Calculate pool surface area and water volume.

    Shapes and required dimensions (feet):
    - rectangular: length, width
    - circular: diameter
    - oval: length, width (aliases oval_length, oval_width)
    - kidney: length, width (0.8 x length x width footprint)

    Example:
    {"shape": "rectangular", "dimensions": {"length": 32, "width": 16}, "avg_depth": 5}

    Returns surface_area (ft²), cubic_feet and gallons (nearest integer).
    Optional: response_format "json" (default) or "markdown".
    """
)
async def calculate_pool_volume(volume_input: Dict[str, Any]) -> Union[Dict[str, Any], str]:
    """Pool volume from shape and dimensions."""
    return _run_tool("calculate_pool_volume", volume_input, calculate_volume, format_volume_markdown)


@mcp.tool(
    description="""Calculate a chemical dose for a pool.

    mode "target": how much product moves current_level to target_level.
    mode "effect": what level results from adding amount_added in unit.

    chemical: salt (ppm), chlorine (free chlorine ppm), ph, alkalinity,
    calcium, cya. chemical_type selects the product for chlorine
    (liquid, powder, granular [default]) and pH (soda_ash, muriatic_acid;
    when omitted, target mode picks acid to lower and soda ash to raise,
    effect mode uses soda_ash); other chemicals take no chemical_type.

    Examples:
    {"mode": "target", "chemical": "salt", "gallons": 20000,
     "current_level": 0, "target_level": 3200}
    {"mode": "effect", "chemical": "chlorine", "chemical_type": "liquid",
     "gallons": 20000, "current_level": 1, "amount_added": 1, "unit": "gallons"}

    amount 0 with no_action true means the reading already meets the target.
    Optional: response_format "json" (default) or "markdown".
    """
)
async def calculate_chemical_dose(dosage_input: Dict[str, Any]) -> Union[Dict[str, Any], str]:
    """Chemical dose in target or effect mode."""
    return _run_tool("calculate_chemical_dose", dosage_input, calculate_dosage, format_dosage_markdown)


@mcp.tool(
    name="calculate_lsi",
    description="""Calculate the Langelier Saturation Index (LSI) of pool water.

    mode "calculate": LSI and interpretation from ph, temperature,
    calcium, alkalinity and tds.
    mode "target_ph": pH that yields target_lsi for the same water.

    temperature is in °F unless temp_unit is "celsius" (32-120 °F).
    tds must be measured; set estimate_tds true (and omit tds) to estimate
    it from calcium, alkalinity, salt_ppm and cya_ppm instead.

    Example:
    {"mode": "calculate", "ph": 7.5, "temperature": 78, "calcium": 300,
     "alkalinity": 100, "tds": 1000}

    Optional: response_format "json" (default) or "markdown".
    """
)
async def calculate_lsi_tool(lsi_input: Dict[str, Any]) -> Union[Dict[str, Any], str]:
    """LSI calculation, interpretation and target pH."""
    return _run_tool("calculate_lsi", lsi_input, calculate_lsi, format_lsi_markdown)


@mcp.tool(
    description="""Estimate total dissolved solids (ppm) when no TDS meter reading exists.

    tds = calcium x 1.5 + alkalinity x 1.2 + salt_ppm + cya_ppm + 200

    Example: {"calcium": 250, "alkalinity": 100}
    Optional: response_format "json" (default) or "markdown".
    """
)
async def estimate_pool_tds(tds_input: Dict[str, Any]) -> Union[Dict[str, Any], str]:
    """TDS estimate."""
    return _run_tool(
        "estimate_pool_tds", tds_input, calculate_tds,
        lambda output: format_as_markdown(output, title="TDS Estimate")
    )


@mcp.tool(
    description="""Check test-kit readings against service ranges.

    readings: any of ph (7.2-7.6), free_chlorine (1-3 ppm),
    alkalinity (80-120 ppm), calcium (200-400 ppm).
    total_chlorine: optional; with free_chlorine gives combined chlorine
    and whether the pool needs shocking (combined > 0.5 ppm).

    Example:
    {"readings": {"ph": 7.8, "free_chlorine": 1.5}, "total_chlorine": 2.4}

    Optional: response_format "json" (default) or "markdown".
    """
)
async def assess_pool_readings(readings_input: Dict[str, Any]) -> Union[Dict[str, Any], str]:
    """Reading assessment and combined chlorine."""
    return _run_tool(
        "assess_pool_readings", readings_input, assess_readings,
        lambda output: format_as_markdown(output, title="Reading Assessment")
    )


# Main entry point
def main():
    """Run the MCP server."""
    logger.info("Starting Pool Chemistry MCP Server...")
    logger.info(f"Logging to {LOG_FILE} at level {LOG_LEVEL}")

    # Log available tools
    logger.info("Available tools:")
    logger.info("  - calculate_pool_volume: Surface area and gallons from shape and dimensions")
    logger.info("  - calculate_chemical_dose: Target or effect dosing for six chemicals")
    logger.info("  - calculate_lsi: Langelier Saturation Index, interpretation and target pH")
    logger.info("  - estimate_pool_tds: TDS estimate from routine readings")
    logger.info("  - assess_pool_readings: Service-range check and combined chlorine")

    # Run the server
    mcp.run()


if __name__ == "__main__":
    main()
