"""
MCP Common Types and Rendering

Provides shared pieces for MCP tool responses:
- ResponseFormat enum for JSON/Markdown output
- Markdown rendering of calculator results
"""

from enum import Enum
from typing import Any, Dict, List


class ResponseFormat(str, Enum):
    """
    Output format for tool responses.

    JSON: Machine-readable structured data (default)
    MARKDOWN: Human-readable formatted text for display
    """
    JSON = "json"
    MARKDOWN = "markdown"


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        if value != 0 and abs(value) < 0.01:
            return f"{value:.3g}"
        return f"{value:,.2f}"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def format_as_markdown(data: Dict[str, Any], title: str = "Results") -> str:
    """
    Convert structured data to markdown format.

    Args:
        data: Dictionary to format
        title: Title for the markdown document

    Returns:
        Markdown-formatted string
    """
    lines = [f"# {title}", ""]

    def format_value(value: Any, indent: int = 0) -> str:
        """Recursively format values."""
        prefix = "  " * indent

        if isinstance(value, dict):
            result = []
            for k, v in value.items():
                if v is None:
                    continue
                formatted_key = k.replace("_", " ").title()
                if isinstance(v, (dict, list)):
                    result.append(f"{prefix}- **{formatted_key}**:")
                    result.append(format_value(v, indent + 1))
                else:
                    result.append(f"{prefix}- **{formatted_key}**: {_format_scalar(v)}")
            return "\n".join(result)

        elif isinstance(value, list):
            if not value:
                return f"{prefix}(none)"
            result = []
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    result.append(f"{prefix}{i + 1}.")
                    result.append(format_value(item, indent + 1))
                else:
                    result.append(f"{prefix}- {item}")
            return "\n".join(result)

        else:
            return f"{prefix}{_format_scalar(value)}"

    if "error" in data:
        lines.append(f"## Error: {data['error']}")
        lines.append("")
        lines.append(str(data.get("message", "")))
        if data.get("hint"):
            lines.append("")
            lines.append(f"**Hint**: {data['hint']}")
        return "\n".join(lines)

    for key, value in data.items():
        if value is None:
            continue
        formatted_key = key.replace("_", " ").title()

        if isinstance(value, (dict, list)):
            lines.append(f"## {formatted_key}")
            lines.append("")
            lines.append(format_value(value))
            lines.append("")
        else:
            lines.append(f"- **{formatted_key}**: {_format_scalar(value)}")

    return "\n".join(lines)


def format_volume_markdown(result: Dict[str, Any]) -> str:
    """Format a volume result as a markdown table."""
    lines = [
        "# Pool Volume",
        "",
        "| Parameter | Value | Unit |",
        "|-----------|-------|------|",
        f"| Shape | {_format_scalar(result['shape'])} | - |",
        f"| Surface Area | {_format_scalar(result['surface_area'])} | ft² |",
        f"| Volume | {_format_scalar(result['cubic_feet'])} | ft³ |",
        f"| Volume | {_format_scalar(result['gallons'])} | gal |",
    ]
    return "\n".join(lines)


def format_dosage_markdown(result: Dict[str, Any]) -> str:
    """
    Format a dosage result (either mode) as markdown.

    Args:
        result: DosageTargetResult or DosageEffectResult as a dict
    """
    chemical = _format_scalar(result["chemical"])
    lines = [f"# Dosage: {chemical}", "", f"**Product**: {result['product']}", ""]

    if result.get("mode") == "effect":
        lines.append(
            f"Level moves from **{_format_scalar(result['current_level'])}** to "
            f"**{_format_scalar(result['new_level'])}** "
            f"(change {result['change']:+.2f})"
        )
        if result.get("clamped"):
            lines.append("")
            lines.append("_Result clamped to the valid range._")
        return "\n".join(lines)

    if result.get("no_action"):
        lines.append(f"**{result.get('message') or 'No action needed'}**")
        return "\n".join(lines)

    lines.append(f"Add **{_format_scalar(result['amount'])} {result['unit']}**")
    if result.get("bags") is not None:
        lines.append(f"({_format_scalar(result['bags'])} bags of 40 lb)")
    return "\n".join(lines)


def format_lsi_markdown(result: Dict[str, Any]) -> str:
    """
    Format an LSI result with its interpretation and factor table.

    Args:
        result: LSI result dict; may carry 'interpretation', 'target_ph',
            'warnings' and 'estimated_tds'
    """
    lines = ["# Langelier Saturation Index", ""]

    if "target_ph" in result:
        lines.append(
            f"- **Target pH** for LSI {_format_scalar(result['target_lsi'])}: "
            f"{_format_scalar(result['target_ph'])}"
        )
    else:
        lines.append(f"- **LSI**: {result['lsi']:+.2f}")
    lines.append(f"- **pHs**: {_format_scalar(result['pHs'])}")
    if result.get("estimated_tds") is not None:
        lines.append(f"- **TDS (estimated)**: {_format_scalar(result['estimated_tds'])} ppm")
    lines.append("")

    interpretation = result.get("interpretation")
    if interpretation:
        lines.append(f"## {_format_scalar(interpretation['status'])}")
        lines.append("")
        lines.append(interpretation["description"])
        lines.append("")
        for recommendation in interpretation.get("recommendations", []):
            lines.append(f"- {recommendation}")
        lines.append("")

    lines.extend([
        "## Factors",
        "",
        "| Factor | Value |",
        "|--------|-------|",
    ])
    factors = result["factors"]
    lines.append(f"| A (TDS) | {factors['A']:.3f} |")
    lines.append(f"| B (temperature) | {factors['B']:.2f} |")
    lines.append(f"| C (calcium) | {factors['C']:.2f} |")
    lines.append(f"| D (alkalinity) | {factors['D']:.2f} |")
    lines.append(f"| Temperature | {factors['temp_c']:.2f} °C |")

    warnings: List[str] = result.get("warnings") or []
    if warnings:
        lines.extend(["", "## Warnings", ""])
        lines.extend(f"- {w}" for w in warnings)

    return "\n".join(lines)
