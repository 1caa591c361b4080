"""
Custom exception hierarchy for the Pool Chemistry MCP Server.

Provides specific exception types for input validation failures.
All exceptions inherit from PoolChemistryError for easy catching of
engine-specific errors.
"""
from typing import Any, Dict, Iterable, Optional


class PoolChemistryError(Exception):
    """Base exception for all pool chemistry engine errors.

    All custom exceptions in this module inherit from this class,
    allowing callers to catch any engine error with a single handler.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
        hint: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        parts = [self.message]
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"[{details_str}]")
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for MCP error responses."""
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.hint:
            result["hint"] = self.hint
        return result


# =============================================================================
# Input Validation Exceptions
# =============================================================================

class ValidationError(PoolChemistryError):
    """Input is missing, conflicting or not accepted for the selected mode.

    Attributes:
        field: Name of the offending input field, if known
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        hint: Optional[str] = None
    ):
        self.field = field
        self.value = value
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message=message, details=details, hint=hint)


class UnknownSelectorError(ValidationError):
    """Selector value is not part of its closed enumeration."""

    def __init__(
        self,
        field: str,
        value: Any,
        allowed: Iterable[str],
        hint: Optional[str] = None
    ):
        self.allowed = list(allowed)
        super().__init__(
            message=f"Unrecognized {field} '{value}'",
            field=field,
            value=value,
            hint=hint or f"Use one of: {', '.join(self.allowed)}"
        )


class InvalidDimensionError(ValidationError):
    """Pool geometry or volume input is missing or not positive."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        hint: Optional[str] = None
    ):
        super().__init__(message=message, field=field, value=value, hint=hint)


class OutOfRangeError(ValidationError):
    """Chemistry value falls outside its physically valid domain.

    Example: pH outside [6.0, 9.0] or a negative ppm reading.
    """

    def __init__(
        self,
        message: str,
        field: str,
        value: Any = None,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        hint: Optional[str] = None
    ):
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(message=message, field=field, value=value, hint=hint)
        if minimum is not None:
            self.details["minimum"] = minimum
        if maximum is not None:
            self.details["maximum"] = maximum
        # Rebuild so str(exc) carries the limits too
        self.args = (self._format_message(),)
