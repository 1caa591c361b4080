"""
Request dispatch for the pool chemistry engine.

Turns a plain request dict (as received by an MCP tool) into a validated
request model, runs the matching calculator and returns a JSON-ready dict.
Pydantic's own validation errors are re-raised as the package's
ValidationError so callers only ever handle PoolChemistryError.
"""

from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union
import logging

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .core_config import CONFIG
from .dosage import compute_dosage_effect, compute_dosage_target
from .exceptions import OutOfRangeError, ValidationError
from .lsi import compute_lsi, compute_target_ph, interpret_lsi
from .readings import assess_reading, compute_combined_chlorine
from .schemas import (
    CalculatorName,
    DosageMode,
    DosageRequest,
    DosageTargetRequest,
    LSICalculateRequest,
    LSIMode,
    LSIRequest,
    ReadingsRequest,
    TDSRequest,
    VolumeRequest,
    WaterSample,
)
from .tds import estimate_tds
from .unit_conversions import (
    TemperatureUnit,
    fahrenheit_to_celsius,
    parse_selector,
    round_half_up,
    to_fahrenheit,
)
from .volume import compute_volume

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_DOSAGE_ADAPTER = TypeAdapter(DosageRequest)
_LSI_ADAPTER = TypeAdapter(LSIRequest)


def _from_pydantic(exc: PydanticValidationError) -> ValidationError:
    """Convert the first pydantic error into a ValidationError naming its field."""
    error = exc.errors()[0]
    loc = [str(part) for part in error.get("loc", ())]
    field = loc[-1] if loc else None
    if error["type"] == "missing":
        return ValidationError(f"{field} is required", field=field)
    message = f"Invalid {field}: {error['msg']}" if field else error["msg"]
    return ValidationError(message, field=field, value=error.get("input") if field else None)


def _validate(model: Union[Type[M], TypeAdapter], data: Any) -> M:
    if isinstance(data, BaseModel):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError("Request must be a JSON object", value=type(data).__name__)
    try:
        if isinstance(model, TypeAdapter):
            return model.validate_python(dict(data))
        return model.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise _from_pydantic(exc) from exc


def _with_mode(data: Any, mode_enum) -> Any:
    """Normalize the 'mode' tag so the tagged union sees its canonical value."""
    if isinstance(data, Mapping):
        mode = parse_selector(mode_enum, data.get("mode"), "mode")
        data = {**data, "mode": mode.value}
    return data


# =============================================================================
# Calculators
# =============================================================================

def calculate_volume(request: Union[Mapping[str, Any], VolumeRequest]) -> Dict[str, Any]:
    """Pool surface area and volume."""
    req = _validate(VolumeRequest, request)
    result = compute_volume(req.shape, req.dimensions, req.avg_depth)
    return result.model_dump(mode="json")


def calculate_dosage(request: Union[Mapping[str, Any], DosageTargetRequest]) -> Dict[str, Any]:
    """Dose needed for a target level, or level reached by a known dose."""
    req = _validate(_DOSAGE_ADAPTER, _with_mode(request, DosageMode))

    if isinstance(req, DosageTargetRequest):
        result = compute_dosage_target(
            req.chemical, req.gallons, req.current_level, req.target_level, req.chemical_type
        )
    else:
        result = compute_dosage_effect(
            req.chemical, req.gallons, req.current_level, req.amount_added, req.unit,
            req.chemical_type
        )
    return result.model_dump(mode="json")


def _resolve_tds(sample: WaterSample) -> Tuple[Optional[float], bool]:
    """
    Return (tds, estimated). Estimation only happens on explicit request
    and never replaces a measured value.
    """
    if sample.estimate_tds:
        if sample.tds is not None:
            raise ValidationError(
                "Provide either a measured tds or estimate_tds, not both",
                field="tds",
                value=sample.tds,
                hint="Drop estimate_tds to use the measured value"
            )
        return estimate_tds(sample.calcium, sample.alkalinity, sample.salt_ppm, sample.cya_ppm), True
    return sample.tds, False


def _temperature_in_fahrenheit(temperature: float, temp_unit: str) -> float:
    """
    Convert a request temperature to °F. Celsius readings are range-checked
    in °C first so the error speaks the caller's unit.
    """
    unit = parse_selector(TemperatureUnit, temp_unit, "temp_unit")
    if unit == TemperatureUnit.CELSIUS:
        low = fahrenheit_to_celsius(CONFIG.TEMP_F_MIN)
        high = fahrenheit_to_celsius(CONFIG.TEMP_F_MAX)
        if temperature < low or temperature > high:
            minimum, maximum = round_half_up(low, 2), round_half_up(high, 2)
            raise OutOfRangeError(
                f"temperature must be between {minimum} and {maximum} °C",
                field="temperature", value=temperature, minimum=minimum, maximum=maximum
            )
    return to_fahrenheit(temperature, unit)


def calculate_lsi(request: Union[Mapping[str, Any], LSICalculateRequest]) -> Dict[str, Any]:
    """LSI with its interpretation, or the pH that reaches a target LSI."""
    req = _validate(_LSI_ADAPTER, _with_mode(request, LSIMode))

    temp_f = None
    if req.temperature is not None:
        temp_f = _temperature_in_fahrenheit(req.temperature, req.temp_unit)
    tds, estimated = _resolve_tds(req)

    if isinstance(req, LSICalculateRequest):
        result = compute_lsi(req.ph, temp_f, req.calcium, req.alkalinity, tds)
        output = result.model_dump(mode="json")
        output["interpretation"] = interpret_lsi(result.lsi).model_dump(mode="json")
    else:
        output = compute_target_ph(req.target_lsi, temp_f, req.calcium, req.alkalinity, tds).model_dump(
            mode="json"
        )

    if estimated:
        output["estimated_tds"] = tds
    return output


def calculate_tds(request: Union[Mapping[str, Any], TDSRequest]) -> Dict[str, Any]:
    """TDS estimate from calcium, alkalinity, salt and CYA."""
    req = _validate(TDSRequest, request)
    return {"estimated_tds": estimate_tds(req.calcium, req.alkalinity, req.salt_ppm, req.cya_ppm)}


def assess_readings(request: Union[Mapping[str, Any], ReadingsRequest]) -> Dict[str, Any]:
    """Range check of each reading plus combined chlorine when total chlorine is given."""
    req = _validate(ReadingsRequest, request)
    readings = {k: v for k, v in req.readings.items() if v is not None}
    if not readings and req.total_chlorine is None:
        raise ValidationError("At least one reading is required", field="readings")

    output: Dict[str, Any] = {
        "assessments": [assess_reading(name, value).model_dump(mode="json") for name, value in readings.items()]
    }

    if req.total_chlorine is not None:
        if "free_chlorine" not in readings:
            raise ValidationError(
                "free_chlorine is required to derive combined chlorine",
                field="free_chlorine"
            )
        output["combined_chlorine"] = compute_combined_chlorine(
            readings["free_chlorine"], req.total_chlorine
        ).model_dump(mode="json")
    return output


_CALCULATORS = {
    CalculatorName.VOLUME: calculate_volume,
    CalculatorName.DOSAGE: calculate_dosage,
    CalculatorName.LSI: calculate_lsi,
    CalculatorName.TDS: calculate_tds,
    CalculatorName.READINGS: assess_readings,
}


def run_calculation(request: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Dispatch a tagged request to its calculator.

    Args:
        request: Dict with a 'calculator' key (volume, dosage, lsi, tds,
            readings) plus that calculator's fields

    Returns:
        JSON-ready result dict

    Raises:
        PoolChemistryError: On any invalid input; no partial results
    """
    if not isinstance(request, Mapping):
        raise ValidationError("Request must be a JSON object", value=type(request).__name__)
    name = parse_selector(CalculatorName, request.get("calculator"), "calculator")
    data = {k: v for k, v in request.items() if k != "calculator"}
    logger.debug(f"Dispatching {name.value} request")
    return _CALCULATORS[name](data)
