"""
Input validation for the ROI engine.

Checks presence and numeric range of every input field and reports all
violations at once, one message per field, in declaration order.

Usage:
    from invoice_roi.roi.validation import validate_inputs, parse_inputs

    errors = validate_inputs({"monthly_invoice_volume": 0})
    inputs = parse_inputs(payload)  # raises InputValidationError
"""

import logging
import math
import numbers
from typing import Any, List, Mapping, Optional, Tuple

from .models import FieldSpec, INPUT_FIELDS, ROIInputs

logger = logging.getLogger(__name__)


class InputValidationError(ValueError):
    """Raised when one or more input fields are missing or out of range."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


_MISSING = object()


def _format_bound(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _coerce_number(value: Any) -> Tuple[Optional[float], Optional[str]]:
    """
    Coerce a raw value to float.

    Returns (number, None) on success, or (None, reason) where reason is
    "missing" or "not_a_number".
    """
    if value is _MISSING or value is None:
        return None, "missing"

    # bool is an int subclass; "true" is not a count
    if isinstance(value, bool):
        return None, "not_a_number"

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None, "missing"
        try:
            number = float(text)
        except ValueError:
            return None, "not_a_number"
    elif isinstance(value, numbers.Real):
        number = float(value)
    else:
        return None, "not_a_number"

    if math.isnan(number):
        return None, "not_a_number"
    return number, None


def _check_field(spec: FieldSpec, raw: Mapping[str, Any]) -> Tuple[Optional[float], Optional[str]]:
    """Return (coerced value, violation message) for one field."""
    number, reason = _coerce_number(raw.get(spec.name, _MISSING))

    if reason == "missing":
        if not spec.required:
            return spec.default, None
        return None, f"{spec.name} is required"
    if reason == "not_a_number":
        return None, f"{spec.name} must be a number"

    out_of_range = not spec.minimum <= number <= spec.maximum
    if out_of_range or (number == 0 and not spec.allow_zero):
        return None, (
            f"{spec.name} must be between {_format_bound(spec.minimum)} "
            f"and {_format_bound(spec.maximum)} (got {_format_bound(number)})"
        )
    return number, None


def validate_inputs(raw: Any) -> List[str]:
    """
    Validate a raw input mapping.

    Args:
        raw: Key/value record, typically a decoded JSON body

    Returns:
        Ordered list of violation messages; empty when the record is valid
    """
    if not isinstance(raw, Mapping):
        return ["inputs must be an object"]

    errors = []
    for spec in INPUT_FIELDS:
        _, message = _check_field(spec, raw)
        if message:
            errors.append(message)
    return errors


def parse_inputs(raw: Any) -> ROIInputs:
    """
    Validate and coerce a raw input mapping into ROIInputs.

    Raises:
        InputValidationError: If any field is missing or out of range
    """
    if not isinstance(raw, Mapping):
        raise InputValidationError(["inputs must be an object"])

    values = {}
    errors = []
    for spec in INPUT_FIELDS:
        value, message = _check_field(spec, raw)
        if message:
            errors.append(message)
        else:
            values[spec.name] = value

    if errors:
        logger.info(f"Rejected ROI inputs with {len(errors)} violation(s)")
        raise InputValidationError(errors)

    return ROIInputs(**values)
