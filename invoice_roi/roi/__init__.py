"""
ROI Module - Estimate return on investment for invoice automation.

Features:
- Input validation that reports every violated field
- Monthly labor and error cost model
- Payback period and ROI percentage over a time horizon
"""

from .models import ROIInputs, ROIResults, FieldSpec, INPUT_FIELDS
from .validation import InputValidationError, validate_inputs, parse_inputs
from .calculator import calculate_roi, simulate, roi_constants, CONSTANTS

__all__ = [
    "ROIInputs",
    "ROIResults",
    "FieldSpec",
    "INPUT_FIELDS",
    "InputValidationError",
    "validate_inputs",
    "parse_inputs",
    "calculate_roi",
    "simulate",
    "roi_constants",
    "CONSTANTS",
]
