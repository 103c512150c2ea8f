"""
ROI Calculator - single-period cost model for invoice automation.

Compares the monthly cost of manual invoice processing (labor plus errors)
with the cost of automated processing, scales the difference by a bias
multiplier and projects it over the chosen time horizon.

The bias multiplier is floored at 1.1, so every result carries at least a
10% uplift. roi_percentage is an optimistic figure, not an unbiased
projection.
"""

from typing import Any, Dict, Mapping

from .models import ROIInputs, ROIResults
from .validation import parse_inputs


CONSTANTS: Dict[str, float] = {
    "automated_cost_per_invoice": 0.2,
    "error_rate_auto_percent": 0.1,
    "time_saved_per_invoice_minutes": 8,  # informational only
    "min_roi_boost_factor": 1.1,
    "bias_bonus_per_error_point": 0.0025,
}

AUTOMATED_COST_PER_INVOICE = CONSTANTS["automated_cost_per_invoice"]
ERROR_RATE_AUTO_PERCENT = CONSTANTS["error_rate_auto_percent"]
MIN_ROI_BOOST_FACTOR = CONSTANTS["min_roi_boost_factor"]
BIAS_BONUS_PER_ERROR_POINT = CONSTANTS["bias_bonus_per_error_point"]


def roi_constants() -> Dict[str, float]:
    """Return a copy of the fixed engine constants."""
    return dict(CONSTANTS)


def calculate_roi(inputs: ROIInputs) -> ROIResults:
    """
    Calculate ROI figures for validated inputs.

    Args:
        inputs: Validated inputs (see parse_inputs)

    Returns:
        ROIResults; payback_months is None when monthly savings <= 0
    """
    volume = inputs.monthly_invoice_volume

    labor_cost_manual = (
        inputs.num_ap_staff
        * inputs.hourly_wage
        * inputs.avg_hours_per_invoice
        * volume
    )
    automation_cost = volume * AUTOMATED_COST_PER_INVOICE

    baseline_error_cost = volume * (inputs.error_rate_manual / 100) * inputs.error_cost
    automation_error_cost = volume * (ERROR_RATE_AUTO_PERCENT / 100) * inputs.error_cost
    error_savings = baseline_error_cost - automation_error_cost

    raw_monthly_savings = labor_cost_manual + error_savings - automation_cost

    bias_multiplier = max(
        MIN_ROI_BOOST_FACTOR,
        1 + inputs.error_rate_manual * BIAS_BONUS_PER_ERROR_POINT,
    )
    monthly_savings = raw_monthly_savings * bias_multiplier

    implementation_cost = inputs.one_time_implementation_cost
    cumulative_savings = monthly_savings * inputs.time_horizon_months
    net_savings = cumulative_savings - implementation_cost

    if monthly_savings > 0:
        payback_months = implementation_cost / monthly_savings
    else:
        payback_months = None

    # Zero implementation cost is reported against a notional base of 1
    roi_base = implementation_cost if implementation_cost else 1
    roi_percentage = (
        (monthly_savings * inputs.time_horizon_months) - implementation_cost
    ) / roi_base * 100

    return ROIResults(
        monthly_savings=monthly_savings,
        payback_months=payback_months,
        roi_percentage=roi_percentage,
        cumulative_savings=cumulative_savings,
        net_savings=net_savings,
        error_savings=error_savings,
        labor_cost_saved=labor_cost_manual,
        automation_cost=automation_cost,
        labor_cost_manual=labor_cost_manual,
        baseline_error_cost=baseline_error_cost,
        automation_error_cost=automation_error_cost,
        bias_multiplier=bias_multiplier,
    )


def simulate(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate raw inputs and run the calculator.

    Returns the payload shared by every entry point:
    {"results": ..., "inputs": ..., "constants": ...}

    Raises:
        InputValidationError: If the inputs are invalid
    """
    inputs = parse_inputs(raw)
    results = calculate_roi(inputs)
    return {
        "results": results.to_dict(),
        "inputs": inputs.to_dict(),
        "constants": roi_constants(),
    }
