"""
Data models for the ROI engine.

ROIInputs is the validated, immutable input record. ROIResults is derived
from it by the calculator and carries every intermediate cost figure.
"""

from dataclasses import dataclass, asdict, fields
from typing import Dict, Any, Optional, Tuple


@dataclass(frozen=True)
class FieldSpec:
    """Inclusive numeric range for one input field."""
    name: str
    minimum: float
    maximum: float
    allow_zero: bool = True  # False: 0 is below the bound even where minimum is 0
    required: bool = True
    default: Optional[float] = None


# Declaration order is the order validation messages are reported in.
INPUT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("monthly_invoice_volume", 1, 100_000),
    FieldSpec("num_ap_staff", 1, 50),
    FieldSpec("avg_hours_per_invoice", 0.01, 10),
    FieldSpec("hourly_wage", 1, 500),
    FieldSpec("error_rate_manual", 0, 100),
    FieldSpec("error_cost", 0, 100_000, allow_zero=False),
    FieldSpec("time_horizon_months", 1, 240),
    FieldSpec("one_time_implementation_cost", 0, 10_000_000, required=False, default=0.0),
)


@dataclass(frozen=True)
class ROIInputs:
    """Operational inputs for one ROI simulation."""

    monthly_invoice_volume: float
    num_ap_staff: float
    avg_hours_per_invoice: float
    hourly_wage: float
    error_rate_manual: float  # percent
    error_cost: float
    time_horizon_months: float
    one_time_implementation_cost: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ROIResults:
    """Monthly cost model and ROI figures for one simulation."""

    monthly_savings: float
    payback_months: Optional[float]  # None when monthly savings <= 0
    roi_percentage: float
    cumulative_savings: float
    net_savings: float
    error_savings: float
    labor_cost_saved: float
    automation_cost: float
    labor_cost_manual: float
    baseline_error_cost: float
    automation_error_cost: float
    bias_multiplier: float

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ROIResults":
        """Create from a stored record, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})
