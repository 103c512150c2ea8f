"""
Label and number formatting shared by the PDF report and e-mail summary.
"""

import math
import numbers
from typing import Any, Dict, List


def format_label(key: str) -> str:
    """Format a field name as a label: 'roi_percentage' -> 'Roi Percentage'."""
    words = key.replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def format_number(value: Any) -> str:
    """
    Format a number for display.

    Missing or non-finite values render as "N/A". Magnitudes of at least 1
    are comma-grouped with at most two fraction digits; smaller magnitudes
    use four fixed fraction digits.
    """
    if value is None:
        return "N/A"
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return str(value)
    if not math.isfinite(value):
        return "N/A"

    if abs(value) >= 1:
        text = f"{value:,.2f}"
        return text.rstrip("0").rstrip(".")
    return f"{value:.4f}"


def format_value(value: Any) -> str:
    """Format an arbitrary input value; numbers go through format_number."""
    if value is None or (isinstance(value, numbers.Real) and not isinstance(value, bool)):
        return format_number(value)
    return str(value)


def summary_lines(values: Dict[str, Any]) -> List[str]:
    """Render 'Label: value' lines in mapping order."""
    return [f"{format_label(key)}: {format_number(value)}" for key, value in values.items()]
