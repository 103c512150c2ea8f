"""
Invoice automation ROI simulator.

Estimates the return on investment of automating manual invoice processing
from staffing, wage, error-rate and volume inputs.
"""

__version__ = "1.0.0"
