"""
Invoice ROI REST API.

FastAPI-based REST API for ROI simulation, saved scenarios and reports.

Usage:
    uvicorn invoice_roi.api.main:create_app --factory --reload
"""

from .main import create_app

__all__ = ["create_app"]
