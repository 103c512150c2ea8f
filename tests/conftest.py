"""
Pytest configuration and fixtures for invoice ROI tests.

Provides reusable test fixtures for:
- Raw and validated simulation inputs
- Isolated settings and store clients
- A mocked mailer and an API test client
"""

import pytest
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from invoice_roi.core.config import Settings
from invoice_roi.db import InMemoryStoreClient
from invoice_roi.notify import ReportMailer
from invoice_roi.roi import parse_inputs


# =============================================================================
# INPUT FIXTURES
# =============================================================================

@pytest.fixture
def example_raw_inputs() -> dict:
    """Worked example: 1000 invoices/month, 3 staff, 5% manual error rate."""
    return {
        "monthly_invoice_volume": 1000,
        "num_ap_staff": 3,
        "avg_hours_per_invoice": 0.5,
        "hourly_wage": 25,
        "error_rate_manual": 5,
        "error_cost": 50,
        "time_horizon_months": 12,
        "one_time_implementation_cost": 5000,
    }


@pytest.fixture
def example_inputs(example_raw_inputs):
    return parse_inputs(example_raw_inputs)


@pytest.fixture
def out_of_range_inputs() -> dict:
    """Every field outside its range."""
    return {
        "monthly_invoice_volume": 0,
        "num_ap_staff": 51,
        "avg_hours_per_invoice": 0.001,
        "hourly_wage": 501,
        "error_rate_manual": -1,
        "error_cost": 100001,
        "time_horizon_months": 241,
        "one_time_implementation_cost": -5,
    }


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment's .env file."""
    return Settings(_env_file=None, store_backend="memory", log_level="WARNING")


@pytest.fixture
def store_client() -> InMemoryStoreClient:
    return InMemoryStoreClient()


@pytest.fixture
def mock_mailer() -> MagicMock:
    mailer = MagicMock(spec=ReportMailer)
    mailer.is_enabled.return_value = True
    mailer.send_report.return_value = True
    return mailer


@pytest.fixture
def api_client(settings, store_client, mock_mailer):
    """API test client wired to in-memory collaborators."""
    from fastapi.testclient import TestClient
    from invoice_roi.api.main import create_app

    app = create_app(settings=settings, store_client=store_client, mailer=mock_mailer)
    with TestClient(app) as client:
        yield client
