"""
Database module for the ROI simulator.

Stores named scenarios and captured report e-mail addresses in Supabase or
in memory.
"""

from .client import (
    StoreClient,
    SupabaseStoreClient,
    InMemoryStoreClient,
    create_store_client,
    check_connection,
)
from .models import ScenarioRecord, EmailCaptureRecord
from .repository import (
    ScenarioRepository,
    EmailCaptureRepository,
    ScenarioStoreError,
    ScenarioNotFoundError,
    is_valid_scenario_id,
    validate_scenario_name,
)

__all__ = [
    "StoreClient",
    "SupabaseStoreClient",
    "InMemoryStoreClient",
    "create_store_client",
    "check_connection",
    "ScenarioRecord",
    "EmailCaptureRecord",
    "ScenarioRepository",
    "EmailCaptureRepository",
    "ScenarioStoreError",
    "ScenarioNotFoundError",
    "is_valid_scenario_id",
    "validate_scenario_name",
]
