"""
Repository pattern for scenario store access.

Wraps a StoreClient with typed records, name validation and error
translation. Repositories are cheap and request-scoped; the client they
wrap is owned by the application.
"""

import logging
import uuid
from typing import List, Optional

from ..roi import InputValidationError, ROIInputs, ROIResults
from .client import StoreClient
from .models import ScenarioRecord, EmailCaptureRecord

logger = logging.getLogger(__name__)

SCENARIO_NAME_MAX_LENGTH = 50


class ScenarioStoreError(RuntimeError):
    """Raised when the store backend fails."""


class ScenarioNotFoundError(LookupError):
    """Raised when no scenario exists for an id."""

    def __init__(self, scenario_id: str):
        super().__init__(f"Scenario not found: {scenario_id}")
        self.scenario_id = scenario_id


def is_valid_scenario_id(scenario_id) -> bool:
    """Scenario ids are UUIDs; anything else cannot name a stored scenario."""
    try:
        uuid.UUID(str(scenario_id))
    except ValueError:
        return False
    return True


def validate_scenario_name(name) -> Optional[str]:
    """Return a violation message for an invalid scenario name, else None."""
    if not isinstance(name, str):
        return "name is required"
    if not 1 <= len(name.strip()) <= SCENARIO_NAME_MAX_LENGTH:
        return f"name must be between 1 and {SCENARIO_NAME_MAX_LENGTH} characters"
    return None


class ScenarioRepository:
    """Repository for named scenarios."""

    def __init__(self, client: StoreClient):
        self._client = client

    def create(self, name: str, inputs: ROIInputs, results: ROIResults) -> ScenarioRecord:
        """Persist a scenario and return it with its id and timestamp."""
        message = validate_scenario_name(name)
        if message:
            raise InputValidationError([message])

        record = ScenarioRecord(name=name.strip(), data=inputs.to_dict(), results=results.to_dict())
        try:
            saved = self._client.insert_scenario(record.to_dict())
        except Exception as e:
            raise ScenarioStoreError(f"Failed to create scenario: {e}") from e
        if not saved:
            raise ScenarioStoreError("Failed to create scenario: store returned no record")

        scenario = self._decode(saved)
        logger.info("Scenario created", extra={"scenario_id": scenario.id})
        return scenario

    def _decode(self, row: dict) -> ScenarioRecord:
        try:
            return ScenarioRecord.from_dict(row)
        except (TypeError, ValueError) as e:
            raise ScenarioStoreError(f"Malformed scenario record: {e}") from e

    def get(self, scenario_id: str) -> ScenarioRecord:
        """Get scenario by ID."""
        if not is_valid_scenario_id(scenario_id):
            raise ScenarioNotFoundError(scenario_id)
        try:
            result = self._client.get_scenario(scenario_id)
        except Exception as e:
            raise ScenarioStoreError(f"Failed to fetch scenario: {e}") from e
        if not result:
            raise ScenarioNotFoundError(scenario_id)
        return self._decode(result)

    def list(self) -> List[ScenarioRecord]:
        """List all scenarios, newest first."""
        try:
            results = self._client.list_scenarios()
        except Exception as e:
            raise ScenarioStoreError(f"Failed to fetch scenarios: {e}") from e
        return [self._decode(r) for r in results]

    def delete(self, scenario_id: str) -> None:
        """Delete a scenario; raises ScenarioNotFoundError if absent."""
        if not is_valid_scenario_id(scenario_id):
            raise ScenarioNotFoundError(scenario_id)
        try:
            deleted = self._client.delete_scenario(scenario_id)
        except Exception as e:
            raise ScenarioStoreError(f"Failed to delete scenario: {e}") from e
        if not deleted:
            raise ScenarioNotFoundError(scenario_id)
        logger.info("Scenario deleted", extra={"scenario_id": scenario_id})


class EmailCaptureRepository:
    """Repository for e-mail addresses captured on report requests."""

    def __init__(self, client: StoreClient):
        self._client = client

    def capture(self, email: str) -> EmailCaptureRecord:
        """Record an e-mail address."""
        try:
            saved = self._client.insert_email_capture(EmailCaptureRecord(email=email).to_dict())
        except Exception as e:
            raise ScenarioStoreError(f"Failed to capture e-mail: {e}") from e
        return EmailCaptureRecord.from_dict(saved) if saved else EmailCaptureRecord(email=email)
