"""
Store clients for scenarios and captured e-mail addresses.

Two backends share one interface:
- SupabaseStoreClient: PostgREST tables in a Supabase project
- InMemoryStoreClient: process-local dicts, for development and tests

Expected Supabase tables:
    scenarios(id uuid default gen_random_uuid(), name text, data jsonb,
              results jsonb, created_at timestamptz default now())
    email_captures(id uuid default gen_random_uuid(), email text,
                   created_at timestamptz default now())

Clients are constructed explicitly (see create_store_client) and owned by
whoever created them; there is no module-level instance.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from supabase import create_client, Client

from ..core.config import Settings

logger = logging.getLogger(__name__)


class StoreClient:
    """Interface implemented by every store backend."""

    backend = "base"

    def insert_scenario(self, data: dict) -> dict:
        raise NotImplementedError

    def get_scenario(self, scenario_id: str) -> Optional[dict]:
        raise NotImplementedError

    def list_scenarios(self) -> List[dict]:
        """List scenarios, newest first."""
        raise NotImplementedError

    def delete_scenario(self, scenario_id: str) -> bool:
        """Delete a scenario. Returns False if it did not exist."""
        raise NotImplementedError

    def insert_email_capture(self, data: dict) -> dict:
        raise NotImplementedError

    def ping(self) -> None:
        """Raise if the backend is unreachable."""

    def close(self) -> None:
        """Release backend resources."""


class SupabaseStoreClient(StoreClient):
    """Supabase-backed store with lazy connection."""

    backend = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        scenarios_table: str = "scenarios",
        email_captures_table: str = "email_captures",
    ):
        if not url or not key:
            raise ValueError(
                "ROI_SUPABASE_URL and ROI_SUPABASE_KEY must be set in environment"
            )
        self._url = url
        self._key = key
        self.scenarios_table = scenarios_table
        self.email_captures_table = email_captures_table
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        """Get or create the Supabase client."""
        if self._client is None:
            self._client = create_client(self._url, self._key)
        return self._client

    # ============================================
    # Scenarios
    # ============================================

    def insert_scenario(self, data: dict) -> dict:
        result = self.client.table(self.scenarios_table).insert(data).execute()
        return result.data[0] if result.data else None

    def get_scenario(self, scenario_id: str) -> Optional[dict]:
        result = (
            self.client.table(self.scenarios_table)
            .select("*")
            .eq("id", scenario_id)
            .execute()
        )
        return result.data[0] if result.data else None

    def list_scenarios(self) -> List[dict]:
        result = (
            self.client.table(self.scenarios_table)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return result.data

    def delete_scenario(self, scenario_id: str) -> bool:
        result = (
            self.client.table(self.scenarios_table)
            .delete()
            .eq("id", scenario_id)
            .execute()
        )
        return bool(result.data)

    # ============================================
    # E-mail captures
    # ============================================

    def insert_email_capture(self, data: dict) -> dict:
        result = self.client.table(self.email_captures_table).insert(data).execute()
        return result.data[0] if result.data else None

    def ping(self) -> None:
        self.client.table(self.scenarios_table).select("id").limit(1).execute()

    def close(self) -> None:
        self._client = None


class InMemoryStoreClient(StoreClient):
    """Thread-safe in-process store."""

    backend = "memory"

    def __init__(self):
        self._lock = threading.Lock()
        self._scenarios: Dict[str, dict] = {}
        self._email_captures: List[dict] = []

    def _stamp(self, data: dict) -> dict:
        row = dict(data)
        row["id"] = uuid.uuid4().hex
        row["created_at"] = datetime.now(timezone.utc)
        return row

    def insert_scenario(self, data: dict) -> dict:
        row = self._stamp(data)
        with self._lock:
            self._scenarios[row["id"]] = row
        return dict(row)

    def get_scenario(self, scenario_id: str) -> Optional[dict]:
        with self._lock:
            row = self._scenarios.get(scenario_id)
        return dict(row) if row else None

    def list_scenarios(self) -> List[dict]:
        with self._lock:
            rows = list(self._scenarios.values())
        # Insertion order breaks ties between equal timestamps
        rows = list(reversed(rows))
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in rows]

    def delete_scenario(self, scenario_id: str) -> bool:
        with self._lock:
            return self._scenarios.pop(scenario_id, None) is not None

    def insert_email_capture(self, data: dict) -> dict:
        row = self._stamp(data)
        with self._lock:
            self._email_captures.append(row)
        return dict(row)

    @property
    def email_captures(self) -> List[dict]:
        with self._lock:
            return [dict(r) for r in self._email_captures]

    def close(self) -> None:
        with self._lock:
            self._scenarios.clear()
            self._email_captures.clear()


def create_store_client(settings: Settings) -> StoreClient:
    """Create the store client selected by settings.store_backend."""
    if settings.store_backend == "supabase":
        logger.info("Using Supabase scenario store")
        return SupabaseStoreClient(
            url=settings.supabase_url,
            key=settings.supabase_key,
            scenarios_table=settings.scenarios_table,
            email_captures_table=settings.email_captures_table,
        )
    logger.info("Using in-memory scenario store")
    return InMemoryStoreClient()


def check_connection(client: StoreClient) -> bool:
    """Check if the store backend is reachable."""
    try:
        client.ping()
        return True
    except Exception as e:
        logger.error(f"Store connection error ({client.backend}): {e}")
        return False
