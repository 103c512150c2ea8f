"""
Tests for the scenario store.

In-memory and mocked Supabase tests always run. Live Supabase tests require
ROI_SUPABASE_URL and ROI_SUPABASE_KEY.
"""

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from postgrest.exceptions import APIError

from invoice_roi.core.config import Settings
from invoice_roi.db import (
    EmailCaptureRepository,
    InMemoryStoreClient,
    ScenarioNotFoundError,
    ScenarioRecord,
    ScenarioRepository,
    ScenarioStoreError,
    SupabaseStoreClient,
    check_connection,
    create_store_client,
    validate_scenario_name,
)
from invoice_roi.roi import InputValidationError, calculate_roi


@pytest.fixture
def repo(store_client):
    return ScenarioRepository(store_client)


@pytest.fixture
def results(example_inputs):
    return calculate_roi(example_inputs)


class TestScenarioRepository:
    """Test scenario CRUD against the in-memory store."""

    def test_create_assigns_id_and_timestamp(self, repo, example_inputs, results):
        saved = repo.create("Baseline", example_inputs, results)
        assert saved.id
        assert isinstance(saved.created_at, datetime)
        assert saved.name == "Baseline"
        assert saved.data == example_inputs.to_dict()
        assert saved.results == results.to_dict()

    def test_get(self, repo, example_inputs, results):
        saved = repo.create("Baseline", example_inputs, results)
        retrieved = repo.get(saved.id)
        assert retrieved.id == saved.id
        assert retrieved.results["monthly_savings"] == pytest.approx(43725)

    def test_get_missing_raises(self, repo):
        with pytest.raises(ScenarioNotFoundError) as exc_info:
            repo.get("missing")
        assert exc_info.value.scenario_id == "missing"

    def test_list_newest_first(self, repo, example_inputs, results):
        names = ["first", "second", "third"]
        for name in names:
            repo.create(name, example_inputs, results)
        assert [s.name for s in repo.list()] == list(reversed(names))

    def test_list_empty(self, repo):
        assert repo.list() == []

    def test_delete(self, repo, example_inputs, results):
        saved = repo.create("Baseline", example_inputs, results)
        repo.delete(saved.id)
        with pytest.raises(ScenarioNotFoundError):
            repo.get(saved.id)

    def test_delete_twice_raises_not_found(self, repo, example_inputs, results):
        saved = repo.create("Baseline", example_inputs, results)
        repo.delete(saved.id)
        with pytest.raises(ScenarioNotFoundError):
            repo.delete(saved.id)

    def test_name_is_stripped(self, repo, example_inputs, results):
        assert repo.create("  Baseline  ", example_inputs, results).name == "Baseline"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51, None])
    def test_invalid_name_rejected(self, repo, example_inputs, results, name):
        with pytest.raises(InputValidationError):
            repo.create(name, example_inputs, results)

    def test_backend_failure_wrapped(self, example_inputs, results):
        client = MagicMock()
        client.insert_scenario.side_effect = ConnectionError("down")
        client.list_scenarios.side_effect = ConnectionError("down")
        repo = ScenarioRepository(client)

        with pytest.raises(ScenarioStoreError):
            repo.create("Baseline", example_inputs, results)
        with pytest.raises(ScenarioStoreError):
            repo.list()

    @pytest.mark.parametrize("scenario_id", ["does-not-exist", "", "123"])
    def test_non_uuid_id_is_not_found_without_query(self, scenario_id):
        client = MagicMock()
        repo = ScenarioRepository(client)

        with pytest.raises(ScenarioNotFoundError):
            repo.get(scenario_id)
        with pytest.raises(ScenarioNotFoundError):
            repo.delete(scenario_id)
        client.get_scenario.assert_not_called()
        client.delete_scenario.assert_not_called()

    def test_malformed_record_is_a_store_error(self):
        client = MagicMock()
        client.get_scenario.return_value = {"id": str(uuid4()), "name": "x", "created_at": "yesterday"}
        with pytest.raises(ScenarioStoreError):
            ScenarioRepository(client).get(client.get_scenario.return_value["id"])

    def test_empty_insert_result_is_an_error(self, example_inputs, results):
        client = MagicMock()
        client.insert_scenario.return_value = None
        with pytest.raises(ScenarioStoreError):
            ScenarioRepository(client).create("Baseline", example_inputs, results)


class TestScenarioName:
    """Tests for scenario name validation."""

    def test_valid_lengths(self):
        assert validate_scenario_name("a") is None
        assert validate_scenario_name("x" * 50) is None

    def test_invalid(self):
        assert validate_scenario_name("") is not None
        assert validate_scenario_name("x" * 51) is not None
        assert validate_scenario_name(42) == "name is required"


class TestEmailCapture:
    """Tests for captured report e-mail addresses."""

    def test_capture(self, store_client):
        record = EmailCaptureRepository(store_client).capture("ap@example.com")
        assert record.email == "ap@example.com"
        assert record.id
        assert [r["email"] for r in store_client.email_captures] == ["ap@example.com"]

    def test_capture_failure_wrapped(self):
        client = MagicMock()
        client.insert_email_capture.side_effect = OSError("down")
        with pytest.raises(ScenarioStoreError):
            EmailCaptureRepository(client).capture("ap@example.com")


class TestScenarioRecord:
    """Tests for record conversion."""

    def test_from_dict_parses_postgrest_timestamp(self):
        record = ScenarioRecord.from_dict({
            "id": "abc",
            "name": "Baseline",
            "data": {},
            "results": {},
            "created_at": "2024-05-01T12:00:00Z",
            "unexpected": "ignored",
        })
        assert record.created_at == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text,microsecond", [
        ("2024-05-01T12:00:00.12345+00:00", 123450),
        ("2024-05-01T12:00:00.1+00:00", 100000),
        ("2024-05-01T12:00:00.123456Z", 123456),
    ])
    def test_from_dict_parses_any_fraction_precision(self, text, microsecond):
        record = ScenarioRecord.from_dict({"name": "Baseline", "created_at": text})
        assert record.created_at.microsecond == microsecond
        assert record.created_at.utcoffset().total_seconds() == 0

    def test_to_dict_omits_store_fields(self):
        record = ScenarioRecord(name="Baseline", id="abc", created_at=datetime.now(timezone.utc))
        assert set(record.to_dict()) == {"name", "data", "results"}

    def test_to_json(self):
        record = ScenarioRecord(
            name="Baseline",
            id="abc",
            created_at=datetime(2024, 5, 1, 12, tzinfo=timezone.utc),
        )
        assert record.to_json()["created_at"] == "2024-05-01T12:00:00+00:00"


class TestStoreClientFactory:
    """Tests for backend selection."""

    def test_memory_backend(self):
        client = create_store_client(Settings(_env_file=None, store_backend="memory"))
        assert isinstance(client, InMemoryStoreClient)
        assert check_connection(client)

    def test_supabase_backend_requires_credentials(self):
        with pytest.raises(ValueError):
            create_store_client(Settings(_env_file=None, store_backend="supabase"))

    def test_supabase_backend(self):
        settings = Settings(
            _env_file=None,
            store_backend="supabase",
            supabase_url="https://project.supabase.co",
            supabase_key="key",
        )
        client = create_store_client(settings)
        assert isinstance(client, SupabaseStoreClient)
        assert client.scenarios_table == "scenarios"


class TestSupabaseStoreClient:
    """Test Supabase query construction with a mocked client."""

    @pytest.fixture
    def supabase(self):
        with patch("invoice_roi.db.client.create_client") as create:
            mock = MagicMock()
            create.return_value = mock
            yield mock

    @pytest.fixture
    def client(self, supabase):
        return SupabaseStoreClient("https://project.supabase.co", "key")

    def test_insert_scenario(self, client, supabase):
        row = {"id": "abc", "name": "Baseline", "created_at": "2024-05-01T12:00:00Z"}
        supabase.table.return_value.insert.return_value.execute.return_value.data = [row]

        assert client.insert_scenario({"name": "Baseline"}) == row
        supabase.table.assert_called_with("scenarios")
        supabase.table.return_value.insert.assert_called_with({"name": "Baseline"})

    def test_list_orders_by_created_at_desc(self, client, supabase):
        query = supabase.table.return_value.select.return_value
        query.order.return_value.execute.return_value.data = []

        assert client.list_scenarios() == []
        query.order.assert_called_with("created_at", desc=True)

    def test_get_missing_returns_none(self, client, supabase):
        query = supabase.table.return_value.select.return_value
        query.eq.return_value.execute.return_value.data = []
        assert client.get_scenario("missing") is None

    def test_delete_reports_whether_row_existed(self, client, supabase):
        query = supabase.table.return_value.delete.return_value
        query.eq.return_value.execute.return_value.data = [{"id": "abc"}]
        assert client.delete_scenario("abc") is True

        query.eq.return_value.execute.return_value.data = []
        assert client.delete_scenario("abc") is False

    def test_email_capture_table(self, client, supabase):
        supabase.table.return_value.insert.return_value.execute.return_value.data = [
            {"id": "1", "email": "ap@example.com"}
        ]
        client.insert_email_capture({"email": "ap@example.com"})
        supabase.table.assert_called_with("email_captures")

    def test_malformed_id_never_reaches_postgrest(self, client, supabase):
        supabase.table.return_value.select.return_value.eq.return_value.execute.side_effect = APIError({
            "message": "invalid input syntax for type uuid: \"does-not-exist\"",
            "code": "22P02",
            "details": None,
            "hint": None,
        })
        repo = ScenarioRepository(client)

        with pytest.raises(ScenarioNotFoundError):
            repo.get("does-not-exist")
        with pytest.raises(ScenarioNotFoundError):
            repo.delete("does-not-exist")
        supabase.table.assert_not_called()

    def test_backend_error_for_valid_id_is_a_store_error(self, client, supabase):
        supabase.table.return_value.select.return_value.eq.return_value.execute.side_effect = APIError({
            "message": "connection refused", "code": "08006", "details": None, "hint": None,
        })
        with pytest.raises(ScenarioStoreError):
            ScenarioRepository(client).get(str(uuid4()))

    def test_check_connection_failure(self, client, supabase):
        supabase.table.side_effect = ConnectionError("down")
        assert check_connection(client) is False


@pytest.mark.skipif(
    not (os.getenv("ROI_SUPABASE_URL") and os.getenv("ROI_SUPABASE_KEY")),
    reason="ROI_SUPABASE_URL not set - skipping live database tests",
)
class TestLiveSupabase:
    """Round trip against a live Supabase project."""

    @pytest.fixture
    def live_repo(self):
        client = SupabaseStoreClient(os.environ["ROI_SUPABASE_URL"], os.environ["ROI_SUPABASE_KEY"])
        yield ScenarioRepository(client)
        client.close()

    def test_create_get_delete(self, live_repo, example_inputs, results):
        saved = live_repo.create(f"Test {uuid4().hex[:8]}", example_inputs, results)
        try:
            assert live_repo.get(saved.id).name == saved.name
        finally:
            live_repo.delete(saved.id)
        with pytest.raises(ScenarioNotFoundError):
            live_repo.get(saved.id)
