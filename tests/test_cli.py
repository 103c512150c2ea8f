"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from invoice_roi.cli import app
from invoice_roi.core.config import Settings
from invoice_roi.db import ScenarioRepository

runner = CliRunner()


@pytest.fixture
def inputs_file(tmp_path, example_raw_inputs):
    path = tmp_path / "inputs.json"
    path.write_text(json.dumps(example_raw_inputs))
    return path


@pytest.fixture
def supabase_settings():
    return Settings(
        _env_file=None,
        store_backend="supabase",
        supabase_url="https://project.supabase.co",
        supabase_key="key",
    )


@pytest.fixture
def repo(store_client, supabase_settings):
    """Point the scenario commands at one store that outlives each command."""
    with patch("invoice_roi.cli.get_settings", return_value=supabase_settings), \
            patch("invoice_roi.cli.create_store_client", return_value=store_client), \
            patch.object(store_client, "close") as close:
        yield ScenarioRepository(store_client)
        assert close.called


class TestCalculate:
    """Tests for the calculate command."""

    def test_json_output_from_options(self):
        result = runner.invoke(app, [
            "calculate", "--json",
            "--volume", "1000", "--staff", "3", "--hours", "0.5", "--wage", "25",
            "--error-rate", "5", "--error-cost", "50", "--months", "12",
            "--implementation-cost", "5000",
        ])
        assert result.exit_code == 0, result.output

        payload = json.loads(result.output)
        assert payload["results"]["monthly_savings"] == pytest.approx(43725)
        assert payload["results"]["net_savings"] == pytest.approx(519700)

    def test_table_output_from_file(self, inputs_file):
        result = runner.invoke(app, ["calculate", "--file", str(inputs_file)])
        assert result.exit_code == 0, result.output
        assert "Monthly Savings" in result.output
        assert "43,725" in result.output

    def test_options_override_file(self, inputs_file):
        result = runner.invoke(app, ["calculate", "--file", str(inputs_file), "--months", "24", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["inputs"]["time_horizon_months"] == 24

    def test_invalid_inputs_exit_1(self, inputs_file):
        result = runner.invoke(app, ["calculate", "--file", str(inputs_file), "--staff", "0"])
        assert result.exit_code == 1
        assert "num_ap_staff must be between 1 and 50" in result.output


class TestReportCommand:
    """Tests for the report command."""

    def test_writes_pdf(self, inputs_file, tmp_path):
        output = tmp_path / "report.pdf"
        result = runner.invoke(app, ["report", str(inputs_file), "--output", str(output)])
        assert result.exit_code == 0, result.output
        assert output.read_bytes().startswith(b"%PDF")


class TestScenarioCommands:
    """Tests for scenario management commands."""

    def test_save_list_delete(self, repo, inputs_file):
        result = runner.invoke(app, ["scenarios", "save", "Baseline", str(inputs_file)])
        assert result.exit_code == 0, result.output

        scenario = repo.list()[0]
        assert scenario.name == "Baseline"

        result = runner.invoke(app, ["scenarios", "list"], env={"COLUMNS": "200"})
        assert result.exit_code == 0
        assert "Baseline" in result.output

        result = runner.invoke(app, ["scenarios", "delete", scenario.id])
        assert result.exit_code == 0
        assert repo.list() == []

    def test_show_unknown(self, repo):
        result = runner.invoke(app, ["scenarios", "show", "missing"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_save_invalid_name(self, repo, inputs_file):
        result = runner.invoke(app, ["scenarios", "save", "x" * 51, str(inputs_file)])
        assert result.exit_code == 1
        assert repo.list() == []

    def test_store_failure_exits_1(self, repo, store_client):
        with patch.object(store_client, "list_scenarios", side_effect=ConnectionError("down")):
            result = runner.invoke(app, ["scenarios", "list"])
        assert result.exit_code == 1
        assert "Scenario store error" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_client_closed_after_command(self, repo, store_client):
        runner.invoke(app, ["scenarios", "list"])
        store_client.close.assert_called_once()


class TestScenarioCommandsWithoutStore:
    """Scenario commands refuse to run against a store that dies with the process."""

    @pytest.fixture(autouse=True)
    def memory_settings(self):
        settings = Settings(_env_file=None, store_backend="memory")
        with patch("invoice_roi.cli.get_settings", return_value=settings):
            yield

    @pytest.mark.parametrize("args", [
        ["scenarios", "list"],
        ["scenarios", "show", "abc"],
        ["scenarios", "delete", "abc"],
    ])
    def test_memory_backend_refused(self, args):
        with patch("invoice_roi.cli.create_store_client") as create:
            result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "persistent store" in result.output
        create.assert_not_called()

    def test_save_refused(self, inputs_file):
        result = runner.invoke(app, ["scenarios", "save", "Baseline", str(inputs_file)])
        assert result.exit_code == 1
        assert "persistent store" in result.output

    def test_missing_supabase_credentials(self):
        settings = Settings(_env_file=None, store_backend="supabase")
        with patch("invoice_roi.cli.get_settings", return_value=settings):
            result = runner.invoke(app, ["scenarios", "list"])
        assert result.exit_code == 1
        assert "ROI_SUPABASE_URL" in result.output
