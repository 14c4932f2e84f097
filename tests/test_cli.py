"""
Smoke tests for the ChaosBoard CLI against the in-memory backend.
"""

import json
import pytest
from click.testing import CliRunner

from src import cli as cli_module
from src.cli import cli
from src.utils.config import get_settings


@pytest.fixture
def runner(monkeypatch):
    """CLI runner with a seeded in-memory backend."""
    monkeypatch.setenv("CHAOSBOARD_BACKEND", "memory")
    monkeypatch.setenv("CHAOSBOARD_SEED", "42")
    monkeypatch.setenv("CHAOSBOARD_ACTING_USER", "cli@example.com")
    monkeypatch.setattr(cli_module.console, "width", 200)
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


class TestListCommands:
    """Tests for list commands."""

    def test_runs(self, runner):
        result = runner.invoke(cli, ["runs"])
        assert result.exit_code == 0
        assert "run-0001" in result.output
        assert "page 1/5" in result.output

    def test_runs_filtered(self, runner):
        result = runner.invoke(cli, ["runs", "--status", "failed", "--scenario", "sc-001"])
        assert result.exit_code == 0
        assert "run-0001" in result.output
        assert "run-0002" not in result.output

    def test_runs_page_clamped(self, runner):
        result = runner.invoke(cli, ["runs", "--page", "99"])
        assert result.exit_code == 0
        assert "page 5/5" in result.output

    def test_runs_invalid_status(self, runner):
        result = runner.invoke(cli, ["runs", "--status", "exploded"])
        assert result.exit_code != 0

    def test_scenarios_archived(self, runner):
        result = runner.invoke(cli, ["scenarios", "--status", "archived"])
        assert result.exit_code == 0
        assert "scenario-001" in result.output
        assert "scenario-002" not in result.output

    def test_incidents_no_match(self, runner):
        result = runner.invoke(cli, ["incidents", "--search", "zzz-no-match"])
        assert result.exit_code == 0
        assert "No incidents match" in result.output


class TestDetailCommands:
    """Tests for detail commands."""

    def test_run(self, runner):
        result = runner.invoke(cli, ["run", "run-0001"])
        assert result.exit_code == 0
        assert "Cascade failure detected" in result.output

    def test_unknown_run(self, runner):
        result = runner.invoke(cli, ["run", "run-9999"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_scenario(self, runner):
        result = runner.invoke(cli, ["scenario", "scenario-004"])
        assert result.exit_code == 0
        assert "Steps" in result.output

    def test_versions(self, runner):
        result = runner.invoke(cli, ["versions", "scenario-005"])
        assert result.exit_code == 0
        assert "v2.1.0" in result.output
        assert "v1.0.0" in result.output

    def test_incident(self, runner):
        result = runner.invoke(cli, ["incident", "inc-0001"])
        assert result.exit_code == 0
        assert "Recommended actions" in result.output


class TestActionCommands:
    """Tests for action commands."""

    def test_ack_sets_owner(self, runner):
        result = runner.invoke(cli, ["ack", "inc-0001"])
        assert result.exit_code == 0
        assert "acknowledged" in result.output
        assert "cli@example.com" in result.output

    def test_resolve_as_user(self, runner):
        result = runner.invoke(cli, ["resolve", "inc-0002", "--as", "ops@example.com"])
        assert result.exit_code == 0
        assert "resolved" in result.output
        assert "ops@example.com" in result.output

    def test_ack_unknown(self, runner):
        result = runner.invoke(cli, ["ack", "inc-9999"])
        assert result.exit_code == 1

    def test_archive_toggles(self, runner):
        result = runner.invoke(cli, ["archive", "scenario-001"])
        assert result.exit_code == 0
        assert "active" in result.output

    def test_duplicate(self, runner):
        result = runner.invoke(cli, ["duplicate", "scenario-002"])
        assert result.exit_code == 0
        assert "(Copy)" in result.output


class TestExportAndStatus:
    """Tests for export, kpis and status."""

    def test_export_to_stdout(self, runner):
        result = runner.invoke(cli, ["export", "incident", "inc-0001"])
        assert result.exit_code == 0
        assert json.loads(result.output)["id"] == "inc-0001"

    def test_export_to_file(self, runner, tmp_path):
        target = tmp_path / "run.json"
        result = runner.invoke(cli, ["export", "run", "run-0003", "--output", str(target)])

        assert result.exit_code == 0
        assert json.loads(target.read_text())["id"] == "run-0003"

    def test_export_unknown(self, runner):
        result = runner.invoke(cli, ["export", "run", "run-9999"])
        assert result.exit_code == 1

    def test_kpis(self, runner):
        result = runner.invoke(cli, ["kpis"])
        assert result.exit_code == 0
        assert "Error Budget Burn" in result.output

    def test_status_memory(self, runner):
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "seed 42" in result.output
        assert "50 runs" in result.output

    def test_bad_backend(self, runner, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_BACKEND", "postgres")
        get_settings.cache_clear()

        result = runner.invoke(cli, ["runs"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_bad_log_level(self, runner, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_LOG_LEVEL", "LOUD")
        get_settings.cache_clear()

        result = runner.invoke(cli, ["kpis"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert "CHAOSBOARD_LOG_LEVEL" in result.output
