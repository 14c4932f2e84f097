"""
Unit tests for JSON export.
"""

import json
import pytest

from src.data.models import IncidentDetail, Run, ScenarioDetail
from src.tools.export import export_filename, export_json, to_document


class TestToDocument:
    """Tests for to_document."""

    def test_enums_and_timestamps_serialized(self, corpus):
        doc = to_document(corpus.runs[0])

        assert doc["status"] == "failed"
        assert doc["started_at"] == corpus.runs[0].started_at.isoformat()
        assert doc["timeline"][0]["type"] == "info"

    def test_nested_dataclasses(self, corpus):
        doc = to_document(corpus.scenario_details[0])

        assert doc["safety_config"]["max_error_rate"] == corpus.scenario_details[0].safety_config.max_error_rate
        assert doc["steps"][0]["type"] == "inject_fault"

    def test_rejects_non_dataclass(self):
        with pytest.raises(TypeError):
            to_document({"id": "run-0001"})

    def test_rejects_dataclass_type(self):
        with pytest.raises(TypeError):
            to_document(Run)

    @pytest.mark.parametrize("record_type,collection", [
        (Run, "runs"),
        (ScenarioDetail, "scenario_details"),
        (IncidentDetail, "incidents"),
    ])
    def test_documents_load_back(self, corpus, record_type, collection):
        """Stored documents rebuild the same records."""
        record = getattr(corpus, collection)[3]
        assert record_type.from_document(to_document(record)) == record


class TestExportJson:
    """Tests for export_json and export_filename."""

    def test_pretty_printed(self, corpus):
        content = export_json(corpus.incidents[0])

        assert content.startswith("{\n  ")
        assert json.loads(content)["id"] == "inc-0001"

    def test_run_detail_export(self, generator, corpus):
        detail = generator.build_run_detail(corpus.runs[0])
        doc = json.loads(export_json(detail))

        assert doc["environment"] == detail.environment
        assert doc["metrics"]["latency_p95"] == detail.metrics.latency_p95
        assert len(doc["incidents"]) == 3

    def test_filenames(self, generator, corpus):
        assert export_filename(corpus.incidents[0]) == "incident-inc-0001.json"
        assert export_filename(corpus.runs[0]) == "run-0001-export.json"
        assert export_filename(generator.build_run_detail(corpus.runs[0])) == "run-0001-export.json"
        assert export_filename(corpus.scenario_details[0]) == "scenario-001.json"
