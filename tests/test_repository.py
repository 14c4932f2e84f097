"""
Tests for the in-memory and Elasticsearch repositories.
"""

import pytest
from dataclasses import replace
from unittest.mock import MagicMock, patch

from elasticsearch import NotFoundError

from src.data.models import IncidentStatus, ScenarioStatus
from src.store.repository import (
    ElasticsearchRepository,
    INDEX_FOR_KIND,
    InMemoryRepository,
    RecordKind,
    corpus_actions,
    load_corpus,
    record_from_source,
    record_to_source,
)
from src.utils.elasticsearch_client import INCIDENT_INDEX, RUN_INDEX, SCENARIO_INDEX


def search_response(sources):
    return {"hits": {"total": {"value": len(sources)}, "hits": [{"_source": s} for s in sources]}}


def not_found_error():
    return NotFoundError("not found", meta=MagicMock(status=404), body={"found": False})


class TestInMemoryRepository:
    """Tests for InMemoryRepository."""

    def test_list_returns_copy(self, corpus):
        repo = InMemoryRepository(corpus)
        runs = repo.list(RecordKind.RUNS)
        runs.clear()

        assert len(repo.list(RecordKind.RUNS)) == 50

    def test_get(self, corpus):
        repo = InMemoryRepository(corpus)

        assert repo.get(RecordKind.INCIDENTS, "inc-0002") is corpus.incidents[1]
        assert repo.get(RecordKind.INCIDENTS, "inc-9999") is None

    def test_replace_by_id_keeps_position(self, corpus):
        repo = InMemoryRepository(corpus)
        updated = replace(corpus.incidents[1], status=IncidentStatus.RESOLVED)

        assert repo.replace(RecordKind.INCIDENTS, updated) is updated
        assert repo.list(RecordKind.INCIDENTS)[1] is updated
        assert corpus.incidents[1].status == IncidentStatus.OPEN

    def test_replace_missing(self, corpus):
        repo = InMemoryRepository(corpus)
        ghost = replace(corpus.runs[0], id="run-9999")

        assert repo.replace(RecordKind.RUNS, ghost) is None
        assert len(repo.list(RecordKind.RUNS)) == 50

    def test_insert_first(self, corpus):
        repo = InMemoryRepository(corpus)
        new = replace(corpus.scenario_details[0], id="scenario-new")
        repo.insert_first(RecordKind.SCENARIOS, new)

        assert repo.list(RecordKind.SCENARIOS)[0] is new

    def test_corpus_lists_not_shared(self, corpus):
        repo = InMemoryRepository(corpus)
        repo.insert_first(RecordKind.RUNS, replace(corpus.runs[0], id="run-new"))
        assert len(corpus.runs) == 50

    def test_empty_repository(self):
        repo = InMemoryRepository()
        assert repo.list(RecordKind.SCENARIOS) == []


class TestDocumentMapping:
    """Tests for record/source conversion."""

    def test_source_carries_position(self, corpus):
        source = record_to_source(corpus.runs[2], 2)
        assert source["position"] == 2
        assert source["id"] == "run-0003"

    def test_source_loads_back(self, corpus):
        source = record_to_source(corpus.incidents[0], 0)
        assert record_from_source(RecordKind.INCIDENTS, source) == corpus.incidents[0]

    def test_index_per_kind(self):
        assert INDEX_FOR_KIND[RecordKind.RUNS] == RUN_INDEX
        assert INDEX_FOR_KIND[RecordKind.SCENARIOS] == SCENARIO_INDEX
        assert INDEX_FOR_KIND[RecordKind.INCIDENTS] == INCIDENT_INDEX


class TestElasticsearchRepository:
    """Tests for ElasticsearchRepository against a mocked client."""

    def test_list_sorted_by_position(self, mock_es_client, corpus):
        mock_es_client.search.return_value = search_response(
            [record_to_source(r, i) for i, r in enumerate(corpus.runs[:3])]
        )
        repo = ElasticsearchRepository(mock_es_client)

        runs = repo.list(RecordKind.RUNS)

        assert [r.id for r in runs] == ["run-0001", "run-0002", "run-0003"]
        kwargs = mock_es_client.search.call_args.kwargs
        assert kwargs["index"] == RUN_INDEX
        assert kwargs["sort"] == [{"position": "asc"}]

    def test_get_found(self, mock_es_client, corpus):
        scenario = corpus.scenario_details[1]
        mock_es_client.get.return_value = {"_source": record_to_source(scenario, 1)}
        repo = ElasticsearchRepository(mock_es_client)

        assert repo.get(RecordKind.SCENARIOS, scenario.id) == scenario
        mock_es_client.get.assert_called_once_with(index=SCENARIO_INDEX, id=scenario.id)

    def test_get_missing_returns_none(self, mock_es_client):
        mock_es_client.get.side_effect = not_found_error()
        repo = ElasticsearchRepository(mock_es_client)

        assert repo.get(RecordKind.RUNS, "run-9999") is None

    def test_replace_keeps_position(self, mock_es_client, corpus):
        incident = corpus.incidents[4]
        mock_es_client.get.return_value = {"_source": record_to_source(incident, 4)}
        repo = ElasticsearchRepository(mock_es_client)
        updated = replace(incident, status=IncidentStatus.RESOLVED)

        assert repo.replace(RecordKind.INCIDENTS, updated) is updated

        kwargs = mock_es_client.index.call_args.kwargs
        assert kwargs["index"] == INCIDENT_INDEX
        assert kwargs["id"] == incident.id
        assert kwargs["document"]["position"] == 4
        assert kwargs["document"]["status"] == "resolved"
        assert kwargs["refresh"] == "wait_for"

    def test_replace_missing(self, mock_es_client, corpus):
        mock_es_client.get.side_effect = not_found_error()
        repo = ElasticsearchRepository(mock_es_client)

        assert repo.replace(RecordKind.RUNS, corpus.runs[0]) is None
        mock_es_client.index.assert_not_called()

    def test_insert_first_goes_before_head(self, mock_es_client, corpus):
        mock_es_client.search.return_value = search_response([{"position": -2}])
        repo = ElasticsearchRepository(mock_es_client)
        scenario = replace(corpus.scenario_details[0], id="scenario-new", status=ScenarioStatus.ACTIVE)

        repo.insert_first(RecordKind.SCENARIOS, scenario)

        assert mock_es_client.index.call_args.kwargs["document"]["position"] == -3

    def test_insert_into_empty_index(self, mock_es_client, corpus):
        mock_es_client.search.return_value = search_response([])
        repo = ElasticsearchRepository(mock_es_client)

        repo.insert_first(RecordKind.SCENARIOS, corpus.scenario_details[0])

        assert mock_es_client.index.call_args.kwargs["document"]["position"] == 0


class TestLoadCorpus:
    """Tests for bulk loading."""

    def test_actions_cover_every_record(self, corpus):
        actions = list(corpus_actions(corpus))

        assert len(actions) == 50 + 24 + 30
        assert actions[0]["_index"] == RUN_INDEX
        assert actions[0]["_id"] == "run-0001"
        assert actions[0]["_source"]["position"] == 0
        assert actions[-1]["_index"] == INCIDENT_INDEX

    def test_load_stats(self, mock_es_client, corpus):
        with patch("src.store.repository.bulk", return_value=(104, [])) as bulk_mock:
            stats = load_corpus(mock_es_client, corpus, batch_size=50)

        assert stats == {"total": 104, "success": 104, "failed": 0}
        assert bulk_mock.call_args.kwargs["chunk_size"] == 50

    def test_load_with_failures(self, mock_es_client, corpus):
        errors = [{"index": {"_id": "run-0001", "error": "mapping"}}]
        with patch("src.store.repository.bulk", return_value=(103, errors)):
            stats = load_corpus(mock_es_client, corpus)

        assert stats["failed"] == 1
        assert stats["success"] == 103
