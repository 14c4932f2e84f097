"""
Tests for index creation and Elasticsearch client helpers.
"""

import pytest
from unittest.mock import MagicMock, patch

from src.data.index_templates import INDEX_MAPPINGS, create_indices, delete_indices
from src.utils.elasticsearch_client import (
    ALL_INDICES,
    get_elasticsearch_client,
    index_counts,
    verify_connection,
)

ES_VARS = [
    "ELASTICSEARCH_CLOUD_ID",
    "ELASTICSEARCH_API_KEY",
    "ELASTICSEARCH_URL",
    "ELASTICSEARCH_USERNAME",
    "ELASTICSEARCH_PASSWORD",
]


class TestIndexMappings:
    """Tests for the index mappings."""

    def test_one_mapping_per_index(self):
        assert set(INDEX_MAPPINGS) == set(ALL_INDICES)

    def test_every_index_sorts_by_position(self):
        for mapping in INDEX_MAPPINGS.values():
            assert mapping["mappings"]["properties"]["position"]["type"] == "long"


class TestCreateIndices:
    """Tests for create_indices and delete_indices."""

    def test_creates_missing(self, mock_es_client):
        mock_es_client.indices.exists.return_value = False

        results = create_indices(mock_es_client)

        assert set(results.values()) == {"created"}
        assert mock_es_client.indices.create.call_count == len(ALL_INDICES)

    def test_skips_existing(self, mock_es_client):
        results = create_indices(mock_es_client)

        assert set(results.values()) == {"already_exists"}
        mock_es_client.indices.create.assert_not_called()

    def test_force_recreates(self, mock_es_client):
        results = create_indices(mock_es_client, force=True)

        assert set(results.values()) == {"created"}
        assert mock_es_client.indices.delete.call_count == len(ALL_INDICES)

    def test_errors_reported_per_index(self, mock_es_client):
        mock_es_client.indices.exists.return_value = False
        mock_es_client.indices.create.side_effect = RuntimeError("boom")

        results = create_indices(mock_es_client)

        assert all(v.startswith("error:") for v in results.values())

    def test_delete(self, mock_es_client):
        mock_es_client.indices.exists.side_effect = [True, False, True]

        results = delete_indices(mock_es_client)

        assert list(results.values()) == ["deleted", "not_found", "deleted"]


class TestClientHelpers:
    """Tests for client construction and connection checks."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ES_VARS:
            monkeypatch.delenv(name, raising=False)

    def test_missing_configuration(self):
        with pytest.raises(ValueError, match="Missing Elasticsearch configuration"):
            get_elasticsearch_client()

    def test_url_with_basic_auth(self, monkeypatch):
        monkeypatch.setenv("ELASTICSEARCH_URL", "http://localhost:9200")
        monkeypatch.setenv("ELASTICSEARCH_USERNAME", "elastic")
        monkeypatch.setenv("ELASTICSEARCH_PASSWORD", "secret")

        with patch("src.utils.elasticsearch_client.Elasticsearch") as es_cls:
            get_elasticsearch_client()

        es_cls.assert_called_once_with(
            hosts=["http://localhost:9200"], basic_auth=("elastic", "secret"), request_timeout=30,
        )

    def test_verify_connection(self, mock_es_client):
        mock_es_client.info.return_value = {"cluster_name": "chaos", "version": {"number": "8.12.0"}}
        assert verify_connection(mock_es_client) == {"cluster_name": "chaos", "version": "8.12.0"}

    def test_verify_connection_failure(self, mock_es_client):
        mock_es_client.info.side_effect = OSError("refused")
        with pytest.raises(ConnectionError):
            verify_connection(mock_es_client)

    def test_index_counts(self):
        client = MagicMock()
        client.indices.exists.side_effect = [True, True, False]
        client.count.return_value = {"count": 7}

        counts = index_counts(client)

        assert list(counts.values()) == [7, 7, None]
