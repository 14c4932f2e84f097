"""Elasticsearch index templates for ChaosBoard.

This module defines the index mappings for:
1. Runs (runs-chaosboard)
2. Scenario definitions (scenarios-chaosboard)
3. Platform incidents (incidents-chaosboard)

Documents are the JSON exports produced by ``src.tools.export.to_document``
plus a ``position`` field that preserves the list order of the corpus.
"""

import logging

from elasticsearch import Elasticsearch

from src.utils.elasticsearch_client import RUN_INDEX, SCENARIO_INDEX, INCIDENT_INDEX

logger = logging.getLogger(__name__)


_INDEX_SETTINGS = {
    "index": {
        "refresh_interval": "1s",
    }
}

_SEARCHABLE_TEXT = {"type": "text", "fields": {"keyword": {"type": "keyword"}}}


RUN_INDEX_MAPPING = {
    "mappings": {
        "properties": {
            "position": {"type": "long"},
            "id": {"type": "keyword"},
            "scenario": _SEARCHABLE_TEXT,
            "scenario_id": {"type": "keyword"},
            "status": {"type": "keyword"},  # success, failed, degraded
            "started_at": {"type": "date"},
            "duration": {"type": "long"},  # in milliseconds

            "metrics": {
                "properties": {
                    "latency_p50": {"type": "float"},
                    "latency_p99": {"type": "float"},
                    "error_rate": {"type": "float"},
                    "request_count": {"type": "long"},
                }
            },

            "errors": {
                "properties": {
                    "code": {"type": "keyword"},
                    "message": {"type": "text"},
                    "count": {"type": "integer"},
                }
            },

            "timeline": {
                "properties": {
                    "timestamp": {"type": "date"},
                    "event": {"type": "text"},
                    "type": {"type": "keyword"},
                }
            },
        }
    },
    "settings": _INDEX_SETTINGS,
}


SCENARIO_INDEX_MAPPING = {
    "mappings": {
        "properties": {
            "position": {"type": "long"},
            "id": {"type": "keyword"},
            "name": _SEARCHABLE_TEXT,
            "description": {"type": "text"},
            "type": {"type": "keyword"},  # latency, error, shutdown, resource
            "target_service": {"type": "keyword"},
            "version": {"type": "keyword"},
            "last_updated": {"type": "date"},
            "owner": {"type": "keyword"},
            "status": {"type": "keyword"},  # active, archived
            "environment": {"type": "keyword"},
            "intensity": {"type": "integer"},
            "duration": {"type": "integer"},  # in seconds
            "schedule_type": {"type": "keyword"},
            "cron_expression": {"type": "keyword"},

            "safety_config": {
                "properties": {
                    "max_error_rate": {"type": "float"},
                    "auto_stop_enabled": {"type": "boolean"},
                }
            },

            # Step config values are free-form scalars, stored but not indexed
            "steps": {"type": "object", "enabled": False},
        }
    },
    "settings": _INDEX_SETTINGS,
}


INCIDENT_INDEX_MAPPING = {
    "mappings": {
        "properties": {
            "position": {"type": "long"},
            "id": {"type": "keyword"},
            "title": _SEARCHABLE_TEXT,
            "summary": {"type": "text"},
            "severity": {"type": "keyword"},  # critical, high, medium, low
            "status": {"type": "keyword"},  # open, acknowledged, resolved
            "service": {"type": "keyword"},
            "detected_at": {"type": "date"},
            "run_id": {"type": "keyword"},
            "owner": {"type": "keyword"},
            "suspected_root_cause": {"type": "text"},
            "impacted_endpoints": {"type": "keyword"},
            "recommended_actions": {"type": "text"},

            "signals": {
                "properties": {
                    "id": {"type": "keyword"},
                    "timestamp": {"type": "date"},
                    "type": {"type": "keyword"},
                    "title": {"type": "text"},
                    "value": {"type": "text"},
                }
            },

            "metrics": {
                "properties": {
                    "latency_p95": {"type": "float"},
                    "error_rate": {"type": "float"},
                }
            },
        }
    },
    "settings": _INDEX_SETTINGS,
}


INDEX_MAPPINGS = {
    RUN_INDEX: RUN_INDEX_MAPPING,
    SCENARIO_INDEX: SCENARIO_INDEX_MAPPING,
    INCIDENT_INDEX: INCIDENT_INDEX_MAPPING,
}


def create_indices(client: Elasticsearch, force: bool = False) -> dict:
    """
    Create the required indices in Elasticsearch.

    Args:
        client: Elasticsearch client
        force: If True, delete existing indices first

    Returns:
        dict: Status of index creation per index name
    """
    results = {}

    for index_name, mapping in INDEX_MAPPINGS.items():
        try:
            if client.indices.exists(index=index_name):
                if force:
                    client.indices.delete(index=index_name)
                    logger.info("Deleted existing index: %s", index_name)
                else:
                    results[index_name] = "already_exists"
                    logger.info("Index already exists: %s", index_name)
                    continue

            client.indices.create(index=index_name, mappings=mapping["mappings"], settings=mapping["settings"])
            results[index_name] = "created"
            logger.info("Created index: %s", index_name)

        except Exception as e:
            results[index_name] = f"error: {str(e)}"
            logger.error("Error creating index %s: %s", index_name, e)

    return results


def delete_indices(client: Elasticsearch) -> dict:
    """
    Delete the ChaosBoard indices.

    Args:
        client: Elasticsearch client

    Returns:
        dict: Status of index deletion per index name
    """
    results = {}

    for index_name in INDEX_MAPPINGS:
        try:
            if client.indices.exists(index=index_name):
                client.indices.delete(index=index_name)
                results[index_name] = "deleted"
                logger.info("Deleted index: %s", index_name)
            else:
                results[index_name] = "not_found"
                logger.info("Index not found: %s", index_name)
        except Exception as e:
            results[index_name] = f"error: {str(e)}"
            logger.error("Error deleting index %s: %s", index_name, e)

    return results
