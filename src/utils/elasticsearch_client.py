"""Elasticsearch client configuration and connection utilities."""

import logging
import os
from typing import Optional, Dict, Any

from elasticsearch import Elasticsearch
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


# Index names as constants
RUN_INDEX = "runs-chaosboard"
SCENARIO_INDEX = "scenarios-chaosboard"
INCIDENT_INDEX = "incidents-chaosboard"

ALL_INDICES = [RUN_INDEX, SCENARIO_INDEX, INCIDENT_INDEX]


def get_elasticsearch_client() -> Elasticsearch:
    """
    Create and return an Elasticsearch client based on environment configuration.

    Supports three authentication methods:
    1. Cloud ID with API Key (Elastic Cloud)
    2. URL with API Key
    3. URL with Username/Password

    Returns:
        Elasticsearch: Configured Elasticsearch client

    Raises:
        ValueError: If required configuration is missing
    """
    cloud_id = os.getenv("ELASTICSEARCH_CLOUD_ID")
    api_key = os.getenv("ELASTICSEARCH_API_KEY")
    url = os.getenv("ELASTICSEARCH_URL")
    username = os.getenv("ELASTICSEARCH_USERNAME")
    password = os.getenv("ELASTICSEARCH_PASSWORD")

    if cloud_id and api_key:
        return Elasticsearch(cloud_id=cloud_id, api_key=api_key, request_timeout=30)

    if url and api_key:
        return Elasticsearch(hosts=[url], api_key=api_key, request_timeout=30)

    if url and username and password:
        return Elasticsearch(hosts=[url], basic_auth=(username, password), request_timeout=30)

    raise ValueError(
        "Missing Elasticsearch configuration. Please set either:\n"
        "1. ELASTICSEARCH_CLOUD_ID + ELASTICSEARCH_API_KEY, or\n"
        "2. ELASTICSEARCH_URL + ELASTICSEARCH_API_KEY, or\n"
        "3. ELASTICSEARCH_URL + ELASTICSEARCH_USERNAME + ELASTICSEARCH_PASSWORD"
    )


def verify_connection(client: Optional[Elasticsearch] = None) -> Dict[str, Any]:
    """
    Verify the Elasticsearch connection is working.

    Args:
        client: Optional Elasticsearch client. If not provided, creates one.

    Returns:
        dict: Cluster name and version

    Raises:
        ConnectionError: If connection fails
    """
    if client is None:
        client = get_elasticsearch_client()

    try:
        info = client.info()
    except Exception as e:
        raise ConnectionError(f"Failed to connect to Elasticsearch: {e}")

    logger.info("Connected to Elasticsearch cluster %s", info["cluster_name"])
    return {
        "cluster_name": info["cluster_name"],
        "version": info["version"]["number"],
    }


def index_counts(client: Elasticsearch) -> Dict[str, Optional[int]]:
    """Document count per ChaosBoard index; None where the index is missing."""
    counts = {}
    for index_name in ALL_INDICES:
        if client.indices.exists(index=index_name):
            counts[index_name] = client.count(index=index_name)["count"]
        else:
            counts[index_name] = None
    return counts
