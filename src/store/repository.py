"""Record storage for ChaosBoard.

The dashboard reads and replaces scenarios, runs and incidents through a
``Repository``. Two backends are provided:

1. ``InMemoryRepository`` - owns a generated corpus for the lifetime of the process
2. ``ElasticsearchRepository`` - one index per record kind, seeded by
   ``scripts/setup_elasticsearch.py``

Lookups of unknown ids return None; nothing here raises for a missing record.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from elasticsearch import Elasticsearch, NotFoundError
from elasticsearch.helpers import bulk, BulkIndexError

from src.data.mock_data import Corpus
from src.data.models import IncidentDetail, Run, ScenarioDetail
from src.tools.export import to_document
from src.utils.elasticsearch_client import RUN_INDEX, SCENARIO_INDEX, INCIDENT_INDEX

logger = logging.getLogger(__name__)


class RecordKind(str, Enum):
    RUNS = "runs"
    SCENARIOS = "scenarios"
    INCIDENTS = "incidents"


RECORD_TYPES = {
    RecordKind.RUNS: Run,
    RecordKind.SCENARIOS: ScenarioDetail,
    RecordKind.INCIDENTS: IncidentDetail,
}


class Repository(ABC):
    """Ordered collections of records, addressed by kind and id."""

    @abstractmethod
    def list(self, kind: RecordKind) -> List[Any]:
        """All records of a kind, in stored order."""

    @abstractmethod
    def get(self, kind: RecordKind, record_id: str) -> Optional[Any]:
        """The record with this id, or None."""

    @abstractmethod
    def replace(self, kind: RecordKind, record: Any) -> Optional[Any]:
        """Store ``record`` in place of the one sharing its id; None if there is none."""

    @abstractmethod
    def insert_first(self, kind: RecordKind, record: Any) -> Any:
        """Store a new record at the head of its collection."""


class InMemoryRepository(Repository):
    """
    Process-local store over a generated corpus.

    Records are swapped by id, never edited in place, so a record handed to a
    caller keeps its values after later writes.
    """

    def __init__(self, corpus: Optional[Corpus] = None):
        corpus = corpus or Corpus()
        self._records: Dict[RecordKind, List[Any]] = {
            RecordKind.RUNS: list(corpus.runs),
            RecordKind.SCENARIOS: list(corpus.scenario_details),
            RecordKind.INCIDENTS: list(corpus.incidents),
        }

    def list(self, kind: RecordKind) -> List[Any]:
        return list(self._records[kind])

    def get(self, kind: RecordKind, record_id: str) -> Optional[Any]:
        for record in self._records[kind]:
            if record.id == record_id:
                return record
        logger.debug("No %s record with id %s", kind.value, record_id)
        return None

    def replace(self, kind: RecordKind, record: Any) -> Optional[Any]:
        records = self._records[kind]
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                return record
        logger.debug("Cannot replace missing %s record %s", kind.value, record.id)
        return None

    def insert_first(self, kind: RecordKind, record: Any) -> Any:
        self._records[kind].insert(0, record)
        return record


# ═══════════════════════════════════════════════════════════════════════════════
# ELASTICSEARCH BACKEND
# ═══════════════════════════════════════════════════════════════════════════════

INDEX_FOR_KIND = {
    RecordKind.RUNS: RUN_INDEX,
    RecordKind.SCENARIOS: SCENARIO_INDEX,
    RecordKind.INCIDENTS: INCIDENT_INDEX,
}

# Upper bound on documents fetched by a single list() call
MAX_LIST_SIZE = 10000


def record_to_source(record: Any, position: int) -> Dict[str, Any]:
    """Elasticsearch document for a record at a list position."""
    source = to_document(record)
    source["position"] = position
    return source


def record_from_source(kind: RecordKind, source: Dict[str, Any]) -> Any:
    return RECORD_TYPES[kind].from_document(source)


class ElasticsearchRepository(Repository):
    """
    Store backed by one Elasticsearch index per record kind.

    List order is kept in a numeric ``position`` field; new records are
    placed before the current minimum.
    """

    def __init__(self, client: Elasticsearch, refresh: str = "wait_for"):
        self.client = client
        self.refresh = refresh

    def _fetch(self, kind: RecordKind, record_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.client.get(index=INDEX_FOR_KIND[kind], id=record_id)
        except NotFoundError:
            logger.debug("No %s document with id %s", kind.value, record_id)
            return None
        return result["_source"]

    def list(self, kind: RecordKind) -> List[Any]:
        result = self.client.search(
            index=INDEX_FOR_KIND[kind],
            query={"match_all": {}},
            sort=[{"position": "asc"}],
            size=MAX_LIST_SIZE,
        )
        return [record_from_source(kind, hit["_source"]) for hit in result["hits"]["hits"]]

    def get(self, kind: RecordKind, record_id: str) -> Optional[Any]:
        source = self._fetch(kind, record_id)
        if source is None:
            return None
        return record_from_source(kind, source)

    def replace(self, kind: RecordKind, record: Any) -> Optional[Any]:
        existing = self._fetch(kind, record.id)
        if existing is None:
            return None

        self.client.index(
            index=INDEX_FOR_KIND[kind],
            id=record.id,
            document=record_to_source(record, existing.get("position", 0)),
            refresh=self.refresh,
        )
        return record

    def _head_position(self, kind: RecordKind) -> int:
        result = self.client.search(
            index=INDEX_FOR_KIND[kind],
            query={"match_all": {}},
            sort=[{"position": "asc"}],
            size=1,
            source=["position"],
        )
        hits = result["hits"]["hits"]
        if not hits:
            return 0
        return hits[0]["_source"]["position"] - 1

    def insert_first(self, kind: RecordKind, record: Any) -> Any:
        self.client.index(
            index=INDEX_FOR_KIND[kind],
            id=record.id,
            document=record_to_source(record, self._head_position(kind)),
            refresh=self.refresh,
        )
        return record


def corpus_actions(corpus: Corpus):
    """Bulk index actions for every record of a corpus."""
    collections = [
        (RecordKind.RUNS, corpus.runs),
        (RecordKind.SCENARIOS, corpus.scenario_details),
        (RecordKind.INCIDENTS, corpus.incidents),
    ]
    for kind, records in collections:
        for position, record in enumerate(records):
            yield {
                "_index": INDEX_FOR_KIND[kind],
                "_id": record.id,
                "_source": record_to_source(record, position),
            }


def load_corpus(client: Elasticsearch, corpus: Corpus, batch_size: int = 500) -> dict:
    """
    Index a generated corpus using the bulk API.

    Args:
        client: Elasticsearch client
        corpus: Generated corpus
        batch_size: Number of documents per bulk request

    Returns:
        dict: Ingestion statistics
    """
    total = len(corpus.runs) + len(corpus.scenario_details) + len(corpus.incidents)
    stats = {"total": total, "success": 0, "failed": 0}

    try:
        success, errors = bulk(
            client,
            corpus_actions(corpus),
            chunk_size=batch_size,
            refresh=True,
            raise_on_error=False,
            raise_on_exception=False,
        )
        stats["success"] = success
        stats["failed"] = len(errors) if isinstance(errors, list) else total - success
    except BulkIndexError as e:
        logger.error("Bulk indexing error: %s", e)
        stats["failed"] = len(e.errors)
        stats["success"] = total - stats["failed"]

    return stats
