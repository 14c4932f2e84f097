"""
Export helpers

Serializes runs and incidents to JSON documents for download. The same
document shape is what the Elasticsearch repository stores.
"""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from src.data.models import IncidentDetail, Run


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def to_document(record: Any) -> Dict[str, Any]:
    """
    Convert a dataclass record to a JSON-compatible dict.

    Timestamps become ISO-8601 strings and enums their wire values. Field
    order follows the dataclass definition.
    """
    if not is_dataclass(record) or isinstance(record, type):
        raise TypeError(f"Expected a dataclass instance, got {type(record).__name__}")
    return _jsonable(asdict(record))


def export_json(record: Any) -> str:
    """Render a record as an indented JSON document."""
    return json.dumps(to_document(record), indent=2)


def export_filename(record: Any) -> str:
    """Download filename for an exported record."""
    if isinstance(record, IncidentDetail):
        return f"incident-{record.id}.json"
    if isinstance(record, Run):
        return f"{record.id}-export.json"
    return f"{record.id}.json"
