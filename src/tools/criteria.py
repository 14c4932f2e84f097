"""
Filter criteria for the runs, scenarios and incidents lists.

Every field defaults to ``None`` (or an empty set), meaning "no restriction".
All active predicates combine with logical AND.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import FrozenSet, Iterable, Optional

from src.data.models import (
    FailureType,
    IncidentDetail,
    IncidentSeverity,
    IncidentStatus,
    Run,
    RunStatus,
    ScenarioDetail,
    ScenarioStatus,
)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are read as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _contains(query: str, *fields: Optional[str]) -> bool:
    needle = query.lower()
    return any(needle in (f or "").lower() for f in fields)


@dataclass(frozen=True)
class DateRange:
    """Inclusive timestamp window; a missing bound leaves that side open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        if self.start is not None:
            object.__setattr__(self, "start", _as_utc(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", _as_utc(self.end))

    @classmethod
    def from_dates(cls, start: Optional[date] = None, end: Optional[date] = None) -> "DateRange":
        """Build a window from calendar days, covering the whole of the end day."""
        return cls(
            start=datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None,
            end=datetime.combine(end, time.max, tzinfo=timezone.utc) if end else None,
        )

    @property
    def is_set(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, timestamp: datetime) -> bool:
        timestamp = _as_utc(timestamp)
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True


def _within(date_range: Optional[DateRange], timestamp: datetime) -> bool:
    return date_range is None or date_range.contains(timestamp)


@dataclass(frozen=True)
class RunFilter:
    status: Optional[RunStatus] = None
    scenario_ids: FrozenSet[str] = field(default_factory=frozenset)
    date_range: Optional[DateRange] = None

    def __post_init__(self):
        if not isinstance(self.scenario_ids, frozenset):
            object.__setattr__(self, "scenario_ids", frozenset(self.scenario_ids or ()))

    @property
    def is_active(self) -> bool:
        return (
            self.status is not None
            or bool(self.scenario_ids)
            or (self.date_range is not None and self.date_range.is_set)
        )

    def matches(self, run: Run) -> bool:
        if self.status is not None and run.status != self.status:
            return False
        if not _within(self.date_range, run.started_at):
            return False
        if self.scenario_ids and run.scenario_id not in self.scenario_ids:
            return False
        return True


@dataclass(frozen=True)
class ScenarioFilter:
    search: Optional[str] = None
    type: Optional[FailureType] = None
    service: Optional[str] = None
    status: Optional[ScenarioStatus] = None

    @property
    def is_active(self) -> bool:
        return bool(self.search) or any(v is not None for v in (self.type, self.service, self.status))

    def matches(self, scenario: ScenarioDetail) -> bool:
        if self.search and not _contains(
            self.search, scenario.name, scenario.description, scenario.target_service, scenario.owner
        ):
            return False
        if self.type is not None and scenario.type != self.type:
            return False
        if self.service is not None and scenario.target_service != self.service:
            return False
        if self.status is not None and scenario.status != self.status:
            return False
        return True


@dataclass(frozen=True)
class IncidentFilter:
    severity: Optional[IncidentSeverity] = None
    status: Optional[IncidentStatus] = None
    service: Optional[str] = None
    date_range: Optional[DateRange] = None
    search: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return (
            any(v is not None for v in (self.severity, self.status, self.service))
            or (self.date_range is not None and self.date_range.is_set)
            or bool(self.search)
        )

    def matches(self, incident: IncidentDetail) -> bool:
        if self.severity is not None and incident.severity != self.severity:
            return False
        if self.status is not None and incident.status != self.status:
            return False
        if self.service is not None and incident.service != self.service:
            return False
        if not _within(self.date_range, incident.detected_at):
            return False
        if self.search and not _contains(
            self.search, incident.title, incident.summary, incident.id, incident.service, incident.run_id
        ):
            return False
        return True


def selected_scenarios(values: Iterable[str]) -> FrozenSet[str]:
    """Normalize a multi-select value into the set a RunFilter expects."""
    return frozenset(v for v in values if v)
