"""Entity definitions for ChaosBoard.

Scenarios, runs and incidents are plain dataclasses. Enum members carry the
wire values used by exports and the Elasticsearch store, so ``Enum("failed")``
round-trips with the documents written by ``src.tools.export``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


ConfigValue = Union[str, int, float, bool]


class RunStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    DEGRADED = "degraded"


class TimelineEntryType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class TimelineEventType(str, Enum):
    FAULT_INJECTED = "fault_injected"
    RETRY_TRIGGERED = "retry_triggered"
    CIRCUIT_BREAKER_OPEN = "circuit_breaker_open"
    FALLBACK_SERVED = "fallback_served"
    RECOVERY = "recovery"
    INFO = "info"


class FailureType(str, Enum):
    LATENCY = "latency"
    ERROR = "error"
    SHUTDOWN = "shutdown"
    RESOURCE = "resource"


class ScenarioStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class ScheduleType(str, Enum):
    MANUAL = "manual"
    CRON = "cron"


class StepType(str, Enum):
    INJECT_FAULT = "inject_fault"
    WAIT = "wait"
    INCREASE_INTENSITY = "increase_intensity"
    RECOVER = "recover"
    VALIDATE = "validate"


class IncidentSeverity(str, Enum):
    """Incident priority tier, most urgent first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IncidentStatus(str, Enum):
    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class SignalType(str, Enum):
    METRIC_ANOMALY = "metric_anomaly"
    THRESHOLD_BREACH = "threshold_breach"
    CORRELATION = "correlation"
    ALERT_FIRED = "alert_fired"


def _parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# ═══════════════════════════════════════════════════════════════════════════════
# SCENARIOS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class Scenario:
    """Catalog entry a run points back to."""
    id: str
    name: str
    description: str


@dataclass
class ScenarioStep:
    id: str
    type: StepType
    label: str
    config: Dict[str, ConfigValue] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ScenarioStep":
        return cls(
            id=doc["id"],
            type=StepType(doc["type"]),
            label=doc["label"],
            config=dict(doc.get("config") or {}),
        )


@dataclass
class SafetyConfig:
    max_error_rate: float
    auto_stop_enabled: bool


@dataclass
class ScenarioDetail(Scenario):
    """A fully configured chaos scenario.

    ``cron_expression`` is only meaningful when ``schedule_type`` is CRON.
    """
    type: FailureType
    target_service: str
    version: str
    last_updated: datetime
    owner: str
    status: ScenarioStatus
    environment: str
    intensity: int
    duration: int  # seconds
    schedule_type: ScheduleType
    safety_config: SafetyConfig
    steps: List[ScenarioStep] = field(default_factory=list)
    cron_expression: Optional[str] = None

    @property
    def is_archived(self) -> bool:
        return self.status == ScenarioStatus.ARCHIVED

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ScenarioDetail":
        safety = doc.get("safety_config") or {}
        return cls(
            id=doc["id"],
            name=doc["name"],
            description=doc["description"],
            type=FailureType(doc["type"]),
            target_service=doc["target_service"],
            version=doc["version"],
            last_updated=_parse_timestamp(doc["last_updated"]),
            owner=doc["owner"],
            status=ScenarioStatus(doc["status"]),
            environment=doc["environment"],
            intensity=int(doc["intensity"]),
            duration=int(doc["duration"]),
            schedule_type=ScheduleType(doc["schedule_type"]),
            safety_config=SafetyConfig(
                max_error_rate=safety.get("max_error_rate", 5),
                auto_stop_enabled=bool(safety.get("auto_stop_enabled", True)),
            ),
            steps=[ScenarioStep.from_document(s) for s in doc.get("steps", [])],
            cron_expression=doc.get("cron_expression"),
        )


@dataclass
class ScenarioVersion:
    id: str
    version: str
    published_at: datetime
    published_by: str
    changelog: str
    is_current: bool


@dataclass
class ScenarioFormData:
    """Fields submitted by the create/edit scenario form."""
    name: str
    target_service: str
    environment: str
    type: FailureType
    description: str = ""
    intensity: int = 50
    duration: int = 60
    schedule_type: ScheduleType = ScheduleType.MANUAL
    cron_expression: str = ""
    max_error_rate: float = 5
    auto_stop_enabled: bool = True
    steps: List[ScenarioStep] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# RUNS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class RunMetrics:
    latency_p50: float
    latency_p99: float
    error_rate: float  # percent
    request_count: int


@dataclass
class RunError:
    code: str
    message: str
    count: int


@dataclass
class TimelineEntry:
    timestamp: datetime
    event: str
    type: TimelineEntryType


@dataclass
class Run:
    """One execution of a scenario.

    ``errors`` is empty exactly when the run succeeded.
    """
    id: str
    scenario: str
    scenario_id: str
    status: RunStatus
    started_at: datetime
    duration: int  # milliseconds
    metrics: RunMetrics
    errors: List[RunError] = field(default_factory=list)
    timeline: List[TimelineEntry] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Run":
        metrics = doc["metrics"]
        return cls(
            id=doc["id"],
            scenario=doc["scenario"],
            scenario_id=doc["scenario_id"],
            status=RunStatus(doc["status"]),
            started_at=_parse_timestamp(doc["started_at"]),
            duration=int(doc["duration"]),
            metrics=RunMetrics(
                latency_p50=metrics["latency_p50"],
                latency_p99=metrics["latency_p99"],
                error_rate=metrics["error_rate"],
                request_count=int(metrics["request_count"]),
            ),
            errors=[RunError(**e) for e in doc.get("errors", [])],
            timeline=[
                TimelineEntry(
                    timestamp=_parse_timestamp(t["timestamp"]),
                    event=t["event"],
                    type=TimelineEntryType(t["type"]),
                )
                for t in doc.get("timeline", [])
            ],
        )


@dataclass
class RunDetailMetrics(RunMetrics):
    latency_p95: float = 0.0
    throughput: int = 0
    cpu_usage: float = 0.0
    memory_usage: float = 0.0


@dataclass
class DetailedTimelineEvent:
    id: str
    timestamp: datetime
    type: TimelineEventType
    title: str
    description: str
    metadata: Optional[Dict[str, Union[str, int, float]]] = None


@dataclass
class Incident:
    """Lightweight incident attached to a single run."""
    id: str
    title: str
    severity: IncidentSeverity
    description: str
    recommended_action: str
    detected_at: datetime


@dataclass
class RunDetail(Run):
    metrics: RunDetailMetrics = None
    environment: str = ""
    detailed_timeline: List[DetailedTimelineEvent] = field(default_factory=list)
    incidents: List[Incident] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# PLATFORM INCIDENTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class IncidentSignal:
    id: str
    timestamp: datetime
    type: SignalType
    title: str
    value: Optional[str] = None


@dataclass
class IncidentMetrics:
    latency_p95: float
    error_rate: float


@dataclass
class IncidentDetail:
    """Platform-wide incident with a triage workflow.

    ``owner`` stays None while the incident is open.
    """
    id: str
    title: str
    summary: str
    severity: IncidentSeverity
    status: IncidentStatus
    service: str
    detected_at: datetime
    run_id: str
    owner: Optional[str]
    suspected_root_cause: str
    impacted_endpoints: List[str] = field(default_factory=list)
    recommended_actions: List[str] = field(default_factory=list)
    signals: List[IncidentSignal] = field(default_factory=list)
    metrics: Optional[IncidentMetrics] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "IncidentDetail":
        metrics = doc.get("metrics")
        return cls(
            id=doc["id"],
            title=doc["title"],
            summary=doc["summary"],
            severity=IncidentSeverity(doc["severity"]),
            status=IncidentStatus(doc["status"]),
            service=doc["service"],
            detected_at=_parse_timestamp(doc["detected_at"]),
            run_id=doc["run_id"],
            owner=doc.get("owner"),
            suspected_root_cause=doc["suspected_root_cause"],
            impacted_endpoints=list(doc.get("impacted_endpoints", [])),
            recommended_actions=list(doc.get("recommended_actions", [])),
            signals=[
                IncidentSignal(
                    id=s["id"],
                    timestamp=_parse_timestamp(s["timestamp"]),
                    type=SignalType(s["type"]),
                    title=s["title"],
                    value=s.get("value"),
                )
                for s in doc.get("signals", [])
            ],
            metrics=IncidentMetrics(**metrics) if metrics else None,
        )
