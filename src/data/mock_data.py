"""Synthetic data generator for ChaosBoard.

Generates an internally consistent chaos-engineering corpus:
- Scenario catalog and fully configured scenario definitions
- Runs with status-dependent metrics, errors and timelines
- Platform incidents with triage state and detection signals
- Per-run drill-down details (extended metrics, detailed timeline, incidents)

All randomness is derived from an explicit seed so a corpus can be rebuilt
exactly for tests and for seeding an Elasticsearch store.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Dict, Any, Optional

from src.data.models import (
    DetailedTimelineEvent,
    FailureType,
    Incident,
    IncidentDetail,
    IncidentMetrics,
    IncidentSeverity,
    IncidentSignal,
    IncidentStatus,
    Run,
    RunDetail,
    RunDetailMetrics,
    RunError,
    RunMetrics,
    RunStatus,
    SafetyConfig,
    Scenario,
    ScenarioDetail,
    ScenarioStatus,
    ScenarioStep,
    ScenarioVersion,
    ScheduleType,
    SignalType,
    StepType,
    TimelineEntry,
    TimelineEntryType,
    TimelineEventType,
)

logger = logging.getLogger(__name__)


# Base scenario catalog
SCENARIOS = [
    Scenario("sc-001", "API Latency Spike", "Simulate increased API response times"),
    Scenario("sc-002", "Database Failover", "Test database failover behavior"),
    Scenario("sc-003", "Memory Pressure", "Simulate high memory usage conditions"),
    Scenario("sc-004", "Network Partition", "Test behavior during network issues"),
    Scenario("sc-005", "CPU Saturation", "Simulate CPU-bound workloads"),
    Scenario("sc-006", "Disk I/O Stress", "Test disk performance limits"),
]

TARGET_SERVICES = [
    "api-gateway",
    "user-service",
    "payment-service",
    "inventory-service",
    "notification-service",
    "auth-service",
]

ENVIRONMENTS = ["production", "staging", "development"]

OWNERS = ["alice@example.com", "bob@example.com", "charlie@example.com", "diana@example.com"]

FAILURE_TYPES = [FailureType.LATENCY, FailureType.ERROR, FailureType.SHUTDOWN, FailureType.RESOURCE]

SEVERITY_CYCLE = [
    IncidentSeverity.CRITICAL,
    IncidentSeverity.HIGH,
    IncidentSeverity.MEDIUM,
    IncidentSeverity.LOW,
]

ERROR_MESSAGES = [
    {"code": "ERR_TIMEOUT", "message": "Request timeout exceeded 5000ms", "count": 12},
    {"code": "ERR_CONNECTION", "message": "Connection refused by upstream", "count": 8},
    {"code": "ERR_MEMORY", "message": "Out of memory exception", "count": 3},
    {"code": "ERR_RATE_LIMIT", "message": "Rate limit exceeded", "count": 24},
    {"code": "ERR_CIRCUIT_OPEN", "message": "Circuit breaker open", "count": 5},
]

CHANGELOG_MESSAGES = [
    "Initial release with basic fault injection",
    "Added configurable intensity ramping",
    "Improved recovery validation logic",
    "Added circuit breaker monitoring",
    "Optimized for production workloads",
    "Fixed timing issues in wait steps",
    "Added support for multi-region testing",
    "Improved error rate threshold handling",
]

INCIDENT_TITLES = [
    "P95 latency exceeded threshold",
    "Error rate spike detected",
    "Circuit breaker tripped repeatedly",
    "Memory usage critical",
    "Connection pool exhausted",
    "Cascade failure in downstream services",
    "Database connection timeouts",
    "Rate limiting triggered",
    "CPU saturation detected",
    "Response time degradation",
]

INCIDENT_SUMMARIES = [
    "p95 latency exceeded 800ms; error rate 4.2%",
    "Error rate spiked to 12.3% over 5 minute window",
    "Circuit breaker opened 8 times in 2 minutes",
    "Memory usage at 94% with no recovery trend",
    "Connection pool 100% utilized; requests queueing",
    "3 downstream services reporting failures",
    "Database connections timing out after 30s",
    "Rate limiter rejecting 45% of requests",
    "CPU at 98% utilization across all instances",
    "Response times 3x baseline for /api/checkout",
]

ROOT_CAUSES = [
    "Increased traffic volume exceeded auto-scaling capacity. The scaling policy delay (3 min) caused request queuing.",
    "Database query N+1 problem in user lookup causing exponential load increase under concurrent requests.",
    "Memory leak in connection handling code causing gradual resource exhaustion over time.",
    "Misconfigured retry policy causing retry storms during partial outages.",
    "Third-party payment provider experiencing degraded performance affecting checkout flow.",
    "DNS resolution delays causing connection establishment timeouts to downstream services.",
]

RECOMMENDED_ACTIONS = [
    "Scale up instances immediately to handle traffic surge",
    "Enable circuit breaker on affected endpoints",
    "Implement request rate limiting at edge",
    "Review and optimize database queries",
    "Add connection pool monitoring alerts",
    "Configure exponential backoff with jitter",
    "Implement bulkhead pattern for isolation",
    "Add fallback responses for degraded mode",
]

IMPACTED_ENDPOINTS = [
    "/api/checkout",
    "/api/users/:id",
    "/api/inventory/search",
    "/api/payments/process",
    "/api/notifications/send",
    "/api/auth/token",
    "/api/orders/:id/status",
    "/api/products/catalog",
]

MAX_VERSION_HISTORY = 6


@dataclass
class Corpus:
    """One generated dataset: the pseudo-datastore the dashboard queries."""
    scenario_details: List[ScenarioDetail] = field(default_factory=list)
    runs: List[Run] = field(default_factory=list)
    incidents: List[IncidentDetail] = field(default_factory=list)


def _ms(base: datetime, milliseconds: int) -> datetime:
    return base + timedelta(milliseconds=milliseconds)


def generate_timeline(started_at: datetime, status: RunStatus) -> List[TimelineEntry]:
    """Build the summary timeline shown in the runs list drawer."""
    events = [
        TimelineEntry(started_at, "Run initialized", TimelineEntryType.INFO),
        TimelineEntry(_ms(started_at, 1000), "Chaos injection started", TimelineEntryType.INFO),
        TimelineEntry(_ms(started_at, 5000), "Baseline metrics captured", TimelineEntryType.INFO),
    ]

    if status == RunStatus.FAILED:
        events += [
            TimelineEntry(_ms(started_at, 15000), "Error threshold exceeded", TimelineEntryType.WARNING),
            TimelineEntry(_ms(started_at, 25000), "System recovery failed", TimelineEntryType.ERROR),
            TimelineEntry(_ms(started_at, 30000), "Run terminated with failures", TimelineEntryType.ERROR),
        ]
    elif status == RunStatus.DEGRADED:
        events += [
            TimelineEntry(_ms(started_at, 12000), "Latency increase detected", TimelineEntryType.WARNING),
            TimelineEntry(_ms(started_at, 22000), "Partial recovery observed", TimelineEntryType.WARNING),
            TimelineEntry(_ms(started_at, 35000), "Run completed with degradation", TimelineEntryType.WARNING),
        ]
    else:
        events += [
            TimelineEntry(_ms(started_at, 10000), "System responded within SLA", TimelineEntryType.SUCCESS),
            TimelineEntry(_ms(started_at, 20000), "Recovery verified", TimelineEntryType.SUCCESS),
            TimelineEntry(_ms(started_at, 25000), "Run completed successfully", TimelineEntryType.SUCCESS),
        ]

    return events


def generate_detailed_timeline(started_at: datetime, status: RunStatus) -> List[DetailedTimelineEvent]:
    """Build the drill-down timeline: three common events plus a status branch."""
    events = [
        DetailedTimelineEvent(
            id="evt-001",
            timestamp=started_at,
            type=TimelineEventType.INFO,
            title="Run initialized",
            description="Chaos engineering run started, baseline metrics being captured",
            metadata={"targetService": "api-gateway", "region": "us-east-1"},
        ),
        DetailedTimelineEvent(
            id="evt-002",
            timestamp=_ms(started_at, 2000),
            type=TimelineEventType.FAULT_INJECTED,
            title="Fault injected",
            description="Latency injection enabled for 30% of requests",
            metadata={"latencyMs": 500, "percentage": 30},
        ),
        DetailedTimelineEvent(
            id="evt-003",
            timestamp=_ms(started_at, 8000),
            type=TimelineEventType.RETRY_TRIGGERED,
            title="Retry triggered",
            description="Automatic retry mechanism activated after timeout threshold exceeded",
            metadata={"retryAttempt": 1, "maxRetries": 3},
        ),
    ]

    if status == RunStatus.FAILED:
        events += [
            DetailedTimelineEvent(
                id="evt-004",
                timestamp=_ms(started_at, 15000),
                type=TimelineEventType.CIRCUIT_BREAKER_OPEN,
                title="Circuit breaker opened",
                description="Error rate exceeded 50%, circuit breaker tripped to prevent cascade failures",
                metadata={"errorRate": 52.3, "threshold": 50},
            ),
            DetailedTimelineEvent(
                id="evt-005",
                timestamp=_ms(started_at, 18000),
                type=TimelineEventType.FALLBACK_SERVED,
                title="Fallback served",
                description="Degraded response served from cache while primary service unavailable",
                metadata={"cacheHitRate": 78},
            ),
            DetailedTimelineEvent(
                id="evt-006",
                timestamp=_ms(started_at, 30000),
                type=TimelineEventType.INFO,
                title="Run terminated",
                description="Run completed with failures, system did not recover within SLA",
            ),
        ]
    elif status == RunStatus.DEGRADED:
        events += [
            DetailedTimelineEvent(
                id="evt-004",
                timestamp=_ms(started_at, 12000),
                type=TimelineEventType.CIRCUIT_BREAKER_OPEN,
                title="Circuit breaker opened",
                description="Error rate elevated, circuit breaker engaged briefly",
                metadata={"errorRate": 35.2, "threshold": 50},
            ),
            DetailedTimelineEvent(
                id="evt-005",
                timestamp=_ms(started_at, 20000),
                type=TimelineEventType.RECOVERY,
                title="Partial recovery",
                description="System partially recovered, operating with reduced throughput",
                metadata={"throughputPercent": 75},
            ),
            DetailedTimelineEvent(
                id="evt-006",
                timestamp=_ms(started_at, 35000),
                type=TimelineEventType.INFO,
                title="Run completed",
                description="Run completed with degradation, manual review recommended",
            ),
        ]
    else:
        events += [
            DetailedTimelineEvent(
                id="evt-004",
                timestamp=_ms(started_at, 12000),
                type=TimelineEventType.RETRY_TRIGGERED,
                title="Retry successful",
                description="Automatic retry succeeded, request completed within SLA",
                metadata={"retryAttempt": 2, "latencyMs": 180},
            ),
            DetailedTimelineEvent(
                id="evt-005",
                timestamp=_ms(started_at, 20000),
                type=TimelineEventType.RECOVERY,
                title="Full recovery",
                description="System fully recovered, all metrics within normal parameters",
                metadata={"recoveryTimeMs": 8000},
            ),
            DetailedTimelineEvent(
                id="evt-006",
                timestamp=_ms(started_at, 25000),
                type=TimelineEventType.INFO,
                title="Run completed",
                description="Chaos experiment completed successfully, system demonstrated resilience",
            ),
        ]

    return events


def generate_run_incidents(run_id: str, status: RunStatus, started_at: datetime) -> List[Incident]:
    """Canned run-scoped incidents, ordered by decreasing severity."""
    if status == RunStatus.SUCCESS:
        return []

    if status == RunStatus.FAILED:
        canned = [
            (
                "Cascade failure detected",
                IncidentSeverity.CRITICAL,
                "Multiple downstream services experienced timeouts leading to cascading failures "
                "across the payment processing pipeline.",
                "Implement bulkhead pattern to isolate service failures and prevent cascade",
                15000,
            ),
            (
                "Memory leak identified",
                IncidentSeverity.HIGH,
                "Memory usage increased by 45% during fault injection without recovery after load normalization.",
                "Review connection pooling configuration and implement proper resource cleanup",
                20000,
            ),
            (
                "Retry storm observed",
                IncidentSeverity.MEDIUM,
                "Exponential backoff not properly configured, leading to retry storms under load.",
                "Configure jitter and increase backoff multiplier in retry policy",
                12000,
            ),
        ]
    else:
        canned = [
            (
                "Elevated latency during recovery",
                IncidentSeverity.MEDIUM,
                "P99 latency remained elevated for 30 seconds after fault injection ended.",
                "Consider implementing connection warming to reduce cold start latency",
                18000,
            ),
            (
                "Partial cache invalidation",
                IncidentSeverity.LOW,
                "Some cached entries were not properly invalidated during failover.",
                "Review cache invalidation strategy and implement TTL-based fallback",
                22000,
            ),
        ]

    return [
        Incident(
            id=f"{run_id}-inc-{i + 1:03d}",
            title=title,
            severity=severity,
            description=description,
            recommended_action=action,
            detected_at=_ms(started_at, offset_ms),
        )
        for i, (title, severity, description, action, offset_ms) in enumerate(canned)
    ]


def generate_steps(failure_type: FailureType) -> List[ScenarioStep]:
    """Default step plan for a failure type.

    Latency and resource scenarios ramp intensity before recovering.
    """
    steps = [
        ScenarioStep(
            id="step-1",
            type=StepType.INJECT_FAULT,
            label=f"Inject {failure_type.value} fault",
            config={"percentage": 30, "target": "all-endpoints"},
        ),
        ScenarioStep(id="step-2", type=StepType.WAIT, label="Wait for metrics", config={"duration": 30}),
    ]

    if failure_type in (FailureType.LATENCY, FailureType.RESOURCE):
        steps.append(ScenarioStep(
            id="step-3",
            type=StepType.INCREASE_INTENSITY,
            label="Increase fault intensity",
            config={"percentage": 60},
        ))
        steps.append(ScenarioStep(id="step-4", type=StepType.WAIT, label="Observe impact", config={"duration": 60}))

    steps.append(ScenarioStep(
        id=f"step-{len(steps) + 1}",
        type=StepType.RECOVER,
        label="Remove fault injection",
        config={"graceful": True},
    ))
    steps.append(ScenarioStep(
        id=f"step-{len(steps) + 1}",
        type=StepType.VALIDATE,
        label="Validate recovery",
        config={"timeout": 120, "checkMetrics": True},
    ))

    return steps


def generate_signals(detected_at: datetime, severity: IncidentSeverity) -> List[IncidentSignal]:
    """
    Generate the detection narrative for an incident.

    Four chronologically ordered signals lead up to detection; critical and
    high severity incidents get a fifth SLO burn signal after it.
    """
    signals = [
        IncidentSignal(
            id="sig-1",
            timestamp=detected_at - timedelta(seconds=180),
            type=SignalType.METRIC_ANOMALY,
            title="Latency anomaly detected",
            value="p95 increased 150% from baseline",
        ),
        IncidentSignal(
            id="sig-2",
            timestamp=detected_at - timedelta(seconds=120),
            type=SignalType.THRESHOLD_BREACH,
            title="Error rate threshold breached",
            value="4.2% > 2% threshold",
        ),
        IncidentSignal(
            id="sig-3",
            timestamp=detected_at - timedelta(seconds=60),
            type=SignalType.CORRELATION,
            title="Correlated with upstream deployment",
            value="api-gateway v2.3.1 deployed 10min ago",
        ),
        IncidentSignal(
            id="sig-4",
            timestamp=detected_at,
            type=SignalType.ALERT_FIRED,
            title="PagerDuty alert triggered",
            value="P1 - Immediate response" if severity == IncidentSeverity.CRITICAL else "P2 - Urgent",
        ),
    ]

    if severity in (IncidentSeverity.CRITICAL, IncidentSeverity.HIGH):
        signals.append(IncidentSignal(
            id="sig-5",
            timestamp=detected_at + timedelta(seconds=30),
            type=SignalType.THRESHOLD_BREACH,
            title="SLO budget consumption accelerated",
            value="Burning 15x normal rate",
        ))

    return signals


def parse_version(version: str) -> tuple:
    """Split a "vMAJOR.MINOR.PATCH" string into integers."""
    parts = version.lstrip("v").split(".")
    numbers = [int(p) for p in parts] + [0, 0, 0]
    return numbers[0], numbers[1], numbers[2]


class MockDataGenerator:
    """
    Seeded factory for the synthetic corpus.

    Every record draws from its own ``random.Random`` keyed by the generator
    seed and the record id, so regenerating a single record (for example a
    run detail) always yields the same values.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        now: Optional[datetime] = None,
        run_count: int = 50,
        scenario_count: int = 24,
        incident_count: int = 30,
    ):
        self.seed = seed if seed is not None else random.randrange(2 ** 32)
        self.now = now or datetime.now(timezone.utc)
        self.run_count = run_count
        self.scenario_count = scenario_count
        self.incident_count = incident_count

    def rng(self, key: str) -> random.Random:
        """Random stream dedicated to one record."""
        return random.Random(f"{self.seed}:{key}")

    # ─────────────────────────────────────────────────────────────────────
    # Runs
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def run_status_for(index: int) -> RunStatus:
        if index % 3 == 0:
            return RunStatus.FAILED
        if index % 5 == 0:
            return RunStatus.DEGRADED
        return RunStatus.SUCCESS

    def generate_run(self, index: int) -> Run:
        """
        Generate the run at a corpus position.

        Args:
            index: Zero-based position; also the number of hours the run is back-dated

        Returns:
            Run with status-dependent metrics, errors and timeline
        """
        run_id = f"run-{index + 1:04d}"
        rng = self.rng(run_id)
        status = self.run_status_for(index)
        scenario = SCENARIOS[index % len(SCENARIOS)]
        started_at = self.now - timedelta(hours=index) - timedelta(milliseconds=rng.random() * 1_800_000)

        if status == RunStatus.FAILED:
            error_rate = 5 + rng.random() * 10
        elif status == RunStatus.DEGRADED:
            error_rate = 1 + rng.random() * 3
        else:
            error_rate = rng.random() * 0.5

        metrics = RunMetrics(
            latency_p50=round(45 + rng.random() * 100, 2),
            latency_p99=round(200 + rng.random() * 300, 2),
            error_rate=round(error_rate, 2),
            request_count=int(5000 + rng.random() * 15000),
        )

        errors = []
        if status != RunStatus.SUCCESS:
            error_slots = 4 if status == RunStatus.FAILED else 2
            for template in ERROR_MESSAGES[:error_slots]:
                count = int(template["count"] * (0.5 + rng.random()))
                errors.append(RunError(code=template["code"], message=template["message"], count=max(count, 1)))

        return Run(
            id=run_id,
            scenario=scenario.name,
            scenario_id=scenario.id,
            status=status,
            started_at=started_at,
            duration=int(20000 + rng.random() * 40000),
            metrics=metrics,
            errors=errors,
            timeline=generate_timeline(started_at, status),
        )

    def generate_runs(self) -> List[Run]:
        return [self.generate_run(i) for i in range(self.run_count)]

    def build_run_detail(self, run: Run) -> RunDetail:
        """Derive the drill-down view of a run."""
        rng = self.rng(f"{run.id}:detail")
        probe = run.id[4] if len(run.id) > 4 else run.id[-1:] or "0"
        environment = ENVIRONMENTS[ord(probe) % len(ENVIRONMENTS)]
        failed = run.status == RunStatus.FAILED

        metrics = RunDetailMetrics(
            latency_p50=run.metrics.latency_p50,
            latency_p99=run.metrics.latency_p99,
            error_rate=run.metrics.error_rate,
            request_count=run.metrics.request_count,
            latency_p95=round(
                run.metrics.latency_p50 + (run.metrics.latency_p99 - run.metrics.latency_p50) * 0.7, 2
            ),
            throughput=int(1000 + rng.random() * 4000),
            cpu_usage=round(75 + rng.random() * 20 if failed else 30 + rng.random() * 40, 1),
            memory_usage=round(70 + rng.random() * 25 if failed else 40 + rng.random() * 30, 1),
        )

        return RunDetail(
            id=run.id,
            scenario=run.scenario,
            scenario_id=run.scenario_id,
            status=run.status,
            started_at=run.started_at,
            duration=run.duration,
            metrics=metrics,
            errors=list(run.errors),
            timeline=list(run.timeline),
            environment=environment,
            detailed_timeline=generate_detailed_timeline(run.started_at, run.status),
            incidents=generate_run_incidents(run.id, run.status, run.started_at),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Scenarios
    # ─────────────────────────────────────────────────────────────────────

    def generate_scenario_detail(self, index: int) -> ScenarioDetail:
        failure_type = FAILURE_TYPES[index % len(FAILURE_TYPES)]
        base = SCENARIOS[index % len(SCENARIOS)]
        is_cron = index % 3 == 0

        return ScenarioDetail(
            id=f"scenario-{index + 1:03d}",
            name=base.name,
            description=base.description,
            type=failure_type,
            target_service=TARGET_SERVICES[index % len(TARGET_SERVICES)],
            version=f"v{index // 3 + 1}.{index % 3}.0",
            last_updated=self.now - timedelta(days=2 * index),
            owner=OWNERS[index % len(OWNERS)],
            status=ScenarioStatus.ARCHIVED if index % 7 == 0 else ScenarioStatus.ACTIVE,
            environment=ENVIRONMENTS[index % len(ENVIRONMENTS)],
            intensity=20 + (index * 10) % 80,
            duration=30 + (index * 15) % 270,
            schedule_type=ScheduleType.CRON if is_cron else ScheduleType.MANUAL,
            cron_expression="0 2 * * 1" if is_cron else None,
            safety_config=SafetyConfig(
                max_error_rate=5 + (index % 10),
                auto_stop_enabled=index % 4 != 0,
            ),
            steps=generate_steps(failure_type),
        )

    def generate_scenario_details(self) -> List[ScenarioDetail]:
        return [self.generate_scenario_detail(i) for i in range(self.scenario_count)]

    def get_scenario_versions(self, scenario: ScenarioDetail) -> List[ScenarioVersion]:
        """
        Reconstruct a scenario's publish history, newest first.

        Walks back from the current major.minor (minors 2..0 for earlier
        majors), capped at six entries published a week apart. The newest
        entry is the current version and carries the scenario's exact
        version string.
        """
        major, minor, _ = parse_version(scenario.version)
        versions = []

        for maj in range(major, 0, -1):
            max_minor = minor if maj == major else 2
            for mnr in range(max_minor, -1, -1):
                idx = len(versions)
                versions.append(ScenarioVersion(
                    id=f"ver-{scenario.id}-{maj}-{mnr}",
                    version=scenario.version if idx == 0 else f"v{maj}.{mnr}.0",
                    published_at=self.now - timedelta(days=7 * idx),
                    published_by=OWNERS[idx % len(OWNERS)],
                    changelog=CHANGELOG_MESSAGES[idx % len(CHANGELOG_MESSAGES)],
                    is_current=idx == 0,
                ))
                if len(versions) >= MAX_VERSION_HISTORY:
                    return versions

        return versions

    # ─────────────────────────────────────────────────────────────────────
    # Incidents
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def incident_status_for(index: int) -> IncidentStatus:
        if index < 3:
            return IncidentStatus.OPEN
        if index < 8:
            return IncidentStatus.ACKNOWLEDGED
        return [IncidentStatus.OPEN, IncidentStatus.ACKNOWLEDGED, IncidentStatus.RESOLVED][index % 3]

    def generate_incident_detail(self, index: int, runs: List[Run]) -> IncidentDetail:
        """
        Generate the platform incident at a corpus position.

        Args:
            index: Zero-based position; drives severity, status and back-dating
            runs: Run corpus the incident is linked into (``runs[index % len(runs)]``)
        """
        incident_id = f"inc-{index + 1:04d}"
        rng = self.rng(incident_id)
        severity = SEVERITY_CYCLE[index % len(SEVERITY_CYCLE)]
        status = self.incident_status_for(index)
        detected_at = self.now - timedelta(hours=2 * index)
        run = runs[index % len(runs)]

        if severity == IncidentSeverity.CRITICAL:
            error_rate = 8 + rng.random() * 7
        elif severity == IncidentSeverity.HIGH:
            error_rate = 4 + rng.random() * 4
        else:
            error_rate = 1 + rng.random() * 3

        return IncidentDetail(
            id=incident_id,
            title=INCIDENT_TITLES[index % len(INCIDENT_TITLES)],
            summary=INCIDENT_SUMMARIES[index % len(INCIDENT_SUMMARIES)],
            severity=severity,
            status=status,
            service=TARGET_SERVICES[index % len(TARGET_SERVICES)],
            detected_at=detected_at,
            run_id=run.id,
            owner=None if status == IncidentStatus.OPEN else OWNERS[index % len(OWNERS)],
            suspected_root_cause=ROOT_CAUSES[index % len(ROOT_CAUSES)],
            impacted_endpoints=IMPACTED_ENDPOINTS[:2 + (index % 4)],
            recommended_actions=RECOMMENDED_ACTIONS[:3 + (index % 3)],
            signals=generate_signals(detected_at, severity),
            metrics=IncidentMetrics(
                latency_p95=200 + (index * 50) % 600,
                error_rate=round(error_rate, 2),
            ),
        )

    def generate_incidents(self, runs: List[Run]) -> List[IncidentDetail]:
        if not runs:
            return []
        return [self.generate_incident_detail(i, runs) for i in range(self.incident_count)]

    def build_corpus(self) -> Corpus:
        """Generate the full dataset in dependency order (runs before incidents)."""
        runs = self.generate_runs()
        corpus = Corpus(
            scenario_details=self.generate_scenario_details(),
            runs=runs,
            incidents=self.generate_incidents(runs),
        )
        logger.debug(
            "Generated corpus (seed=%s): %d scenarios, %d runs, %d incidents",
            self.seed, len(corpus.scenario_details), len(corpus.runs), len(corpus.incidents),
        )
        return corpus


if __name__ == "__main__":
    # Generate a sample corpus
    corpus = MockDataGenerator(seed=42).build_corpus()
    print(f"Generated {len(corpus.runs)} runs, {len(corpus.scenario_details)} scenarios, "
          f"{len(corpus.incidents)} incidents")

    print("\nSample runs:")
    for run in corpus.runs[:3]:
        print(f"  {run.id} [{run.status.value}] {run.scenario} - error rate {run.metrics.error_rate}%")
