"""
Derived views over the corpus: overview KPIs, incident counters, related
runs and the root-cause panel of the incident page.
"""

import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from src.data.models import (
    IncidentDetail,
    IncidentSeverity,
    IncidentStatus,
    Run,
    RunStatus,
)


KPI_WINDOW = timedelta(hours=24)

# Share of requests allowed to fail before the error budget is spent
ERROR_BUDGET_RATIO = 0.05

SEVERITY_CONFIDENCE = {
    IncidentSeverity.CRITICAL: 92,
    IncidentSeverity.HIGH: 85,
    IncidentSeverity.MEDIUM: 72,
    IncidentSeverity.LOW: 65,
}

CONTRIBUTING_FACTORS = [
    {"factor": "Recent deployment", "correlation": 78, "verified": True},
    {"factor": "Traffic spike", "correlation": 65, "verified": True},
    {"factor": "Database load", "correlation": 52, "verified": False},
]


def compute_kpis(runs: Sequence[Run], now: datetime) -> Dict[str, Any]:
    """
    Overview cards for the last 24 hours.

    Returns:
        Dict with runs_today, failed_runs, avg_latency (ms, p50) and
        error_budget_burn (percent of the budget consumed, capped at 100)
    """
    window_start = now - KPI_WINDOW
    recent = [r for r in runs if window_start <= r.started_at <= now]

    requests = sum(r.metrics.request_count for r in recent)
    failed_requests = sum(r.metrics.request_count * r.metrics.error_rate / 100 for r in recent)
    burn = 0
    if requests:
        burn = min(100, round(failed_requests / requests / ERROR_BUDGET_RATIO * 100))

    return {
        "runs_today": len(recent),
        "failed_runs": sum(1 for r in recent if r.status == RunStatus.FAILED),
        "avg_latency": round(sum(r.metrics.latency_p50 for r in recent) / len(recent)) if recent else 0,
        "error_budget_burn": burn,
    }


def status_breakdown(runs: Sequence[Run]) -> Dict[str, int]:
    """Run count per status, every status present."""
    counts = {status.value: 0 for status in RunStatus}
    for run in runs:
        counts[run.status.value] += 1
    return counts


def incident_stats(incidents: Sequence[IncidentDetail]) -> Dict[str, int]:
    return {
        "total": len(incidents),
        "open": sum(1 for i in incidents if i.status == IncidentStatus.OPEN),
        "critical": sum(
            1 for i in incidents
            if i.severity == IncidentSeverity.CRITICAL and i.status != IncidentStatus.RESOLVED
        ),
    }


def related_runs(incident: IncidentDetail, runs: Sequence[Run], limit: int = 5) -> List[Run]:
    """
    Runs worth looking at next to an incident.

    The run that raised the incident comes first, followed by other runs of
    the same scenario in corpus order.
    """
    origin = next((r for r in runs if r.id == incident.run_id), None)
    if origin is None:
        return []

    related = [origin]
    for run in runs:
        if len(related) >= limit:
            break
        if run.id != origin.id and run.scenario_id == origin.scenario_id:
            related.append(run)
    return related


def incident_confidence(incident: IncidentDetail, seed: Optional[int] = None) -> int:
    """
    Illustrative root-cause confidence: a per-severity base with a small,
    stable jitter in [-4, +3] keyed by the incident id.
    """
    jitter = random.Random(f"{seed}:{incident.id}:confidence").randint(-4, 3)
    return SEVERITY_CONFIDENCE[incident.severity] + jitter


def confidence_level(confidence: int) -> str:
    if confidence >= 85:
        return "High"
    if confidence >= 70:
        return "Medium"
    return "Low"


def contributing_factors(incident: IncidentDetail) -> List[Dict[str, Any]]:
    """Fresh copy of the illustrative factor list shown beside a root cause."""
    return [dict(f) for f in CONTRIBUTING_FACTORS]


def root_cause_analysis(incident: IncidentDetail, seed: Optional[int] = None) -> Dict[str, Any]:
    confidence = incident_confidence(incident, seed)
    return {
        "incident_id": incident.id,
        "suspected_root_cause": incident.suspected_root_cause,
        "confidence": confidence,
        "confidence_level": confidence_level(confidence),
        "contributing_factors": contributing_factors(incident),
    }


def format_duration(ms: int) -> str:
    """Human duration, e.g. ``"2m 34s"`` or ``"48s"``."""
    seconds = int(ms // 1000)
    minutes, remaining = divmod(seconds, 60)
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{seconds}s"
