"""
Pytest configuration and shared fixtures for ChaosBoard tests.
"""

import pytest
from unittest.mock import MagicMock
from datetime import datetime, timedelta, timezone

from src.data.mock_data import MockDataGenerator
from src.data.models import (
    FailureType,
    IncidentDetail,
    IncidentSeverity,
    IncidentStatus,
    Run,
    RunMetrics,
    RunStatus,
    ScenarioFormData,
)
from src.service import DashboardService
from src.store.repository import InMemoryRepository


FIXED_NOW = datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)
SEED = 1234


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires ES)"
    )


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def generator():
    """Seeded generator pinned to a fixed clock."""
    return MockDataGenerator(seed=SEED, now=FIXED_NOW)


@pytest.fixture
def corpus(generator):
    return generator.build_corpus()


@pytest.fixture
def service(generator):
    """Dashboard service over a fresh in-memory corpus."""
    return DashboardService(
        InMemoryRepository(generator.build_corpus()),
        generator,
        acting_user="tester@example.com",
    )


@pytest.fixture
def mock_es_client():
    """
    Create a mock Elasticsearch client.

    This fixture provides a MagicMock that simulates the Elasticsearch
    client interface without requiring a real connection.
    """
    client = MagicMock()
    client.indices.exists.return_value = True
    return client


def make_run(run_id: str, started_at: datetime, status: RunStatus = RunStatus.SUCCESS,
             scenario_id: str = "sc-001", scenario: str = "API Latency Spike") -> Run:
    """Minimal run for filter tests."""
    return Run(
        id=run_id,
        scenario=scenario,
        scenario_id=scenario_id,
        status=status,
        started_at=started_at,
        duration=30000,
        metrics=RunMetrics(latency_p50=100, latency_p99=300, error_rate=1.0, request_count=1000),
    )


def make_incident(incident_id: str = "inc-9001", title: str = "P95 latency exceeded threshold",
                  status: IncidentStatus = IncidentStatus.OPEN, owner=None,
                  severity: IncidentSeverity = IncidentSeverity.HIGH,
                  detected_at: datetime = FIXED_NOW) -> IncidentDetail:
    """Minimal incident for action and filter tests."""
    return IncidentDetail(
        id=incident_id,
        title=title,
        summary="p95 latency exceeded 800ms; error rate 4.2%",
        severity=severity,
        status=status,
        service="api-gateway",
        detected_at=detected_at,
        run_id="run-0001",
        owner=owner,
        suspected_root_cause="Increased traffic volume exceeded auto-scaling capacity.",
    )


@pytest.fixture
def run_factory():
    return make_run


@pytest.fixture
def incident_factory():
    return make_incident


@pytest.fixture
def valid_form():
    """A scenario form that passes validation."""
    from src.data.mock_data import generate_steps
    return ScenarioFormData(
        name="Checkout Latency",
        target_service="payment-service",
        environment="staging",
        type=FailureType.LATENCY,
        description="Inject latency into checkout",
        intensity=40,
        duration=120,
        max_error_rate=5,
        steps=generate_steps(FailureType.LATENCY),
    )


@pytest.fixture
def days():
    """Timestamps on day 1, 3 and 5 of January 2026."""
    return {
        n: datetime(2026, 1, n, 9, 30, tzinfo=timezone.utc)
        for n in (1, 3, 5)
    }


@pytest.fixture
def hour():
    return timedelta(hours=1)
