"""
Dashboard service for ChaosBoard.

The single entry point the CLI and the Streamlit dashboard talk to. It
combines the repository (where records live), the generator (which derives
run details and scenario history) and the query/action helpers, and
returns None wherever a requested id does not exist.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.data.mock_data import MockDataGenerator, SCENARIOS, TARGET_SERVICES
from src.data.models import (
    IncidentDetail,
    Run,
    RunDetail,
    Scenario,
    ScenarioDetail,
    ScenarioFormData,
    ScenarioVersion,
)
from src.store.repository import (
    ElasticsearchRepository,
    InMemoryRepository,
    RecordKind,
    Repository,
)
from src.tools import actions, insights
from src.tools.criteria import IncidentFilter, RunFilter, ScenarioFilter
from src.tools.export import export_filename, export_json
from src.tools.query import DEFAULT_PAGE_SIZE, Page, query
from src.utils.config import DEFAULT_ACTING_USER, Settings

logger = logging.getLogger(__name__)


@dataclass
class Export:
    """A serialized record ready for download."""
    filename: str
    content: str
    media_type: str = "application/json"


class DashboardService:
    """Queries and actions behind every dashboard screen."""

    def __init__(
        self,
        repository: Repository,
        generator: MockDataGenerator,
        acting_user: str = DEFAULT_ACTING_USER,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.repository = repository
        self.generator = generator
        self.acting_user = acting_user
        self.page_size = page_size

    @classmethod
    def in_memory(cls, seed: Optional[int] = None, now: Optional[datetime] = None, **kwargs) -> "DashboardService":
        """Service over a freshly generated corpus."""
        generator = MockDataGenerator(seed=seed, now=now)
        return cls(InMemoryRepository(generator.build_corpus()), generator, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DashboardService":
        """
        Build the service for the configured backend.

        Raises:
            ValueError: If the Elasticsearch backend is selected but not configured
        """
        generator = MockDataGenerator(seed=settings.seed)

        if settings.backend == "elasticsearch":
            from src.utils.elasticsearch_client import get_elasticsearch_client
            repository = ElasticsearchRepository(get_elasticsearch_client())
        else:
            repository = InMemoryRepository(generator.build_corpus())

        logger.debug("Using %s backend (seed=%s)", settings.backend, generator.seed)
        return cls(
            repository,
            generator,
            acting_user=settings.acting_user,
            page_size=settings.page_size,
        )

    @property
    def now(self) -> datetime:
        return self.generator.now

    # ─────────────────────────────────────────────────────────────────────
    # Catalog
    # ─────────────────────────────────────────────────────────────────────

    def scenario_catalog(self) -> List[Scenario]:
        """Base scenarios offered by the runs list multi-select."""
        return list(SCENARIOS)

    def services(self) -> List[str]:
        return list(TARGET_SERVICES)

    # ─────────────────────────────────────────────────────────────────────
    # Lists
    # ─────────────────────────────────────────────────────────────────────

    def _page_size(self, page_size: Optional[int]) -> int:
        return page_size or self.page_size

    def list_runs(self, criteria: Optional[RunFilter] = None, page: int = 1,
                  page_size: Optional[int] = None) -> Page[Run]:
        return query(self.repository.list(RecordKind.RUNS), criteria, page, self._page_size(page_size))

    def list_scenarios(self, criteria: Optional[ScenarioFilter] = None, page: int = 1,
                       page_size: Optional[int] = None) -> Page[ScenarioDetail]:
        return query(self.repository.list(RecordKind.SCENARIOS), criteria, page, self._page_size(page_size))

    def list_incidents(self, criteria: Optional[IncidentFilter] = None, page: int = 1,
                       page_size: Optional[int] = None) -> Page[IncidentDetail]:
        return query(self.repository.list(RecordKind.INCIDENTS), criteria, page, self._page_size(page_size))

    def all_runs(self) -> List[Run]:
        return self.repository.list(RecordKind.RUNS)

    def all_scenarios(self) -> List[ScenarioDetail]:
        return self.repository.list(RecordKind.SCENARIOS)

    def all_incidents(self) -> List[IncidentDetail]:
        return self.repository.list(RecordKind.INCIDENTS)

    # ─────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────

    def get_run(self, run_id: str) -> Optional[Run]:
        return self.repository.get(RecordKind.RUNS, run_id)

    def get_run_detail(self, run_id: str) -> Optional[RunDetail]:
        run = self.get_run(run_id)
        if run is None:
            return None
        return self.generator.build_run_detail(run)

    def get_scenario(self, scenario_id: str) -> Optional[ScenarioDetail]:
        return self.repository.get(RecordKind.SCENARIOS, scenario_id)

    def get_incident_detail(self, incident_id: str) -> Optional[IncidentDetail]:
        return self.repository.get(RecordKind.INCIDENTS, incident_id)

    def get_scenario_versions(self, scenario_id: str) -> Optional[List[ScenarioVersion]]:
        scenario = self.get_scenario(scenario_id)
        if scenario is None:
            return None
        return self.generator.get_scenario_versions(scenario)

    def get_scenario_runs(self, scenario_id: str, limit: int = 10) -> Optional[List[Run]]:
        """Most recent runs of a scenario, matched by scenario name."""
        scenario = self.get_scenario(scenario_id)
        if scenario is None:
            return None
        return [r for r in self.all_runs() if r.scenario == scenario.name][:limit]

    def get_related_runs(self, incident_id: str, limit: int = 5) -> Optional[List[Run]]:
        incident = self.get_incident_detail(incident_id)
        if incident is None:
            return None
        return insights.related_runs(incident, self.all_runs(), limit)

    # ─────────────────────────────────────────────────────────────────────
    # Incident actions
    # ─────────────────────────────────────────────────────────────────────

    def _update_incident(self, incident_id: str, action, acting_user: Optional[str]) -> Optional[IncidentDetail]:
        incident = self.get_incident_detail(incident_id)
        if incident is None:
            return None
        updated = action(incident, acting_user or self.acting_user)
        if updated is incident:
            return incident
        return self.repository.replace(RecordKind.INCIDENTS, updated)

    def acknowledge_incident(self, incident_id: str, acting_user: Optional[str] = None) -> Optional[IncidentDetail]:
        return self._update_incident(incident_id, actions.acknowledge_incident, acting_user)

    def resolve_incident(self, incident_id: str, acting_user: Optional[str] = None) -> Optional[IncidentDetail]:
        return self._update_incident(incident_id, actions.resolve_incident, acting_user)

    # ─────────────────────────────────────────────────────────────────────
    # Scenario actions
    # ─────────────────────────────────────────────────────────────────────

    def create_scenario(self, form: ScenarioFormData, acting_user: Optional[str] = None) -> ScenarioDetail:
        """
        Raises:
            ScenarioFormError: If the form does not validate
        """
        scenario = actions.create_scenario(form, acting_user or self.acting_user, now=_utcnow())
        return self.repository.insert_first(RecordKind.SCENARIOS, scenario)

    def update_scenario(self, scenario_id: str, form: ScenarioFormData) -> Optional[ScenarioDetail]:
        """
        Raises:
            ScenarioFormError: If the form does not validate
        """
        scenario = self.get_scenario(scenario_id)
        if scenario is None:
            return None
        return self.repository.replace(RecordKind.SCENARIOS, actions.update_scenario(scenario, form, now=_utcnow()))

    def _update_scenario_status(self, scenario_id: str, action) -> Optional[ScenarioDetail]:
        scenario = self.get_scenario(scenario_id)
        if scenario is None:
            return None
        updated = action(scenario)
        if updated is scenario:
            return scenario
        return self.repository.replace(RecordKind.SCENARIOS, updated)

    def archive_scenario(self, scenario_id: str) -> Optional[ScenarioDetail]:
        return self._update_scenario_status(scenario_id, actions.archive_scenario)

    def restore_scenario(self, scenario_id: str) -> Optional[ScenarioDetail]:
        return self._update_scenario_status(scenario_id, actions.restore_scenario)

    def toggle_scenario_archive(self, scenario_id: str) -> Optional[ScenarioDetail]:
        return self._update_scenario_status(scenario_id, actions.toggle_scenario_archive)

    def duplicate_scenario(self, scenario_id: str) -> Optional[ScenarioDetail]:
        scenario = self.get_scenario(scenario_id)
        if scenario is None:
            return None
        return self.repository.insert_first(RecordKind.SCENARIOS, actions.duplicate_scenario(scenario, now=_utcnow()))

    # ─────────────────────────────────────────────────────────────────────
    # Export and insights
    # ─────────────────────────────────────────────────────────────────────

    def export_run(self, run_id: str) -> Optional[Export]:
        detail = self.get_run_detail(run_id)
        if detail is None:
            return None
        return Export(filename=export_filename(detail), content=export_json(detail))

    def export_incident(self, incident_id: str) -> Optional[Export]:
        incident = self.get_incident_detail(incident_id)
        if incident is None:
            return None
        return Export(filename=export_filename(incident), content=export_json(incident))

    def kpis(self) -> Dict[str, Any]:
        return insights.compute_kpis(self.all_runs(), self.now)

    def incident_stats(self) -> Dict[str, int]:
        return insights.incident_stats(self.all_incidents())

    def root_cause_analysis(self, incident_id: str) -> Optional[Dict[str, Any]]:
        incident = self.get_incident_detail(incident_id)
        if incident is None:
            return None
        return insights.root_cause_analysis(incident, self.generator.seed)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
