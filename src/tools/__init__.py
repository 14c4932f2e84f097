"""Query, action and export helpers for ChaosBoard.

This module re-exports the pure functions the service layer is built from:
1. Filter criteria and pagination
2. Incident and scenario actions
3. Export and derived insights
"""

from src.tools.criteria import (
    DateRange,
    IncidentFilter,
    RunFilter,
    ScenarioFilter,
    selected_scenarios,
)
from src.tools.query import (
    DEFAULT_PAGE_SIZE,
    ListView,
    Page,
    filter_records,
    page_numbers,
    paginate,
    query,
)
from src.tools.actions import (
    ScenarioFormError,
    acknowledge_incident,
    archive_scenario,
    create_scenario,
    duplicate_scenario,
    form_from_scenario,
    is_read_only,
    resolve_incident,
    restore_scenario,
    toggle_scenario_archive,
    update_scenario,
    validate_scenario_form,
)
from src.tools.export import export_filename, export_json, to_document
from src.tools.insights import (
    compute_kpis,
    contributing_factors,
    incident_stats,
    related_runs,
    root_cause_analysis,
)

__all__ = [
    # Criteria and pagination
    "DateRange",
    "IncidentFilter",
    "RunFilter",
    "ScenarioFilter",
    "selected_scenarios",
    "DEFAULT_PAGE_SIZE",
    "ListView",
    "Page",
    "filter_records",
    "page_numbers",
    "paginate",
    "query",
    # Actions
    "ScenarioFormError",
    "acknowledge_incident",
    "archive_scenario",
    "create_scenario",
    "duplicate_scenario",
    "form_from_scenario",
    "is_read_only",
    "resolve_incident",
    "restore_scenario",
    "toggle_scenario_archive",
    "update_scenario",
    "validate_scenario_form",
    # Export and insights
    "export_filename",
    "export_json",
    "to_document",
    "compute_kpis",
    "contributing_factors",
    "incident_stats",
    "related_runs",
    "root_cause_analysis",
]
