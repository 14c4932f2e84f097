"""
Status-transition and catalog actions for incidents and scenarios.

Every action returns a new record and leaves its input untouched; callers
store the result by replacing the record with the same id.
"""

import copy
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional

from src.data.models import (
    IncidentDetail,
    IncidentStatus,
    SafetyConfig,
    ScenarioDetail,
    ScenarioFormData,
    ScenarioStatus,
    ScheduleType,
)

logger = logging.getLogger(__name__)


INITIAL_SCENARIO_VERSION = "v1.0.0"

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
INTENSITY_RANGE = (10, 100)
DURATION_RANGE = (15, 300)  # seconds
MAX_ERROR_RATE_RANGE = (1, 25)  # percent


class ScenarioFormError(ValueError):
    """Raised when a scenario form submission fails validation."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# INCIDENTS
# ═══════════════════════════════════════════════════════════════════════════════

def acknowledge_incident(incident: IncidentDetail, acting_user: str) -> IncidentDetail:
    """
    Move an open incident to acknowledged.

    The acting user becomes the owner unless one is already set. Incidents
    that are not open are returned unchanged.
    """
    if incident.status != IncidentStatus.OPEN:
        logger.debug("Ignoring acknowledge on %s incident %s", incident.status.value, incident.id)
        return incident

    logger.info("Incident %s acknowledged by %s", incident.id, acting_user)
    return replace(
        incident,
        status=IncidentStatus.ACKNOWLEDGED,
        owner=incident.owner or acting_user,
    )


def resolve_incident(incident: IncidentDetail, acting_user: str) -> IncidentDetail:
    """
    Resolve an open or acknowledged incident.

    An existing owner is never overridden; the acting user is assigned only
    when the incident has none. Resolved incidents are returned unchanged.
    """
    if incident.status == IncidentStatus.RESOLVED:
        logger.debug("Incident %s is already resolved", incident.id)
        return incident

    logger.info("Incident %s resolved by %s", incident.id, acting_user)
    return replace(
        incident,
        status=IncidentStatus.RESOLVED,
        owner=incident.owner or acting_user,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SCENARIOS
# ═══════════════════════════════════════════════════════════════════════════════

def is_read_only(scenario: ScenarioDetail) -> bool:
    """Archived scenarios cannot be edited, published or run."""
    return scenario.is_archived


def archive_scenario(scenario: ScenarioDetail) -> ScenarioDetail:
    if scenario.status == ScenarioStatus.ARCHIVED:
        return scenario
    logger.info("Scenario %s archived", scenario.id)
    return replace(scenario, status=ScenarioStatus.ARCHIVED)


def restore_scenario(scenario: ScenarioDetail) -> ScenarioDetail:
    if scenario.status == ScenarioStatus.ACTIVE:
        return scenario
    logger.info("Scenario %s restored", scenario.id)
    return replace(scenario, status=ScenarioStatus.ACTIVE)


def toggle_scenario_archive(scenario: ScenarioDetail) -> ScenarioDetail:
    if scenario.status == ScenarioStatus.ARCHIVED:
        return restore_scenario(scenario)
    return archive_scenario(scenario)


def new_scenario_id(now: Optional[datetime] = None) -> str:
    """Unique scenario id: creation time in epoch milliseconds plus a random suffix."""
    now = now or _utcnow()
    return f"scenario-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:4]}"


def duplicate_scenario(scenario: ScenarioDetail, now: Optional[datetime] = None) -> ScenarioDetail:
    """
    Copy a scenario under a fresh id.

    The copy's name gets a " (Copy)" suffix and ``last_updated`` is set to
    now; every other field is copied verbatim.
    """
    now = now or _utcnow()
    copied = copy.deepcopy(scenario)
    duplicated = replace(
        copied,
        id=new_scenario_id(now),
        name=f"{scenario.name} (Copy)",
        last_updated=now,
    )
    logger.info("Scenario %s duplicated as %s", scenario.id, duplicated.id)
    return duplicated


def validate_scenario_form(form: ScenarioFormData) -> Dict[str, str]:
    """
    Check a form submission.

    Returns:
        Mapping of field name to error message; empty when the form is valid
    """
    errors = {}

    if not form.name or not form.name.strip():
        errors["name"] = "Scenario name is required"
    elif len(form.name) > NAME_MAX_LENGTH:
        errors["name"] = f"Name must be {NAME_MAX_LENGTH} characters or less"

    if form.description and len(form.description) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less"

    if not form.target_service:
        errors["target_service"] = "Target service is required"

    if not form.environment:
        errors["environment"] = "Environment is required"

    if form.schedule_type == ScheduleType.CRON and not (form.cron_expression or "").strip():
        errors["cron_expression"] = "Cron expression is required for scheduled scenarios"

    if not form.steps:
        errors["steps"] = "At least one step is required"

    low, high = INTENSITY_RANGE
    if not low <= form.intensity <= high:
        errors["intensity"] = f"Intensity must be between {low} and {high}"

    low, high = DURATION_RANGE
    if not low <= form.duration <= high:
        errors["duration"] = f"Duration must be between {low} and {high} seconds"

    low, high = MAX_ERROR_RATE_RANGE
    if not low <= form.max_error_rate <= high:
        errors["max_error_rate"] = f"Max error rate must be between {low}% and {high}%"

    return errors


def _check_form(form: ScenarioFormData) -> None:
    errors = validate_scenario_form(form)
    if errors:
        raise ScenarioFormError(errors)


def _cron_for(form: ScenarioFormData) -> Optional[str]:
    if form.schedule_type == ScheduleType.CRON:
        return form.cron_expression.strip()
    return None


def create_scenario(
    form: ScenarioFormData,
    acting_user: str,
    now: Optional[datetime] = None,
) -> ScenarioDetail:
    """
    Build a new active scenario at version v1.0.0 owned by the acting user.

    Raises:
        ScenarioFormError: If the form does not validate
    """
    _check_form(form)
    now = now or _utcnow()

    scenario = ScenarioDetail(
        id=new_scenario_id(now),
        name=form.name.strip(),
        description=form.description,
        type=form.type,
        target_service=form.target_service,
        version=INITIAL_SCENARIO_VERSION,
        last_updated=now,
        owner=acting_user,
        status=ScenarioStatus.ACTIVE,
        environment=form.environment,
        intensity=form.intensity,
        duration=form.duration,
        schedule_type=form.schedule_type,
        cron_expression=_cron_for(form),
        safety_config=SafetyConfig(
            max_error_rate=form.max_error_rate,
            auto_stop_enabled=form.auto_stop_enabled,
        ),
        steps=copy.deepcopy(form.steps),
    )
    logger.info("Scenario %s created by %s", scenario.id, acting_user)
    return scenario


def update_scenario(
    scenario: ScenarioDetail,
    form: ScenarioFormData,
    now: Optional[datetime] = None,
) -> ScenarioDetail:
    """
    Merge a form submission into an existing scenario.

    Id, version, owner and status are kept; the safety config and
    ``last_updated`` are recomputed.

    Raises:
        ScenarioFormError: If the form does not validate
    """
    _check_form(form)
    now = now or _utcnow()

    updated = replace(
        scenario,
        name=form.name.strip(),
        description=form.description,
        type=form.type,
        target_service=form.target_service,
        environment=form.environment,
        intensity=form.intensity,
        duration=form.duration,
        schedule_type=form.schedule_type,
        cron_expression=_cron_for(form),
        safety_config=SafetyConfig(
            max_error_rate=form.max_error_rate,
            auto_stop_enabled=form.auto_stop_enabled,
        ),
        steps=copy.deepcopy(form.steps),
        last_updated=now,
    )
    logger.info("Scenario %s updated", scenario.id)
    return updated


def form_from_scenario(scenario: ScenarioDetail) -> ScenarioFormData:
    """Prefill an edit form from an existing scenario."""
    return ScenarioFormData(
        name=scenario.name,
        description=scenario.description,
        target_service=scenario.target_service,
        environment=scenario.environment,
        type=scenario.type,
        intensity=scenario.intensity,
        duration=scenario.duration,
        schedule_type=scenario.schedule_type,
        cron_expression=scenario.cron_expression or "",
        max_error_rate=scenario.safety_config.max_error_rate,
        auto_stop_enabled=scenario.safety_config.auto_stop_enabled,
        steps=copy.deepcopy(scenario.steps),
    )
