"""
Unit tests for incident triage and scenario lifecycle actions.
"""

import re
import pytest
from dataclasses import replace
from datetime import timedelta

from src.data.models import (
    FailureType,
    IncidentStatus,
    ScenarioStatus,
    ScheduleType,
)
from src.tools.actions import (
    INITIAL_SCENARIO_VERSION,
    ScenarioFormError,
    acknowledge_incident,
    archive_scenario,
    create_scenario,
    duplicate_scenario,
    form_from_scenario,
    is_read_only,
    new_scenario_id,
    resolve_incident,
    restore_scenario,
    toggle_scenario_archive,
    update_scenario,
    validate_scenario_form,
)
from src.tools.export import to_document


class TestAcknowledgeIncident:
    """Tests for acknowledge_incident."""

    def test_open_becomes_acknowledged_with_owner(self, incident_factory):
        incident = incident_factory(status=IncidentStatus.OPEN, owner=None)
        updated = acknowledge_incident(incident, "me@example.com")

        assert updated.status == IncidentStatus.ACKNOWLEDGED
        assert updated.owner == "me@example.com"

    def test_existing_owner_kept(self, incident_factory):
        incident = incident_factory(status=IncidentStatus.OPEN, owner="bob@example.com")
        assert acknowledge_incident(incident, "me@example.com").owner == "bob@example.com"

    def test_original_not_mutated(self, incident_factory):
        incident = incident_factory(status=IncidentStatus.OPEN)
        acknowledge_incident(incident, "me@example.com")

        assert incident.status == IncidentStatus.OPEN
        assert incident.owner is None

    @pytest.mark.parametrize("status", [IncidentStatus.ACKNOWLEDGED, IncidentStatus.RESOLVED])
    def test_non_open_is_noop(self, incident_factory, status):
        incident = incident_factory(status=status, owner="bob@example.com")
        assert acknowledge_incident(incident, "me@example.com") is incident


class TestResolveIncident:
    """Tests for resolve_incident."""

    def test_acknowledge_then_resolve_keeps_owner(self, incident_factory):
        """Resolving after acknowledgement never overwrites the owner."""
        incident = incident_factory(status=IncidentStatus.OPEN)
        acknowledged = acknowledge_incident(incident, "first@example.com")
        resolved = resolve_incident(acknowledged, "second@example.com")

        assert resolved.status == IncidentStatus.RESOLVED
        assert resolved.owner == "first@example.com"

    def test_resolve_from_open_assigns_owner(self, incident_factory):
        incident = incident_factory(status=IncidentStatus.OPEN, owner=None)
        resolved = resolve_incident(incident, "me@example.com")

        assert resolved.status == IncidentStatus.RESOLVED
        assert resolved.owner == "me@example.com"

    def test_already_resolved_is_noop(self, incident_factory):
        incident = incident_factory(status=IncidentStatus.RESOLVED, owner="bob@example.com")
        assert resolve_incident(incident, "me@example.com") is incident


class TestArchiveRestore:
    """Tests for scenario archive and restore."""

    def test_archive_active(self, corpus):
        scenario = corpus.scenario_details[1]
        assert scenario.status == ScenarioStatus.ACTIVE

        archived = archive_scenario(scenario)
        assert archived.status == ScenarioStatus.ARCHIVED
        assert is_read_only(archived)
        assert scenario.status == ScenarioStatus.ACTIVE

    def test_restore_archived(self, corpus):
        scenario = corpus.scenario_details[0]
        assert is_read_only(scenario)
        assert restore_scenario(scenario).status == ScenarioStatus.ACTIVE

    def test_read_only_follows_archived_flag(self, corpus):
        for scenario in corpus.scenario_details:
            assert is_read_only(scenario) is scenario.is_archived
        assert sum(s.is_archived for s in corpus.scenario_details) == 4

    def test_noop_transitions_return_same_object(self, corpus):
        active, archived = corpus.scenario_details[1], corpus.scenario_details[0]
        assert archive_scenario(archived) is archived
        assert restore_scenario(active) is active

    def test_toggle_round_trip(self, corpus):
        scenario = corpus.scenario_details[2]
        toggled = toggle_scenario_archive(scenario)

        assert toggled.status == ScenarioStatus.ARCHIVED
        assert toggle_scenario_archive(toggled).status == ScenarioStatus.ACTIVE


class TestDuplicateScenario:
    """Tests for duplicate_scenario."""

    def test_copy_fields(self, corpus, now):
        """The copy has a new id and a suffixed name; everything else matches."""
        original = corpus.scenario_details[3]
        later = now + timedelta(minutes=5)
        copied = duplicate_scenario(original, now=later)

        assert copied.id != original.id
        assert copied.name == f"{original.name} (Copy)"
        assert copied.last_updated == later

        expected = to_document(original)
        actual = to_document(copied)
        for key in ("id", "name", "last_updated"):
            expected.pop(key)
            actual.pop(key)
        assert actual == expected

    def test_copy_is_independent(self, corpus):
        original = corpus.scenario_details[3]
        copied = duplicate_scenario(original)

        copied.steps[0].config["percentage"] = 99
        assert original.steps[0].config["percentage"] == 30

    def test_new_ids_are_unique(self, now):
        ids = {new_scenario_id(now) for _ in range(20)}
        assert len(ids) == 20
        assert all(re.fullmatch(r"scenario-\d+-[0-9a-f]{4}", i) for i in ids)


class TestScenarioForm:
    """Tests for form validation, create and update."""

    def test_valid_form(self, valid_form):
        assert validate_scenario_form(valid_form) == {}

    def test_name_required(self, valid_form):
        errors = validate_scenario_form(replace(valid_form, name="   "))
        assert "name" in errors

    def test_name_too_long(self, valid_form):
        assert "name" in validate_scenario_form(replace(valid_form, name="x" * 101))

    def test_cron_requires_expression(self, valid_form):
        form = replace(valid_form, schedule_type=ScheduleType.CRON, cron_expression="")
        assert "cron_expression" in validate_scenario_form(form)

    def test_ranges(self, valid_form):
        form = replace(valid_form, intensity=5, duration=400, max_error_rate=30)
        errors = validate_scenario_form(form)
        assert {"intensity", "duration", "max_error_rate"} <= set(errors)

    def test_steps_required(self, valid_form):
        assert "steps" in validate_scenario_form(replace(valid_form, steps=[]))

    def test_create_scenario(self, valid_form, now):
        scenario = create_scenario(valid_form, "me@example.com", now=now)

        assert scenario.id.startswith("scenario-")
        assert scenario.version == INITIAL_SCENARIO_VERSION
        assert scenario.owner == "me@example.com"
        assert scenario.status == ScenarioStatus.ACTIVE
        assert scenario.last_updated == now
        assert scenario.safety_config.max_error_rate == 5
        assert scenario.cron_expression is None

    def test_create_invalid_raises(self, valid_form):
        with pytest.raises(ScenarioFormError) as exc_info:
            create_scenario(replace(valid_form, name=""), "me@example.com")
        assert "name" in exc_info.value.errors

    def test_form_error_is_value_error(self):
        assert issubclass(ScenarioFormError, ValueError)

    def test_update_keeps_identity(self, corpus, valid_form, now):
        scenario = corpus.scenario_details[4]
        form = replace(
            valid_form,
            type=FailureType.ERROR,
            schedule_type=ScheduleType.CRON,
            cron_expression=" 0 3 * * * ",
        )
        updated = update_scenario(scenario, form, now=now)

        assert updated.id == scenario.id
        assert updated.version == scenario.version
        assert updated.owner == scenario.owner
        assert updated.status == scenario.status
        assert updated.name == "Checkout Latency"
        assert updated.type == FailureType.ERROR
        assert updated.cron_expression == "0 3 * * *"
        assert updated.last_updated == now

    def test_form_from_scenario_prefills(self, corpus):
        scenario = corpus.scenario_details[3]
        form = form_from_scenario(scenario)

        assert form.name == scenario.name
        assert form.max_error_rate == scenario.safety_config.max_error_rate
        assert form.cron_expression == (scenario.cron_expression or "")
        assert validate_scenario_form(form) == {}
