#!/usr/bin/env python3
"""
ChaosBoard Dashboard - Streamlit interface for chaos experiments.

Run with: streamlit run src/dashboard.py
"""

import streamlit as st
import pandas as pd
import plotly.express as px
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.data.mock_data import generate_steps  # noqa: E402
from src.data.models import (  # noqa: E402
    FailureType,
    IncidentSeverity,
    IncidentStatus,
    RunStatus,
    ScenarioFormData,
    ScenarioStatus,
    ScheduleType,
)
from src.tools.actions import ScenarioFormError, form_from_scenario, is_read_only  # noqa: E402
from src.tools.criteria import DateRange, IncidentFilter, RunFilter, ScenarioFilter, selected_scenarios  # noqa: E402
from src.tools.insights import format_duration, status_breakdown  # noqa: E402
from src.tools.query import ListView, page_numbers  # noqa: E402
from src.utils.config import get_settings  # noqa: E402
from src.utils.logging_config import configure_logging  # noqa: E402

# Page config
st.set_page_config(
    page_title="ChaosBoard - Chaos Engineering Dashboard",
    page_icon="🔥",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #e8590c;
        margin-bottom: 0;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-top: 0;
    }
</style>
""", unsafe_allow_html=True)

ALL = "All"

STATUS_COLORS = {
    "success": "#00c853",
    "failed": "#ff4b4b",
    "degraded": "#ffb300",
}


def get_service():
    """Dashboard service for this browser session."""
    if "service" not in st.session_state:
        from src.service import DashboardService
        settings = get_settings()
        configure_logging(settings.log_level)
        st.session_state.service = DashboardService.from_settings(settings)
    return st.session_state.service


def get_view(key: str, criteria) -> ListView:
    """Filter and page state of one list, kept across reruns."""
    if key not in st.session_state:
        st.session_state[key] = ListView(criteria=criteria, page_size=get_service().page_size)
    return st.session_state[key]


def choice(value: str, enum_type):
    return None if value == ALL else enum_type(value)


def pager(view: ListView, result, key: str):
    """Page buttons under a list; None entries render as an ellipsis."""
    if result.total_pages <= 1:
        return
    numbers = page_numbers(result.page, result.total_pages)
    cols = st.columns(len(numbers) + 2)
    if cols[0].button("‹", key=f"{key}-prev", disabled=not result.has_previous):
        view.set_page(result.page - 1)
        st.rerun()
    for col, number in zip(cols[1:-1], numbers):
        if number is None:
            col.write("…")
        elif col.button(str(number), key=f"{key}-page-{number}",
                        type="primary" if number == result.page else "secondary"):
            view.set_page(number)
            st.rerun()
    if cols[-1].button("›", key=f"{key}-next", disabled=not result.has_next):
        view.set_page(result.page + 1)
        st.rerun()


def date_range_input(label: str, key: str):
    selected = st.date_input(label, value=(), key=key)
    if not selected:
        return None
    if len(selected) == 1:
        return DateRange.from_dates(selected[0], None)
    return DateRange.from_dates(selected[0], selected[1])


try:
    service = get_service()
except ValueError as e:
    st.error(f"Configuration error: {e}")
    st.info("Check your .env file (see .env.example)")
    st.stop()

settings = get_settings()

# Sidebar
with st.sidebar:
    st.title("ChaosBoard")
    st.caption("Chaos Engineering Dashboard")

    st.divider()

    st.success(f"Backend: {settings.backend}")
    st.caption(f"Seed: {service.generator.seed}")
    st.caption(f"Signed in as {service.acting_user}")

    st.divider()

    if settings.backend == "memory" and st.button("Regenerate data", use_container_width=True):
        for key in list(st.session_state.keys()):
            del st.session_state[key]
        st.rerun()


st.markdown('<p class="main-header">🔥 ChaosBoard</p>', unsafe_allow_html=True)
st.markdown('<p class="sub-header">Scenarios, runs and incidents from your chaos experiments</p>',
            unsafe_allow_html=True)

tab1, tab2, tab3, tab4 = st.tabs(["📊 Overview", "▶️ Runs", "🧪 Scenarios", "🚨 Incidents"])

# Tab 1: Overview
with tab1:
    kpis = service.kpis()
    stats = service.incident_stats()

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Runs (24h)", f"{kpis['runs_today']:,}")
    with col2:
        st.metric("Failed Runs (24h)", f"{kpis['failed_runs']:,}")
    with col3:
        st.metric("Avg Latency (p50)", f"{kpis['avg_latency']}ms")
    with col4:
        st.metric("Error Budget Burn", f"{kpis['error_budget_burn']}%")

    st.divider()

    all_runs = service.all_runs()
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Runs Over Time")
        if all_runs:
            df = pd.DataFrame([
                {"started_at": r.started_at, "status": r.status.value, "error_rate": r.metrics.error_rate}
                for r in all_runs
            ])
            fig = px.scatter(
                df,
                x="started_at",
                y="error_rate",
                color="status",
                color_discrete_map=STATUS_COLORS,
                labels={"started_at": "Started", "error_rate": "Error Rate (%)"},
            )
            fig.update_layout(height=300)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No runs recorded")

    with col2:
        st.subheader("Run Outcomes")
        breakdown = status_breakdown(all_runs)
        df = pd.DataFrame({"status": list(breakdown.keys()), "count": list(breakdown.values())})
        fig = px.pie(df, values="count", names="status", color="status",
                     color_discrete_map=STATUS_COLORS, hole=0.4)
        fig.update_layout(height=300)
        st.plotly_chart(fig, use_container_width=True)

    col1, col2, col3 = st.columns(3)
    col1.metric("Incidents", stats["total"])
    col2.metric("Open", stats["open"])
    col3.metric("Critical (unresolved)", stats["critical"])

# Tab 2: Runs
with tab2:
    view = get_view("runs_view", RunFilter())

    col1, col2, col3, col4 = st.columns([1, 2, 2, 1])
    with col1:
        status_value = st.selectbox("Status", [ALL] + [s.value for s in RunStatus], key="runs-status")
    with col2:
        catalog = {s.id: s.name for s in service.scenario_catalog()}
        chosen = st.multiselect("Scenarios", list(catalog), format_func=catalog.get, key="runs-scenarios")
    with col3:
        date_range = date_range_input("Started between", key="runs-dates")
    with col4:
        st.write("")
        if st.button("Clear filters", key="runs-clear", disabled=not view.criteria.is_active):
            view.clear_criteria()
            for key in ("runs-status", "runs-scenarios", "runs-dates"):
                st.session_state.pop(key, None)
            st.rerun()

    view.set_criteria(RunFilter(
        status=choice(status_value, RunStatus),
        scenario_ids=selected_scenarios(chosen),
        date_range=date_range,
    ))
    result = view.result(service.all_runs())

    if result.is_empty:
        st.info("No runs match the current filters")
    else:
        df = pd.DataFrame([
            {
                "Run": r.id,
                "Scenario": r.scenario,
                "Status": r.status.value,
                "Started": r.started_at.strftime("%Y-%m-%d %H:%M"),
                "Duration": format_duration(r.duration),
                "Error Rate (%)": round(r.metrics.error_rate, 2),
                "p99 (ms)": round(r.metrics.latency_p99),
            }
            for r in result.items
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.caption(f"{result.total_count} runs, page {result.page} of {result.total_pages}")
        pager(view, result, "runs")

        run_id = st.selectbox("Inspect run", [r.id for r in result.items], key="runs-inspect")
        detail = service.get_run_detail(run_id)
        if detail is not None:
            m = detail.metrics
            col1, col2, col3, col4 = st.columns(4)
            col1.metric("p95 Latency", f"{m.latency_p95:.0f}ms")
            col2.metric("Throughput", f"{m.throughput:,} rps")
            col3.metric("CPU", f"{m.cpu_usage:.1f}%")
            col4.metric("Memory", f"{m.memory_usage:.1f}%")

            timeline_df = pd.DataFrame([
                {"Time": e.timestamp.strftime("%H:%M:%S"), "Event": e.title, "Description": e.description}
                for e in detail.detailed_timeline
            ])
            st.dataframe(timeline_df, use_container_width=True, hide_index=True)

            for inc in detail.incidents:
                st.warning(f"**{inc.severity.value.upper()}** {inc.title}: {inc.recommended_action}")

            exported = service.export_run(run_id)
            st.download_button("Export JSON", exported.content, file_name=exported.filename,
                               mime=exported.media_type, key="runs-export")

# Tab 3: Scenarios
with tab3:
    view = get_view("scenarios_view", ScenarioFilter())

    col1, col2, col3, col4 = st.columns([2, 1, 1, 1])
    with col1:
        search = st.text_input("Search", placeholder="Name, description, service or owner", key="sc-search")
    with col2:
        type_value = st.selectbox("Type", [ALL] + [t.value for t in FailureType], key="sc-type")
    with col3:
        service_value = st.selectbox("Service", [ALL] + service.services(), key="sc-service")
    with col4:
        sc_status = st.selectbox("Status", [ALL] + [s.value for s in ScenarioStatus], key="sc-status")

    view.set_criteria(ScenarioFilter(
        search=search or None,
        type=choice(type_value, FailureType),
        service=None if service_value == ALL else service_value,
        status=choice(sc_status, ScenarioStatus),
    ))
    result = view.result(service.all_scenarios())

    if result.is_empty:
        st.info("No scenarios match the current filters")
    else:
        df = pd.DataFrame([
            {
                "Id": s.id,
                "Name": s.name,
                "Type": s.type.value,
                "Service": s.target_service,
                "Version": s.version,
                "Status": s.status.value,
                "Owner": s.owner,
                "Updated": s.last_updated.strftime("%Y-%m-%d"),
            }
            for s in result.items
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.caption(f"{result.total_count} scenarios, page {result.page} of {result.total_pages}")
        pager(view, result, "scenarios")

        scenario_id = st.selectbox("Inspect scenario", [s.id for s in result.items], key="sc-inspect")
        scenario = service.get_scenario(scenario_id)
        if scenario is not None:
            with st.expander(f"**{scenario.name}** {scenario.version}", expanded=True):
                st.markdown(scenario.description)
                if is_read_only(scenario):
                    st.caption("Archived scenarios are read-only. Restore to edit.")

                col1, col2 = st.columns(2)
                if col1.button("Restore" if is_read_only(scenario) else "Archive", key="sc-archive"):
                    service.toggle_scenario_archive(scenario.id)
                    st.rerun()
                if col2.button("Duplicate", key="sc-duplicate"):
                    copied = service.duplicate_scenario(scenario.id)
                    st.success(f"Created {copied.name}")
                    st.rerun()

                st.markdown("**Steps**")
                st.dataframe(pd.DataFrame([
                    {"Type": step.type.value, "Label": step.label,
                     "Config": ", ".join(f"{k}={v}" for k, v in step.config.items())}
                    for step in scenario.steps
                ]), use_container_width=True, hide_index=True)

                st.markdown("**Version history**")
                st.dataframe(pd.DataFrame([
                    {"Version": v.version, "Published": v.published_at.strftime("%Y-%m-%d"),
                     "By": v.published_by, "Changelog": v.changelog, "Current": v.is_current}
                    for v in service.get_scenario_versions(scenario.id)
                ]), use_container_width=True, hide_index=True)

                if not is_read_only(scenario):
                    st.session_state["sc-form-source"] = scenario.id

    st.divider()
    editing_id = st.session_state.get("sc-form-source")
    mode = st.radio("Form", ["Create new", "Edit selected"], horizontal=True, key="sc-form-mode",
                    disabled=editing_id is None)
    editing = service.get_scenario(editing_id) if mode == "Edit selected" and editing_id else None
    defaults = form_from_scenario(editing) if editing else ScenarioFormData(
        name="", target_service=service.services()[0], environment="staging", type=FailureType.LATENCY,
    )

    with st.form("scenario-form"):
        name = st.text_input("Name", value=defaults.name)
        description = st.text_area("Description", value=defaults.description)
        col1, col2, col3 = st.columns(3)
        target = col1.selectbox("Target service", service.services(),
                                index=service.services().index(defaults.target_service)
                                if defaults.target_service in service.services() else 0)
        environment = col2.text_input("Environment", value=defaults.environment)
        failure_type = col3.selectbox("Type", [t.value for t in FailureType],
                                      index=[t.value for t in FailureType].index(defaults.type.value))
        col1, col2, col3 = st.columns(3)
        intensity = col1.slider("Intensity (%)", 10, 100, int(defaults.intensity))
        duration = col2.number_input("Duration (s)", value=int(defaults.duration), step=15)
        max_error_rate = col3.number_input("Max error rate (%)", value=float(defaults.max_error_rate))
        col1, col2, col3 = st.columns(3)
        schedule = col1.selectbox("Schedule", [s.value for s in ScheduleType],
                                  index=[s.value for s in ScheduleType].index(defaults.schedule_type.value))
        cron = col2.text_input("Cron expression", value=defaults.cron_expression)
        auto_stop = col3.checkbox("Auto-stop", value=defaults.auto_stop_enabled)
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        form = ScenarioFormData(
            name=name,
            target_service=target,
            environment=environment,
            type=FailureType(failure_type),
            description=description,
            intensity=intensity,
            duration=int(duration),
            schedule_type=ScheduleType(schedule),
            cron_expression=cron,
            max_error_rate=max_error_rate,
            auto_stop_enabled=auto_stop,
            steps=list(defaults.steps) if editing else generate_steps(FailureType(failure_type)),
        )
        try:
            if editing:
                saved = service.update_scenario(editing.id, form)
            else:
                saved = service.create_scenario(form)
        except ScenarioFormError as e:
            for field_name, message in e.errors.items():
                st.error(f"{field_name}: {message}")
        else:
            st.success(f"Saved {saved.name} ({saved.version})")

# Tab 4: Incidents
with tab4:
    view = get_view("incidents_view", IncidentFilter())
    stats = service.incident_stats()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total", stats["total"])
    col2.metric("Open", stats["open"])
    col3.metric("Critical (unresolved)", stats["critical"])

    col1, col2, col3, col4, col5 = st.columns([2, 1, 1, 1, 2])
    with col1:
        inc_search = st.text_input("Search", placeholder="Title, summary, id, service or run", key="inc-search")
    with col2:
        severity_value = st.selectbox("Severity", [ALL] + [s.value for s in IncidentSeverity], key="inc-sev")
    with col3:
        inc_status = st.selectbox("Status", [ALL] + [s.value for s in IncidentStatus], key="inc-status")
    with col4:
        inc_service = st.selectbox("Service", [ALL] + service.services(), key="inc-service")
    with col5:
        inc_dates = date_range_input("Detected between", key="inc-dates")

    view.set_criteria(IncidentFilter(
        severity=choice(severity_value, IncidentSeverity),
        status=choice(inc_status, IncidentStatus),
        service=None if inc_service == ALL else inc_service,
        date_range=inc_dates,
        search=inc_search or None,
    ))
    result = view.result(service.all_incidents())

    if result.is_empty:
        st.info("No incidents match the current filters")
    else:
        df = pd.DataFrame([
            {
                "Id": i.id,
                "Severity": i.severity.value,
                "Status": i.status.value,
                "Title": i.title,
                "Service": i.service,
                "Detected": i.detected_at.strftime("%Y-%m-%d %H:%M"),
                "Owner": i.owner or "",
            }
            for i in result.items
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.caption(f"{result.total_count} incidents, page {result.page} of {result.total_pages}")
        pager(view, result, "incidents")

        incident_id = st.selectbox("Inspect incident", [i.id for i in result.items], key="inc-inspect")
        incident = service.get_incident_detail(incident_id)
        if incident is not None:
            analysis = service.root_cause_analysis(incident.id)
            with st.expander(f"**{incident.id}** - {incident.title}", expanded=True):
                st.markdown(incident.summary)
                st.markdown(
                    f"**Suspected root cause** ({analysis['confidence']}%, "
                    f"{analysis['confidence_level']} confidence): {incident.suspected_root_cause}"
                )

                col1, col2, col3 = st.columns(3)
                if col1.button("Acknowledge", key="inc-ack", disabled=incident.status != IncidentStatus.OPEN):
                    service.acknowledge_incident(incident.id)
                    st.rerun()
                if col2.button("Resolve", key="inc-resolve", disabled=incident.status == IncidentStatus.RESOLVED):
                    service.resolve_incident(incident.id)
                    st.rerun()
                exported = service.export_incident(incident.id)
                col3.download_button("Export JSON", exported.content, file_name=exported.filename,
                                     mime=exported.media_type, key="inc-export")

                st.markdown("**Signals**")
                st.dataframe(pd.DataFrame([
                    {"Time": s.timestamp.strftime("%H:%M:%S"), "Type": s.type.value,
                     "Signal": s.title, "Value": s.value or ""}
                    for s in incident.signals
                ]), use_container_width=True, hide_index=True)

                st.markdown("**Recommended actions**")
                for n, action in enumerate(incident.recommended_actions, start=1):
                    st.markdown(f"{n}. {action}")

                related = service.get_related_runs(incident.id) or []
                if related:
                    st.markdown("**Related runs**")
                    st.dataframe(pd.DataFrame([
                        {"Run": r.id, "Status": r.status.value,
                         "Started": r.started_at.strftime("%Y-%m-%d %H:%M")}
                        for r in related
                    ]), use_container_width=True, hide_index=True)


# Footer
st.divider()
col1, col2, col3 = st.columns(3)
with col2:
    st.caption("ChaosBoard v0.1.0")
