#!/usr/bin/env python3
"""
ChaosBoard CLI - Command-line access to chaos experiment data.

Lists and inspects scenarios, runs and incidents, applies incident triage
actions and exports records, against the configured backend.

Usage:
    python -m src.cli runs --status failed --scenario sc-001
    python -m src.cli run run-0004
    python -m src.cli incidents --severity critical --search latency
    python -m src.cli ack inc-0001
    python -m src.cli export run run-0004 --output run.json
    python -m src.cli seed --force
"""

import sys
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from src.data.models import (
    FailureType,
    IncidentSeverity,
    IncidentStatus,
    RunStatus,
    ScenarioStatus,
)
from src.tools.criteria import DateRange, IncidentFilter, RunFilter, ScenarioFilter, selected_scenarios
from src.tools.insights import format_duration
from src.tools.query import Page
from src.utils.config import get_settings
from src.utils.logging_config import configure_logging

console = Console()

STATUS_STYLES = {
    "success": "green",
    "failed": "red",
    "degraded": "yellow",
    "open": "red",
    "acknowledged": "yellow",
    "resolved": "green",
    "active": "green",
    "archived": "dim",
}

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "blue",
}


def get_service():
    """Get the dashboard service with error handling."""
    try:
        from src.service import DashboardService
        return DashboardService.from_settings(get_settings())
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        console.print("\nCheck your .env file (see .env.example).")
        sys.exit(1)


def styled(value: str, styles: dict = STATUS_STYLES) -> str:
    style = styles.get(value, "white")
    return f"[{style}]{value}[/{style}]"


def fmt_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def print_page_footer(page: Page, noun: str):
    if page.is_empty:
        console.print(f"[yellow]No {noun} match the current filters.[/yellow]")
        return
    console.print(
        f"Showing {len(page.items)} of {page.total_count} {noun} "
        f"(page {page.page}/{page.total_pages})"
    )


def not_found(kind: str, record_id: str):
    console.print(f"[yellow]{kind} '{record_id}' not found.[/yellow]")
    sys.exit(1)


def parse_date_range(date_from: Optional[datetime], date_to: Optional[datetime]) -> Optional[DateRange]:
    if date_from is None and date_to is None:
        return None
    return DateRange.from_dates(
        date_from.date() if date_from else None,
        date_to.date() if date_to else None,
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="ChaosBoard")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """ChaosBoard - Chaos Engineering Dashboard

    Browse scenarios, runs and incidents from the command line.
    """
    try:
        settings = get_settings()
        configure_logging("DEBUG" if verbose else settings.log_level, console=Console(stderr=True))
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)


# ═══════════════════════════════════════════════════════════════════════════════
# RUNS
# ═══════════════════════════════════════════════════════════════════════════════

@cli.command()
@click.option("--status", "-s", type=click.Choice([s.value for s in RunStatus]), default=None)
@click.option("--scenario", "scenario_ids", multiple=True, help="Scenario id (repeatable)")
@click.option("--from", "date_from", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--to", "date_to", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--page", "-p", default=1, help="Page number")
def runs(status: Optional[str], scenario_ids: tuple, date_from, date_to, page: int):
    """List runs."""
    service = get_service()

    criteria = RunFilter(
        status=RunStatus(status) if status else None,
        scenario_ids=selected_scenarios(scenario_ids),
        date_range=parse_date_range(date_from, date_to),
    )
    result = service.list_runs(criteria, page=page)

    if result.items:
        table = Table(title="Runs")
        table.add_column("Run", style="cyan", no_wrap=True)
        table.add_column("Scenario")
        table.add_column("Status")
        table.add_column("Started", style="dim")
        table.add_column("Duration", justify="right")
        table.add_column("Error Rate", justify="right")

        for run in result.items:
            table.add_row(
                run.id,
                run.scenario,
                styled(run.status.value),
                fmt_time(run.started_at),
                format_duration(run.duration),
                f"{run.metrics.error_rate:.2f}%",
            )

        console.print(table)

    print_page_footer(result, "runs")


@cli.command()
@click.argument("run_id")
def run(run_id: str):
    """Show run details."""
    service = get_service()

    detail = service.get_run_detail(run_id)
    if detail is None:
        not_found("Run", run_id)

    m = detail.metrics
    console.print(Panel.fit(
        f"[bold]{detail.scenario}[/bold] ({detail.scenario_id})\n\n"
        f"[yellow]Status:[/yellow] {styled(detail.status.value)}\n"
        f"[yellow]Environment:[/yellow] {detail.environment}\n"
        f"[yellow]Started:[/yellow] {fmt_time(detail.started_at)}\n"
        f"[yellow]Duration:[/yellow] {format_duration(detail.duration)}\n\n"
        f"[yellow]Latency:[/yellow] p50 {m.latency_p50:.0f}ms / p95 {m.latency_p95:.0f}ms / p99 {m.latency_p99:.0f}ms\n"
        f"[yellow]Error rate:[/yellow] {m.error_rate:.2f}%  "
        f"[yellow]Requests:[/yellow] {m.request_count:,}  "
        f"[yellow]Throughput:[/yellow] {m.throughput:,} rps\n"
        f"[yellow]CPU:[/yellow] {m.cpu_usage:.1f}%  [yellow]Memory:[/yellow] {m.memory_usage:.1f}%",
        title=detail.id,
    ))

    if detail.errors:
        table = Table(title="Errors")
        table.add_column("Code", style="red")
        table.add_column("Message")
        table.add_column("Count", justify="right")
        for err in detail.errors:
            table.add_row(err.code, err.message, str(err.count))
        console.print(table)

    timeline = Table(title="Timeline")
    timeline.add_column("Time", style="dim")
    timeline.add_column("Event", style="cyan")
    timeline.add_column("Description")
    for event in detail.detailed_timeline:
        timeline.add_row(event.timestamp.strftime("%H:%M:%S"), event.title, event.description)
    console.print(timeline)

    for incident in detail.incidents:
        console.print(
            f"  {styled(incident.severity.value, SEVERITY_STYLES)} [bold]{incident.title}[/bold]\n"
            f"    {incident.recommended_action}"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# SCENARIOS
# ═══════════════════════════════════════════════════════════════════════════════

@cli.command()
@click.option("--search", "-q", default=None, help="Search name, description, service or owner")
@click.option("--type", "failure_type", type=click.Choice([t.value for t in FailureType]), default=None)
@click.option("--service", default=None, help="Filter by target service")
@click.option("--status", type=click.Choice([s.value for s in ScenarioStatus]), default=None)
@click.option("--page", "-p", default=1, help="Page number")
def scenarios(search: Optional[str], failure_type: Optional[str], service: Optional[str],
              status: Optional[str], page: int):
    """List scenarios."""
    svc = get_service()

    criteria = ScenarioFilter(
        search=search,
        type=FailureType(failure_type) if failure_type else None,
        service=service,
        status=ScenarioStatus(status) if status else None,
    )
    result = svc.list_scenarios(criteria, page=page)

    if result.items:
        table = Table(title="Scenarios")
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("Service")
        table.add_column("Version")
        table.add_column("Status")
        table.add_column("Owner", style="dim")

        for scenario in result.items:
            table.add_row(
                scenario.id,
                scenario.name,
                scenario.type.value,
                scenario.target_service,
                scenario.version,
                styled(scenario.status.value),
                scenario.owner,
            )

        console.print(table)

    print_page_footer(result, "scenarios")


@cli.command()
@click.argument("scenario_id")
def scenario(scenario_id: str):
    """Show a scenario with its steps and recent runs."""
    service = get_service()

    detail = service.get_scenario(scenario_id)
    if detail is None:
        not_found("Scenario", scenario_id)

    schedule = detail.schedule_type.value
    if detail.cron_expression:
        schedule += f" ({detail.cron_expression})"

    console.print(Panel.fit(
        f"[bold]{detail.name}[/bold] {detail.version}\n"
        f"{detail.description}\n\n"
        f"[yellow]Type:[/yellow] {detail.type.value}  "
        f"[yellow]Target:[/yellow] {detail.target_service} ({detail.environment})\n"
        f"[yellow]Status:[/yellow] {styled(detail.status.value)}  [yellow]Owner:[/yellow] {detail.owner}\n"
        f"[yellow]Intensity:[/yellow] {detail.intensity}%  [yellow]Duration:[/yellow] {detail.duration}s\n"
        f"[yellow]Schedule:[/yellow] {schedule}\n"
        f"[yellow]Safety:[/yellow] max error rate {detail.safety_config.max_error_rate}%, "
        f"auto-stop {'on' if detail.safety_config.auto_stop_enabled else 'off'}",
        title=detail.id,
    ))

    steps = Table(title="Steps")
    steps.add_column("#", justify="right", style="dim")
    steps.add_column("Type", style="cyan")
    steps.add_column("Label")
    steps.add_column("Config", style="dim")
    for i, step in enumerate(detail.steps, start=1):
        config = ", ".join(f"{k}={v}" for k, v in step.config.items())
        steps.add_row(str(i), step.type.value, step.label, config)
    console.print(steps)

    recent = service.get_scenario_runs(scenario_id) or []
    console.print(f"\nRecent runs: {len(recent)}")
    for r in recent:
        console.print(f"  {r.id} {styled(r.status.value)} {fmt_time(r.started_at)}")


@cli.command()
@click.argument("scenario_id")
def versions(scenario_id: str):
    """Show a scenario's version history."""
    service = get_service()

    history = service.get_scenario_versions(scenario_id)
    if history is None:
        not_found("Scenario", scenario_id)

    table = Table(title=f"Versions of {scenario_id}")
    table.add_column("Version", style="cyan")
    table.add_column("Published", style="dim")
    table.add_column("By")
    table.add_column("Changelog")

    for version in history:
        label = f"{version.version} (current)" if version.is_current else version.version
        table.add_row(label, fmt_time(version.published_at), version.published_by, version.changelog)

    console.print(table)


@cli.command()
@click.argument("scenario_id")
def duplicate(scenario_id: str):
    """Duplicate a scenario."""
    service = get_service()

    copied = service.duplicate_scenario(scenario_id)
    if copied is None:
        not_found("Scenario", scenario_id)
    console.print(f"[green]Created {copied.id}: {copied.name}[/green]")


@cli.command()
@click.argument("scenario_id")
def archive(scenario_id: str):
    """Archive a scenario, or restore it if already archived."""
    service = get_service()

    updated = service.toggle_scenario_archive(scenario_id)
    if updated is None:
        not_found("Scenario", scenario_id)
    console.print(f"{updated.id} is now {styled(updated.status.value)}")


# ═══════════════════════════════════════════════════════════════════════════════
# INCIDENTS
# ═══════════════════════════════════════════════════════════════════════════════

@cli.command()
@click.option("--severity", type=click.Choice([s.value for s in IncidentSeverity]), default=None)
@click.option("--status", type=click.Choice([s.value for s in IncidentStatus]), default=None)
@click.option("--service", default=None, help="Filter by service name")
@click.option("--search", "-q", default=None, help="Search title, summary, id, service or run id")
@click.option("--from", "date_from", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--to", "date_to", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--page", "-p", default=1, help="Page number")
def incidents(severity, status, service, search, date_from, date_to, page: int):
    """List incidents."""
    svc = get_service()

    criteria = IncidentFilter(
        severity=IncidentSeverity(severity) if severity else None,
        status=IncidentStatus(status) if status else None,
        service=service,
        date_range=parse_date_range(date_from, date_to),
        search=search,
    )
    result = svc.list_incidents(criteria, page=page)
    stats = svc.incident_stats()

    console.print(
        f"[bold]Incidents[/bold]  open: [red]{stats['open']}[/red]  "
        f"critical (unresolved): [bold red]{stats['critical']}[/bold red]\n"
    )

    if result.items:
        table = Table()
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Severity")
        table.add_column("Status")
        table.add_column("Title")
        table.add_column("Service")
        table.add_column("Detected", style="dim")
        table.add_column("Owner", style="dim")

        for incident in result.items:
            table.add_row(
                incident.id,
                styled(incident.severity.value, SEVERITY_STYLES),
                styled(incident.status.value),
                incident.title,
                incident.service,
                fmt_time(incident.detected_at),
                incident.owner or "-",
            )

        console.print(table)

    print_page_footer(result, "incidents")


@cli.command()
@click.argument("incident_id")
def incident(incident_id: str):
    """Show an incident with its signals and root-cause analysis."""
    service = get_service()

    detail = service.get_incident_detail(incident_id)
    if detail is None:
        not_found("Incident", incident_id)

    analysis = service.root_cause_analysis(incident_id)

    console.print(Panel.fit(
        f"[bold]{detail.title}[/bold]\n{detail.summary}\n\n"
        f"[yellow]Severity:[/yellow] {styled(detail.severity.value, SEVERITY_STYLES)}  "
        f"[yellow]Status:[/yellow] {styled(detail.status.value)}  "
        f"[yellow]Owner:[/yellow] {detail.owner or 'unassigned'}\n"
        f"[yellow]Service:[/yellow] {detail.service}  [yellow]Run:[/yellow] {detail.run_id}\n"
        f"[yellow]Detected:[/yellow] {fmt_time(detail.detected_at)}\n\n"
        f"[yellow]Suspected root cause[/yellow] "
        f"({analysis['confidence']}% - {analysis['confidence_level']} confidence):\n"
        f"{detail.suspected_root_cause}",
        title=detail.id,
    ))

    signals = Table(title="Signals")
    signals.add_column("Time", style="dim")
    signals.add_column("Type", style="cyan")
    signals.add_column("Signal")
    signals.add_column("Value")
    for signal in detail.signals:
        signals.add_row(signal.timestamp.strftime("%H:%M:%S"), signal.type.value, signal.title, signal.value or "")
    console.print(signals)

    console.print("\n[bold]Recommended actions[/bold]")
    for i, action in enumerate(detail.recommended_actions, start=1):
        console.print(f"  {i}. {action}")

    console.print(f"\n[bold]Impacted endpoints:[/bold] {', '.join(detail.impacted_endpoints)}")


@cli.command()
@click.argument("incident_id")
@click.option("--as", "acting_user", default=None, help="Acting user (defaults to CHAOSBOARD_ACTING_USER)")
def ack(incident_id: str, acting_user: Optional[str]):
    """Acknowledge an open incident."""
    service = get_service()

    updated = service.acknowledge_incident(incident_id, acting_user)
    if updated is None:
        not_found("Incident", incident_id)
    console.print(f"{updated.id}: {styled(updated.status.value)} (owner: {updated.owner})")


@cli.command()
@click.argument("incident_id")
@click.option("--as", "acting_user", default=None, help="Acting user (defaults to CHAOSBOARD_ACTING_USER)")
def resolve(incident_id: str, acting_user: Optional[str]):
    """Resolve an incident."""
    service = get_service()

    updated = service.resolve_incident(incident_id, acting_user)
    if updated is None:
        not_found("Incident", incident_id)
    console.print(f"{updated.id}: {styled(updated.status.value)} (owner: {updated.owner})")


# ═══════════════════════════════════════════════════════════════════════════════
# EXPORT, OVERVIEW AND BACKEND
# ═══════════════════════════════════════════════════════════════════════════════

@cli.command()
@click.argument("kind", type=click.Choice(["run", "incident"]))
@click.argument("record_id")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Write to this file instead of stdout")
def export(kind: str, record_id: str, output: Optional[str]):
    """Export a run or incident as JSON."""
    service = get_service()

    exported = service.export_run(record_id) if kind == "run" else service.export_incident(record_id)
    if exported is None:
        not_found(kind.capitalize(), record_id)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(exported.content)
        console.print(f"[green]Wrote {output}[/green]")
    else:
        click.echo(exported.content)


@cli.command()
def kpis():
    """Show overview KPIs for the last 24 hours."""
    service = get_service()
    data = service.kpis()

    table = Table(title="Last 24 hours")
    table.add_column("Runs", justify="right")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Avg Latency", justify="right")
    table.add_column("Error Budget Burn", justify="right")
    burn_style = "red" if data["error_budget_burn"] > 50 else "green"
    table.add_row(
        f"{data['runs_today']:,}",
        f"{data['failed_runs']:,}",
        f"{data['avg_latency']}ms",
        f"[{burn_style}]{data['error_budget_burn']}%[/{burn_style}]",
    )
    console.print(table)


@cli.command()
@click.option("--force", is_flag=True, help="Delete and recreate indices")
@click.option("--seed", type=int, default=None, help="Generator seed (defaults to CHAOSBOARD_SEED)")
def seed(force: bool, seed: Optional[int]):
    """Create Elasticsearch indices and load a generated corpus."""
    from src.data.index_templates import create_indices
    from src.data.mock_data import MockDataGenerator
    from src.store.repository import load_corpus
    from src.utils.elasticsearch_client import get_elasticsearch_client, verify_connection

    try:
        client = get_elasticsearch_client()
        info = verify_connection(client)
    except (ValueError, ConnectionError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(f"[green]Connected to {info['cluster_name']} ({info['version']})[/green]")
    create_indices(client, force=force)

    generator = MockDataGenerator(seed=seed if seed is not None else get_settings().seed)
    stats = load_corpus(client, generator.build_corpus())
    console.print(
        f"Indexed {stats['success']}/{stats['total']} documents "
        f"([red]{stats['failed']} failed[/red]) with seed {generator.seed}"
    )


@cli.command()
def status():
    """Check backend configuration and data availability."""
    settings = get_settings()
    console.print("[bold]ChaosBoard Status[/bold]\n")
    console.print(f"Backend: [cyan]{settings.backend}[/cyan]")
    console.print(f"Acting user: {settings.acting_user}")

    if settings.backend != "elasticsearch":
        service = get_service()
        console.print(
            f"[green]In-memory corpus (seed {service.generator.seed}): "
            f"{len(service.all_scenarios())} scenarios, {len(service.all_runs())} runs, "
            f"{len(service.all_incidents())} incidents[/green]"
        )
        return

    from src.utils.elasticsearch_client import get_elasticsearch_client, verify_connection, index_counts

    try:
        client = get_elasticsearch_client()
        verify_connection(client)
        console.print("[green]Elasticsearch: Connected[/green]")
    except (ValueError, ConnectionError) as e:
        console.print(f"[red]Elasticsearch: Error - {e}[/red]")
        sys.exit(1)

    for index_name, count in index_counts(client).items():
        if count is None:
            console.print(f"[yellow]{index_name}: Not found (run 'seed')[/yellow]")
        else:
            console.print(f"[green]{index_name}: {count} documents[/green]")


if __name__ == "__main__":
    cli()
