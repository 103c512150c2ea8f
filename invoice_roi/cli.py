"""
Invoice ROI CLI.

Command-line interface for ROI simulation, reports and saved scenarios.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import get_settings
from .db import (
    ScenarioNotFoundError,
    ScenarioRepository,
    ScenarioStoreError,
    create_store_client,
)
from .reporting import format_label, format_number, generate_report
from .roi import InputValidationError, calculate_roi, parse_inputs, simulate
from .utils.logging_config import ensure_logging

app = typer.Typer(
    name="invoice-roi",
    help="Invoice ROI - estimate the return on automating invoice processing",
    add_completion=False,
)
scenarios_app = typer.Typer(help="Manage saved scenarios")
app.add_typer(scenarios_app, name="scenarios")

console = Console()


def _load_inputs(
    input_file: Optional[Path],
    overrides: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge a JSON input file with values given as options."""
    raw: Dict[str, Any] = {}
    if input_file:
        raw.update(json.loads(input_file.read_text(encoding="utf-8")))
    raw.update({k: v for k, v in overrides.items() if v is not None})
    return raw


def _print_errors(errors) -> None:
    console.print("[red]✗ Invalid inputs:[/red]")
    for error in errors:
        console.print(f"  [red]•[/red] {error}")


def _results_table(title: str, values: Dict[str, Any]) -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in values.items():
        table.add_row(format_label(key), format_number(value))
    return table


@app.command()
def calculate(
    input_file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="JSON file with inputs"
    ),
    monthly_invoice_volume: Optional[str] = typer.Option(None, "--volume", help="Invoices per month"),
    num_ap_staff: Optional[str] = typer.Option(None, "--staff", help="AP staff count"),
    avg_hours_per_invoice: Optional[str] = typer.Option(None, "--hours", help="Hours per invoice"),
    hourly_wage: Optional[str] = typer.Option(None, "--wage", help="Hourly wage"),
    error_rate_manual: Optional[str] = typer.Option(None, "--error-rate", help="Manual error rate (%)"),
    error_cost: Optional[str] = typer.Option(None, "--error-cost", help="Cost per erroneous invoice"),
    time_horizon_months: Optional[str] = typer.Option(None, "--months", help="Time horizon in months"),
    one_time_implementation_cost: Optional[str] = typer.Option(
        None, "--implementation-cost", help="One-time implementation cost"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """
    Calculate ROI for automating invoice processing.

    Inputs come from --file, individual options, or both (options win).
    """
    raw = _load_inputs(input_file, {
        "monthly_invoice_volume": monthly_invoice_volume,
        "num_ap_staff": num_ap_staff,
        "avg_hours_per_invoice": avg_hours_per_invoice,
        "hourly_wage": hourly_wage,
        "error_rate_manual": error_rate_manual,
        "error_cost": error_cost,
        "time_horizon_months": time_horizon_months,
        "one_time_implementation_cost": one_time_implementation_cost,
    })

    try:
        payload = simulate(raw)
    except InputValidationError as e:
        _print_errors(e.errors)
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(payload, indent=2))
        return

    console.print(_results_table("Inputs", payload["inputs"]))
    console.print(_results_table("Results", payload["results"]))
    console.print(
        "[dim]Monthly savings include a bias multiplier of at least 1.1; "
        "treat ROI as an optimistic estimate.[/dim]"
    )


@app.command()
def report(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with inputs"),
    output: Path = typer.Option(Path("roi-report.pdf"), "--output", "-o", help="PDF output path"),
):
    """Render a PDF report for the inputs in a JSON file."""
    try:
        inputs = parse_inputs(_load_inputs(input_file, {}))
    except InputValidationError as e:
        _print_errors(e.errors)
        raise typer.Exit(1)

    generate_report(inputs, calculate_roi(inputs), output_path=output)
    console.print(f"[green]✓[/green] Report written to {output}")


@contextmanager
def _repository() -> Iterator[ScenarioRepository]:
    """Open the configured scenario store for one command."""
    settings = get_settings()
    if settings.store_backend == "memory":
        console.print(
            "[red]✗ Scenario commands need a persistent store.[/red] "
            "Set ROI_STORE_BACKEND=supabase with ROI_SUPABASE_URL and ROI_SUPABASE_KEY."
        )
        raise typer.Exit(1)

    try:
        client = create_store_client(settings)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    try:
        yield ScenarioRepository(client)
    except ScenarioNotFoundError as e:
        console.print(f"[red]✗ Scenario not found:[/red] {e.scenario_id}")
        raise typer.Exit(1)
    except ScenarioStoreError as e:
        console.print(f"[red]✗ Scenario store error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        client.close()


@scenarios_app.command("list")
def list_scenarios():
    """List saved scenarios, newest first."""
    with _repository() as repo:
        scenarios = repo.list()

    table = Table(title=f"Scenarios ({len(scenarios)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Created")
    table.add_column("Monthly Savings", justify="right")
    table.add_column("ROI %", justify="right")
    for s in scenarios:
        table.add_row(
            s.id,
            s.name,
            s.created_at.strftime("%Y-%m-%d %H:%M") if s.created_at else "",
            format_number(s.results.get("monthly_savings")),
            format_number(s.results.get("roi_percentage")),
        )
    console.print(table)


@scenarios_app.command("show")
def show_scenario(scenario_id: str = typer.Argument(..., help="Scenario ID")):
    """Show one saved scenario."""
    with _repository() as repo:
        scenario = repo.get(scenario_id)

    console.print(Panel.fit(f"[bold blue]{scenario.name}[/bold blue]\n{scenario.id}"))
    console.print(_results_table("Inputs", scenario.data))
    console.print(_results_table("Results", scenario.results))


@scenarios_app.command("save")
def save_scenario(
    name: str = typer.Argument(..., help="Scenario name (1-50 characters)"),
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with inputs"),
):
    """Calculate and save a named scenario."""
    try:
        inputs = parse_inputs(_load_inputs(input_file, {}))
        with _repository() as repo:
            scenario = repo.create(name, inputs, calculate_roi(inputs))
    except InputValidationError as e:
        _print_errors(e.errors)
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Saved scenario {scenario.name!r} ({scenario.id})")


@scenarios_app.command("delete")
def delete_scenario(scenario_id: str = typer.Argument(..., help="Scenario ID")):
    """Delete a saved scenario."""
    with _repository() as repo:
        repo.delete(scenario_id)
    console.print(f"[green]✓[/green] Deleted {scenario_id}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the REST API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "invoice_roi.api.main:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
):
    """Invoice ROI - estimate the return on automating invoice processing."""
    settings = get_settings()
    ensure_logging(
        settings.log_level if verbose else "WARNING",
        log_to_file=settings.log_to_file,
        log_dir=settings.log_dir,
    )


if __name__ == "__main__":
    app()
