"""Typer CLI interface for fiplan."""

import json
from decimal import Decimal
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from fiplan.engines.constants import DEFAULT_HORIZON_YEARS
from fiplan.exceptions import HouseholdLoadError
from fiplan.models.household import Household
from fiplan.models.projection import ValidationReport
from fiplan.models.scenario import Scenario

app = typer.Typer(
    name="fiplan",
    help="fiplan: year-by-year financial-independence projections for a household.",
)


def load_household(path: Path) -> Household:
    """Read and decode a Household JSON document."""
    if not path.exists():
        raise HouseholdLoadError(str(path), "file not found")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise HouseholdLoadError(str(path), f"invalid JSON ({e})") from e
    try:
        return Household.model_validate(data)
    except ValidationError as e:
        raise HouseholdLoadError(str(path), str(e)) from e


def _load_inputs(path: Path, scenario_id: str | None) -> tuple[Household, Scenario]:
    try:
        household = load_household(path)
    except HouseholdLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    scenario = household.get_scenario(scenario_id)
    if scenario is None:
        wanted = f"'{scenario_id}'" if scenario_id else "any scenario"
        typer.echo(f"Error: Household {household.id} does not define {wanted}.", err=True)
        raise typer.Exit(1)
    return household, scenario


def _fmt(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"${value:,.0f}"


def _print_issues(console: Console, report: ValidationReport) -> None:
    sections = (
        ("Errors", report.errors, "red"),
        ("Warnings", report.warnings, "yellow"),
        ("Assumptions", report.assumptions, "dim"),
    )
    for title, issues, style in sections:
        if not issues:
            continue
        console.print()
        console.print(Rule(f"{title} ({len(issues)})", style=style))
        for issue in issues:
            console.print(f"[{style}]{issue.code.value}[/{style}]: {escape(issue.message)}")


@app.command()
def project(
    file: Path = typer.Argument(..., help="Household JSON file"),
    scenario_id: str | None = typer.Option(
        None, "--scenario", "-s", help="Scenario id (defaults to the first scenario)"
    ),
    horizon: int = typer.Option(
        DEFAULT_HORIZON_YEARS, "--horizon", "-y", min=1, help="Number of years to project"
    ),
) -> None:
    """Run a projection and print the year-by-year table and milestones."""
    from fiplan.engines.projection import run_projection

    household, scenario = _load_inputs(file, scenario_id)
    result = run_projection(household, scenario, horizon)
    console = Console()

    if result.year_rows:
        tbl = Table(title=f"{household.name}: {scenario.name}", show_header=True)
        tbl.add_column("Year", style="cyan")
        tbl.add_column("Phase")
        tbl.add_column("Gross income", justify="right")
        tbl.add_column("Spending", justify="right")
        tbl.add_column("Contributions", justify="right")
        tbl.add_column("Withdrawals", justify="right")
        tbl.add_column("Surplus", justify="right")
        tbl.add_column("Invested assets", justify="right", style="green")
        tbl.add_column("Net worth", justify="right")
        for row in result.year_rows:
            tbl.add_row(
                str(row.year),
                row.phase.value,
                _fmt(row.gross_income),
                _fmt(row.spending),
                _fmt(row.total_contributions),
                _fmt(row.total_withdrawals),
                _fmt(row.unallocated_surplus),
                _fmt(row.invested_assets),
                _fmt(row.net_worth),
            )
        console.print(tbl)

        console.print()
        console.print(f"[bold]FI number:[/bold] {_fmt(result.fi_number)}")
        console.print(f"[bold]FI year:[/bold] {result.fi_year or 'not reached'}")
        console.print(f"[bold]Coast FI year:[/bold] {result.coast_fi_year or 'not reached'}")
        console.print(f"[bold]Savings rate:[/bold] {result.savings_rate:.1%}")
        if result.shortfall_data is not None:
            console.print(
                f"[yellow]Shortfall: portfolio supports "
                f"{_fmt(result.shortfall_data.portfolio_supports_per_year)}/yr vs target spend "
                f"{_fmt(result.shortfall_data.target_spend_per_year)}/yr[/yellow]"
            )

    _print_issues(console, result.validation)
    if result.validation.has_blocking_errors:
        raise typer.Exit(1)


@app.command()
def validate(
    file: Path = typer.Argument(..., help="Household JSON file"),
    scenario_id: str | None = typer.Option(
        None, "--scenario", "-s", help="Scenario id (defaults to the first scenario)"
    ),
) -> None:
    """Check a household for errors before projecting it."""
    from fiplan.engines.projection import validate_household

    household, scenario = _load_inputs(file, scenario_id)
    report = validate_household(household, scenario)
    console = Console()
    if not report.all_issues():
        console.print("[green]No issues found.[/green]")
        return
    _print_issues(console, report)
    if report.has_blocking_errors:
        raise typer.Exit(1)


@app.command()
def summary(
    file: Path = typer.Argument(..., help="Household JSON file"),
    scenario_id: str | None = typer.Option(
        None, "--scenario", "-s", help="Scenario id (defaults to the first scenario)"
    ),
    horizon: int = typer.Option(
        DEFAULT_HORIZON_YEARS, "--horizon", "-y", min=1, help="Number of years to project"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the summary to this file instead of stdout"
    ),
) -> None:
    """Render a plain-text projection summary."""
    from fiplan.engines.projection import run_projection
    from fiplan.reports import ProjectionSummaryGenerator

    household, scenario = _load_inputs(file, scenario_id)
    result = run_projection(household, scenario, horizon)
    content = ProjectionSummaryGenerator().render(household, scenario, result)
    if output is None:
        typer.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content)
    typer.echo(f"Summary written to {output}")


if __name__ == "__main__":
    app()
