"""Projection summary report generator."""

from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from fiplan.models.household import Household
from fiplan.models.projection import ProjectionResult
from fiplan.models.scenario import Scenario

TEMPLATE_DIR = Path(__file__).parent / "templates"


def money(value: Decimal | None) -> str:
    if value is None:
        return "N/A"
    return f"${value:,.0f}"


def percent(value: Decimal | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1%}"


class ProjectionSummaryGenerator:
    """Generates a plain-text summary of a projection run."""

    def __init__(self) -> None:
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True, lstrip_blocks=True
        )
        self.env.filters["money"] = money
        self.env.filters["percent"] = percent

    def render(
        self,
        household: Household,
        scenario: Scenario,
        result: ProjectionResult,
        max_rows: int | None = None,
    ) -> str:
        """Render the projection summary. `max_rows` limits the year table."""
        rows = result.year_rows if max_rows is None else result.year_rows[:max_rows]
        template = self.env.get_template("projection_summary.txt")
        return template.render(
            household=household,
            scenario=scenario,
            result=result,
            rows=rows,
            validation=result.validation,
        )
