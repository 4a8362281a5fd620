"""Milestone calculator: FI number, FI year, Coast-FI year, savings rate, shortfall."""

import logging
from decimal import Decimal

from fiplan.engines.constants import ONE, ZERO
from fiplan.models.enums import IssueCode, Phase
from fiplan.models.projection import ShortfallData, ValidationReport, YearRow
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)


class MilestoneCalculator:
    """Derives milestones from a finished sequence of year rows.

    The FI number is expressed in start-year dollars. Under NOMINAL modeling
    the per-year threshold and spending targets grow with inflation.
    """

    def __init__(self, scenario: EffectiveScenario, start_year: int):
        self.scenario = scenario
        self.start_year = start_year

    @property
    def fi_number(self) -> Decimal:
        return self.scenario.retirement_annual_spend / self.scenario.swr

    def inflation_factor(self, year: int) -> Decimal:
        if self.scenario.is_real:
            return ONE
        return (ONE + self.scenario.inflation) ** max(0, year - self.start_year)

    def fi_threshold(self, year: int) -> Decimal:
        return self.fi_number * self.inflation_factor(year)

    def retirement_spend(self, year: int) -> Decimal:
        return self.scenario.retirement_annual_spend * self.inflation_factor(year)

    def fi_year(self, rows: list[YearRow]) -> int | None:
        for row in rows:
            if row.invested_assets >= self.fi_threshold(row.year):
                return row.year
        return None

    def coast_fi_year(self, rows: list[YearRow], retirement_year: int) -> int | None:
        """Earliest accumulation year whose FI assets grow into the threshold by retirement.

        Assets at the end of year y compound for max(1, R - y) years with no
        further contributions.
        """
        target = self.fi_threshold(retirement_year)
        growth = ONE + self.scenario.investment_return
        for row in rows:
            if row.phase != Phase.ACCUMULATION or row.year >= retirement_year:
                continue
            if row.invested_assets * growth ** max(1, retirement_year - row.year) >= target:
                return row.year
        return None

    @staticmethod
    def savings_rate(rows: list[YearRow]) -> Decimal:
        """Contributions / (contributions + spending) for the first accumulation year."""
        for row in rows:
            if row.phase != Phase.ACCUMULATION:
                continue
            contributions = row.total_contributions
            denominator = contributions + row.spending
            if denominator <= 0:
                return ZERO
            return contributions / denominator
        return ZERO

    def shortfall(
        self,
        rows: list[YearRow],
        retirement_year: int,
        starting_fi_assets: Decimal,
        report: ValidationReport | None = None,
    ) -> ShortfallData | None:
        """Compare what the portfolio supports entering retirement with target spend.

        Only evaluated when the retirement year falls inside the horizon.
        """
        if not rows or not (rows[0].year <= retirement_year <= rows[-1].year):
            return None
        assets = starting_fi_assets
        for row in rows:
            if row.year == retirement_year - 1:
                assets = row.invested_assets
        if assets >= self.fi_threshold(retirement_year):
            return None

        data = ShortfallData(
            portfolio_supports_per_year=assets * self.scenario.swr,
            target_spend_per_year=self.retirement_spend(retirement_year),
        )
        logger.info(
            "FI not met at retirement year %d: supports %s vs target %s",
            retirement_year, data.portfolio_supports_per_year, data.target_spend_per_year,
        )
        if report is not None:
            report.warn(
                IssueCode.FI_NOT_MET_AT_RETIREMENT_AGE,
                f"At retirement in {retirement_year} the portfolio supports "
                f"${data.portfolio_supports_per_year:,.0f}/yr vs a target spend of "
                f"${data.target_spend_per_year:,.0f}/yr.",
                year=retirement_year,
            )
        return data
