"""Income and contribution calculator.

Computes each person's gross cash compensation and turns payroll,
out-of-pocket and monthly-savings contributions into prorated annual lines.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel

from fiplan.engines.constants import LIMIT_CLASS, ONE, ZERO
from fiplan.exceptions import UnknownAccountError
from fiplan.models.enums import (
    AccountType,
    ContributionSource,
    ContributorType,
    LimitClass,
    Owner,
)
from fiplan.models.household import Household, Person
from fiplan.models.records import Contribution, ContributionTiming
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)

TWELVE = Decimal("12")
HUNDRED = Decimal("100")


class ContributionLine(BaseModel):
    """One contribution flowing into one account for one year."""

    source: ContributionSource
    person_id: str | None = None
    account_id: str
    account_type: AccountType
    owner: Owner = Owner.PERSON_A
    contributor_type: ContributorType = ContributorType.EMPLOYEE
    amount: Decimal

    @property
    def limit_class(self) -> LimitClass:
        return LIMIT_CLASS[self.account_type]

    @property
    def is_employer(self) -> bool:
        return self.contributor_type == ContributorType.EMPLOYER


def months_in_year(c: ContributionTiming, year: int) -> int:
    """Whole months a contribution is active in `year`.

    start_month only applies in start_year and end_month only in end_year.
    """
    if c.start_year is not None and year < c.start_year:
        return 0
    if c.end_year is not None and year > c.end_year:
        return 0
    first = c.start_month if (c.start_year == year and c.start_month) else 1
    last = c.end_month if (c.end_year == year and c.end_month) else 12
    return max(0, last - first + 1)


def prorated_annual_amount(c: ContributionTiming, year: int, gross: Decimal = ZERO) -> Decimal:
    """Annual amount of a contribution in `year`, prorated by active months.

    Percent-of-income contributions use `gross` for the base.
    """
    months = months_in_year(c, year)
    if months == 0:
        return ZERO
    if c.is_percent:
        return gross * c.percent_of_income / HUNDRED * months / TWELVE
    if c.amount_annual is not None:
        return c.amount_annual * months / TWELVE
    return c.amount_monthly * months


class IncomeCalculator:
    """Gross income and contribution lines for a resolved scenario."""

    def __init__(self, household: Household, scenario: EffectiveScenario):
        self.household = household
        self.scenario = scenario

    def salary_growth_rate(self, person: Person) -> Decimal:
        growth = self.scenario.salary_growth_override
        if growth is None:
            growth = person.income.salary_growth_rate
        if person.income.salary_growth_is_real and self.scenario.is_real:
            return (ONE + growth) / (ONE + self.scenario.inflation) - ONE
        return growth

    def salary(self, person: Person, year: int) -> Decimal:
        years_from_start = max(0, year - self.household.start_year)
        factor = (ONE + self.salary_growth_rate(person)) ** years_from_start
        return person.income.base_salary_annual * factor

    def gross_income(self, person: Person, year: int) -> Decimal:
        """Salary with growth plus bonus. Bonus percent applies to base salary."""
        income = self.salary(person, year)
        if person.income.bonus_annual:
            income += person.income.bonus_annual
        if person.income.bonus_percent:
            income += person.income.base_salary_annual * person.income.bonus_percent / HUNDRED
        return income

    def household_gross_income(self, year: int) -> Decimal:
        return sum((self.gross_income(p, year) for p in self.household.people), ZERO)

    def payroll_deductions(self) -> Decimal:
        return sum(
            (p.payroll.payroll_deductions_spending for p in self.household.people), ZERO
        )

    def contribution_lines(
        self, year: int, begin_balances: dict[str, Decimal] | None = None
    ) -> list[ContributionLine]:
        """All uncapped contribution lines for `year`.

        Employer-tagged payroll lines and employer match only count when the
        scenario includes employer match. Household lines into the emergency
        fund account stop once its beginning balance reaches the goal.
        """
        lines: list[ContributionLine] = []
        for person in self.household.people:
            lines.extend(self._payroll_lines(person, year))

        household_gross = self.household_gross_income(year)
        funded = self._emergency_fund_funded(begin_balances or {})
        for source, contributions in (
            (ContributionSource.OUT_OF_POCKET, self.household.out_of_pocket_investing),
            (ContributionSource.MONTHLY_SAVINGS, self.household.monthly_savings),
        ):
            for c in contributions:
                if funded is not None and c.account_id == funded:
                    continue
                line = self._line(c, source, None, prorated_annual_amount(c, year, household_gross))
                if line is not None:
                    lines.append(line)
        logger.debug("Year %d: %d contribution line(s) before limits", year, len(lines))
        return lines

    def _payroll_lines(self, person: Person, year: int) -> list[ContributionLine]:
        include_employer = self.scenario.include_employer_match
        gross = self.gross_income(person, year)
        lines: list[ContributionLine] = []
        for c in person.payroll.payroll_investing:
            if c.contributor_type == ContributorType.EMPLOYER and not include_employer:
                continue
            amount = prorated_annual_amount(c, year, gross)
            line = self._line(c, ContributionSource.PAYROLL, person.id, amount)
            if line is not None:
                lines.append(line)

        match = person.payroll.employer_match
        if include_employer and match is not None:
            match_line = self._employer_match_line(person, year, lines)
            if match_line is not None:
                lines.append(match_line)
        return lines

    def _employer_match_line(
        self, person: Person, year: int, employee_lines: list[ContributionLine]
    ) -> ContributionLine | None:
        match = person.payroll.employer_match
        salary = self.salary(person, year)
        deferrals = [
            ln for ln in employee_lines
            if not ln.is_employer and ln.limit_class == LimitClass.PLAN_401K
        ]
        if salary <= 0 or not deferrals:
            return None
        deferral_pct = sum((ln.amount for ln in deferrals), ZERO) / salary * HUNDRED
        matched_pct = min(deferral_pct, match.up_to_percent)
        amount = salary * match.match_rate * matched_pct / HUNDRED
        account = self.household.account(match.account_id or deferrals[0].account_id)
        if account is None or amount <= 0:
            return None
        return ContributionLine(
            source=ContributionSource.PAYROLL,
            person_id=person.id,
            account_id=account.id,
            account_type=account.type,
            owner=account.owner,
            contributor_type=ContributorType.EMPLOYER,
            amount=amount,
        )

    def _line(
        self,
        c: Contribution,
        source: ContributionSource,
        person_id: str | None,
        amount: Decimal,
    ) -> ContributionLine | None:
        if amount <= 0:
            return None
        account = self.household.account(c.account_id)
        if account is None:
            raise UnknownAccountError(c.account_id, f"{source.value.lower()} contribution")
        return ContributionLine(
            source=source,
            person_id=person_id,
            account_id=account.id,
            account_type=account.type,
            owner=account.owner,
            contributor_type=(
                c.contributor_type if source == ContributionSource.PAYROLL
                else ContributorType.EMPLOYEE
            ),
            amount=amount,
        )

    def _emergency_fund_funded(self, begin_balances: dict[str, Decimal]) -> str | None:
        """Account id of the emergency fund once it has reached its target."""
        goal = self.household.emergency_fund_goal
        if goal is None or goal.account_id is None:
            return None
        if begin_balances.get(goal.account_id, ZERO) >= goal.target_amount:
            return goal.account_id
        return None
