"""Pre-run household validation.

Structural problems (missing references, invalid rates, conflicting tax
inputs) are blocking errors: the projection does not run. Static warnings
flag inputs that are legal but likely to mislead.
"""

import logging

from fiplan.engines.constants import (
    AGGRESSIVE_RETURN_THRESHOLD,
    LIMIT_CLASS,
    MAX_RATE,
    MAX_SWR,
    MIN_RATE,
    PESSIMISTIC_RETURN_THRESHOLD,
    ZERO,
)
from fiplan.engines.equity import vested_shares
from fiplan.models.enums import (
    ContributionSource,
    ContributorType,
    EventKind,
    IssueCode,
    LimitClass,
    SalePolicy,
    TakeHomeDefinition,
)
from fiplan.models.household import Household
from fiplan.models.projection import ValidationReport
from fiplan.models.scenario import EffectiveScenario, Scenario

logger = logging.getLogger(__name__)


class HouseholdValidator:
    """Validates a household (with scenario overrides applied) against a scenario."""

    def __init__(self, household: Household, scenario: Scenario, report: ValidationReport | None = None):
        self.household = household
        self.scenario = scenario
        self.report = report if report is not None else ValidationReport()

    def check_structure(self) -> ValidationReport:
        """Blocking errors. Returns the report for chaining."""
        self._check_account_refs()
        self._check_person_refs()
        self._check_employer_match_accounts()
        self._check_rates()
        self._check_balances()
        self._check_tax_mode()
        if self.report.has_blocking_errors:
            logger.info(
                "Household %s has %d blocking error(s)",
                self.household.id, len(self.report.errors),
            )
        return self.report

    def check_static(self, effective: EffectiveScenario) -> ValidationReport:
        """Non-blocking warnings that depend on the resolved scenario."""
        h = self.household
        report = self.report

        rate = effective.investment_return
        if rate > AGGRESSIVE_RETURN_THRESHOLD:
            report.warn(
                IssueCode.AGGRESSIVE_RETURNS,
                f"Effective return of {rate:.2%} is above {AGGRESSIVE_RETURN_THRESHOLD:.0%}.",
            )
        elif rate < PESSIMISTIC_RETURN_THRESHOLD:
            report.warn(
                IssueCode.PESSIMISTIC_RETURNS,
                f"Effective return of {rate:.2%} is negative.",
            )

        if self.scenario.retirement_monthly_spend < effective.current_monthly_spend:
            report.warn(
                IssueCode.RETIREMENT_SPEND_LT_CURRENT,
                f"Retirement spend (${self.scenario.retirement_monthly_spend:,.0f}/mo) is below "
                f"current spend (${effective.current_monthly_spend:,.0f}/mo).",
            )

        for account in h.accounts:
            if not account.included_in_fi_assets:
                report.warn(
                    IssueCode.FI_ASSETS_EXCLUSION,
                    f"{account.name} is excluded from FI assets and will not fund retirement.",
                )

        if not effective.include_employer_match:
            for person in h.people:
                has_employer = person.payroll.employer_match is not None or any(
                    c.contributor_type == ContributorType.EMPLOYER
                    for c in person.payroll.payroll_investing
                )
                if has_employer:
                    report.warn(
                        IssueCode.EMPLOYER_MATCH_DISABLED_BUT_PRESENT,
                        f"{person.name} has employer contributions but this scenario "
                        "excludes employer match.",
                    )

        for grant in h.equity_grants:
            if not grant.is_enabled:
                continue
            if not grant.vesting_table and not grant.shares_per_period:
                report.warn(
                    IssueCode.EQUITY_EMPTY_VESTING,
                    f"Equity grant {grant.id} has no vesting schedule.",
                )
                continue
            early = sorted({v.year for v in grant.vesting_table if v.year < h.start_year})
            if not grant.vesting_table and grant.start_year < h.start_year:
                early = [
                    y for y in range(grant.start_year, h.start_year)
                    if vested_shares(grant, y) > 0
                ]
            if early:
                report.warn(
                    IssueCode.EQUITY_VESTED_BEFORE_START,
                    f"Equity grant {grant.id} vests before the plan starts "
                    f"({', '.join(str(y) for y in early)}); those vests are ignored.",
                )
        return report

    def _missing_account(self, account_id: str | None, context: str) -> None:
        if account_id is None:
            self.report.error(IssueCode.MISSING_ACCOUNT_REF, f"{context} has no account.")
        elif self.household.account(account_id) is None:
            self.report.error(
                IssueCode.MISSING_ACCOUNT_REF,
                f"{context} references unknown account '{account_id}'.",
            )

    def _check_account_refs(self) -> None:
        h = self.household
        for person in h.people:
            for c in person.payroll.payroll_investing:
                self._missing_account(c.account_id, f"Payroll contribution for {person.name}")
        for c in h.out_of_pocket_investing:
            self._missing_account(c.account_id, "Out-of-pocket contribution")
        for c in h.monthly_savings:
            self._missing_account(c.account_id, "Monthly savings contribution")
        for o in self.scenario.contribution_overrides:
            self._missing_account(o.account_id, f"Scenario {o.source.value.lower()} override")

        for event in h.events:
            if event.account_id is None:
                if event.kind != EventKind.INFLOW:
                    self._missing_account(None, f"{event.kind.value} event '{event.name}'")
            else:
                self._missing_account(event.account_id, f"Event '{event.name}'")
            if event.kind == EventKind.TRANSFER:
                self._missing_account(event.to_account_id, f"Transfer event '{event.name}'")

        policy = self.scenario.equity_policy
        default_destination = policy.default_destination_account_id if policy else None
        if default_destination is not None:
            self._missing_account(default_destination, "Equity policy default destination")
        for grant in h.equity_grants:
            destination = grant.destination_account_id or default_destination
            if destination is None:
                if grant.is_enabled and grant.sale_policy != SalePolicy.HOLD:
                    self._missing_account(None, f"Equity grant {grant.id} destination")
            elif grant.destination_account_id is not None:
                self._missing_account(destination, f"Equity grant {grant.id} destination")

        goal = h.emergency_fund_goal
        if goal is not None and goal.account_id is not None:
            self._missing_account(goal.account_id, "Emergency fund goal")
        if self.scenario.overflow_account_id is not None:
            self._missing_account(self.scenario.overflow_account_id, "Overflow account")
        for person in h.people:
            match = person.payroll.employer_match
            if match is not None and match.account_id is not None:
                self._missing_account(match.account_id, f"Employer match for {person.name}")

    def _check_person_refs(self) -> None:
        h = self.household
        for grant in h.equity_grants:
            if h.person(grant.owner_person_id) is None:
                self.report.error(
                    IssueCode.MISSING_PERSON_REF,
                    f"Equity grant {grant.id} references unknown person '{grant.owner_person_id}'.",
                )
        for o in self.scenario.contribution_overrides:
            if o.source == ContributionSource.PAYROLL and h.person(o.person_id) is None:
                self.report.error(
                    IssueCode.MISSING_PERSON_REF,
                    f"Payroll override references unknown person '{o.person_id}'.",
                )

    def _check_employer_match_accounts(self) -> None:
        if not self.scenario.include_employer_match:
            return
        for person in self.household.people:
            match = person.payroll.employer_match
            if match is None or match.account_id is not None:
                continue
            has_plan = False
            for c in person.payroll.payroll_investing:
                account = self.household.account(c.account_id)
                if (
                    account is not None
                    and c.contributor_type == ContributorType.EMPLOYEE
                    and LIMIT_CLASS[account.type] == LimitClass.PLAN_401K
                ):
                    has_plan = True
            if not has_plan:
                self.report.error(
                    IssueCode.MISSING_EMPLOYER_MATCH_ACCOUNT,
                    f"Employer match for {person.name} has no account to deposit into.",
                )

    def _check_rates(self) -> None:
        s = self.scenario
        if not (ZERO < s.swr <= MAX_SWR):
            self.report.error(
                IssueCode.INVALID_SWR,
                f"Safe withdrawal rate {s.swr} must be above 0 and at most {MAX_SWR}.",
            )
        rates = {
            "Nominal return": s.nominal_return,
            "Inflation": s.inflation,
            "Salary growth override": s.salary_growth_override,
            "Stress-test first-year return": s.stress_test_first_year_return,
        }
        for label, value in rates.items():
            if value is not None and not (MIN_RATE <= value <= MAX_RATE):
                self.report.error(
                    IssueCode.INVALID_RATES,
                    f"{label} {value} is outside [{MIN_RATE}, {MAX_RATE}].",
                )

    def _check_balances(self) -> None:
        for account in self.household.accounts:
            if account.starting_balance < 0:
                self.report.error(
                    IssueCode.NEGATIVE_BALANCE,
                    f"{account.name} has a negative starting balance.",
                )

    def _check_tax_mode(self) -> None:
        s = self.scenario
        uses_take_home = (
            s.take_home_annual is not None
            or s.take_home_definition == TakeHomeDefinition.OVERRIDE
        )
        if s.effective_tax_rate is not None and uses_take_home:
            self.report.error(
                IssueCode.TAX_MODE_CONFLICT,
                "Set either an effective tax rate or take-home pay, not both.",
            )
        elif s.effective_tax_rate is None and not uses_take_home:
            self.report.error(
                IssueCode.TAX_MODE_CONFLICT,
                "Set an effective tax rate or take-home pay.",
            )
        if s.take_home_definition == TakeHomeDefinition.OVERRIDE and s.net_to_checking_override is None:
            self.report.error(
                IssueCode.INPUT_DEFINITION_CONFLICT,
                "Take-home definition OVERRIDE requires net_to_checking_override.",
            )
