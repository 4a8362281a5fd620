"""Projection engine: the core of fiplan.

Runs a household and scenario through a discrete-year simulation:

1. Apply scenario overrides to a copy of the household
2. Validate structure (blocking errors stop the run with no rows)
3. Resolve the effective scenario and record assumptions
4. For each year: pick the phase, post events, then either earn, tax,
   vest and contribute (ACCUMULATION) or withdraw to fund spending
   (WITHDRAWAL); roll every account forward and reconcile cash flow
5. Derive milestones from the finished rows

Domain problems never raise out of the engine; they become issues on the
result's validation report.
"""

import logging
from collections.abc import Iterator
from decimal import Decimal

from fiplan.engines.constants import (
    DEFAULT_HORIZON_YEARS,
    PRE_TAX_ACCOUNT_TYPES,
    ROTH_ACCOUNT_TYPES,
    ZERO,
)
from fiplan.engines.effective import ScenarioResolver, apply_scenario_overrides
from fiplan.engines.equity import EquityVestingProcessor, EquityYear
from fiplan.engines.income import ContributionLine, IncomeCalculator
from fiplan.engines.ledger import AccountLedger, LedgerYear
from fiplan.engines.limits import ContributionLimitResolver
from fiplan.engines.milestones import MilestoneCalculator
from fiplan.engines.reconciliation import CashFlowReconciler
from fiplan.engines.taxes import TaxResolver
from fiplan.engines.validation import HouseholdValidator
from fiplan.engines.withdrawal import PhasePlanner, WithdrawalPlanner, WithdrawalResult
from fiplan.exceptions import LedgerImbalanceError, ReconciliationError
from fiplan.models.enums import (
    ContributionSource,
    ContributorType,
    EventKind,
    IssueCode,
    Phase,
    WithdrawalBucket,
)
from fiplan.models.household import Household
from fiplan.models.projection import ProjectionResult, ValidationReport, YearRow
from fiplan.models.scenario import EffectiveScenario, Scenario

logger = logging.getLogger(__name__)


class EventFlows:
    """Checking-account effect of one year's events."""

    def __init__(self) -> None:
        self.checking_inflows = ZERO
        self.invested = ZERO


class ProjectionEngine:
    """Runs one household under one scenario."""

    def __init__(
        self,
        household: Household,
        scenario: Scenario,
        horizon_years: int = DEFAULT_HORIZON_YEARS,
    ):
        self.household = household
        self.scenario = scenario
        self.horizon_years = horizon_years
        self.report = ValidationReport()
        self.effective: EffectiveScenario | None = None
        self.starting_fi_assets = ZERO
        self._prepared: Household | None = None

    def validate(self) -> ValidationReport:
        """Structural errors, static warnings and assumptions, without simulating."""
        report = ValidationReport()
        household = apply_scenario_overrides(self.household, self.scenario)
        validator = HouseholdValidator(household, self.scenario, report)
        validator.check_structure()
        if not report.has_blocking_errors:
            effective = ScenarioResolver(household, report).resolve(self.scenario)
            validator.check_static(effective)
        return report

    def iter_years(self) -> Iterator[YearRow]:
        """Yield one YearRow per simulated year.

        Each call starts a fresh simulation with a fresh validation report.
        Yields nothing when the household has blocking errors.
        """
        self.report = ValidationReport()
        self.effective = None
        household = apply_scenario_overrides(self.household, self.scenario)
        validator = HouseholdValidator(household, self.scenario, self.report)
        validator.check_structure()
        if self.report.has_blocking_errors:
            return

        effective = ScenarioResolver(household, self.report).resolve(self.scenario)
        validator.check_static(effective)
        self.effective = effective
        self._prepared = household

        ledger = AccountLedger(household.accounts, effective)
        milestones = MilestoneCalculator(effective, household.start_year)
        phases = PhasePlanner(effective, milestones)
        income = IncomeCalculator(household, effective)
        equity = EquityVestingProcessor(household, effective)
        taxes = TaxResolver(effective, self.report)
        limits = ContributionLimitResolver(self.report)
        withdrawals = WithdrawalPlanner(household, effective, taxes)
        reconciler = CashFlowReconciler(effective, self.report)

        self.starting_fi_assets = ledger.fi_assets()
        prior_fi_assets = self.starting_fi_assets
        logger.info(
            "Projecting household %s under scenario %s for %d years",
            household.id, effective.scenario_id, self.horizon_years,
        )

        for offset in range(self.horizon_years):
            year = household.start_year + offset
            phase = phases.advance(year, prior_fi_assets, first_year=offset == 0)
            ledger.open_year(year)
            flows = self._apply_events(household, year, ledger)

            row = YearRow(year=year, phase=phase)
            if phase == Phase.ACCUMULATION:
                leftover, scale = self._accumulate(
                    household, year, row, flows, ledger, income, limits, equity, taxes, milestones
                )
            else:
                plan = self._withdraw(year, row, flows, ledger, withdrawals, milestones)
                leftover = (
                    flows.checking_inflows + plan.withdrawn + plan.shortfall
                    - row.spending - flows.invested - plan.taxes
                )
                scale = row.spending + flows.invested + flows.checking_inflows
            row.unallocated_surplus = reconciler.post_leftover(year, leftover, scale, ledger)

            try:
                closed = ledger.close()
            except LedgerImbalanceError as e:
                self.report.error(IssueCode.ACCOUNT_ROLLFORWARD_MISMATCH, str(e), year=year)
                return
            self._fill_balances(row, closed)

            breakdown = reconciler.breakdown(row, flows.checking_inflows)
            row.reconciliation_delta = breakdown.delta
            try:
                reconciler.verify(row, flows.checking_inflows)
            except ReconciliationError as e:
                logger.error("%s", e)
                self.report.error(
                    IssueCode.CASHFLOW_RECONCILIATION_BREAKDOWN,
                    f"Sources and uses of cash differ by ${e.breakdown.delta:,.2f} in {year}.",
                    year=year,
                    breakdown=e.breakdown,
                )

            logger.debug(
                "Year %d (%s): invested assets %s, net worth %s",
                year, phase.value, row.invested_assets, row.net_worth,
            )
            prior_fi_assets = row.invested_assets
            yield row

    def run(self) -> ProjectionResult:
        rows = list(self.iter_years())
        result = ProjectionResult(year_rows=rows, validation=self.report)
        if self.effective is None:
            logger.info("Projection blocked by %d error(s)", len(self.report.errors))
            return result

        effective = self.effective
        milestones = MilestoneCalculator(effective, self._prepared.start_year)
        result.fi_number = milestones.fi_number.quantize(Decimal("0.01"))
        result.fi_year = milestones.fi_year(rows)
        result.coast_fi_year = milestones.coast_fi_year(rows, effective.retirement_year)
        result.savings_rate = milestones.savings_rate(rows)
        result.retirement_start_year = next(
            (r.year for r in rows if r.phase == Phase.WITHDRAWAL), None
        )
        result.shortfall_data = milestones.shortfall(
            rows, effective.retirement_year, self.starting_fi_assets, self.report
        )
        result.fi_not_met_at_retirement_age = result.shortfall_data is not None
        result.validation = self.report
        logger.info(
            "Projection complete: %d years, FI year %s, %d warning(s)",
            len(rows), result.fi_year, len(self.report.warnings),
        )
        return result

    def _apply_events(self, household: Household, year: int, ledger: AccountLedger) -> EventFlows:
        """Post this year's events before any contributions or withdrawals."""
        flows = EventFlows()
        for event in household.events:
            if event.year != year:
                continue
            if event.kind == EventKind.INFLOW:
                if event.account_id is None:
                    flows.checking_inflows += event.amount
                else:
                    ledger.credit_event(event.account_id, event.amount)
            elif event.kind == EventKind.INVEST:
                ledger.contribute(event.account_id, event.amount)
                flows.invested += event.amount
            else:
                taken = ledger.debit_event(event.account_id, event.amount)
                if taken < event.amount:
                    self.report.warn(
                        IssueCode.EVENT_OVERDRAFT,
                        f"Event '{event.name}' needed ${event.amount:,.0f} but only "
                        f"${taken:,.0f} was available in {year}.",
                        year=year,
                    )
                if event.kind == EventKind.WITHDRAW:
                    flows.checking_inflows += taken
                elif event.kind == EventKind.TRANSFER:
                    ledger.credit_event(event.to_account_id, taken)
        return flows

    def _accumulate(
        self,
        household: Household,
        year: int,
        row: YearRow,
        flows: EventFlows,
        ledger: AccountLedger,
        income: IncomeCalculator,
        limits: ContributionLimitResolver,
        equity: EquityVestingProcessor,
        taxes: TaxResolver,
        milestones: MilestoneCalculator,
    ) -> tuple[Decimal, Decimal]:
        """Earn, tax, vest and contribute. Returns (leftover checking cash, scale)."""
        cash_compensation = income.household_gross_income(year)
        raw_lines = income.contribution_lines(year, ledger.begin)
        lines = limits.cap_contributions_at_irs_limits(household, year, raw_lines)
        vests = equity.vest(year)

        employee_payroll = _sum(
            ln for ln in lines
            if ln.source == ContributionSource.PAYROLL and not ln.is_employer
        )
        household_lines = _sum(ln for ln in lines if ln.source != ContributionSource.PAYROLL)
        deductions = income.payroll_deductions()
        payroll = taxes.payroll(year, cash_compensation, employee_payroll, deductions)

        for line in lines:
            if line.amount > 0:
                ledger.contribute(line.account_id, line.amount)
        for account_id, amount in vests.invested_by_account.items():
            ledger.contribute(account_id, amount)

        base_spend = self.effective.current_annual_spend * milestones.inflation_factor(year)
        row.gross_income = cash_compensation + vests.vest_value
        row.taxes_payroll = payroll.taxes_payroll
        row.net_to_checking = payroll.net_to_checking
        row.spending = base_spend + deductions
        row.employee_pre_tax_contribs = _sum(
            ln for ln in lines
            if _is_employee_payroll(ln) and ln.account_type in PRE_TAX_ACCOUNT_TYPES
        )
        row.employee_roth_contribs = _sum(
            ln for ln in lines
            if _is_employee_payroll(ln) and ln.account_type in ROTH_ACCOUNT_TYPES
        )
        row.employer_contribs = _sum(ln for ln in lines if ln.is_employer)
        self._fill_equity(row, vests)

        leftover = (
            payroll.net_to_checking + flows.checking_inflows
            - base_spend - household_lines - flows.invested
        )
        scale = cash_compensation + vests.vest_value + flows.checking_inflows
        return leftover, scale

    def _withdraw(
        self,
        year: int,
        row: YearRow,
        flows: EventFlows,
        ledger: AccountLedger,
        withdrawals: WithdrawalPlanner,
        milestones: MilestoneCalculator,
    ) -> WithdrawalResult:
        row.spending = milestones.retirement_spend(year)
        need = row.spending + flows.invested - flows.checking_inflows
        plan = withdrawals.plan(year, need, ledger)

        row.withdrawals_taxable = plan.from_bucket(WithdrawalBucket.TAXABLE)
        row.withdrawals_traditional = plan.from_bucket(WithdrawalBucket.TAX_DEFERRED)
        row.withdrawals_roth = plan.from_bucket(WithdrawalBucket.ROTH)
        row.withdrawal_taxes = plan.taxes
        row.taxes_additional = plan.taxes
        row.withdrawal_shortfall = plan.shortfall

        if plan.shortfall > 0:
            self.report.warn(
                IssueCode.WITHDRAWAL_SHORTFALL,
                f"Accessible accounts could not cover ${plan.shortfall:,.0f} of spending in {year}.",
                year=year,
            )
        if (
            row.withdrawals_traditional > 0
            and self.effective.traditional_withdrawals_tax_rate == 0
        ):
            self.report.warn(
                IssueCode.RETIREMENT_TAX_ZERO,
                "Traditional withdrawals are taxed at 0%; set a retirement tax rate "
                "to model income tax on them.",
            )
        return plan

    @staticmethod
    def _fill_equity(row: YearRow, vests: EquityYear) -> None:
        row.rsu_vest_value = vests.vest_value
        row.rsu_withholding = vests.withholding
        row.rsu_net_proceeds = vests.net_proceeds
        row.rsu_held_value = vests.held_value

    @staticmethod
    def _fill_balances(row: YearRow, closed: LedgerYear) -> None:
        row.contributions_by_account = closed.contributions_by_account
        row.withdrawal_by_account = closed.withdrawal_by_account
        row.growth_by_account = closed.growth_by_account
        row.ending_balances = closed.ending_balances
        row.net_worth = closed.net_worth
        row.invested_assets = closed.invested_assets


def _sum(lines) -> Decimal:
    return sum((ln.amount for ln in lines), ZERO)


def _is_employee_payroll(line: ContributionLine) -> bool:
    return (
        line.source == ContributionSource.PAYROLL
        and line.contributor_type == ContributorType.EMPLOYEE
    )


def run_projection(
    household: Household,
    scenario: Scenario,
    horizon_years: int = DEFAULT_HORIZON_YEARS,
) -> ProjectionResult:
    """Project `household` under `scenario` for `horizon_years` years."""
    return ProjectionEngine(household, scenario, horizon_years).run()


def validate_household(household: Household, scenario: Scenario) -> ValidationReport:
    """Pre-run issues for `household` under `scenario`, without simulating."""
    return ProjectionEngine(household, scenario).validate()
