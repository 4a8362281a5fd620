"""Effective scenario resolution and scenario overrides.

Every optional scenario field is resolved here, once, to the value the engine
uses. Each default that gets applied is recorded as an assumption so callers
can show what the projection assumed on the user's behalf.
"""

import logging
from decimal import Decimal

from fiplan.engines.constants import (
    DEFAULT_CURRENT_MONTHLY_SPEND,
    DEFAULT_RETIREMENT_OFFSET_YEARS,
    DEFAULT_RSU_WITHHOLDING_RATE,
    DEFAULT_TAXABLE_WITHDRAWAL_TAX_RATE,
    DEFAULT_WITHDRAWAL_ORDER,
    ONE,
    ZERO,
)
from fiplan.models.enums import (
    AccountType,
    ContributionSource,
    IssueCode,
    ModelingMode,
    RetireWhen,
)
from fiplan.models.household import Household
from fiplan.models.projection import ValidationReport
from fiplan.models.records import Contribution, Event
from fiplan.models.scenario import ContributionOverride, EffectiveScenario, Scenario

logger = logging.getLogger(__name__)

TWELVE = Decimal("12")


def investment_return(scenario: Scenario) -> Decimal:
    """Real return (1+n)/(1+i) - 1 under REAL modeling, nominal otherwise."""
    if scenario.modeling_mode == ModelingMode.REAL:
        return (ONE + scenario.nominal_return) / (ONE + scenario.inflation) - ONE
    return scenario.nominal_return


def _as_contribution(override: ContributionOverride) -> Contribution:
    return Contribution(
        account_id=override.account_id,
        contributor_type=override.contributor_type,
        amount_annual=override.amount_annual,
        amount_monthly=override.amount_monthly,
        percent_of_income=override.percent_of_income,
        start_year=override.start_year,
        end_year=override.end_year,
        start_month=override.start_month,
        end_month=override.end_month,
    )


def _replace_or_append(
    contributions: list[Contribution], override: ContributionOverride, match_type: bool
) -> list[Contribution]:
    replacement = _as_contribution(override)
    result: list[Contribution] = []
    replaced = False
    for c in contributions:
        same = c.account_id == override.account_id and (
            not match_type or c.contributor_type == override.contributor_type
        )
        if same:
            if not replaced:
                result.append(replacement)
                replaced = True
            continue
        result.append(c)
    if not replaced:
        result.append(replacement)
    return result


def _merge_events(events: list[Event], overrides: list[Event]) -> list[Event]:
    by_id = {o.id: o for o in overrides}
    merged = [by_id.pop(e.id, e) for e in events]
    merged.extend(o for o in overrides if o.id in by_id)
    return merged


def apply_scenario_overrides(household: Household, scenario: Scenario) -> Household:
    """Return a new Household with the scenario's overrides applied.

    Contribution overrides replace base contributions with the same source,
    person (payroll only) and account, or are appended when nothing matches.
    Event overrides replace same-id events or are appended. Grant overrides
    toggle `is_enabled`. The input household is never modified.
    """
    result = household.model_copy(deep=True)

    for override in scenario.contribution_overrides:
        if override.source == ContributionSource.PAYROLL:
            person = result.person(override.person_id)
            if person is None:
                logger.warning("Skipping payroll override for unknown person %s", override.person_id)
                continue
            person.payroll.payroll_investing = _replace_or_append(
                person.payroll.payroll_investing, override, match_type=True
            )
        elif override.source == ContributionSource.OUT_OF_POCKET:
            result.out_of_pocket_investing = _replace_or_append(
                result.out_of_pocket_investing, override, match_type=False
            )
        else:
            result.monthly_savings = _replace_or_append(
                result.monthly_savings, override, match_type=False
            )

    if scenario.event_overrides:
        result.events = _merge_events(result.events, scenario.event_overrides)

    for grant_override in scenario.equity_grant_overrides:
        if grant_override.is_enabled is None:
            continue
        for grant in result.equity_grants:
            if grant.id == grant_override.grant_id:
                grant.is_enabled = grant_override.is_enabled

    return result


class ScenarioResolver:
    """Resolves a Scenario against a Household into an EffectiveScenario."""

    def __init__(self, household: Household, report: ValidationReport | None = None):
        self.household = household
        self.report = report if report is not None else ValidationReport()

    def resolve(self, scenario: Scenario) -> EffectiveScenario:
        h = self.household
        report = self.report

        current_monthly = scenario.current_monthly_spend
        if current_monthly is None:
            current_monthly = DEFAULT_CURRENT_MONTHLY_SPEND
            report.assume(
                IssueCode.CURRENT_SPEND_DEFAULTED,
                f"Current monthly spend not set; assuming ${current_monthly:,.0f}/mo.",
            )

        order = scenario.withdrawal_order_buckets
        if not order:
            order = list(DEFAULT_WITHDRAWAL_ORDER)
            report.assume(
                IssueCode.WITHDRAWAL_ORDER_DEFAULTED,
                "Withdrawal order not set; using " + " -> ".join(b.value for b in order) + ".",
            )

        traditional = scenario.traditional_withdrawals_tax_rate
        if traditional is None:
            traditional = (
                scenario.retirement_effective_tax_rate
                if scenario.retirement_effective_tax_rate is not None
                else ZERO
            )
            report.assume(
                IssueCode.TRADITIONAL_TAX_RATE_DEFAULTED,
                f"Traditional withdrawal tax rate not set; using {traditional:.1%}.",
            )
        roth = scenario.roth_withdrawals_tax_rate
        if roth is None:
            roth = ZERO
            report.assume(
                IssueCode.ROTH_TAX_RATE_DEFAULTED,
                "Roth withdrawal tax rate not set; assuming tax-free withdrawals.",
            )
        taxable = scenario.taxable_withdrawals_tax_rate
        if taxable is None:
            taxable = DEFAULT_TAXABLE_WITHDRAWAL_TAX_RATE
            report.assume(
                IssueCode.TAXABLE_TAX_RATE_DEFAULTED,
                f"Taxable withdrawal tax rate not set; using {taxable:.1%}.",
            )

        retirement_year = self._retirement_year(scenario)

        retirement_annual = scenario.retirement_monthly_spend * TWELVE
        target = scenario.retirement_target_amount
        if target is None:
            target = retirement_annual / scenario.swr if scenario.swr > 0 else ZERO
            if scenario.retire_when == RetireWhen.TARGET_AMOUNT:
                report.assume(
                    IssueCode.RETIREMENT_TARGET_DEFAULTED,
                    f"Retirement target amount not set; using the FI number ${target:,.0f}.",
                )

        policy = scenario.equity_policy
        withholding = policy.default_withholding_rate if policy is not None else None
        if withholding is None:
            withholding = DEFAULT_RSU_WITHHOLDING_RATE
            if any(g.is_enabled and g.withholding_rate is None for g in h.equity_grants):
                report.assume(
                    IssueCode.RSU_WITHHOLDING_DEFAULTED,
                    f"RSU withholding rate not set; assuming {withholding:.0%}.",
                )

        balancing = scenario.enable_unallocated_surplus_balancing
        if balancing is None:
            balancing = True
            report.assume(
                IssueCode.SURPLUS_BALANCING_DEFAULTED,
                "Leftover cash each year is reported as unallocated surplus.",
            )

        overflow = scenario.overflow_account_id
        if overflow is None and scenario.auto_fix_overflow:
            taxable_accounts = [a for a in h.accounts if a.type == AccountType.TAXABLE]
            if taxable_accounts:
                overflow = taxable_accounts[0].id
                report.assume(
                    IssueCode.OVERFLOW_ACCOUNT_DEFAULTED,
                    f"Overflow account not set; routing surplus to {taxable_accounts[0].name}.",
                )

        for account in h.accounts:
            if account.type == AccountType.MONEY_MARKET and account.apy is None:
                report.assume(
                    IssueCode.MONEY_MARKET_RATE_DEFAULTED,
                    f"{account.name} has no APY; it grows at the scenario return.",
                )

        effective = EffectiveScenario(
            scenario_id=scenario.id,
            name=scenario.name,
            modeling_mode=scenario.modeling_mode,
            nominal_return=scenario.nominal_return,
            inflation=scenario.inflation,
            investment_return=investment_return(scenario),
            swr=scenario.swr,
            retirement_annual_spend=retirement_annual,
            current_monthly_spend=current_monthly,
            current_annual_spend=current_monthly * TWELVE,
            retirement_age_target=scenario.retirement_age_target,
            retirement_year=retirement_year,
            retire_when=scenario.retire_when,
            retirement_target_amount=target,
            effective_tax_rate=scenario.effective_tax_rate,
            take_home_annual=scenario.take_home_annual,
            take_home_definition=scenario.take_home_definition,
            net_to_checking_override=scenario.net_to_checking_override,
            salary_growth_override=scenario.salary_growth_override,
            include_employer_match=scenario.include_employer_match,
            withdrawal_order_buckets=order,
            traditional_withdrawals_tax_rate=traditional,
            roth_withdrawals_tax_rate=roth,
            taxable_withdrawals_tax_rate=taxable,
            default_withholding_rate=withholding,
            default_destination_account_id=(
                policy.default_destination_account_id if policy is not None else None
            ),
            auto_fix_overflow=scenario.auto_fix_overflow,
            enable_unallocated_surplus_balancing=balancing,
            overflow_account_id=overflow,
            stress_test_first_year_return=scenario.stress_test_first_year_return,
        )
        logger.debug(
            "Resolved scenario %s: return=%s retirement_year=%d",
            scenario.id, effective.investment_return, retirement_year,
        )
        return effective

    def _retirement_year(self, scenario: Scenario) -> int:
        if scenario.retirement_start_year is not None:
            return scenario.retirement_start_year
        for person in self.household.people:
            if person.birth_year is not None:
                return person.birth_year + scenario.retirement_age_target
        year = self.household.start_year + DEFAULT_RETIREMENT_OFFSET_YEARS
        self.report.assume(
            IssueCode.RETIREMENT_YEAR_DEFAULTED,
            f"No retirement year or birth year; assuming retirement in {year}.",
        )
        return year
