"""Phase and withdrawal planner.

The household starts in ACCUMULATION and moves once, permanently, to
WITHDRAWAL. In WITHDRAWAL the spending need is funded from FI-asset
accounts bucket by bucket. Each bucket's tax rate applies to the amount
withdrawn from it; the tax itself is not withdrawn.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel, Field

from fiplan.engines.constants import PENALTY_FREE_AGE, WITHDRAWAL_BUCKET, ZERO
from fiplan.engines.ledger import AccountLedger
from fiplan.engines.milestones import MilestoneCalculator
from fiplan.engines.taxes import TaxResolver
from fiplan.models.enums import Phase, RetireWhen, WithdrawalBucket
from fiplan.models.household import Account, Household
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)


class PhasePlanner:
    """One-way ACCUMULATION -> WITHDRAWAL state machine."""

    def __init__(self, scenario: EffectiveScenario, milestones: MilestoneCalculator):
        self.scenario = scenario
        self.milestones = milestones
        self.phase = Phase.ACCUMULATION

    def _fi_reached(self, year: int, prior_fi_assets: Decimal) -> bool:
        return prior_fi_assets >= self.milestones.fi_threshold(year)

    def should_retire(self, year: int, prior_fi_assets: Decimal, first_year: bool) -> bool:
        """Whether `year` starts in WITHDRAWAL, judged on last year's ending FI assets.

        The first simulated year can only switch on the retirement year.
        """
        s = self.scenario
        year_reached = year >= s.retirement_year
        if s.retire_when == RetireWhen.AGE:
            return year_reached
        if first_year:
            return s.retire_when == RetireWhen.EITHER and year_reached
        if s.retire_when == RetireWhen.FI:
            return self._fi_reached(year, prior_fi_assets)
        if s.retire_when == RetireWhen.TARGET_AMOUNT:
            return prior_fi_assets >= s.retirement_target_amount
        return year_reached or self._fi_reached(year, prior_fi_assets)

    def advance(self, year: int, prior_fi_assets: Decimal, first_year: bool = False) -> Phase:
        if self.phase == Phase.ACCUMULATION and self.should_retire(year, prior_fi_assets, first_year):
            logger.info("Entering WITHDRAWAL phase in %d", year)
            self.phase = Phase.WITHDRAWAL
        return self.phase


class WithdrawalResult(BaseModel):
    by_account: dict[str, Decimal] = Field(default_factory=dict)
    by_bucket: dict[WithdrawalBucket, Decimal] = Field(default_factory=dict)
    taxes: Decimal = ZERO
    withdrawn: Decimal = ZERO
    shortfall: Decimal = ZERO

    def from_bucket(self, bucket: WithdrawalBucket) -> Decimal:
        return self.by_bucket.get(bucket, ZERO)


def oldest_age(household: Household, year: int) -> int | None:
    birth_years = [p.birth_year for p in household.people if p.birth_year is not None]
    if not birth_years:
        return None
    return year - min(birth_years)


def is_accessible(account: Account, household: Household, year: int) -> bool:
    """Penalty-free access by the oldest person's age; no birth years means no gate."""
    age = oldest_age(household, year)
    if age is None:
        return True
    return age >= PENALTY_FREE_AGE.get(account.type, 0)


class WithdrawalPlanner:
    """Funds a net spending need from FI-asset accounts in bucket order."""

    def __init__(self, household: Household, scenario: EffectiveScenario, taxes: TaxResolver):
        self.household = household
        self.scenario = scenario
        self.taxes = taxes

    def accounts_in_order(self, year: int) -> list[tuple[WithdrawalBucket, Account]]:
        ordered: list[tuple[WithdrawalBucket, Account]] = []
        for bucket in self.scenario.withdrawal_order_buckets:
            for account in self.household.accounts:
                if not account.included_in_fi_assets:
                    continue
                if WITHDRAWAL_BUCKET[account.type] != bucket:
                    continue
                if not is_accessible(account, self.household, year):
                    continue
                ordered.append((bucket, account))
        return ordered

    def plan(self, year: int, need: Decimal, ledger: AccountLedger) -> WithdrawalResult:
        """Withdraw `need` in bucket order; unmet need is the shortfall.

        Taxes are charged on each amount withdrawn at its bucket's rate but
        are not added to the withdrawal, so they leave checking unfunded.
        """
        result = WithdrawalResult()
        remaining = need
        if remaining <= 0:
            return result

        for bucket, account in self.accounts_in_order(year):
            if remaining <= 0:
                break
            taken = ledger.withdraw(account.id, remaining)
            if taken <= 0:
                continue
            result.by_account[account.id] = result.by_account.get(account.id, ZERO) + taken
            result.by_bucket[bucket] = result.by_bucket.get(bucket, ZERO) + taken
            result.taxes += taken * self.taxes.withdrawal_rate(bucket)
            result.withdrawn += taken
            remaining -= taken

        result.shortfall = max(ZERO, remaining)
        if result.shortfall > 0:
            logger.warning("Withdrawal shortfall of %s in %d", result.shortfall, year)
        return result
