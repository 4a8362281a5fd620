"""Account ledger.

Rolls every account forward one year at a time:

    end = begin + contributions + event inflows + growth - withdrawals - event outflows

Growth is earned on the beginning balance. Debits are clamped to what the
account holds, so balances never go negative.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel, Field

from fiplan.engines.constants import ONE, RECONCILIATION_TOLERANCE, ZERO
from fiplan.exceptions import LedgerImbalanceError, UnknownAccountError
from fiplan.models.enums import AccountType
from fiplan.models.household import Account
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)


class LedgerYear(BaseModel):
    """Closed-out account activity for one year, keyed by account id."""

    year: int
    begin_balances: dict[str, Decimal] = Field(default_factory=dict)
    contributions_by_account: dict[str, Decimal] = Field(default_factory=dict)
    withdrawal_by_account: dict[str, Decimal] = Field(default_factory=dict)
    event_inflows_by_account: dict[str, Decimal] = Field(default_factory=dict)
    event_outflows_by_account: dict[str, Decimal] = Field(default_factory=dict)
    growth_by_account: dict[str, Decimal] = Field(default_factory=dict)
    ending_balances: dict[str, Decimal] = Field(default_factory=dict)
    net_worth: Decimal = ZERO
    invested_assets: Decimal = ZERO


def account_growth_rate(
    account: Account, scenario: EffectiveScenario, first_year: bool = False
) -> Decimal:
    """Annual growth rate for an account.

    Money market accounts with an APY earn that APY (deflated under REAL);
    every other account earns the scenario return, or the stress-test return
    in the first simulated year when one is set.
    """
    if account.type == AccountType.MONEY_MARKET and account.apy is not None:
        if scenario.is_real:
            return (ONE + account.apy) / (ONE + scenario.inflation) - ONE
        return account.apy
    if first_year and scenario.stress_test_first_year_return is not None:
        return scenario.stress_test_first_year_return
    return scenario.investment_return


class AccountLedger:
    """Running balances for every household account."""

    def __init__(self, accounts: list[Account], scenario: EffectiveScenario):
        self.accounts = list(accounts)
        self._by_id = {a.id: a for a in self.accounts}
        self.rates = {a.id: account_growth_rate(a, scenario) for a in self.accounts}
        self.first_year_rates = {
            a.id: account_growth_rate(a, scenario, first_year=True) for a in self.accounts
        }
        self.balances: dict[str, Decimal] = {a.id: a.starting_balance for a in self.accounts}
        self.year: int | None = None
        self._reset_year()

    def _reset_year(self, first_year: bool = False) -> None:
        rates = self.first_year_rates if first_year else self.rates
        ids = [a.id for a in self.accounts]
        self.begin = dict(self.balances)
        self.contributions = dict.fromkeys(ids, ZERO)
        self.withdrawals = dict.fromkeys(ids, ZERO)
        self.event_inflows = dict.fromkeys(ids, ZERO)
        self.event_outflows = dict.fromkeys(ids, ZERO)
        self.growth = {i: self.begin[i] * rates[i] for i in ids}

    def open_year(self, year: int) -> None:
        first_year = self.year is None
        self.year = year
        self._reset_year(first_year=first_year)

    def fi_assets(self) -> Decimal:
        return sum(
            (self.balances[a.id] for a in self.accounts if a.included_in_fi_assets), ZERO
        )

    def net_worth(self) -> Decimal:
        return sum(self.balances.values(), ZERO)

    def account(self, account_id: str | None) -> Account:
        account = self._by_id.get(account_id)
        if account is None:
            raise UnknownAccountError(account_id, "ledger posting")
        return account

    def available(self, account_id: str) -> Decimal:
        """Balance that can still be debited this year."""
        self.account(account_id)
        return max(
            ZERO,
            self.begin[account_id]
            + self.contributions[account_id]
            + self.event_inflows[account_id]
            + self.growth[account_id]
            - self.withdrawals[account_id]
            - self.event_outflows[account_id],
        )

    def contribute(self, account_id: str, amount: Decimal) -> None:
        self.account(account_id)
        self.contributions[account_id] += amount

    def credit_event(self, account_id: str, amount: Decimal) -> None:
        self.account(account_id)
        self.event_inflows[account_id] += amount

    def debit_event(self, account_id: str, amount: Decimal) -> Decimal:
        """Debit an event outflow, clamped to the available balance. Returns the amount taken."""
        taken = min(amount, self.available(account_id))
        self.event_outflows[account_id] += taken
        if taken < amount:
            logger.warning(
                "Event debit of %s from %s clamped to %s in %s",
                amount, account_id, taken, self.year,
            )
        return taken

    def withdraw(self, account_id: str, amount: Decimal) -> Decimal:
        """Withdraw up to `amount`, clamped to the available balance. Returns the amount taken."""
        taken = min(amount, self.available(account_id))
        self.withdrawals[account_id] += taken
        return taken

    def close(self) -> LedgerYear:
        """Post the year's activity and verify each account's roll-forward."""
        ending: dict[str, Decimal] = {}
        for a in self.accounts:
            i = a.id
            end = (
                self.begin[i] + self.contributions[i] + self.event_inflows[i]
                + self.growth[i] - self.withdrawals[i] - self.event_outflows[i]
            )
            # Fully drained accounts can carry rounding residue below zero
            if -RECONCILIATION_TOLERANCE < end < ZERO:
                end = ZERO
            ending[i] = end
        self.verify(ending)
        self.balances = ending

        result = LedgerYear(
            year=self.year,
            begin_balances=dict(self.begin),
            contributions_by_account=dict(self.contributions),
            withdrawal_by_account=dict(self.withdrawals),
            event_inflows_by_account=dict(self.event_inflows),
            event_outflows_by_account=dict(self.event_outflows),
            growth_by_account=dict(self.growth),
            ending_balances=dict(ending),
            net_worth=self.net_worth(),
            invested_assets=self.fi_assets(),
        )
        self._reset_year()
        return result

    def verify(self, ending: dict[str, Decimal]) -> None:
        """Raise LedgerImbalanceError when an ending balance breaks the roll-forward identity."""
        for a in self.accounts:
            i = a.id
            expected = (
                self.begin[i] + self.contributions[i] + self.event_inflows[i]
                + self.growth[i] - self.withdrawals[i] - self.event_outflows[i]
            )
            scale = max(ONE, abs(expected))
            if abs(ending[i] - expected) > RECONCILIATION_TOLERANCE * scale:
                raise LedgerImbalanceError(i, self.year, expected, ending[i])
            if ending[i] < -RECONCILIATION_TOLERANCE * scale:
                raise LedgerImbalanceError(i, self.year, ZERO, ending[i])
