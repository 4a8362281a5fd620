"""Equity vesting processor.

Values RSU vests, applies withholding, and splits net proceeds between the
destination account (sold and reinvested) and shares kept outside the plan.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel, Field

from fiplan.engines.constants import (
    DEFAULT_VESTING_YEARS,
    ONE,
    VESTING_PERIODS_PER_YEAR,
    ZERO,
)
from fiplan.models.enums import PriceMode, SalePolicy
from fiplan.models.household import EquityGrant, Household
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)


class VestResult(BaseModel):
    """One grant's vest in one year."""

    grant_id: str
    owner_person_id: str
    shares: Decimal
    price: Decimal
    vest_value: Decimal
    withholding: Decimal
    net_proceeds: Decimal
    invested: Decimal
    held: Decimal
    destination_account_id: str | None = None


class EquityYear(BaseModel):
    """All vests in one year, totalled."""

    vests: list[VestResult] = Field(default_factory=list)
    vest_value: Decimal = ZERO
    withholding: Decimal = ZERO
    net_proceeds: Decimal = ZERO
    held_value: Decimal = ZERO
    invested_by_account: dict[str, Decimal] = Field(default_factory=dict)


def vested_shares(grant: EquityGrant, year: int) -> Decimal:
    """Shares vesting in `year` from the table, or from the periodic schedule."""
    if grant.vesting_table:
        return sum((v.shares for v in grant.vesting_table if v.year == year), ZERO)
    if not grant.shares_per_period:
        return ZERO
    end_year = grant.end_year if grant.end_year is not None else grant.start_year + DEFAULT_VESTING_YEARS
    if grant.start_year <= year <= end_year:
        return grant.shares_per_period * VESTING_PERIODS_PER_YEAR[grant.vesting_frequency]
    return ZERO


def share_price(grant: EquityGrant, year: int) -> Decimal:
    assumption = grant.price_assumption
    if assumption.mode == PriceMode.GROWTH:
        return assumption.fixed_price * (ONE + assumption.growth_rate) ** (year - grant.start_year)
    return assumption.fixed_price


class EquityVestingProcessor:
    """Processes enabled equity grants year by year."""

    def __init__(self, household: Household, scenario: EffectiveScenario):
        self.household = household
        self.scenario = scenario

    def withholding_rate(self, grant: EquityGrant) -> Decimal:
        if grant.withholding_rate is not None:
            return grant.withholding_rate
        return self.scenario.default_withholding_rate

    def destination(self, grant: EquityGrant) -> str | None:
        return grant.destination_account_id or self.scenario.default_destination_account_id

    def vest_grant(self, grant: EquityGrant, year: int) -> VestResult | None:
        shares = vested_shares(grant, year)
        if shares <= 0:
            return None
        price = share_price(grant, year)
        probability = grant.vesting_probability if grant.vesting_probability is not None else ONE
        value = shares * price * probability
        withholding = value * self.withholding_rate(grant)
        net = value - withholding

        if grant.sale_policy == SalePolicy.SELL_ALL:
            invested = net
        elif grant.sale_policy == SalePolicy.SELL_PERCENT:
            invested = net * grant.sell_percent
        else:
            invested = ZERO

        destination = self.destination(grant)
        if destination is None:
            invested = ZERO
        return VestResult(
            grant_id=grant.id,
            owner_person_id=grant.owner_person_id,
            shares=shares,
            price=price,
            vest_value=value,
            withholding=withholding,
            net_proceeds=net,
            invested=invested,
            held=net - invested,
            destination_account_id=destination,
        )

    def vest(self, year: int) -> EquityYear:
        """Vest every enabled grant for `year`."""
        result = EquityYear()
        for grant in self.household.equity_grants:
            if not grant.is_enabled:
                continue
            vest = self.vest_grant(grant, year)
            if vest is None:
                continue
            logger.debug(
                "Grant %s vests %s shares at %s in %d (value %s)",
                grant.id, vest.shares, vest.price, year, vest.vest_value,
            )
            result.vests.append(vest)
            result.vest_value += vest.vest_value
            result.withholding += vest.withholding
            result.net_proceeds += vest.net_proceeds
            result.held_value += vest.held
            if vest.invested > 0:
                acct = vest.destination_account_id
                result.invested_by_account[acct] = (
                    result.invested_by_account.get(acct, ZERO) + vest.invested
                )
        return result
