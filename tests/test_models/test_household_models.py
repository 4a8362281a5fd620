"""Tests for household and scenario input models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from fiplan.models.enums import (
    AccountType,
    ContributionSource,
    EventKind,
    Owner,
    PriceMode,
    SalePolicy,
)
from fiplan.models.household import Account, EquityGrant, Household, PriceAssumption
from fiplan.models.records import Contribution, Event
from fiplan.models.scenario import ContributionOverride, Scenario


class TestContribution:
    def test_single_amount(self):
        c = Contribution(account_id="k401", amount_annual=Decimal("12000"))
        assert c.amount_annual == Decimal("12000")
        assert not c.is_percent

    def test_percent_of_income(self):
        c = Contribution(account_id="k401", percent_of_income=Decimal("10"))
        assert c.is_percent

    def test_requires_an_amount(self):
        with pytest.raises(ValidationError, match="exactly one"):
            Contribution(account_id="k401")

    def test_rejects_two_amounts(self):
        with pytest.raises(ValidationError, match="exactly one"):
            Contribution(
                account_id="k401",
                amount_annual=Decimal("12000"),
                amount_monthly=Decimal("1000"),
            )

    def test_percent_over_100_rejected(self):
        with pytest.raises(ValidationError):
            Contribution(account_id="k401", percent_of_income=Decimal("150"))

    def test_month_range(self):
        with pytest.raises(ValidationError):
            Contribution(account_id="k401", amount_monthly=Decimal("100"), start_month=13)


class TestAccount:
    def test_defaults(self):
        acct = Account(id="a", name="Checking", type=AccountType.CASH)
        assert acct.owner == Owner.PERSON_A
        assert acct.starting_balance == Decimal("0")
        assert acct.included_in_fi_assets is True
        assert acct.apy is None

    def test_403b_value(self):
        acct = Account(id="b", name="403(b)", type="403B")
        assert acct.type == AccountType.PLAN_403B


class TestEquityGrant:
    def test_sell_percent_requires_percent(self):
        with pytest.raises(ValidationError, match="sell_percent"):
            EquityGrant(
                id="g1",
                owner_person_id="p1",
                start_year=2025,
                price_assumption=PriceAssumption(fixed_price=Decimal("100")),
                sale_policy=SalePolicy.SELL_PERCENT,
            )

    def test_growth_price_requires_rate(self):
        with pytest.raises(ValidationError, match="growth_rate"):
            PriceAssumption(mode=PriceMode.GROWTH, fixed_price=Decimal("100"))


class TestEvent:
    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Event(id="e1", name="Bad", year=2025, amount=Decimal("-1"), kind=EventKind.INFLOW)


class TestScenario:
    def test_payroll_override_requires_person(self):
        with pytest.raises(ValidationError, match="person_id"):
            ContributionOverride(
                source=ContributionSource.PAYROLL,
                account_id="k401",
                amount_annual=Decimal("1000"),
            )

    def test_household_override_without_person(self):
        o = ContributionOverride(
            source=ContributionSource.OUT_OF_POCKET,
            account_id="brokerage",
            amount_monthly=Decimal("500"),
        )
        assert o.person_id is None

    def test_withdrawal_tax_rate_below_one(self):
        with pytest.raises(ValidationError):
            Scenario(
                id="s",
                name="s",
                nominal_return=Decimal("0.07"),
                inflation=Decimal("0.03"),
                swr=Decimal("0.04"),
                retirement_monthly_spend=Decimal("5000"),
                traditional_withdrawals_tax_rate=Decimal("1"),
            )


class TestHousehold:
    def test_lookups(self, sample_household: Household):
        assert sample_household.account("k401").type == AccountType.TRADITIONAL_401K
        assert sample_household.account("missing") is None
        assert sample_household.person("p1").name == "Alex"
        assert sample_household.get_scenario().id == "base"
        assert sample_household.get_scenario("base").id == "base"
        assert sample_household.get_scenario("other") is None

    def test_decode_from_json(self, sample_household: Household):
        raw = sample_household.model_dump_json()
        decoded = Household.model_validate_json(raw)
        assert decoded == sample_household
