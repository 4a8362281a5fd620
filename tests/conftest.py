"""Shared test fixtures for fiplan."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from fiplan.models.enums import AccountType, ModelingMode, RetireWhen
from fiplan.models.household import Account, Household, IncomeModel, Person
from fiplan.models.scenario import Scenario


@pytest.fixture
def base_scenario() -> Scenario:
    return Scenario(
        id="base",
        name="Base case",
        modeling_mode=ModelingMode.REAL,
        nominal_return=Decimal("0.07"),
        inflation=Decimal("0.03"),
        swr=Decimal("0.04"),
        retirement_monthly_spend=Decimal("8000"),
        current_monthly_spend=Decimal("6000"),
        effective_tax_rate=Decimal("0.25"),
        retirement_start_year=2055,
    )


@pytest.fixture
def flat_scenario() -> Scenario:
    """Zero return and inflation so balances only move with cash flows."""
    return Scenario(
        id="flat",
        name="Flat",
        modeling_mode=ModelingMode.NOMINAL,
        nominal_return=Decimal("0"),
        inflation=Decimal("0"),
        swr=Decimal("0.04"),
        retirement_monthly_spend=Decimal("8000"),
        current_monthly_spend=Decimal("0"),
        effective_tax_rate=Decimal("0.25"),
        retirement_start_year=2100,
        retire_when=RetireWhen.AGE,
    )


@pytest.fixture
def sample_person() -> Person:
    return Person(
        id="p1",
        name="Alex",
        birth_year=1985,
        income=IncomeModel(base_salary_annual=Decimal("200000")),
    )


@pytest.fixture
def sample_accounts() -> list[Account]:
    return [
        Account(
            id="brokerage",
            name="Brokerage",
            type=AccountType.TAXABLE,
            starting_balance=Decimal("100000"),
        ),
        Account(
            id="k401",
            name="401(k)",
            type=AccountType.TRADITIONAL_401K,
            starting_balance=Decimal("50000"),
        ),
        Account(
            id="roth",
            name="Roth IRA",
            type=AccountType.ROTH_IRA,
            starting_balance=Decimal("20000"),
        ),
    ]


@pytest.fixture
def sample_household(
    sample_person: Person, sample_accounts: list[Account], base_scenario: Scenario
) -> Household:
    return Household(
        id="hh-001",
        name="Sample Household",
        start_year=2025,
        people=[sample_person],
        accounts=sample_accounts,
        scenarios=[base_scenario],
    )


@pytest.fixture
def household_file(tmp_path: Path, sample_household: Household) -> Path:
    path = tmp_path / "household.json"
    path.write_text(json.dumps(sample_household.model_dump(mode="json")))
    return path
