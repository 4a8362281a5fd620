"""Household input models: people, income, accounts and equity grants."""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from fiplan.models.enums import (
    AccountType,
    Owner,
    PriceMode,
    SalePolicy,
    VestingFrequency,
)
from fiplan.models.records import Contribution, Event
from fiplan.models.scenario import Scenario


class IncomeModel(BaseModel):
    base_salary_annual: Decimal = Field(default=Decimal("0"), ge=0)
    salary_growth_rate: Decimal = Decimal("0")
    salary_growth_is_real: bool = True
    bonus_annual: Decimal | None = Field(default=None, ge=0)
    bonus_percent: Decimal | None = Field(default=None, ge=0)


class EmployerMatchModel(BaseModel):
    """Employer matches `match_rate` of employee deferrals up to `up_to_percent` of salary."""

    match_rate: Decimal = Field(ge=0)
    up_to_percent: Decimal = Field(ge=0, le=100)
    account_id: str | None = None


class PayrollModel(BaseModel):
    payroll_investing: list[Contribution] = Field(default_factory=list)
    payroll_deductions_spending: Decimal = Field(default=Decimal("0"), ge=0)
    employer_match: EmployerMatchModel | None = None


class Person(BaseModel):
    id: str
    name: str
    birth_year: int | None = None
    income: IncomeModel = Field(default_factory=IncomeModel)
    payroll: PayrollModel = Field(default_factory=PayrollModel)


class Account(BaseModel):
    id: str
    name: str
    type: AccountType
    owner: Owner = Owner.PERSON_A
    starting_balance: Decimal = Decimal("0")
    included_in_fi_assets: bool = True
    # Only read for MONEY_MARKET accounts
    apy: Decimal | None = Field(default=None, ge=0, le=Decimal("0.5"))


class PriceAssumption(BaseModel):
    mode: PriceMode = PriceMode.FIXED
    fixed_price: Decimal = Field(ge=0)
    growth_rate: Decimal | None = None

    @model_validator(mode="after")
    def _growth_needs_rate(self):
        if self.mode == PriceMode.GROWTH and self.growth_rate is None:
            raise ValueError("GROWTH price assumption requires growth_rate.")
        return self


class VestingEntry(BaseModel):
    year: int
    shares: Decimal = Field(ge=0)


class EquityGrant(BaseModel):
    id: str
    owner_person_id: str
    start_year: int
    end_year: int | None = None
    vesting_table: list[VestingEntry] = Field(default_factory=list)
    shares_per_period: Decimal | None = Field(default=None, ge=0)
    vesting_frequency: VestingFrequency = VestingFrequency.QUARTERLY
    price_assumption: PriceAssumption
    withholding_rate: Decimal | None = Field(default=None, ge=0, le=1)
    sale_policy: SalePolicy = SalePolicy.SELL_ALL
    sell_percent: Decimal | None = Field(default=None, ge=0, le=1)
    destination_account_id: str | None = None
    is_enabled: bool = True
    vesting_probability: Decimal | None = Field(default=None, ge=0, le=1)

    @model_validator(mode="after")
    def _sell_percent_required(self):
        if self.sale_policy == SalePolicy.SELL_PERCENT and self.sell_percent is None:
            raise ValueError("SELL_PERCENT sale policy requires sell_percent.")
        return self


class EmergencyFundGoal(BaseModel):
    target_amount: Decimal = Field(ge=0)
    account_id: str | None = None


class Household(BaseModel):
    id: str
    name: str
    start_year: int
    currency: str = "USD"
    people: list[Person] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    scenarios: list[Scenario] = Field(default_factory=list)
    out_of_pocket_investing: list[Contribution] = Field(default_factory=list)
    monthly_savings: list[Contribution] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    equity_grants: list[EquityGrant] = Field(default_factory=list)
    emergency_fund_goal: EmergencyFundGoal | None = None

    def account(self, account_id: str | None) -> Account | None:
        for acct in self.accounts:
            if acct.id == account_id:
                return acct
        return None

    def person(self, person_id: str | None) -> Person | None:
        for p in self.people:
            if p.id == person_id:
                return p
        return None

    def get_scenario(self, scenario_id: str | None = None) -> Scenario | None:
        """Look up a scenario by id; with no id, the first scenario."""
        if scenario_id is None:
            return self.scenarios[0] if self.scenarios else None
        for s in self.scenarios:
            if s.id == scenario_id:
                return s
        return None
