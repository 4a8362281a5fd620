"""Scenario models: assumptions, tax treatment, withdrawal policy and overrides."""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from fiplan.models.enums import (
    ContributionSource,
    ContributorType,
    ModelingMode,
    RetireWhen,
    TakeHomeDefinition,
    WithdrawalBucket,
)
from fiplan.models.records import ContributionTiming, Event


class ContributionOverride(ContributionTiming):
    """Scenario-only replacement for a base contribution.

    Matches base contributions by source, person (payroll only) and account.
    """

    source: ContributionSource
    person_id: str | None = None
    account_id: str
    contributor_type: ContributorType = ContributorType.EMPLOYEE

    @model_validator(mode="after")
    def _payroll_needs_person(self):
        if self.source == ContributionSource.PAYROLL and self.person_id is None:
            raise ValueError("person_id is required when source is PAYROLL.")
        return self


class EquityGrantOverride(BaseModel):
    grant_id: str
    is_enabled: bool | None = None


class EquityPolicy(BaseModel):
    default_withholding_rate: Decimal | None = Field(default=None, ge=0, le=1)
    default_destination_account_id: str | None = None


class Scenario(BaseModel):
    id: str
    name: str
    modeling_mode: ModelingMode = ModelingMode.REAL
    nominal_return: Decimal
    inflation: Decimal
    swr: Decimal
    retirement_monthly_spend: Decimal = Field(ge=0)
    current_monthly_spend: Decimal | None = Field(default=None, ge=0)
    retirement_age_target: int = 65
    retirement_start_year: int | None = None
    retirement_target_amount: Decimal | None = Field(default=None, ge=0)
    retire_when: RetireWhen = RetireWhen.EITHER
    # Tax mode: exactly one of effective_tax_rate / take_home_annual
    effective_tax_rate: Decimal | None = Field(default=None, ge=0, le=1)
    take_home_annual: Decimal | None = None
    take_home_definition: TakeHomeDefinition = TakeHomeDefinition.NET_TO_CHECKING
    net_to_checking_override: Decimal | None = None
    salary_growth_override: Decimal | None = None
    include_employer_match: bool = False
    withdrawal_order_buckets: list[WithdrawalBucket] | None = None
    retirement_effective_tax_rate: Decimal | None = Field(default=None, ge=0, lt=1)
    traditional_withdrawals_tax_rate: Decimal | None = Field(default=None, ge=0, lt=1)
    roth_withdrawals_tax_rate: Decimal | None = Field(default=None, ge=0, lt=1)
    taxable_withdrawals_tax_rate: Decimal | None = Field(default=None, ge=0, lt=1)
    contribution_overrides: list[ContributionOverride] = Field(default_factory=list)
    event_overrides: list[Event] = Field(default_factory=list)
    equity_grant_overrides: list[EquityGrantOverride] = Field(default_factory=list)
    equity_policy: EquityPolicy | None = None
    auto_fix_overflow: bool = False
    enable_unallocated_surplus_balancing: bool | None = None
    overflow_account_id: str | None = None
    # Replaces the scenario return in the first simulated year
    stress_test_first_year_return: Decimal | None = None


class EffectiveScenario(BaseModel):
    """A Scenario with every optional field resolved to the value the engine uses."""

    scenario_id: str
    name: str
    modeling_mode: ModelingMode
    nominal_return: Decimal
    inflation: Decimal
    investment_return: Decimal
    swr: Decimal
    retirement_annual_spend: Decimal
    current_monthly_spend: Decimal
    current_annual_spend: Decimal
    retirement_age_target: int
    retirement_year: int
    retire_when: RetireWhen
    retirement_target_amount: Decimal
    effective_tax_rate: Decimal | None
    take_home_annual: Decimal | None
    take_home_definition: TakeHomeDefinition
    net_to_checking_override: Decimal | None
    salary_growth_override: Decimal | None
    include_employer_match: bool
    withdrawal_order_buckets: list[WithdrawalBucket]
    traditional_withdrawals_tax_rate: Decimal
    roth_withdrawals_tax_rate: Decimal
    taxable_withdrawals_tax_rate: Decimal
    default_withholding_rate: Decimal
    default_destination_account_id: str | None
    auto_fix_overflow: bool
    enable_unallocated_surplus_balancing: bool
    overflow_account_id: str | None
    stress_test_first_year_return: Decimal | None = None

    @property
    def is_real(self) -> bool:
        return self.modeling_mode == ModelingMode.REAL

    @property
    def uses_take_home(self) -> bool:
        return self.take_home_annual is not None or (
            self.take_home_definition == TakeHomeDefinition.OVERRIDE
        )
