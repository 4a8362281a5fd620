"""Contribution and event records shared by households and scenario overrides."""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from fiplan.models.enums import ContributorType, EventKind


class ContributionTiming(BaseModel):
    """Amount and active window shared by contributions and their overrides."""

    amount_annual: Decimal | None = Field(default=None, ge=0)
    amount_monthly: Decimal | None = Field(default=None, ge=0)
    percent_of_income: Decimal | None = Field(default=None, ge=0, le=100)
    start_year: int | None = None
    end_year: int | None = None
    start_month: int | None = Field(default=None, ge=1, le=12)
    end_month: int | None = Field(default=None, ge=1, le=12)

    @model_validator(mode="after")
    def _exactly_one_amount(self):
        provided = [
            v for v in (self.amount_annual, self.amount_monthly, self.percent_of_income)
            if v is not None
        ]
        if len(provided) != 1:
            raise ValueError(
                "Use exactly one of amount_annual, amount_monthly or percent_of_income."
            )
        return self

    @property
    def is_percent(self) -> bool:
        return self.percent_of_income is not None


class Contribution(ContributionTiming):
    account_id: str
    contributor_type: ContributorType = ContributorType.EMPLOYEE


class Event(BaseModel):
    """One-time money movement in a given year.

    INFLOW without an account is a windfall into checking; every other kind
    needs `account_id`, and TRANSFER also needs `to_account_id`.
    """

    id: str
    name: str
    year: int
    amount: Decimal = Field(ge=0)
    kind: EventKind
    account_id: str | None = None
    to_account_id: str | None = None
    notes: str | None = None
