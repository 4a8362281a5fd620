"""Projection output models: year rows, milestones and validation issues."""

from decimal import Decimal

from pydantic import BaseModel, Field

from fiplan.models.enums import IssueCode, IssueSeverity, Phase


class ReconciliationBreakdown(BaseModel):
    """Sources and uses of cash for one year, attached to reconciliation errors."""

    year: int
    phase: Phase
    sources: dict[str, Decimal] = Field(default_factory=dict)
    uses: dict[str, Decimal] = Field(default_factory=dict)
    total_sources: Decimal = Decimal("0")
    total_uses: Decimal = Decimal("0")
    delta: Decimal = Decimal("0")


class ValidationIssue(BaseModel):
    code: IssueCode
    message: str
    severity: IssueSeverity
    year: int | None = None
    breakdown: ReconciliationBreakdown | None = None


class ValidationReport(BaseModel):
    """Errors, warnings and assumptions collected before and during a run.

    Issues are de-duplicated by (code, message); insertion order is kept.
    """

    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    assumptions: list[ValidationIssue] = Field(default_factory=list)

    def add(self, issue: ValidationIssue) -> None:
        bucket = self._bucket(issue.severity)
        if any(i.code == issue.code and i.message == issue.message for i in bucket):
            return
        bucket.append(issue)

    def error(self, code: IssueCode, message: str, **kwargs) -> None:
        self.add(ValidationIssue(code=code, message=message, severity=IssueSeverity.ERROR, **kwargs))

    def warn(self, code: IssueCode, message: str, **kwargs) -> None:
        self.add(ValidationIssue(code=code, message=message, severity=IssueSeverity.WARNING, **kwargs))

    def assume(self, code: IssueCode, message: str, **kwargs) -> None:
        self.add(
            ValidationIssue(code=code, message=message, severity=IssueSeverity.ASSUMPTION, **kwargs)
        )

    def all_issues(self) -> list[ValidationIssue]:
        return [*self.errors, *self.warnings, *self.assumptions]

    def codes(self) -> set[IssueCode]:
        return {i.code for i in self.all_issues()}

    @property
    def has_blocking_errors(self) -> bool:
        return bool(self.errors)

    def _bucket(self, severity: IssueSeverity) -> list[ValidationIssue]:
        if severity == IssueSeverity.ERROR:
            return self.errors
        if severity == IssueSeverity.WARNING:
            return self.warnings
        return self.assumptions


class YearRow(BaseModel):
    """One simulated year. Per-account dicts follow household account order."""

    year: int
    phase: Phase
    gross_income: Decimal = Decimal("0")
    taxes_payroll: Decimal = Decimal("0")
    taxes_additional: Decimal = Decimal("0")
    net_to_checking: Decimal = Decimal("0")
    spending: Decimal = Decimal("0")
    employee_pre_tax_contribs: Decimal = Decimal("0")
    employee_roth_contribs: Decimal = Decimal("0")
    employer_contribs: Decimal = Decimal("0")
    rsu_vest_value: Decimal = Decimal("0")
    rsu_withholding: Decimal = Decimal("0")
    rsu_net_proceeds: Decimal = Decimal("0")
    rsu_held_value: Decimal = Decimal("0")
    withdrawals_traditional: Decimal = Decimal("0")
    withdrawals_roth: Decimal = Decimal("0")
    withdrawals_taxable: Decimal = Decimal("0")
    withdrawal_taxes: Decimal = Decimal("0")
    withdrawal_shortfall: Decimal = Decimal("0")
    unallocated_surplus: Decimal = Decimal("0")
    contributions_by_account: dict[str, Decimal] = Field(default_factory=dict)
    withdrawal_by_account: dict[str, Decimal] = Field(default_factory=dict)
    growth_by_account: dict[str, Decimal] = Field(default_factory=dict)
    ending_balances: dict[str, Decimal] = Field(default_factory=dict)
    net_worth: Decimal = Decimal("0")
    invested_assets: Decimal = Decimal("0")
    reconciliation_delta: Decimal = Decimal("0")

    @property
    def total_withdrawals(self) -> Decimal:
        return self.withdrawals_traditional + self.withdrawals_roth + self.withdrawals_taxable

    @property
    def total_contributions(self) -> Decimal:
        return sum(self.contributions_by_account.values(), Decimal("0"))


class ShortfallData(BaseModel):
    portfolio_supports_per_year: Decimal
    target_spend_per_year: Decimal

    @property
    def gap_per_year(self) -> Decimal:
        return self.target_spend_per_year - self.portfolio_supports_per_year


class ProjectionResult(BaseModel):
    year_rows: list[YearRow] = Field(default_factory=list)
    fi_number: Decimal = Decimal("0")
    fi_year: int | None = None
    coast_fi_year: int | None = None
    savings_rate: Decimal = Decimal("0")
    retirement_start_year: int | None = None
    fi_not_met_at_retirement_age: bool = False
    shortfall_data: ShortfallData | None = None
    validation: ValidationReport = Field(default_factory=ValidationReport)
