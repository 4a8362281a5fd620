"""Data models for fiplan."""

from fiplan.models.enums import (
    AccountType,
    ContributionSource,
    ContributorType,
    EventKind,
    IssueCode,
    IssueSeverity,
    LimitClass,
    ModelingMode,
    Owner,
    Phase,
    PriceMode,
    RetireWhen,
    SalePolicy,
    TakeHomeDefinition,
    VestingFrequency,
    WithdrawalBucket,
)
from fiplan.models.household import (
    Account,
    EmergencyFundGoal,
    EmployerMatchModel,
    EquityGrant,
    Household,
    IncomeModel,
    PayrollModel,
    Person,
    PriceAssumption,
    VestingEntry,
)
from fiplan.models.projection import (
    ProjectionResult,
    ReconciliationBreakdown,
    ShortfallData,
    ValidationIssue,
    ValidationReport,
    YearRow,
)
from fiplan.models.records import Contribution, ContributionTiming, Event
from fiplan.models.scenario import (
    ContributionOverride,
    EffectiveScenario,
    EquityGrantOverride,
    EquityPolicy,
    Scenario,
)

__all__ = [
    "Account",
    "AccountType",
    "Contribution",
    "ContributionOverride",
    "ContributionSource",
    "ContributionTiming",
    "ContributorType",
    "EffectiveScenario",
    "EmergencyFundGoal",
    "EmployerMatchModel",
    "EquityGrant",
    "EquityGrantOverride",
    "EquityPolicy",
    "Event",
    "EventKind",
    "Household",
    "IncomeModel",
    "IssueCode",
    "IssueSeverity",
    "LimitClass",
    "ModelingMode",
    "Owner",
    "PayrollModel",
    "Person",
    "Phase",
    "PriceAssumption",
    "PriceMode",
    "ProjectionResult",
    "ReconciliationBreakdown",
    "RetireWhen",
    "SalePolicy",
    "Scenario",
    "ShortfallData",
    "TakeHomeDefinition",
    "ValidationIssue",
    "ValidationReport",
    "VestingEntry",
    "VestingFrequency",
    "WithdrawalBucket",
    "YearRow",
]
