"""Projection engine configuration.

Contribution limits, account taxonomy, engine defaults and validation guardrails.
Keyed by plan year where the value changes over time. Never hardcode these in
computation functions.

Sources:
  - 2024: IRS Notice 2023-75, Rev. Proc. 2023-23 (HSA)
  - 2025: IRS Notice 2024-80, Rev. Proc. 2024-25 (HSA)
  - 2026: IRS Notice 2025-67, Rev. Proc. 2025-19 (HSA)
  - 2027: placeholder, repeats 2026 until published
"""

from decimal import Decimal

from fiplan.models.enums import AccountType, LimitClass, VestingFrequency, WithdrawalBucket

# ---------------------------------------------------------------------------
# Annual contribution limits: {year: Decimal}
# Years outside the table clamp to the nearest known year.
# ---------------------------------------------------------------------------
EMPLOYEE_DEFERRAL_LIMIT: dict[int, Decimal] = {
    2024: Decimal("23000"),
    2025: Decimal("23500"),
    2026: Decimal("24500"),
    2027: Decimal("24500"),
}

# Employee + employer additions to a defined-contribution plan (IRC 415(c))
COMBINED_401K_LIMIT: dict[int, Decimal] = {
    2024: Decimal("69000"),
    2025: Decimal("70000"),
    2026: Decimal("72000"),
    2027: Decimal("72000"),
}

IRA_LIMIT: dict[int, Decimal] = {
    2024: Decimal("7000"),
    2025: Decimal("7000"),
    2026: Decimal("7500"),
    2027: Decimal("7500"),
}

HSA_FAMILY_LIMIT: dict[int, Decimal] = {
    2024: Decimal("8300"),
    2025: Decimal("8550"),
    2026: Decimal("8750"),
    2027: Decimal("8750"),
}

# ---------------------------------------------------------------------------
# Account taxonomy
# ---------------------------------------------------------------------------
LIMIT_CLASS: dict[AccountType, LimitClass] = {
    AccountType.CASH: LimitClass.NONE,
    AccountType.TAXABLE: LimitClass.NONE,
    AccountType.MONEY_MARKET: LimitClass.NONE,
    AccountType.EQUITY: LimitClass.NONE,
    AccountType.TRADITIONAL_401K: LimitClass.PLAN_401K,
    AccountType.ROTH_401K: LimitClass.PLAN_401K,
    AccountType.PLAN_403B: LimitClass.PLAN_401K,
    AccountType.TRADITIONAL_IRA: LimitClass.IRA,
    AccountType.ROTH_IRA: LimitClass.IRA,
    AccountType.HSA: LimitClass.HSA,
}

WITHDRAWAL_BUCKET: dict[AccountType, WithdrawalBucket] = {
    AccountType.CASH: WithdrawalBucket.TAXABLE,
    AccountType.TAXABLE: WithdrawalBucket.TAXABLE,
    AccountType.MONEY_MARKET: WithdrawalBucket.TAXABLE,
    AccountType.EQUITY: WithdrawalBucket.TAXABLE,
    AccountType.TRADITIONAL_401K: WithdrawalBucket.TAX_DEFERRED,
    AccountType.PLAN_403B: WithdrawalBucket.TAX_DEFERRED,
    AccountType.TRADITIONAL_IRA: WithdrawalBucket.TAX_DEFERRED,
    AccountType.HSA: WithdrawalBucket.TAX_DEFERRED,
    AccountType.ROTH_401K: WithdrawalBucket.ROTH,
    AccountType.ROTH_IRA: WithdrawalBucket.ROTH,
}

# Pre-tax employee deferrals (the rest of the employee 401k/IRA lines are Roth)
PRE_TAX_ACCOUNT_TYPES = frozenset({
    AccountType.TRADITIONAL_401K,
    AccountType.PLAN_403B,
    AccountType.TRADITIONAL_IRA,
    AccountType.HSA,
})

ROTH_ACCOUNT_TYPES = frozenset({AccountType.ROTH_401K, AccountType.ROTH_IRA})

# Age (of the oldest person) at which withdrawals are penalty-free
PENALTY_FREE_AGE: dict[AccountType, int] = {
    AccountType.TRADITIONAL_401K: 60,
    AccountType.PLAN_403B: 60,
    AccountType.TRADITIONAL_IRA: 60,
    AccountType.HSA: 65,
}

DEFAULT_WITHDRAWAL_ORDER: list[WithdrawalBucket] = [
    WithdrawalBucket.TAXABLE,
    WithdrawalBucket.TAX_DEFERRED,
    WithdrawalBucket.ROTH,
]

# ---------------------------------------------------------------------------
# Engine defaults
# ---------------------------------------------------------------------------
DEFAULT_HORIZON_YEARS = 50
DEFAULT_CURRENT_MONTHLY_SPEND = Decimal("6353")
DEFAULT_RSU_WITHHOLDING_RATE = Decimal("0.30")
DEFAULT_TAXABLE_WITHDRAWAL_TAX_RATE = Decimal("0.05")
DEFAULT_RETIREMENT_OFFSET_YEARS = 30
DEFAULT_VESTING_YEARS = 3

VESTING_PERIODS_PER_YEAR: dict[VestingFrequency, int] = {
    VestingFrequency.ANNUAL: 1,
    VestingFrequency.SEMI_ANNUAL: 2,
    VestingFrequency.QUARTERLY: 4,
    VestingFrequency.MONTHLY: 12,
}

# Reconciliation tolerance: |delta| <= RECONCILIATION_TOLERANCE * max(1, scale)
RECONCILIATION_TOLERANCE = Decimal("0.000001")

# ---------------------------------------------------------------------------
# Validation guardrails
# ---------------------------------------------------------------------------
MAX_SWR = Decimal("0.10")
MIN_RATE = Decimal("-0.50")
MAX_RATE = Decimal("0.50")
AGGRESSIVE_RETURN_THRESHOLD = Decimal("0.07")
PESSIMISTIC_RETURN_THRESHOLD = Decimal("0")

ZERO = Decimal("0")
ONE = Decimal("1")
