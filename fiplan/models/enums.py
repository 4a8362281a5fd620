"""Enumerations for the fiplan projection engine."""

from enum import StrEnum


class AccountType(StrEnum):
    CASH = "CASH"
    TAXABLE = "TAXABLE"
    MONEY_MARKET = "MONEY_MARKET"
    EQUITY = "EQUITY"
    TRADITIONAL_401K = "TRADITIONAL_401K"
    ROTH_401K = "ROTH_401K"
    PLAN_403B = "403B"
    TRADITIONAL_IRA = "TRADITIONAL_IRA"
    ROTH_IRA = "ROTH_IRA"
    HSA = "HSA"


class Owner(StrEnum):
    PERSON_A = "PERSON_A"
    PERSON_B = "PERSON_B"
    JOINT = "JOINT"


class ContributorType(StrEnum):
    EMPLOYEE = "EMPLOYEE"
    EMPLOYER = "EMPLOYER"


class ContributionSource(StrEnum):
    PAYROLL = "PAYROLL"
    OUT_OF_POCKET = "OUT_OF_POCKET"
    MONTHLY_SAVINGS = "MONTHLY_SAVINGS"


class EventKind(StrEnum):
    INFLOW = "INFLOW"
    OUTFLOW = "OUTFLOW"
    INVEST = "INVEST"
    WITHDRAW = "WITHDRAW"
    TRANSFER = "TRANSFER"


class PriceMode(StrEnum):
    FIXED = "FIXED"
    GROWTH = "GROWTH"


class VestingFrequency(StrEnum):
    ANNUAL = "ANNUAL"
    SEMI_ANNUAL = "SEMI_ANNUAL"
    QUARTERLY = "QUARTERLY"
    MONTHLY = "MONTHLY"


class SalePolicy(StrEnum):
    SELL_ALL = "SELL_ALL"
    SELL_PERCENT = "SELL_PERCENT"
    HOLD = "HOLD"


class ModelingMode(StrEnum):
    REAL = "REAL"
    NOMINAL = "NOMINAL"


class TakeHomeDefinition(StrEnum):
    NET_TO_CHECKING = "NET_TO_CHECKING"
    AFTER_TAX_ONLY = "AFTER_TAX_ONLY"
    OVERRIDE = "OVERRIDE"


class RetireWhen(StrEnum):
    EITHER = "EITHER"
    AGE = "AGE"
    FI = "FI"
    TARGET_AMOUNT = "TARGET_AMOUNT"


class WithdrawalBucket(StrEnum):
    TAXABLE = "TAXABLE"
    TAX_DEFERRED = "TAX_DEFERRED"
    ROTH = "ROTH"


class LimitClass(StrEnum):
    PLAN_401K = "PLAN_401K"
    IRA = "IRA"
    HSA = "HSA"
    NONE = "NONE"


class Phase(StrEnum):
    ACCUMULATION = "ACCUMULATION"
    WITHDRAWAL = "WITHDRAWAL"


class IssueSeverity(StrEnum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    ASSUMPTION = "ASSUMPTION"


class IssueCode(StrEnum):
    # Structural (pre-run) errors
    MISSING_ACCOUNT_REF = "MISSING_ACCOUNT_REF"
    MISSING_PERSON_REF = "MISSING_PERSON_REF"
    MISSING_EMPLOYER_MATCH_ACCOUNT = "MISSING_EMPLOYER_MATCH_ACCOUNT"
    INVALID_SWR = "INVALID_SWR"
    INVALID_RATES = "INVALID_RATES"
    NEGATIVE_BALANCE = "NEGATIVE_BALANCE"
    TAX_MODE_CONFLICT = "TAX_MODE_CONFLICT"
    INPUT_DEFINITION_CONFLICT = "INPUT_DEFINITION_CONFLICT"
    # Runtime errors
    CASHFLOW_RECONCILIATION_BREAKDOWN = "CASHFLOW_RECONCILIATION_BREAKDOWN"
    ACCOUNT_ROLLFORWARD_MISMATCH = "ACCOUNT_ROLLFORWARD_MISMATCH"
    # Warnings
    AGGRESSIVE_RETURNS = "AGGRESSIVE_RETURNS"
    PESSIMISTIC_RETURNS = "PESSIMISTIC_RETURNS"
    RETIREMENT_SPEND_LT_CURRENT = "RETIREMENT_SPEND_LT_CURRENT"
    FI_ASSETS_EXCLUSION = "FI_ASSETS_EXCLUSION"
    EMPLOYER_MATCH_DISABLED_BUT_PRESENT = "EMPLOYER_MATCH_DISABLED_BUT_PRESENT"
    EQUITY_EMPTY_VESTING = "EQUITY_EMPTY_VESTING"
    EQUITY_VESTED_BEFORE_START = "EQUITY_VESTED_BEFORE_START"
    CASHFLOW_DEFICIT = "CASHFLOW_DEFICIT"
    EVENT_OVERDRAFT = "EVENT_OVERDRAFT"
    CONTRIBUTION_CAPPED_AT_LIMIT = "CONTRIBUTION_CAPPED_AT_LIMIT"
    TAKE_HOME_EXCEEDS_GROSS = "TAKE_HOME_EXCEEDS_GROSS"
    RETIREMENT_TAX_ZERO = "RETIREMENT_TAX_ZERO"
    WITHDRAWAL_SHORTFALL = "WITHDRAWAL_SHORTFALL"
    AUTO_OVERFLOW_ROUTED = "AUTO_OVERFLOW_ROUTED"
    FI_NOT_MET_AT_RETIREMENT_AGE = "FI_NOT_MET_AT_RETIREMENT_AGE"
    # Assumptions
    CURRENT_SPEND_DEFAULTED = "CURRENT_SPEND_DEFAULTED"
    WITHDRAWAL_ORDER_DEFAULTED = "WITHDRAWAL_ORDER_DEFAULTED"
    TRADITIONAL_TAX_RATE_DEFAULTED = "TRADITIONAL_TAX_RATE_DEFAULTED"
    ROTH_TAX_RATE_DEFAULTED = "ROTH_TAX_RATE_DEFAULTED"
    TAXABLE_TAX_RATE_DEFAULTED = "TAXABLE_TAX_RATE_DEFAULTED"
    RETIREMENT_YEAR_DEFAULTED = "RETIREMENT_YEAR_DEFAULTED"
    RETIREMENT_TARGET_DEFAULTED = "RETIREMENT_TARGET_DEFAULTED"
    RSU_WITHHOLDING_DEFAULTED = "RSU_WITHHOLDING_DEFAULTED"
    SURPLUS_BALANCING_DEFAULTED = "SURPLUS_BALANCING_DEFAULTED"
    OVERFLOW_ACCOUNT_DEFAULTED = "OVERFLOW_ACCOUNT_DEFAULTED"
    MONEY_MARKET_RATE_DEFAULTED = "MONEY_MARKET_RATE_DEFAULTED"
