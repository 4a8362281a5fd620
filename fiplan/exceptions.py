"""Custom exceptions for fiplan."""

from decimal import Decimal

from fiplan.models.projection import ReconciliationBreakdown


class ProjectionComputationError(Exception):
    """Base exception for projection computation errors."""


class UnknownAccountError(ProjectionComputationError):
    """Raised when a contribution, event or grant references a missing account."""

    def __init__(self, account_id: str | None, context: str):
        self.account_id = account_id
        self.context = context
        super().__init__(f"Unknown account '{account_id}' referenced by {context}")


class LedgerImbalanceError(ProjectionComputationError):
    """Raised when an account's roll-forward identity does not hold."""

    def __init__(self, account_id: str, year: int, expected: Decimal, actual: Decimal):
        self.account_id = account_id
        self.year = year
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Roll-forward mismatch for account {account_id} in {year}: "
            f"expected={expected}, actual={actual}"
        )


class ReconciliationError(ProjectionComputationError):
    """Raised when a year's sources and uses of cash do not balance."""

    def __init__(self, breakdown: ReconciliationBreakdown):
        self.breakdown = breakdown
        super().__init__(
            f"Reconciliation error in {breakdown.year}: "
            f"sources={breakdown.total_sources}, uses={breakdown.total_uses}, "
            f"delta={breakdown.delta}"
        )


class HouseholdLoadError(ProjectionComputationError):
    """Raised when a household document cannot be read or decoded."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Could not load household from {source}: {message}")
