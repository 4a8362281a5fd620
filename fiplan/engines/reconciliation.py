"""Per-year cash-flow reconciliation.

Every dollar that enters the household's checking account in a year must
leave it again as a tax, spending, a contribution, equity kept outside the
plan, or unallocated surplus:

    sources = gross income + employer contributions + withdrawals
              + checking inflows + withdrawal shortfall
    uses    = payroll taxes + RSU withholding + withdrawal taxes + spending
              + contributions + RSU held value + unallocated surplus
"""

import logging
from decimal import Decimal

from fiplan.engines.constants import ONE, RECONCILIATION_TOLERANCE, ZERO
from fiplan.engines.ledger import AccountLedger
from fiplan.exceptions import ReconciliationError
from fiplan.models.enums import IssueCode
from fiplan.models.projection import ReconciliationBreakdown, ValidationReport, YearRow
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)


def within_tolerance(delta: Decimal, scale: Decimal) -> bool:
    return abs(delta) <= RECONCILIATION_TOLERANCE * max(ONE, abs(scale))


class CashFlowReconciler:
    """Posts leftover checking cash and verifies the sources/uses identity."""

    def __init__(self, scenario: EffectiveScenario, report: ValidationReport | None = None):
        self.scenario = scenario
        self.report = report if report is not None else ValidationReport()

    def post_leftover(self, year: int, leftover: Decimal, scale: Decimal, ledger: AccountLedger) -> Decimal:
        """Decide where leftover checking cash goes. Returns the unallocated surplus.

        Positive leftover is routed to the overflow account when auto-fix is
        on; otherwise, with balancing enabled, it becomes surplus (negative
        leftover becomes a deficit). With neither, nothing is posted and the
        gap surfaces in `verify`.
        """
        s = self.scenario
        if within_tolerance(leftover, scale):
            return ZERO

        if leftover > 0 and s.auto_fix_overflow and s.overflow_account_id is not None:
            ledger.contribute(s.overflow_account_id, leftover)
            message = f"Routed ${leftover:,.0f} of leftover cash to the overflow account in {year}."
            logger.info("Overflow routing: %s", message)
            self.report.warn(IssueCode.AUTO_OVERFLOW_ROUTED, message, year=year)
            return ZERO

        if not s.enable_unallocated_surplus_balancing:
            return ZERO

        if leftover < 0:
            message = f"Spending, taxes and contributions exceed available cash by ${-leftover:,.0f} in {year}."
            logger.warning("Cash-flow deficit: %s", message)
            self.report.warn(IssueCode.CASHFLOW_DEFICIT, message, year=year)
        return leftover

    @staticmethod
    def breakdown(row: YearRow, checking_inflows: Decimal) -> ReconciliationBreakdown:
        sources = {
            "gross_income": row.gross_income,
            "employer_contribs": row.employer_contribs,
            "withdrawals": row.total_withdrawals,
            "checking_inflows": checking_inflows,
            "withdrawal_shortfall": row.withdrawal_shortfall,
        }
        uses = {
            "taxes_payroll": row.taxes_payroll,
            "rsu_withholding": row.rsu_withholding,
            "taxes_additional": row.taxes_additional,
            "spending": row.spending,
            "contributions": row.total_contributions,
            "rsu_held_value": row.rsu_held_value,
            "unallocated_surplus": row.unallocated_surplus,
        }
        total_sources = sum(sources.values(), ZERO)
        total_uses = sum(uses.values(), ZERO)
        return ReconciliationBreakdown(
            year=row.year,
            phase=row.phase,
            sources=sources,
            uses=uses,
            total_sources=total_sources,
            total_uses=total_uses,
            delta=total_sources - total_uses,
        )

    def verify(self, row: YearRow, checking_inflows: Decimal) -> ReconciliationBreakdown:
        """Check the identity for one row; raises ReconciliationError when it fails."""
        result = self.breakdown(row, checking_inflows)
        scale = max(result.total_sources, result.total_uses)
        if not within_tolerance(result.delta, scale):
            raise ReconciliationError(result)
        return result
