"""Tax resolver.

Payroll taxes come from one of two modes: a flat effective rate on cash
compensation, or a known take-home amount with taxes as the residual.
Withdrawal taxes use a flat rate per withdrawal bucket.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel

from fiplan.engines.constants import ZERO
from fiplan.models.enums import IssueCode, TakeHomeDefinition, WithdrawalBucket
from fiplan.models.projection import ValidationReport
from fiplan.models.scenario import EffectiveScenario

logger = logging.getLogger(__name__)


class PayrollTaxResult(BaseModel):
    taxes_payroll: Decimal
    net_to_checking: Decimal


class TaxResolver:
    """Resolves payroll taxes, net pay and withdrawal tax rates."""

    def __init__(self, scenario: EffectiveScenario, report: ValidationReport | None = None):
        self.scenario = scenario
        self.report = report if report is not None else ValidationReport()

    def payroll(
        self,
        year: int,
        cash_compensation: Decimal,
        employee_payroll: Decimal,
        payroll_deductions: Decimal,
    ) -> PayrollTaxResult:
        """Split cash compensation into payroll taxes and net pay to checking.

        Args:
            year: Projection year (for issue reporting).
            cash_compensation: Salary plus bonus, excluding equity vests.
            employee_payroll: Capped employee payroll contributions.
            payroll_deductions: Payroll-deducted spending (e.g. premiums).
        """
        s = self.scenario
        if not s.uses_take_home:
            rate = s.effective_tax_rate if s.effective_tax_rate is not None else ZERO
            taxes = cash_compensation * rate
            net = cash_compensation - taxes - employee_payroll - payroll_deductions
            return PayrollTaxResult(taxes_payroll=taxes, net_to_checking=net)

        net = self.net_to_checking(employee_payroll)
        taxes = cash_compensation - net - employee_payroll - payroll_deductions
        if taxes < 0:
            message = (
                f"Take-home pay (${net:,.0f}) plus payroll contributions and deductions "
                f"exceeds gross cash compensation (${cash_compensation:,.0f}) in {year}."
            )
            logger.warning("Payroll tax residual is negative: %s", message)
            self.report.warn(IssueCode.TAKE_HOME_EXCEEDS_GROSS, message, year=year)
        return PayrollTaxResult(taxes_payroll=taxes, net_to_checking=net)

    def net_to_checking(self, employee_payroll: Decimal) -> Decimal:
        s = self.scenario
        if s.take_home_definition == TakeHomeDefinition.OVERRIDE:
            return s.net_to_checking_override if s.net_to_checking_override is not None else ZERO
        take_home = s.take_home_annual if s.take_home_annual is not None else ZERO
        if s.take_home_definition == TakeHomeDefinition.AFTER_TAX_ONLY:
            return take_home - employee_payroll
        return take_home

    def withdrawal_rate(self, bucket: WithdrawalBucket) -> Decimal:
        if bucket == WithdrawalBucket.TAX_DEFERRED:
            return self.scenario.traditional_withdrawals_tax_rate
        if bucket == WithdrawalBucket.ROTH:
            return self.scenario.roth_withdrawals_tax_rate
        return self.scenario.taxable_withdrawals_tax_rate
