"""Tests for payroll and withdrawal tax resolution."""

from decimal import Decimal

from fiplan.engines.effective import ScenarioResolver
from fiplan.engines.taxes import TaxResolver
from fiplan.models.enums import IssueCode, TakeHomeDefinition, WithdrawalBucket
from fiplan.models.household import Household
from fiplan.models.scenario import Scenario

CASH = Decimal("200000")
EMPLOYEE_PAYROLL = Decimal("20000")
DEDUCTIONS = Decimal("5000")


def _resolver(scenario: Scenario) -> TaxResolver:
    household = Household(id="h", name="h", start_year=2025)
    return TaxResolver(ScenarioResolver(household).resolve(scenario))


def _scenario(**overrides) -> Scenario:
    fields = {
        "id": "s",
        "name": "s",
        "nominal_return": Decimal("0.05"),
        "inflation": Decimal("0.02"),
        "swr": Decimal("0.04"),
        "retirement_monthly_spend": Decimal("8000"),
    }
    fields.update(overrides)
    return Scenario(**fields)


class TestPayrollTaxes:
    def test_effective_rate_mode(self):
        taxes = _resolver(_scenario(effective_tax_rate=Decimal("0.25")))
        result = taxes.payroll(2025, CASH, EMPLOYEE_PAYROLL, DEDUCTIONS)
        assert result.taxes_payroll == Decimal("50000")
        assert result.net_to_checking == Decimal("125000")

    def test_take_home_net_to_checking(self):
        taxes = _resolver(_scenario(take_home_annual=Decimal("120000")))
        result = taxes.payroll(2025, CASH, EMPLOYEE_PAYROLL, DEDUCTIONS)
        assert result.net_to_checking == Decimal("120000")
        assert result.taxes_payroll == Decimal("55000")

    def test_take_home_after_tax_only(self):
        taxes = _resolver(
            _scenario(
                take_home_annual=Decimal("150000"),
                take_home_definition=TakeHomeDefinition.AFTER_TAX_ONLY,
            )
        )
        result = taxes.payroll(2025, CASH, EMPLOYEE_PAYROLL, DEDUCTIONS)
        assert result.net_to_checking == Decimal("130000")
        assert result.taxes_payroll == Decimal("45000")

    def test_take_home_override(self):
        taxes = _resolver(
            _scenario(
                take_home_definition=TakeHomeDefinition.OVERRIDE,
                net_to_checking_override=Decimal("100000"),
            )
        )
        result = taxes.payroll(2025, CASH, EMPLOYEE_PAYROLL, DEDUCTIONS)
        assert result.net_to_checking == Decimal("100000")
        assert result.taxes_payroll == Decimal("75000")

    def test_take_home_above_gross_warns(self):
        taxes = _resolver(_scenario(take_home_annual=Decimal("190000")))
        result = taxes.payroll(2025, CASH, EMPLOYEE_PAYROLL, DEDUCTIONS)
        assert result.taxes_payroll == Decimal("-15000")
        assert IssueCode.TAKE_HOME_EXCEEDS_GROSS in taxes.report.codes()


class TestWithdrawalTaxes:
    def test_rates_by_bucket(self):
        taxes = _resolver(
            _scenario(
                effective_tax_rate=Decimal("0.25"),
                traditional_withdrawals_tax_rate=Decimal("0.22"),
                roth_withdrawals_tax_rate=Decimal("0"),
                taxable_withdrawals_tax_rate=Decimal("0.15"),
            )
        )
        assert taxes.withdrawal_rate(WithdrawalBucket.TAX_DEFERRED) == Decimal("0.22")
        assert taxes.withdrawal_rate(WithdrawalBucket.ROTH) == Decimal("0")
        assert taxes.withdrawal_rate(WithdrawalBucket.TAXABLE) == Decimal("0.15")

    def test_defaults(self):
        taxes = _resolver(
            _scenario(
                effective_tax_rate=Decimal("0.25"),
                retirement_effective_tax_rate=Decimal("0.18"),
            )
        )
        assert taxes.withdrawal_rate(WithdrawalBucket.TAX_DEFERRED) == Decimal("0.18")
        assert taxes.withdrawal_rate(WithdrawalBucket.ROTH) == Decimal("0")
        assert taxes.withdrawal_rate(WithdrawalBucket.TAXABLE) == Decimal("0.05")
