"""Tests for the cash-flow reconciler."""

from decimal import Decimal

import pytest

from fiplan.engines.effective import ScenarioResolver
from fiplan.engines.ledger import AccountLedger
from fiplan.engines.reconciliation import CashFlowReconciler, within_tolerance
from fiplan.exceptions import ReconciliationError
from fiplan.models.enums import IssueCode, Phase
from fiplan.models.household import Household
from fiplan.models.projection import YearRow
from fiplan.models.scenario import Scenario


class TestWithinTolerance:
    def test_scaled_tolerance(self):
        assert within_tolerance(Decimal("0.5"), Decimal("1000000"))
        assert not within_tolerance(Decimal("2"), Decimal("1000000"))

    def test_minimum_scale_of_one(self):
        assert within_tolerance(Decimal("0.000001"), Decimal("0"))
        assert not within_tolerance(Decimal("0.01"), Decimal("0"))


class TestPostLeftover:
    def _reconciler(self, household: Household, scenario: Scenario):
        effective = ScenarioResolver(household).resolve(scenario)
        ledger = AccountLedger(household.accounts, effective)
        ledger.open_year(2025)
        return CashFlowReconciler(effective), ledger

    def test_leftover_becomes_surplus(self, sample_household: Household, flat_scenario: Scenario):
        reconciler, ledger = self._reconciler(sample_household, flat_scenario)
        surplus = reconciler.post_leftover(2025, Decimal("5000"), Decimal("200000"), ledger)
        assert surplus == Decimal("5000")
        assert reconciler.report.warnings == []

    def test_rounding_noise_ignored(self, sample_household: Household, flat_scenario: Scenario):
        reconciler, ledger = self._reconciler(sample_household, flat_scenario)
        surplus = reconciler.post_leftover(2025, Decimal("0.0001"), Decimal("200000"), ledger)
        assert surplus == Decimal("0")

    def test_deficit_warns(self, sample_household: Household, flat_scenario: Scenario):
        reconciler, ledger = self._reconciler(sample_household, flat_scenario)
        surplus = reconciler.post_leftover(2025, Decimal("-2500"), Decimal("200000"), ledger)
        assert surplus == Decimal("-2500")
        assert reconciler.report.warnings[0].code == IssueCode.CASHFLOW_DEFICIT
        assert "$2,500" in reconciler.report.warnings[0].message

    def test_overflow_routing(self, sample_household: Household, flat_scenario: Scenario):
        flat_scenario.auto_fix_overflow = True
        reconciler, ledger = self._reconciler(sample_household, flat_scenario)
        surplus = reconciler.post_leftover(2025, Decimal("5000"), Decimal("200000"), ledger)
        assert surplus == Decimal("0")
        assert ledger.contributions["brokerage"] == Decimal("5000")
        assert reconciler.report.warnings[0].code == IssueCode.AUTO_OVERFLOW_ROUTED

    def test_overflow_never_takes_deficits(
        self, sample_household: Household, flat_scenario: Scenario
    ):
        flat_scenario.auto_fix_overflow = True
        reconciler, ledger = self._reconciler(sample_household, flat_scenario)
        surplus = reconciler.post_leftover(2025, Decimal("-100"), Decimal("200000"), ledger)
        assert surplus == Decimal("-100")
        assert ledger.contributions["brokerage"] == Decimal("0")

    def test_balancing_disabled(self, sample_household: Household, flat_scenario: Scenario):
        flat_scenario.enable_unallocated_surplus_balancing = False
        reconciler, ledger = self._reconciler(sample_household, flat_scenario)
        surplus = reconciler.post_leftover(2025, Decimal("5000"), Decimal("200000"), ledger)
        assert surplus == Decimal("0")


class TestVerify:
    def setup_method(self):
        self.row = YearRow(
            year=2025,
            phase=Phase.ACCUMULATION,
            gross_income=Decimal("200000"),
            taxes_payroll=Decimal("50000"),
            spending=Decimal("72000"),
            contributions_by_account={"k401": Decimal("23500")},
            unallocated_surplus=Decimal("54500"),
        )

    def test_balanced_row(self, base_scenario: Scenario, sample_household: Household):
        effective = ScenarioResolver(sample_household).resolve(base_scenario)
        breakdown = CashFlowReconciler(effective).verify(self.row, Decimal("0"))
        assert breakdown.total_sources == Decimal("200000")
        assert breakdown.total_uses == Decimal("200000")
        assert breakdown.delta == Decimal("0")

    def test_checking_inflows_count_as_sources(
        self, base_scenario: Scenario, sample_household: Household
    ):
        self.row.unallocated_surplus = Decimal("64500")
        effective = ScenarioResolver(sample_household).resolve(base_scenario)
        breakdown = CashFlowReconciler(effective).verify(self.row, Decimal("10000"))
        assert breakdown.sources["checking_inflows"] == Decimal("10000")
        assert breakdown.delta == Decimal("0")

    def test_imbalance_raises_with_breakdown(
        self, base_scenario: Scenario, sample_household: Household
    ):
        self.row.unallocated_surplus = Decimal("0")
        effective = ScenarioResolver(sample_household).resolve(base_scenario)
        with pytest.raises(ReconciliationError) as exc_info:
            CashFlowReconciler(effective).verify(self.row, Decimal("0"))
        breakdown = exc_info.value.breakdown
        assert breakdown.delta == Decimal("54500")
        assert breakdown.uses["spending"] == Decimal("72000")
