"""Tests for the contribution limit resolver."""

from decimal import Decimal

from fiplan.engines.constants import EMPLOYEE_DEFERRAL_LIMIT
from fiplan.engines.income import ContributionLine
from fiplan.engines.limits import (
    ContributionLimitResolver,
    get_contribution_limit,
    limit_for_year,
)
from fiplan.models.enums import (
    AccountType,
    ContributionSource,
    ContributorType,
    IssueCode,
    Owner,
)
from fiplan.models.household import Household, Person


def _line(
    account_type: AccountType,
    amount: str,
    person_id: str | None = "p1",
    contributor_type: ContributorType = ContributorType.EMPLOYEE,
    owner: Owner = Owner.PERSON_A,
    account_id: str = "acct",
) -> ContributionLine:
    return ContributionLine(
        source=ContributionSource.PAYROLL if person_id else ContributionSource.OUT_OF_POCKET,
        person_id=person_id,
        account_id=account_id,
        account_type=account_type,
        owner=owner,
        contributor_type=contributor_type,
        amount=Decimal(amount),
    )


class TestLimitTables:
    def test_clamps_to_nearest_year(self):
        assert limit_for_year(EMPLOYEE_DEFERRAL_LIMIT, 2023) == Decimal("23000")
        assert limit_for_year(EMPLOYEE_DEFERRAL_LIMIT, 2030) == Decimal("24500")

    def test_limits_by_account_type(self):
        assert get_contribution_limit(AccountType.TRADITIONAL_401K, 2025) == Decimal("23500")
        assert get_contribution_limit(AccountType.PLAN_403B, 2025) == Decimal("23500")
        assert get_contribution_limit(AccountType.ROTH_IRA, 2026) == Decimal("7500")
        assert get_contribution_limit(AccountType.HSA, 2024) == Decimal("8300")

    def test_unlimited_accounts(self):
        assert get_contribution_limit(AccountType.TAXABLE, 2025) is None
        assert get_contribution_limit(AccountType.CASH, 2025) is None


class TestCapContributions:
    def setup_method(self):
        self.resolver = ContributionLimitResolver()

    def test_employee_deferral_capped(self, sample_household: Household):
        lines = [_line(AccountType.TRADITIONAL_401K, "30000")]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("23500")
        assert IssueCode.CONTRIBUTION_CAPPED_AT_LIMIT in self.resolver.report.codes()
        message = self.resolver.report.warnings[0].message
        assert "Alex" in message
        assert "$23,500" in message

    def test_input_lines_untouched(self, sample_household: Household):
        lines = [_line(AccountType.TRADITIONAL_401K, "30000")]
        self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert lines[0].amount == Decimal("30000")

    def test_under_limit_unchanged(self, sample_household: Household):
        lines = [_line(AccountType.TRADITIONAL_401K, "10000")]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("10000")
        assert self.resolver.report.warnings == []

    def test_traditional_and_roth_share_the_deferral_limit(self, sample_household: Household):
        lines = [
            _line(AccountType.TRADITIONAL_401K, "20000", account_id="k401"),
            _line(AccountType.ROTH_401K, "20000", account_id="roth401"),
        ]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("11750")
        assert capped[1].amount == Decimal("11750")

    def test_employer_additions_reduce_employee_room(self, sample_household: Household):
        lines = [
            _line(AccountType.TRADITIONAL_401K, "60000", contributor_type=ContributorType.EMPLOYER),
            _line(AccountType.TRADITIONAL_401K, "23500"),
        ]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("60000")
        assert capped[1].amount == Decimal("10000")

    def test_ira_lines_scaled_proportionally(self, sample_household: Household):
        lines = [
            _line(AccountType.ROTH_IRA, "5000", person_id=None, account_id="roth"),
            _line(AccountType.TRADITIONAL_IRA, "5000", person_id=None, account_id="ira"),
        ]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert [c.amount for c in capped] == [Decimal("3500"), Decimal("3500")]

    def test_taxable_never_capped(self, sample_household: Household):
        lines = [_line(AccountType.TAXABLE, "500000", person_id=None)]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("500000")

    def test_joint_account_splits_across_people(self, sample_household: Household):
        sample_household.people.append(Person(id="p2", name="Sam"))
        lines = [_line(AccountType.HSA, "12000", person_id=None, owner=Owner.JOINT)]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("12000")

    def test_single_owner_account_capped(self, sample_household: Household):
        sample_household.people.append(Person(id="p2", name="Sam"))
        lines = [_line(AccountType.HSA, "12000", person_id=None, owner=Owner.PERSON_B)]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert capped[0].amount == Decimal("8550")
        assert "Sam" in self.resolver.report.warnings[0].message

    def test_limits_are_per_person(self, sample_household: Household):
        sample_household.people.append(Person(id="p2", name="Sam"))
        lines = [
            _line(AccountType.TRADITIONAL_401K, "23500", person_id="p1"),
            _line(AccountType.TRADITIONAL_401K, "23500", person_id="p2"),
        ]
        capped = self.resolver.cap_contributions_at_irs_limits(sample_household, 2025, lines)
        assert [c.amount for c in capped] == [Decimal("23500"), Decimal("23500")]
