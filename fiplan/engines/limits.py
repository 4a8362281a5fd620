"""Contribution limit resolver.

Holds 401(k)/403(b), IRA and HSA contributions to the annual IRS limits,
per person. Over-limit contributions are scaled down proportionally.

Per IRC 402(g) (elective deferrals), 415(c) (annual additions),
219(b) (IRA) and 223(b) (HSA).
"""

import logging
from decimal import Decimal

from fiplan.engines.constants import (
    COMBINED_401K_LIMIT,
    EMPLOYEE_DEFERRAL_LIMIT,
    HSA_FAMILY_LIMIT,
    IRA_LIMIT,
    LIMIT_CLASS,
    ZERO,
)
from fiplan.engines.income import ContributionLine
from fiplan.models.enums import AccountType, IssueCode, LimitClass, Owner
from fiplan.models.household import Household
from fiplan.models.projection import ValidationReport

logger = logging.getLogger(__name__)

HOUSEHOLD_KEY = "__household__"

# Buckets tracked per person
EMPLOYER_401K = "employer_401k"
EMPLOYEE_401K = "employee_401k"
IRA = "ira"
HSA = "hsa"


def limit_for_year(table: dict[int, Decimal], year: int) -> Decimal:
    """Look up a limit, clamping years outside the table to the nearest known year."""
    years = sorted(table)
    return table[min(max(year, years[0]), years[-1])]


def get_contribution_limit(account_type: AccountType, year: int) -> Decimal | None:
    """Annual employee limit for an account type, or None when it has no limit."""
    limit_class = LIMIT_CLASS[account_type]
    if limit_class == LimitClass.PLAN_401K:
        return limit_for_year(EMPLOYEE_DEFERRAL_LIMIT, year)
    if limit_class == LimitClass.IRA:
        return limit_for_year(IRA_LIMIT, year)
    if limit_class == LimitClass.HSA:
        return limit_for_year(HSA_FAMILY_LIMIT, year)
    return None


def _bucket(line: ContributionLine) -> str | None:
    if line.limit_class == LimitClass.PLAN_401K:
        return EMPLOYER_401K if line.is_employer else EMPLOYEE_401K
    if line.limit_class == LimitClass.IRA:
        return IRA
    if line.limit_class == LimitClass.HSA:
        return HSA
    return None


class ContributionLimitResolver:
    """Caps contribution lines at the IRS limits for each person."""

    def __init__(self, report: ValidationReport | None = None):
        self.report = report if report is not None else ValidationReport()

    def cap_contributions_at_irs_limits(
        self, household: Household, year: int, lines: list[ContributionLine]
    ) -> list[ContributionLine]:
        """Return new lines with amounts held to the year's limits.

        Payroll lines count against their person. Household lines count
        against the account owner; JOINT accounts split evenly across people.
        """
        attributions = [self._attribute(household, line) for line in lines]

        requested: dict[tuple[str, str], Decimal] = {}
        for line, shares in zip(lines, attributions):
            bucket = _bucket(line)
            if bucket is None:
                continue
            for person_key, share in shares:
                key = (person_key, bucket)
                requested[key] = requested.get(key, ZERO) + line.amount * share

        caps = self._caps(household, year, requested)

        capped_lines: list[ContributionLine] = []
        for line, shares in zip(lines, attributions):
            bucket = _bucket(line)
            if bucket is None:
                capped_lines.append(line.model_copy())
                continue
            amount = ZERO
            for person_key, share in shares:
                key = (person_key, bucket)
                portion = line.amount * share
                cap = caps.get(key)
                if cap is not None and requested[key] > cap:
                    portion = portion * cap / requested[key]
                amount += portion
            capped_lines.append(line.model_copy(update={"amount": amount}))
        return capped_lines

    def _caps(
        self,
        household: Household,
        year: int,
        requested: dict[tuple[str, str], Decimal],
    ) -> dict[tuple[str, str], Decimal]:
        """Per (person, bucket) caps; emits a warning for each one exceeded."""
        combined = limit_for_year(COMBINED_401K_LIMIT, year)
        caps: dict[tuple[str, str], Decimal] = {}
        for person_key, bucket in requested:
            if bucket == EMPLOYER_401K:
                caps[(person_key, bucket)] = combined
            elif bucket == EMPLOYEE_401K:
                employer = min(requested.get((person_key, EMPLOYER_401K), ZERO), combined)
                caps[(person_key, bucket)] = max(
                    ZERO, min(limit_for_year(EMPLOYEE_DEFERRAL_LIMIT, year), combined - employer)
                )
            elif bucket == IRA:
                caps[(person_key, bucket)] = limit_for_year(IRA_LIMIT, year)
            elif bucket == HSA:
                caps[(person_key, bucket)] = limit_for_year(HSA_FAMILY_LIMIT, year)

        labels = {
            EMPLOYER_401K: "Employer 401(k)/403(b) contributions",
            EMPLOYEE_401K: "Employee 401(k)/403(b) deferrals",
            IRA: "IRA contributions",
            HSA: "HSA contributions",
        }
        for key, cap in caps.items():
            if requested[key] <= cap:
                continue
            person_key, bucket = key
            who = self._person_label(household, person_key)
            message = (
                f"{labels[bucket]} for {who} capped at ${cap:,.0f} in {year} "
                f"(requested ${requested[key]:,.0f})."
            )
            logger.warning("Contribution limit applied: %s", message)
            self.report.warn(IssueCode.CONTRIBUTION_CAPPED_AT_LIMIT, message, year=year)
        return caps

    def _attribute(
        self, household: Household, line: ContributionLine
    ) -> list[tuple[str, Decimal]]:
        people = household.people
        if line.person_id is not None:
            return [(line.person_id, Decimal("1"))]
        if not people:
            return [(HOUSEHOLD_KEY, Decimal("1"))]
        if line.owner == Owner.JOINT:
            share = Decimal("1") / Decimal(len(people))
            return [(p.id, share) for p in people]
        if line.owner == Owner.PERSON_B and len(people) > 1:
            return [(people[1].id, Decimal("1"))]
        return [(people[0].id, Decimal("1"))]

    @staticmethod
    def _person_label(household: Household, person_key: str) -> str:
        person = household.person(person_key)
        return person.name if person is not None else "household"
