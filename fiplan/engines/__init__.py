"""Projection engines."""

from fiplan.engines.effective import ScenarioResolver, apply_scenario_overrides
from fiplan.engines.equity import EquityVestingProcessor
from fiplan.engines.income import IncomeCalculator
from fiplan.engines.ledger import AccountLedger
from fiplan.engines.limits import ContributionLimitResolver, get_contribution_limit
from fiplan.engines.milestones import MilestoneCalculator
from fiplan.engines.projection import ProjectionEngine, run_projection, validate_household
from fiplan.engines.reconciliation import CashFlowReconciler
from fiplan.engines.taxes import TaxResolver
from fiplan.engines.validation import HouseholdValidator
from fiplan.engines.withdrawal import PhasePlanner, WithdrawalPlanner

__all__ = [
    "AccountLedger",
    "CashFlowReconciler",
    "ContributionLimitResolver",
    "EquityVestingProcessor",
    "HouseholdValidator",
    "IncomeCalculator",
    "MilestoneCalculator",
    "PhasePlanner",
    "ProjectionEngine",
    "ScenarioResolver",
    "TaxResolver",
    "WithdrawalPlanner",
    "apply_scenario_overrides",
    "get_contribution_limit",
    "run_projection",
    "validate_household",
]
