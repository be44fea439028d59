"""Core business logic services for SmartSplit balances and settlements."""

from .balance_service import BalanceService, TOLERANCE
from .settlement_service import Settlement, SettlementPlanner
from .expense_service import ExpenseValidationService
from .activity_service import ActivityService

__all__ = [
    "BalanceService",
    "TOLERANCE",
    "Settlement",
    "SettlementPlanner",
    "ExpenseValidationService",
    "ActivityService",
]
