"""Centsible Core - Budget allocation and transaction normalization."""

__version__ = "0.1.0"

from .budget import (
    BudgetResult,
    add_allocation,
    apply_actions,
    available_funds,
    create_budget_state,
    record_spending,
    reduce,
    remove_allocation,
    set_income,
    set_savings_target,
    update_allocation,
    validate_allocation,
)
from .models import BudgetAllocation, BudgetMode, BudgetState, EnhancedTransaction
from .money import cents_to_dollars, dollars_to_cents, format_money, parse_dollar_amount
from .transactions import TransactionProcessor

__all__ = [
    "BudgetResult",
    "add_allocation",
    "apply_actions",
    "available_funds",
    "create_budget_state",
    "record_spending",
    "reduce",
    "remove_allocation",
    "set_income",
    "set_savings_target",
    "update_allocation",
    "validate_allocation",
    "BudgetAllocation",
    "BudgetMode",
    "BudgetState",
    "EnhancedTransaction",
    "cents_to_dollars",
    "dollars_to_cents",
    "format_money",
    "parse_dollar_amount",
    "TransactionProcessor",
]
