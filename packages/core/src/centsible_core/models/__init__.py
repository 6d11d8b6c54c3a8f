"""Data models for centsible-core.

This package provides:
- Budget allocation and budget state value types (budget.py)
- Reducer actions for the budget engine (budget.py)
- Raw and normalized transaction records (transaction.py)
"""

from centsible_core.models.budget import (
    # Enumerations
    AllocationFrequency,
    BudgetMode,
    # Values
    BudgetAllocation,
    BudgetState,
    # Reducer actions
    BudgetAction,
    SetIncome,
    SetSavings,
    AddAllocation,
    UpdateAllocation,
    RemoveAllocation,
    RecordSpending,
    SetInitialState,
)

from centsible_core.models.transaction import (
    # Enumerations
    TransactionCategory,
    TransactionTag,
    TransactionType,
    ThresholdLevel,
    # Records
    AmountThreshold,
    RawTransaction,
    EnhancedTransaction,
)

__all__ = [
    # Budget enumerations
    "AllocationFrequency",
    "BudgetMode",
    # Budget values
    "BudgetAllocation",
    "BudgetState",
    # Reducer actions
    "BudgetAction",
    "SetIncome",
    "SetSavings",
    "AddAllocation",
    "UpdateAllocation",
    "RemoveAllocation",
    "RecordSpending",
    "SetInitialState",
    # Transaction enumerations
    "TransactionCategory",
    "TransactionTag",
    "TransactionType",
    "ThresholdLevel",
    # Transaction records
    "AmountThreshold",
    "RawTransaction",
    "EnhancedTransaction",
]
