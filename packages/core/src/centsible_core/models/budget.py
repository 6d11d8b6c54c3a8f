"""Budget allocation models.

This module provides the immutable value types driven by the budget engine:
- Allocation frequency and setup mode enumerations
- Budget allocations (one per spending category)
- The per-user budget state
- Reducer actions, as a discriminated union on ``type``

All money fields are integer cents.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from ..money import MAX_CENTS


class AllocationFrequency(str, Enum):
    """How often an allocation's planned amount recurs."""

    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


class BudgetMode(str, Enum):
    """Validation mode for allocation changes.

    During onboarding a user allocates their whole income before committing
    to a savings figure, so the guard checks against income only. Once
    setup is complete every allocation must respect the savings carve-out.
    """

    INITIAL_SETUP = "initial_setup"
    STEADY_STATE = "steady_state"


class BudgetAllocation(BaseModel):
    """A spending category with a planned limit for a period."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "0b9a3c1e-6f0e-4d55-9c57-2b8f0d4f7a10",
                    "user_id": "user-123",
                    "category": "Housing",
                    "frequency": "MONTHLY",
                    "allocated_amount": 200000,
                    "spent": 50000,
                    "available": 150000,
                }
            ]
        },
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Unique identifier of the allocation",
    )
    user_id: str = Field(default="", description="Owner of the allocation")
    category: str = Field(min_length=1, description="Category name, e.g. 'Housing'")
    frequency: AllocationFrequency = Field(
        default=AllocationFrequency.MONTHLY,
        description="Recurrence of the planned amount",
    )
    allocated_amount: int = Field(
        ge=-MAX_CENTS,
        le=MAX_CENTS,
        description="Planned amount in cents. Negative values are rejected by the guard, not here",
    )
    spent: int = Field(
        default=0,
        ge=0,
        le=MAX_CENTS,
        description="Amount spent so far in cents",
    )
    available: int = Field(
        default=0,
        description="allocated_amount - spent in cents; negative when overspent",
    )

    @model_validator(mode="before")
    @classmethod
    def default_available(cls, data):
        """Derive ``available`` when the caller did not supply it."""
        if isinstance(data, dict) and data.get("available") is None:
            allocated = data.get("allocated_amount")
            if isinstance(allocated, int) and not isinstance(allocated, bool):
                data = {**data, "available": allocated - int(data.get("spent") or 0)}
        return data

    @property
    def is_overspent(self) -> bool:
        """True when spending has exceeded the allocated amount."""
        return self.spent > self.allocated_amount

    def reconciled(self) -> "BudgetAllocation":
        """Return a copy whose ``available`` equals ``allocated_amount - spent``."""
        available = self.allocated_amount - self.spent
        if available == self.available:
            return self
        return self.model_copy(update={"available": available})


class BudgetState(BaseModel):
    """A user's budget: income, savings target and category allocations.

    ``unallocated`` is derived data. The engine recomputes it on every
    transition as ``total_income - target_savings - sum(allocated_amount)``
    and never reads the stored value.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(default="", description="Owner of the budget")
    total_income: int = Field(
        default=0,
        ge=0,
        le=MAX_CENTS,
        description="Income for the period in cents",
    )
    target_savings: int = Field(
        default=0,
        ge=0,
        le=MAX_CENTS,
        description="Savings carve-out for the period in cents",
    )
    allocations: tuple[BudgetAllocation, ...] = Field(
        default=(),
        description="Category allocations, in insertion order",
    )
    unallocated: int = Field(
        default=0,
        description="Income not yet assigned to savings or any allocation",
    )
    mode: BudgetMode = Field(
        default=BudgetMode.INITIAL_SETUP,
        description="Whether the user is still onboarding",
    )

    @computed_field
    @property
    def total_allocated(self) -> int:
        """Sum of allocated amounts in cents."""
        return sum(a.allocated_amount for a in self.allocations)

    @property
    def is_initial_setup(self) -> bool:
        return self.mode is BudgetMode.INITIAL_SETUP

    def get_allocation(self, allocation_id: str) -> Optional[BudgetAllocation]:
        """Find an allocation by id."""
        for allocation in self.allocations:
            if allocation.id == allocation_id:
                return allocation
        return None


# =============================================================================
# REDUCER ACTIONS
# =============================================================================


class SetIncome(BaseModel):
    type: Literal["SET_INCOME"] = "SET_INCOME"
    amount: int


class SetSavings(BaseModel):
    type: Literal["SET_SAVINGS"] = "SET_SAVINGS"
    amount: int


class AddAllocation(BaseModel):
    type: Literal["ADD_ALLOCATION"] = "ADD_ALLOCATION"
    allocation: BudgetAllocation
    is_initial_allocation: bool = False


class UpdateAllocation(BaseModel):
    type: Literal["UPDATE_ALLOCATION"] = "UPDATE_ALLOCATION"
    allocation: BudgetAllocation


class RemoveAllocation(BaseModel):
    type: Literal["REMOVE_ALLOCATION"] = "REMOVE_ALLOCATION"
    allocation_id: str


class RecordSpending(BaseModel):
    type: Literal["RECORD_SPENDING"] = "RECORD_SPENDING"
    allocation_id: str
    amount: int


class SetInitialState(BaseModel):
    """Replace income, savings and allocations wholesale (e.g. after loading)."""

    type: Literal["SET_INITIAL_STATE"] = "SET_INITIAL_STATE"
    total_income: int = 0
    target_savings: int = 0
    allocations: list[BudgetAllocation] = Field(default_factory=list)


BudgetAction = Annotated[
    Union[
        SetIncome,
        SetSavings,
        AddAllocation,
        UpdateAllocation,
        RemoveAllocation,
        RecordSpending,
        SetInitialState,
    ],
    Field(discriminator="type"),
]
