"""Budget allocation engine.

Every operation is a pure transition: it takes a ``BudgetState`` and
returns a ``BudgetResult`` holding either the new state or, on rejection,
the original state object together with the error. Nothing is mutated, so
callers that share a budget between requests must serialize the
read-modify-write themselves (a database transaction or optimistic lock).

The single invariant maintained here is

    unallocated == total_income - target_savings - sum(allocated_amount)

and it is recomputed after every transition. The stored ``unallocated``
value is never read.

Allocation checks run in one of two modes (see ``BudgetMode``). While the
user is onboarding an allocation only has to fit inside income, because the
savings target may not be decided yet. Afterwards it has to fit inside
income minus the savings target.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Optional, Union

import structlog
from pydantic import TypeAdapter

from .exceptions import (
    AllocationNotFoundError,
    BudgetErrorCode,
    BudgetValidationError,
    CentsibleError,
    ValidationError,
)
from .models.budget import (
    AddAllocation,
    BudgetAction,
    BudgetAllocation,
    BudgetMode,
    BudgetState,
    RecordSpending,
    RemoveAllocation,
    SetIncome,
    SetInitialState,
    SetSavings,
    UpdateAllocation,
)
from .money import CENT, ensure_cents

logger = structlog.get_logger()

_action_adapter: TypeAdapter = TypeAdapter(BudgetAction)


@dataclass(frozen=True)
class BudgetResult:
    """Outcome of a budget transition.

    Attributes:
        state: The new state, or the unchanged input state on rejection.
        error: The rejection reason, None when the change was applied.
        warnings: Non-fatal issues, e.g. unallocated funds went negative.
    """

    state: BudgetState
    error: Optional[CentsibleError] = None
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def code(self) -> Optional[BudgetErrorCode]:
        return getattr(self.error, "code", None)

    @classmethod
    def accepted(cls, state: BudgetState, warnings: Iterable[str] = ()) -> "BudgetResult":
        return cls(state=state, warnings=tuple(warnings))

    @classmethod
    def rejected(cls, state: BudgetState, error: CentsibleError) -> "BudgetResult":
        return cls(state=state, error=error)


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of applying a sequence of actions with ``apply_actions``."""

    state: BudgetState
    results: list[BudgetResult] = field(default_factory=list)

    @property
    def errors(self) -> list[CentsibleError]:
        return [r.error for r in self.results if r.error is not None]

    @property
    def warnings(self) -> list[str]:
        return [w for r in self.results for w in r.warnings]


# =============================================================================
# DERIVED VALUES
# =============================================================================


def total_allocated(
    allocations: Iterable[BudgetAllocation], exclude_id: Optional[str] = None
) -> int:
    """Sum allocated cents, optionally skipping one allocation."""
    return sum(a.allocated_amount for a in allocations if a.id != exclude_id)


def compute_unallocated(
    total_income: int,
    target_savings: int,
    allocations: Iterable[BudgetAllocation],
) -> int:
    return total_income - target_savings - total_allocated(allocations)


def available_funds(state: BudgetState, exclude_id: Optional[str] = None) -> int:
    """Funds left for a new (or replaced) allocation once savings are carved out."""
    return (
        state.total_income
        - state.target_savings
        - total_allocated(state.allocations, exclude_id=exclude_id)
    )


def _display(cents: int) -> str:
    dollars = (Decimal(abs(cents)) / 100).quantize(CENT)
    return f"-${dollars}" if cents < 0 else f"${dollars}"


def _recompute(state: BudgetState, **update: Any) -> BudgetState:
    updated = state.model_copy(update=update)
    unallocated = compute_unallocated(
        updated.total_income, updated.target_savings, updated.allocations
    )
    return updated.model_copy(update={"unallocated": unallocated})


def _overcommitted(state: BudgetState) -> list[str]:
    if state.unallocated >= 0:
        return []
    logger.warning(
        "unallocated_negative",
        user_id=state.user_id,
        unallocated=state.unallocated,
        mode=state.mode.value,
    )
    return [
        f"Savings and allocations exceed income by {_display(-state.unallocated)}"
    ]


def _owned(state: BudgetState, allocation: BudgetAllocation) -> BudgetAllocation:
    """Stamp the budget owner on an allocation that has none, and reconcile it."""
    if not allocation.user_id and state.user_id:
        allocation = allocation.model_copy(update={"user_id": state.user_id})
    return allocation.reconciled()


# =============================================================================
# ALLOCATION GUARD
# =============================================================================


def validate_allocation(
    state: BudgetState,
    allocation: BudgetAllocation,
    mode: BudgetMode,
    is_initial_allocation: bool = False,
    exclude_id: Optional[str] = None,
) -> None:
    """Check that ``allocation`` fits in the budget.

    Args:
        state: Current budget.
        allocation: The allocation being added or replacing an existing one.
        mode: INITIAL_SETUP checks against income only; STEADY_STATE also
            subtracts the savings target.
        is_initial_allocation: Apply the INITIAL_SETUP rule regardless of
            ``mode``.
        exclude_id: Id of the allocation being replaced, left out of the
            existing total.

    Raises:
        BudgetValidationError: With code NegativeAllocation, IncomeNotSet,
            ExceedsIncome or InsufficientFunds.
    """
    amount = allocation.allocated_amount
    if amount < 0:
        raise BudgetValidationError(
            "Allocation amount cannot be negative",
            code=BudgetErrorCode.NEGATIVE_ALLOCATION,
            field="allocated_amount",
            value=amount,
            constraint="allocated_amount >= 0",
        )

    if state.total_income <= 0:
        raise BudgetValidationError(
            "Set your income before allocating funds",
            code=BudgetErrorCode.INCOME_NOT_SET,
            field="total_income",
            value=state.total_income,
            constraint="total_income > 0",
        )

    existing = total_allocated(state.allocations, exclude_id=exclude_id)

    if mode is BudgetMode.INITIAL_SETUP or is_initial_allocation:
        new_total = existing + amount
        if new_total > state.total_income:
            raise BudgetValidationError(
                f"Total allocations of {_display(new_total)} would exceed "
                f"income of {_display(state.total_income)}",
                code=BudgetErrorCode.EXCEEDS_INCOME,
                field="allocated_amount",
                value=amount,
                constraint="sum(allocated_amount) <= total_income",
                details={"total_income": state.total_income, "new_total": new_total},
            )
        return

    funds = state.total_income - state.target_savings - existing
    if amount > funds:
        raise BudgetValidationError(
            f"Insufficient funds. Available: {_display(funds)}",
            code=BudgetErrorCode.INSUFFICIENT_FUNDS,
            field="allocated_amount",
            value=amount,
            constraint="allocated_amount <= available funds",
            details={"available": funds},
        )


def is_allocation_valid(
    state: BudgetState,
    allocation: BudgetAllocation,
    mode: Optional[BudgetMode] = None,
    is_initial_allocation: bool = False,
) -> bool:
    """Boolean form of ``validate_allocation``; ``mode`` defaults to the state's."""
    try:
        validate_allocation(
            state,
            allocation,
            mode if mode is not None else state.mode,
            is_initial_allocation=is_initial_allocation,
            exclude_id=allocation.id if state.get_allocation(allocation.id) else None,
        )
    except BudgetValidationError:
        return False
    return True


# =============================================================================
# TRANSITIONS
# =============================================================================


def create_budget_state(
    user_id: str = "",
    total_income: int = 0,
    target_savings: int = 0,
    allocations: Iterable[BudgetAllocation] = (),
    mode: Optional[BudgetMode] = None,
) -> BudgetState:
    """Build a consistent state from stored values.

    ``unallocated`` and every allocation's ``available`` are recomputed. The
    mode defaults to STEADY_STATE when income is already set.

    Raises:
        InvalidAmountError: If an amount is not integer cents in range.
        ValidationError: If two allocations share an id.
    """
    total_income = max(ensure_cents(total_income, "total_income"), 0)
    target_savings = max(ensure_cents(target_savings, "target_savings"), 0)

    seen: set[str] = set()
    reconciled = []
    for allocation in allocations:
        if allocation.id in seen:
            raise ValidationError(
                f"Duplicate allocation id: {allocation.id}",
                field="allocations",
                value=allocation.id,
                constraint="allocation ids are unique",
            )
        seen.add(allocation.id)
        if not allocation.user_id and user_id:
            allocation = allocation.model_copy(update={"user_id": user_id})
        reconciled.append(allocation.reconciled())

    if mode is None:
        mode = BudgetMode.STEADY_STATE if total_income > 0 else BudgetMode.INITIAL_SETUP

    return BudgetState(
        user_id=user_id,
        total_income=total_income,
        target_savings=target_savings,
        allocations=tuple(reconciled),
        unallocated=compute_unallocated(total_income, target_savings, reconciled),
        mode=mode,
    )


def set_initial_state(
    state: BudgetState,
    total_income: int = 0,
    target_savings: int = 0,
    allocations: Iterable[BudgetAllocation] = (),
) -> BudgetResult:
    """Replace the budget wholesale, keeping the owner.

    Loaded values are not re-validated against the guard; an over-committed
    budget is reported as a warning.
    """
    total_income = ensure_cents(total_income, "total_income")
    mode = (
        BudgetMode.STEADY_STATE
        if state.mode is BudgetMode.STEADY_STATE or total_income > 0
        else BudgetMode.INITIAL_SETUP
    )
    new_state = create_budget_state(
        user_id=state.user_id,
        total_income=total_income,
        target_savings=target_savings,
        allocations=allocations,
        mode=mode,
    )
    logger.debug(
        "budget_state_loaded",
        user_id=new_state.user_id,
        allocations=len(new_state.allocations),
    )
    return BudgetResult.accepted(new_state, _overcommitted(new_state))


def set_income(state: BudgetState, amount: int) -> BudgetResult:
    """Set income; negative amounts are treated as zero.

    An income decrease is never rejected. In steady state a resulting
    negative ``unallocated`` is reported as a warning. Onboarding ends the
    first time a positive income is set.
    """
    amount = max(ensure_cents(amount, "total_income"), 0)
    mode = BudgetMode.STEADY_STATE if amount > 0 else state.mode
    new_state = _recompute(state, total_income=amount, mode=mode)

    warnings: list[str] = []
    if new_state.mode is BudgetMode.STEADY_STATE:
        warnings = _overcommitted(new_state)

    logger.debug("income_set", user_id=state.user_id, total_income=amount)
    return BudgetResult.accepted(new_state, warnings)


def set_savings_target(state: BudgetState, amount: int) -> BudgetResult:
    """Set the savings target; rejected when it exceeds income."""
    amount = max(ensure_cents(amount, "target_savings"), 0)
    if amount > state.total_income:
        error = BudgetValidationError(
            "Savings cannot exceed income",
            code=BudgetErrorCode.SAVINGS_EXCEEDS_INCOME,
            field="target_savings",
            value=amount,
            constraint="target_savings <= total_income",
        )
        logger.info(
            "savings_rejected",
            user_id=state.user_id,
            target_savings=amount,
            total_income=state.total_income,
        )
        return BudgetResult.rejected(state, error)

    new_state = _recompute(state, target_savings=amount)
    logger.debug("savings_set", user_id=state.user_id, target_savings=amount)
    return BudgetResult.accepted(new_state, _overcommitted(new_state))


def add_allocation(
    state: BudgetState,
    allocation: BudgetAllocation,
    is_initial_allocation: bool = False,
) -> BudgetResult:
    """Append an allocation after checking it fits.

    Adding an allocation whose id is already present replaces that entry
    (``update_allocation`` semantics), so repeating an add never creates a
    duplicate.
    """
    if state.get_allocation(allocation.id) is not None:
        return update_allocation(state, allocation, is_initial_allocation)

    try:
        validate_allocation(state, allocation, state.mode, is_initial_allocation)
    except BudgetValidationError as e:
        logger.info(
            "allocation_rejected",
            user_id=state.user_id,
            allocation_id=allocation.id,
            code=e.code.value,
        )
        return BudgetResult.rejected(state, e)

    new_state = _recompute(
        state, allocations=state.allocations + (_owned(state, allocation),)
    )
    logger.debug(
        "allocation_added",
        user_id=state.user_id,
        allocation_id=allocation.id,
        allocated_amount=allocation.allocated_amount,
    )
    return BudgetResult.accepted(new_state)


def update_allocation(
    state: BudgetState,
    allocation: BudgetAllocation,
    is_initial_allocation: bool = False,
) -> BudgetResult:
    """Replace the allocation with the same id.

    Validation matches ``add_allocation`` with the replaced entry left out of
    the existing total. An unknown id is rejected with NotFound rather than
    inserted.
    """
    if state.get_allocation(allocation.id) is None:
        return BudgetResult.rejected(state, AllocationNotFoundError(allocation.id))

    try:
        validate_allocation(
            state,
            allocation,
            state.mode,
            is_initial_allocation,
            exclude_id=allocation.id,
        )
    except BudgetValidationError as e:
        logger.info(
            "allocation_rejected",
            user_id=state.user_id,
            allocation_id=allocation.id,
            code=e.code.value,
        )
        return BudgetResult.rejected(state, e)

    replacement = _owned(state, allocation)
    allocations = tuple(
        replacement if a.id == allocation.id else a for a in state.allocations
    )
    logger.debug("allocation_updated", user_id=state.user_id, allocation_id=allocation.id)
    return BudgetResult.accepted(_recompute(state, allocations=allocations))


def remove_allocation(state: BudgetState, allocation_id: str) -> BudgetResult:
    """Delete an allocation, returning its funds to ``unallocated``."""
    if state.get_allocation(allocation_id) is None:
        return BudgetResult.rejected(state, AllocationNotFoundError(allocation_id))

    allocations = tuple(a for a in state.allocations if a.id != allocation_id)
    logger.debug("allocation_removed", user_id=state.user_id, allocation_id=allocation_id)
    return BudgetResult.accepted(_recompute(state, allocations=allocations))


def record_spending(state: BudgetState, allocation_id: str, amount: int) -> BudgetResult:
    """Set (not increment) the amount spent against an allocation.

    Negative amounts are treated as zero. Overspending is allowed and shows
    up as a negative ``available``.
    """
    amount = max(ensure_cents(amount, "spent"), 0)
    existing = state.get_allocation(allocation_id)
    if existing is None:
        return BudgetResult.rejected(state, AllocationNotFoundError(allocation_id))

    updated = existing.model_copy(update={"spent": amount}).reconciled()
    allocations = tuple(
        updated if a.id == allocation_id else a for a in state.allocations
    )
    if updated.is_overspent:
        logger.info(
            "allocation_overspent",
            user_id=state.user_id,
            allocation_id=allocation_id,
            available=updated.available,
        )
    return BudgetResult.accepted(_recompute(state, allocations=allocations))


# =============================================================================
# REDUCER
# =============================================================================


def parse_action(payload: Union[dict[str, Any], BudgetAction]) -> BudgetAction:
    """Validate a raw action payload into its typed model."""
    if isinstance(payload, dict):
        return _action_adapter.validate_python(payload)
    return payload


def reduce(state: BudgetState, action: Union[dict[str, Any], BudgetAction]) -> BudgetResult:
    """Apply one action to the state."""
    action = parse_action(action)

    if isinstance(action, SetIncome):
        return set_income(state, action.amount)
    if isinstance(action, SetSavings):
        return set_savings_target(state, action.amount)
    if isinstance(action, AddAllocation):
        return add_allocation(state, action.allocation, action.is_initial_allocation)
    if isinstance(action, UpdateAllocation):
        return update_allocation(state, action.allocation)
    if isinstance(action, RemoveAllocation):
        return remove_allocation(state, action.allocation_id)
    if isinstance(action, RecordSpending):
        return record_spending(state, action.allocation_id, action.amount)
    if isinstance(action, SetInitialState):
        return set_initial_state(
            state, action.total_income, action.target_savings, action.allocations
        )
    raise TypeError(f"Unsupported budget action: {type(action).__name__}")


def apply_actions(
    state: BudgetState,
    actions: Iterable[Union[dict[str, Any], BudgetAction]],
) -> ReplayResult:
    """Apply actions in order, continuing past rejected ones."""
    results = []
    for action in actions:
        result = reduce(state, action)
        results.append(result)
        state = result.state
    return ReplayResult(state=state, results=results)


__all__ = [
    "BudgetResult",
    "ReplayResult",
    "total_allocated",
    "compute_unallocated",
    "available_funds",
    "validate_allocation",
    "is_allocation_valid",
    "create_budget_state",
    "set_initial_state",
    "set_income",
    "set_savings_target",
    "add_allocation",
    "update_allocation",
    "remove_allocation",
    "record_spending",
    "parse_action",
    "reduce",
    "apply_actions",
]
