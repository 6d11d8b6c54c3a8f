"""Mapping between API payloads and budget models.

Older call paths send the planned amount of an allocation twice, as
``amount`` and as ``allocated``, and sometimes nest it under
``target: {type, amount}``. Inside the core there is only
``allocated_amount``; this module is the one place that understands the
legacy shapes. Payload keys are camelCase, amounts are integer cents.
"""

from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .budget import create_budget_state
from .exceptions import ValidationError
from .models.budget import AllocationFrequency, BudgetAllocation, BudgetState

_AMOUNT_KEYS = ("allocatedAmount", "allocated_amount", "allocated", "amount")


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _allocated_amount(payload: Mapping[str, Any]) -> int:
    values = {key: payload[key] for key in _AMOUNT_KEYS if payload.get(key) is not None}
    target = payload.get("target")
    if not values and isinstance(target, Mapping) and target.get("amount") is not None:
        values["target.amount"] = target["amount"]

    if not values:
        raise ValidationError(
            "Allocation payload has no amount",
            field="allocated",
            constraint=f"one of {', '.join(_AMOUNT_KEYS)} is required",
        )
    if len(set(values.values())) > 1:
        raise ValidationError(
            "Conflicting allocation amounts",
            field="allocated",
            value=values,
            constraint="amount and allocated must be equal when both are sent",
        )
    return next(iter(values.values()))


def _frequency(payload: Mapping[str, Any]) -> Optional[AllocationFrequency]:
    raw = payload.get("frequency")
    target = payload.get("target")
    if raw is None and isinstance(target, Mapping):
        raw = target.get("type")
    if raw is None:
        return None
    try:
        return AllocationFrequency(str(raw).upper())
    except ValueError:
        raise ValidationError(
            f"Unknown frequency: {raw}",
            field="frequency",
            value=raw,
            constraint="WEEKLY, MONTHLY or ANNUAL",
        ) from None


def allocation_from_payload(payload: Mapping[str, Any]) -> BudgetAllocation:
    """Build a BudgetAllocation from an API payload.

    Raises:
        ValidationError: If the amount is missing or sent with conflicting
            values, the frequency is unknown, or a field fails the model's
            constraints (negative ``spent``, fractional cents).
    """
    data: dict[str, Any] = {
        "category": _first(payload, "category", "name"),
        "allocated_amount": _allocated_amount(payload),
        "spent": payload.get("spent") or 0,
        "available": payload.get("available"),
        "user_id": _first(payload, "userId", "user_id") or "",
    }
    if payload.get("id"):
        data["id"] = payload["id"]
    frequency = _frequency(payload)
    if frequency is not None:
        data["frequency"] = frequency
    try:
        return BudgetAllocation.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid allocation payload: {first.get('msg')}",
            field=field,
            value=first.get("input"),
        ) from e


def allocation_to_payload(allocation: BudgetAllocation) -> dict[str, Any]:
    """Serialize an allocation with both legacy amount keys populated."""
    return {
        "id": allocation.id,
        "userId": allocation.user_id,
        "category": allocation.category,
        "frequency": allocation.frequency.value,
        "amount": allocation.allocated_amount,
        "allocated": allocation.allocated_amount,
        "spent": allocation.spent,
        "available": allocation.available,
    }


def state_from_payload(payload: Mapping[str, Any]) -> BudgetState:
    """Rebuild a budget from an API payload; any stored ``unallocated`` is ignored."""
    allocations = [allocation_from_payload(a) for a in payload.get("allocations") or []]
    return create_budget_state(
        user_id=_first(payload, "userId", "user_id") or "",
        total_income=_first(payload, "totalIncome", "total_income") or 0,
        target_savings=_first(payload, "targetSavings", "target_savings") or 0,
        allocations=allocations,
    )


def state_to_payload(state: BudgetState) -> dict[str, Any]:
    return {
        "userId": state.user_id,
        "totalIncome": state.total_income,
        "targetSavings": state.target_savings,
        "allocations": [allocation_to_payload(a) for a in state.allocations],
        "unallocated": state.unallocated,
        "isInitialSetup": state.is_initial_setup,
    }
