"""Tests for API payload mapping."""

import pytest

from centsible_core.compat import (
    allocation_from_payload,
    allocation_to_payload,
    state_from_payload,
    state_to_payload,
)
from centsible_core.exceptions import ValidationError
from centsible_core.models import AllocationFrequency, BudgetMode


class TestAllocationFromPayload:
    """Tests for reading legacy allocation payloads."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"category": "Food", "amount": 50000},
            {"category": "Food", "allocated": 50000},
            {"category": "Food", "amount": 50000, "allocated": 50000},
            {"category": "Food", "allocatedAmount": 50000},
            {"name": "Food", "target": {"type": "monthly", "amount": 50000}},
        ],
    )
    def test_amount_shapes(self, payload):
        allocation = allocation_from_payload(payload)

        assert allocation.category == "Food"
        assert allocation.allocated_amount == 50000
        assert allocation.frequency is AllocationFrequency.MONTHLY

    def test_conflicting_amounts_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            allocation_from_payload({"category": "Food", "amount": 100, "allocated": 200})
        assert exc_info.value.field == "allocated"

    def test_missing_amount_rejected(self):
        with pytest.raises(ValidationError):
            allocation_from_payload({"category": "Food"})

    def test_frequency_from_target(self):
        allocation = allocation_from_payload(
            {"category": "Car", "target": {"type": "annual", "amount": 120000}}
        )
        assert allocation.frequency is AllocationFrequency.ANNUAL

    def test_unknown_frequency_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            allocation_from_payload({"category": "Car", "amount": 1, "frequency": "daily"})
        assert exc_info.value.field == "frequency"

    @pytest.mark.parametrize("spent", [-100, 10.5])
    def test_invalid_spending_raises_validation_error(self, spent):
        with pytest.raises(ValidationError) as exc_info:
            allocation_from_payload({"category": "Food", "amount": 500, "spent": spent})

        assert exc_info.value.field == "spent"
        assert exc_info.value.value == spent

    def test_empty_category_raises_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            allocation_from_payload({"category": "", "amount": 500})
        assert exc_info.value.field == "category"

    def test_keeps_id_owner_and_spending(self):
        allocation = allocation_from_payload(
            {"id": "a-1", "userId": "user-7", "category": "Food", "amount": 500, "spent": 200}
        )

        assert allocation.id == "a-1"
        assert allocation.user_id == "user-7"
        assert allocation.available == 300


class TestStatePayloads:
    """Tests for whole-budget payloads."""

    def test_stored_unallocated_is_ignored(self):
        state = state_from_payload(
            {
                "userId": "user-1",
                "totalIncome": 500000,
                "targetSavings": 100000,
                "unallocated": 123,
                "allocations": [{"id": "h", "category": "Housing", "amount": 200000}],
            }
        )

        assert state.unallocated == 200000
        assert state.mode is BudgetMode.STEADY_STATE
        assert state.allocations[0].user_id == "user-1"

    def test_to_payload_writes_both_amount_keys(self, steady_budget):
        payload = state_to_payload(steady_budget)

        assert payload["totalIncome"] == 500000
        assert payload["unallocated"] == 200000
        assert payload["isInitialSetup"] is False
        housing = payload["allocations"][0]
        assert housing["amount"] == housing["allocated"] == 200000

    def test_payload_survives_a_round_trip(self, steady_budget):
        assert state_from_payload(state_to_payload(steady_budget)) == steady_budget

    def test_allocation_to_payload(self, housing):
        payload = allocation_to_payload(housing)

        assert payload["id"] == "housing"
        assert payload["frequency"] == "MONTHLY"
        assert payload["available"] == 200000
