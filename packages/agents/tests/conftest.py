"""Shared fixtures for centsible-agents tests."""

import pytest
import structlog

from centsible_core.budget import create_budget_state
from centsible_core.models import AllocationFrequency, BudgetAllocation, BudgetState


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def tracked_budget() -> BudgetState:
    """Income $5000, savings $500, three categories with recorded spending.

    - food: $800 allocated, $760 spent (95%, over)
    - fun: $400 allocated, $100 spent (25%, under, monthly)
    - car: $1200 allocated, $300 spent (25%, under, annual)
    - rent: $2000 allocated, $1400 spent (70%, on track)
    """
    return create_budget_state(
        user_id="user-1",
        total_income=500000,
        target_savings=50000,
        allocations=[
            BudgetAllocation(id="food", category="Food", allocated_amount=80000, spent=76000),
            BudgetAllocation(id="fun", category="Fun", allocated_amount=40000, spent=10000),
            BudgetAllocation(
                id="car",
                category="Car",
                allocated_amount=120000,
                spent=30000,
                frequency=AllocationFrequency.ANNUAL,
            ),
            BudgetAllocation(id="rent", category="Rent", allocated_amount=200000, spent=140000),
        ],
    )


@pytest.fixture
def raw_row() -> dict:
    return {
        "raw_amount": "42.99",
        "raw_date": "2023-01-01T00:00:00Z",
        "raw_description": "WHOLE FOODS MKT #123",
        "source": "csv",
    }
