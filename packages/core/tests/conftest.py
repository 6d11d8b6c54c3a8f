"""Shared fixtures for centsible-core tests."""

import pytest
import structlog

from centsible_core.budget import create_budget_state
from centsible_core.models import BudgetAllocation, BudgetMode, BudgetState
from centsible_core.transactions import TransactionProcessor


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def housing() -> BudgetAllocation:
    return BudgetAllocation(
        id="housing",
        user_id="user-1",
        category="Housing",
        allocated_amount=200000,
    )


@pytest.fixture
def steady_budget(housing: BudgetAllocation) -> BudgetState:
    """Income $5000, savings $1000, $2000 allocated to housing."""
    return create_budget_state(
        user_id="user-1",
        total_income=500000,
        target_savings=100000,
        allocations=[housing],
    )


@pytest.fixture
def onboarding_budget() -> BudgetState:
    """Income and savings entered but onboarding not finished."""
    return create_budget_state(
        user_id="user-1",
        total_income=500000,
        target_savings=100000,
        mode=BudgetMode.INITIAL_SETUP,
    )


@pytest.fixture
def processor() -> TransactionProcessor:
    return TransactionProcessor()


@pytest.fixture
def whole_foods_row() -> dict:
    return {
        "raw_amount": "42.99",
        "raw_date": "2023-01-01T00:00:00Z",
        "raw_description": "WHOLE FOODS MKT #123",
        "source": "csv",
    }
