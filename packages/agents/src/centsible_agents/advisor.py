"""Rule-based budget advisor.

Pure functions over a ``BudgetState``:

- ``generate_advice``: budget-level advice (unassigned or overcommitted
  income)
- ``analyze_spending_patterns``: per-allocation over/under/on-track status
- ``suggest_budget_adjustments``: concrete allocation changes in cents

Thresholds come from ``AdvisorConfig``. Nothing here mutates the budget;
applying a suggestion is an ``update_allocation`` call by the caller.
"""

import math
from decimal import Decimal
from enum import Enum
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from centsible_core.models import AllocationFrequency, BudgetAllocation, BudgetState
from centsible_core.money import format_money

from .config import AdvisorConfig

logger = structlog.get_logger()


# =============================================================================
# RESULT MODELS
# =============================================================================


class AdviceCategory(str, Enum):
    BUDGET = "budget"
    SAVING = "saving"
    INVESTMENT = "investment"
    DEBT = "debt"


class AdvicePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SpendingStatus(str, Enum):
    """How spending compares with the allocation."""

    OVER = "over"
    UNDER = "under"
    ON_TRACK = "on_track"


class FinancialAdvice(BaseModel):
    """A piece of budget-level advice."""

    model_config = ConfigDict(frozen=True)

    category: AdviceCategory
    title: str
    description: str
    steps: list[str] = Field(default_factory=list)
    priority: AdvicePriority
    potential_impact: float = Field(
        ge=0.0,
        description="Affected share of income, e.g. 0.2 for a fifth",
    )


class SpendingAnalysis(BaseModel):
    """Spending status of one allocation."""

    model_config = ConfigDict(frozen=True)

    allocation_id: str
    category: str
    status: SpendingStatus
    spending_ratio: Optional[float] = Field(
        default=None,
        description="spent / allocated_amount; None when nothing is allocated",
    )
    recommendation: str = ""


class ImpactAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    short_term: str
    long_term: str


class BudgetSuggestion(BaseModel):
    """A proposed change to one allocation, in cents."""

    model_config = ConfigDict(frozen=True)

    allocation_id: str
    category: str
    current_allocation: int
    suggested_adjustment: int = Field(
        description="Cents to add (positive) or remove (negative)",
    )
    rationale: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    impact_analysis: ImpactAnalysis

    @property
    def suggested_allocation(self) -> int:
        return self.current_allocation + self.suggested_adjustment


# =============================================================================
# ANALYSIS
# =============================================================================


def spending_ratio(allocation: BudgetAllocation) -> Optional[float]:
    """Return spent / allocated, or None when nothing positive is allocated."""
    if allocation.allocated_amount <= 0:
        return None
    return allocation.spent / allocation.allocated_amount


def _status(allocation: BudgetAllocation, config: AdvisorConfig) -> SpendingStatus:
    ratio = spending_ratio(allocation)
    if ratio is None:
        # Any spending against an empty allocation is overspending
        return SpendingStatus.OVER if allocation.spent > 0 else SpendingStatus.ON_TRACK
    if ratio > config.overspend_ratio:
        return SpendingStatus.OVER
    if ratio < config.underspend_ratio:
        return SpendingStatus.UNDER
    return SpendingStatus.ON_TRACK


def generate_advice(
    state: BudgetState, config: Optional[AdvisorConfig] = None
) -> list[FinancialAdvice]:
    """Budget-level advice: every dollar of income should have a job.

    Positive ``unallocated`` yields a high-priority "Allocate Remaining
    Funds" item; negative ``unallocated`` (savings and allocations exceed
    income) yields "Reduce Commitments". Impact is the affected share of
    income.
    """
    config = config or AdvisorConfig()
    advice: list[FinancialAdvice] = []
    income = state.total_income

    if state.unallocated > 0:
        advice.append(
            FinancialAdvice(
                category=AdviceCategory.BUDGET,
                title="Allocate Remaining Funds",
                description=(
                    f"You have {format_money(state.unallocated)} unallocated. "
                    "Every dollar should have a specific purpose."
                ),
                steps=[
                    "Review your financial goals",
                    "Consider increasing your emergency fund",
                    "Look for underfunded categories",
                    "Consider paying down debt if applicable",
                ],
                priority=AdvicePriority.HIGH,
                potential_impact=state.unallocated / income if income else 0.0,
            )
        )
    elif state.unallocated < 0:
        shortfall = -state.unallocated
        advice.append(
            FinancialAdvice(
                category=AdviceCategory.BUDGET,
                title="Reduce Commitments",
                description=(
                    f"Savings and allocations exceed income by "
                    f"{format_money(shortfall)}."
                ),
                steps=[
                    "Lower allocations in discretionary categories",
                    "Reduce the savings target for this period",
                    "Update your income if it has changed",
                ],
                priority=AdvicePriority.HIGH,
                potential_impact=shortfall / income if income else 1.0,
            )
        )

    logger.debug("advice_generated", user_id=state.user_id, count=len(advice))
    return advice


def analyze_spending_patterns(
    state: BudgetState, config: Optional[AdvisorConfig] = None
) -> list[SpendingAnalysis]:
    """Classify every allocation as over, under or on track."""
    config = config or AdvisorConfig()
    analysis = []
    for allocation in state.allocations:
        status = _status(allocation, config)
        if status is SpendingStatus.OVER:
            recommendation = (
                f"Consider increasing the {allocation.category} budget "
                "or finding areas to reduce spending"
            )
        elif status is SpendingStatus.UNDER:
            recommendation = (
                f"You might be able to reallocate some funds from "
                f"{allocation.category} to other priorities"
            )
        else:
            recommendation = ""
        analysis.append(
            SpendingAnalysis(
                allocation_id=allocation.id,
                category=allocation.category,
                status=status,
                spending_ratio=spending_ratio(allocation),
                recommendation=recommendation,
            )
        )
    return analysis


def suggest_budget_adjustments(
    state: BudgetState, config: Optional[AdvisorConfig] = None
) -> list[BudgetSuggestion]:
    """Suggest allocation changes based on current spending.

    Over categories are raised to ``ceil(spent * increase_factor)``. Under
    categories are lowered to ``floor(spent * decrease_factor)``, except
    monthly ones, whose spending is expected to catch up within the period.
    """
    config = config or AdvisorConfig()
    increase = Decimal(str(config.increase_factor))
    decrease = Decimal(str(config.decrease_factor))
    suggestions = []

    for allocation in state.allocations:
        status = _status(allocation, config)
        if status is SpendingStatus.OVER:
            target = math.ceil(allocation.spent * increase)
            suggestions.append(
                BudgetSuggestion(
                    allocation_id=allocation.id,
                    category=allocation.category,
                    current_allocation=allocation.allocated_amount,
                    suggested_adjustment=target - allocation.allocated_amount,
                    rationale="Current allocation might be insufficient based on spending patterns",
                    confidence_score=0.8,
                    impact_analysis=ImpactAnalysis(
                        short_term="Reduce stress about overspending",
                        long_term="More accurate budgeting and better financial planning",
                    ),
                )
            )
        elif (
            status is SpendingStatus.UNDER
            and allocation.frequency is not AllocationFrequency.MONTHLY
        ):
            target = math.floor(allocation.spent * decrease)
            suggestions.append(
                BudgetSuggestion(
                    allocation_id=allocation.id,
                    category=allocation.category,
                    current_allocation=allocation.allocated_amount,
                    suggested_adjustment=target - allocation.allocated_amount,
                    rationale="Category might be over-budgeted",
                    confidence_score=0.7,
                    impact_analysis=ImpactAnalysis(
                        short_term="Free up money for other categories",
                        long_term="More efficient use of available funds",
                    ),
                )
            )

    logger.debug(
        "adjustments_suggested", user_id=state.user_id, count=len(suggestions)
    )
    return suggestions


__all__ = [
    "AdviceCategory",
    "AdvicePriority",
    "SpendingStatus",
    "FinancialAdvice",
    "SpendingAnalysis",
    "ImpactAnalysis",
    "BudgetSuggestion",
    "spending_ratio",
    "generate_advice",
    "analyze_spending_patterns",
    "suggest_budget_adjustments",
]
