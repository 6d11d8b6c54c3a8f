"""Centsible Agents - Classifier pipeline and budget advisor."""

from centsible_agents.advisor import (
    analyze_spending_patterns,
    generate_advice,
    suggest_budget_adjustments,
)
from centsible_agents.classifier import KeywordClassifier
from centsible_agents.config import AdvisorConfig, AgentsConfig, ClassifierConfig
from centsible_agents.exceptions import ClassificationError
from centsible_agents.interfaces import Classification, ClassifierProtocol
from centsible_agents.pipeline import ClassifiedIngestion

__version__ = "0.1.0"

__all__ = [
    "analyze_spending_patterns",
    "generate_advice",
    "suggest_budget_adjustments",
    "KeywordClassifier",
    "AdvisorConfig",
    "AgentsConfig",
    "ClassifierConfig",
    "ClassificationError",
    "Classification",
    "ClassifierProtocol",
    "ClassifiedIngestion",
]
