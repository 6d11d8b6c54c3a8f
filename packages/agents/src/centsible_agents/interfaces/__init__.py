"""Framework-agnostic agent interfaces.

This package defines the contract that any transaction classifier must
implement and the value it returns. It imports nothing from AI/ML
frameworks.

Available Interfaces:
    ClassifierProtocol: Protocol for transaction classifiers
    Classification: Category, tags and overrides for one transaction
"""

from centsible_agents.interfaces.base import (
    Classification,
    ClassifierProtocol,
)

__all__ = [
    "Classification",
    "ClassifierProtocol",
]
