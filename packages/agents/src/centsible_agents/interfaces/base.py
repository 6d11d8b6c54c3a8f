"""Framework-agnostic classifier interface for Centsible.

Categorizing a transaction is delegated to a collaborator outside the core:
an AI service in production, a keyword matcher as fallback, a stub in
tests. This module defines the contract every such collaborator satisfies
and the value it returns. The protocol uses structural subtyping, so any
class with a matching ``classify`` method is compatible without inheriting
from anything here.

Example Usage:
    ```python
    from centsible_agents.interfaces.base import Classification, ClassifierProtocol

    class AlwaysFood:
        def classify(self, raw: RawTransaction) -> Classification:
            return Classification(category=TransactionCategory.FOOD)

    assert isinstance(AlwaysFood(), ClassifierProtocol)
    ```
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from centsible_core.models import RawTransaction, TransactionCategory, TransactionTag


# =============================================================================
# RESULT MODEL
# =============================================================================

class Classification(BaseModel):
    """What a classifier says about one raw transaction.

    Attributes:
        category: The spending category.
        tags: Markers such as ``recurring`` or ``needs_review``.
        confidence: The classifier's own confidence. When None the
            normalizer computes its heuristic score instead.
        merchant_id: A merchant key that replaces the derived one.

    Example:
        ```python
        Classification(
            category=TransactionCategory.FOOD,
            tags=[TransactionTag.ESSENTIAL],
            confidence=0.92,
        )
        ```
    """

    model_config = ConfigDict(frozen=True)

    category: TransactionCategory = Field(
        default=TransactionCategory.OTHER,
        description="Assigned spending category",
    )
    tags: list[TransactionTag] = Field(
        default_factory=list,
        description="Markers attached to the transaction",
    )
    confidence: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Classifier confidence; None defers to the heuristic score",
    )
    merchant_id: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Merchant key overriding the one derived from the description",
    )

    def apply_to(self, raw: RawTransaction) -> RawTransaction:
        """Return ``raw`` with this classification merged in.

        Category and tags always come from the classification. Confidence
        and merchant id only replace the raw row's values when set.
        """
        update = {
            "category": self.category.value,
            "ai_tags": [tag.value for tag in self.tags],
        }
        if self.confidence is not None:
            update["confidence"] = self.confidence
        if self.merchant_id is not None:
            update["merchant_id"] = self.merchant_id
        return raw.model_copy(update=update)


# =============================================================================
# CLASSIFIER PROTOCOL
# =============================================================================

@runtime_checkable
class ClassifierProtocol(Protocol):
    """Contract for transaction classifiers.

    Implementations may raise any exception on failure (timeouts, rate
    limits, malformed responses); the ingestion pipeline owns retries and
    fallback. They must not modify ``raw``.
    """

    def classify(self, raw: RawTransaction) -> Classification:
        """Classify one raw transaction.

        Args:
            raw: The transaction as received, before normalization.

        Returns:
            The category, tags and optional overrides for the row.
        """
        ...


__all__ = [
    "Classification",
    "ClassifierProtocol",
]
