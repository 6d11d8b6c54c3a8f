"""Transaction models for the ingestion pipeline.

This module provides:
- Category, tag, type and amount-threshold enumerations
- RawTransaction: one candidate row as received from a CSV upload or an
  external classifier
- EnhancedTransaction: the canonical record produced by the normalizer

EnhancedTransaction serializes with camelCase aliases for the API layer
(``model_dump(by_alias=True)``) and accepts either naming on input.
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from ..money import MAX_DOLLARS, dollars_to_cents

# Calendar date first; bare numbers would otherwise pass as Unix timestamps
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_ISO_DATE_OR_DATETIME = TypeAdapter(Union[datetime, date])


class TransactionCategory(str, Enum):
    """Spending categories assigned by the external classifier."""

    INCOME = "INCOME"
    TRANSFER = "TRANSFER"
    HOUSING = "HOUSING"
    TRANSPORT = "TRANSPORT"
    FOOD = "FOOD"
    SHOPPING = "SHOPPING"
    HEALTHCARE = "HEALTHCARE"
    ENTERTAINMENT = "ENTERTAINMENT"
    EDUCATION = "EDUCATION"
    UTILITIES = "UTILITIES"
    BUSINESS = "BUSINESS"
    OTHER = "OTHER"


class TransactionTag(str, Enum):
    """Free-form markers the classifier may attach to a transaction."""

    ESSENTIAL = "essential"
    RECURRING = "recurring"
    DISCRETIONARY = "discretionary"
    SUBSCRIPTION = "subscription"
    INTERNATIONAL = "international"
    HIGH_VALUE = "high_value"
    NEEDS_REVIEW = "needs_review"
    POSSIBLE_FRAUD = "possible_fraud"
    REFUND = "refund"
    BUSINESS_EXPENSE = "business_expense"


class TransactionType(str, Enum):
    """Transaction direction."""

    DEBIT = "debit"  # Money out
    CREDIT = "credit"  # Money in
    TRANSFER = "transfer"  # Only assigned by an upstream classifier


class ThresholdLevel(str, Enum):
    """Risk band of a transaction amount."""

    NORMAL = "NORMAL"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class AmountThreshold(BaseModel):
    """Amount-risk classification of a transaction."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    is_within_limits: bool
    threshold: ThresholdLevel


class RawTransaction(BaseModel):
    """A candidate transaction before normalization.

    The ``raw_*`` fields are untyped. The normalizer checks them and
    reports every failure as a field-attributed
    TransactionError rather than a model error. ``category``, ``ai_tags``,
    ``confidence`` and ``merchant_id`` are optional classifier output and
    are validated only when the final record is assembled.
    """

    model_config = ConfigDict(extra="ignore")

    raw_amount: Any = None
    raw_date: Any = None
    raw_description: Any = None
    source: Optional[str] = None

    category: Optional[str] = None
    ai_tags: list[str] = Field(default_factory=list)
    confidence: Optional[float] = None
    merchant_id: Optional[str] = None


class EnhancedTransaction(BaseModel):
    """A canonical, normalized transaction.

    Created once per raw input by the normalizer and immutable thereafter;
    user-editable fields are changed by the CRUD layer, not here.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "amount": "42.99",
                    "date": "2023-01-01T00:00:00Z",
                    "description": "WHOLE FOODS MKT 123",
                    "originalDescription": "WHOLE FOODS MKT #123",
                    "merchantId": "WHOLEFOODSMKT123",
                    "transactionType": "credit",
                    "category": "OTHER",
                    "aiTags": [],
                    "confidence": 0.8,
                    "amountThreshold": {"isWithinLimits": True, "threshold": "NORMAL"},
                    "source": "csv",
                    "schemaVersion": "1.0.0",
                }
            ]
        },
    )

    amount: Decimal = Field(description="Signed amount in dollars")
    date: str = Field(description="ISO 8601 date or timestamp, as received")
    description: str = Field(min_length=1, description="Cleaned description")
    original_description: str = Field(description="Description exactly as received")
    merchant_id: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Deterministic merchant key derived from the description",
    )
    recurring_id: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    transaction_type: TransactionType
    category: TransactionCategory = Field(default=TransactionCategory.OTHER)
    ai_tags: list[TransactionTag] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    amount_threshold: Optional[AmountThreshold] = Field(default=None)
    source: str = Field(min_length=1)
    schema_version: str = Field(default="1.0.0")
    processing_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @field_validator("amount")
    @classmethod
    def validate_amount_range(cls, v: Decimal) -> Decimal:
        """Amounts must be finite and within the supported money range."""
        if not v.is_finite() or abs(v) > MAX_DOLLARS:
            raise ValueError(f"Amount out of range: {v}")
        return v

    @field_validator("date")
    @classmethod
    def validate_iso_date(cls, v: str) -> str:
        """Dates must parse as ISO 8601."""
        candidate = v.strip()
        try:
            if not _ISO_DATE_PREFIX.match(candidate):
                raise ValueError(candidate)
            _ISO_DATE_OR_DATETIME.validate_python(candidate)
        except ValueError:
            raise ValueError(f"Invalid date format: {v}") from None
        return v

    @computed_field
    @property
    def amount_cents(self) -> int:
        """The amount in integer cents, rounded half-up."""
        return dollars_to_cents(self.amount)

    @property
    def is_debit(self) -> bool:
        return self.transaction_type is TransactionType.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.transaction_type is TransactionType.CREDIT
