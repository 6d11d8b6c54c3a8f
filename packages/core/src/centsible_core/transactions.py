"""Transaction normalization.

Turns one raw candidate transaction (a CSV row, or a row already enriched
by an external classifier) into exactly one ``EnhancedTransaction``, or
raises a ``TransactionError``. Nothing is silently dropped or coerced:

1. raw_amount, raw_date and raw_description must be present
2. the amount must parse to a finite number
3. a merchant id and a cleaned description are derived
4. type, confidence and amount threshold are derived
5. the assembled record is validated against the schema

Category and tags are never invented here. They come from the caller, or
default to OTHER and no tags.
"""

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from .config import IngestionConfig
from .exceptions import TransactionError, TransactionErrorCode
from .models.transaction import (
    AmountThreshold,
    EnhancedTransaction,
    RawTransaction,
    ThresholdLevel,
    TransactionCategory,
    TransactionType,
)

logger = structlog.get_logger()

REQUIRED_FIELDS = ("raw_amount", "raw_date", "raw_description")

MERCHANT_ID_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 100

HIGH_AMOUNT = Decimal("1000")
VERY_HIGH_AMOUNT = Decimal("5000")

_NON_AMOUNT_CHARS = re.compile(r"[^0-9.\-]")
# Longest numeric prefix, the way a lenient float parser reads "12.5-3" as 12.5
_LEADING_FLOAT = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)")
_NON_MERCHANT_CHARS = re.compile(r"[^A-Z0-9]")
_WHITESPACE = re.compile(r"\s+")
_NON_DESCRIPTION_CHARS = re.compile(r"[^\w\s-]", re.ASCII)

RawInput = Union[RawTransaction, Mapping[str, Any]]


# =============================================================================
# FIELD DERIVATION
# =============================================================================


def parse_transaction_amount(value: Any) -> Optional[Decimal]:
    """Parse a raw amount.

    Numbers are accepted if finite. Strings are stripped of everything but
    digits, ``.`` and ``-`` and their leading numeric part is used, so
    "$1,234.56" gives 1234.56. Returns None when nothing usable remains.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if not isinstance(value, str):
        return None

    match = _LEADING_FLOAT.match(_NON_AMOUNT_CHARS.sub("", value))
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def generate_merchant_id(description: str) -> str:
    """Derive a deterministic merchant key from a description.

    >>> generate_merchant_id("WHOLE FOODS MKT #123")
    'WHOLEFOODSMKT123'
    """
    return _NON_MERCHANT_CHARS.sub("", description.upper())[:MERCHANT_ID_MAX_LENGTH]


def clean_description(description: str) -> str:
    """Trim, collapse whitespace and strip special characters except hyphens."""
    cleaned = _WHITESPACE.sub(" ", description.strip())
    cleaned = _NON_DESCRIPTION_CHARS.sub("", cleaned)
    return cleaned[:DESCRIPTION_MAX_LENGTH]


def calculate_confidence(
    description: str,
    category: Union[TransactionCategory, str],
    amount: Decimal,
    merchant_id: Optional[str],
) -> float:
    """Heuristic confidence of the derived fields, in [0, 1].

    Additive bands, capped at 1.0:
        description longer than 3 chars   0.3 (else 0.1)
        category other than OTHER         0.3 (else 0.1)
        absolute amount under 1000        0.2 (else 0.1)
        merchant id present               0.2 (else 0.1)
    """
    # Scored in tenths to keep the bands exact
    score = 3 if len(description) > 3 else 1
    score += 3 if category != TransactionCategory.OTHER else 1
    score += 2 if abs(amount) < HIGH_AMOUNT else 1
    score += 2 if merchant_id else 1
    return min(score / 10, 1.0)


def get_amount_threshold(amount: Decimal) -> AmountThreshold:
    """Classify an amount into a risk band."""
    magnitude = abs(amount)
    if magnitude > VERY_HIGH_AMOUNT:
        level = ThresholdLevel.VERY_HIGH
    elif magnitude > HIGH_AMOUNT:
        level = ThresholdLevel.HIGH
    else:
        level = ThresholdLevel.NORMAL
    return AmountThreshold(
        is_within_limits=magnitude <= VERY_HIGH_AMOUNT,
        threshold=level,
    )


def _format_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else item.get("msg", ""))
    return "; ".join(parts)


# =============================================================================
# PROCESSOR
# =============================================================================


@dataclass(frozen=True)
class RowError:
    """A failed row in a batch."""

    index: int
    code: TransactionErrorCode
    message: str
    field: Optional[str] = None


@dataclass
class BatchResult:
    """Outcome of normalizing a batch of rows."""

    total: int
    transactions: list[EnhancedTransaction] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def succeeded(self) -> int:
        return len(self.transactions)

    @property
    def summary(self) -> str:
        return f"{self.failed} of {self.total} rows failed"


class TransactionProcessor:
    """Normalize raw transactions into EnhancedTransaction records.

    The processor holds only configuration; ``process`` is a pure function
    of its input, so one instance can be shared across threads.
    """

    def __init__(self, config: Optional[IngestionConfig] = None):
        """
        Args:
            config: Ingestion settings (default source, schema version).
        """
        self.config = config or IngestionConfig()

    def coerce(self, raw: RawInput) -> RawTransaction:
        """Turn a mapping into a RawTransaction, failing with PROCESSING_ERROR."""
        if isinstance(raw, RawTransaction):
            return raw
        try:
            return RawTransaction.model_validate(dict(raw))
        except (PydanticValidationError, TypeError, ValueError) as e:
            message = (
                _format_validation_error(e)
                if isinstance(e, PydanticValidationError)
                else str(e)
            )
            raise TransactionError(
                f"Malformed raw transaction: {message}",
                code=TransactionErrorCode.PROCESSING_ERROR,
            ) from e

    def process(self, raw: RawInput) -> EnhancedTransaction:
        """Process one raw transaction.

        Args:
            raw: A RawTransaction or a mapping with the same keys.

        Returns:
            The normalized, schema-validated transaction.

        Raises:
            TransactionError: MISSING_FIELDS, INVALID_AMOUNT or
                PROCESSING_ERROR. No partial record is ever returned.
        """
        row = self.coerce(raw)

        missing = [name for name in REQUIRED_FIELDS if not getattr(row, name)]
        if missing:
            raise TransactionError(
                "Missing required fields",
                code=TransactionErrorCode.MISSING_FIELDS,
                field=", ".join(missing),
            )

        amount = parse_transaction_amount(row.raw_amount)
        if amount is None:
            raise TransactionError(
                f"Invalid amount: {row.raw_amount}",
                code=TransactionErrorCode.INVALID_AMOUNT,
                field="raw_amount",
            )

        original = str(row.raw_description)
        description = clean_description(original)
        merchant_id = (
            row.merchant_id
            if row.merchant_id is not None
            else generate_merchant_id(original)
        )
        category = row.category or TransactionCategory.OTHER
        confidence = (
            row.confidence
            if row.confidence is not None
            else calculate_confidence(description, category, amount, merchant_id)
        )

        try:
            transaction = EnhancedTransaction(
                amount=amount,
                date=str(row.raw_date),
                description=description,
                original_description=original,
                merchant_id=merchant_id,
                transaction_type=(
                    TransactionType.CREDIT if amount > 0 else TransactionType.DEBIT
                ),
                category=category,
                ai_tags=row.ai_tags,
                confidence=confidence,
                amount_threshold=get_amount_threshold(amount),
                source=row.source or self.config.default_source,
                schema_version=self.config.schema_version,
            )
        except PydanticValidationError as e:
            raise TransactionError(
                _format_validation_error(e),
                code=TransactionErrorCode.PROCESSING_ERROR,
            ) from e

        logger.debug(
            "transaction_processed",
            merchant_id=transaction.merchant_id,
            threshold=transaction.amount_threshold.threshold.value,
            confidence=transaction.confidence,
        )
        return transaction

    def process_batch(self, rows: Iterable[RawInput]) -> BatchResult:
        """Process rows independently; one failure never stops the rest."""
        transactions: list[EnhancedTransaction] = []
        errors: list[RowError] = []
        total = 0

        for index, raw in enumerate(rows):
            total += 1
            try:
                transactions.append(self.process(raw))
            except TransactionError as e:
                errors.append(
                    RowError(index=index, code=e.code, message=e.message, field=e.field)
                )
                logger.info(
                    "transaction_row_failed",
                    row=index,
                    code=e.code.value,
                    field=e.field,
                )

        result = BatchResult(total=total, transactions=transactions, errors=errors)
        logger.info(
            "batch_processed",
            total=result.total,
            succeeded=result.succeeded,
            failed=result.failed,
        )
        return result


__all__ = [
    "REQUIRED_FIELDS",
    "parse_transaction_amount",
    "generate_merchant_id",
    "clean_description",
    "calculate_confidence",
    "get_amount_threshold",
    "RowError",
    "BatchResult",
    "TransactionProcessor",
]
