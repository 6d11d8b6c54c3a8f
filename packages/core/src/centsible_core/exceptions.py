"""Custom exceptions for the Centsible core.

This module provides a hierarchy of exception classes for consistent error
handling across the budget engine, the transaction normalizer and the money
helpers. All exceptions inherit from CentsibleError, making it easy to catch
all application-specific errors.

Example:
    try:
        txn = processor.process(row)
    except TransactionError as e:
        # Report the row and move on to the next one
        failures.append((row, e.code, e.field))
    except CentsibleError as e:
        logger.error("unexpected_failure", error=str(e))
"""

from enum import Enum
from typing import Any, Optional


class BudgetErrorCode(str, Enum):
    """Rejection reasons produced by the allocation guard and reducer."""

    NEGATIVE_ALLOCATION = "NegativeAllocation"
    INCOME_NOT_SET = "IncomeNotSet"
    EXCEEDS_INCOME = "ExceedsIncome"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    SAVINGS_EXCEEDS_INCOME = "SavingsExceedsIncome"
    NOT_FOUND = "NotFound"


class TransactionErrorCode(str, Enum):
    """Failure codes for transaction normalization."""

    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    PROCESSING_ERROR = "PROCESSING_ERROR"


class CentsibleError(Exception):
    """Base exception for all Centsible errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise CentsibleError("Something went wrong", details={"code": 500})
        CentsibleError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(CentsibleError):
    """Error raised when user-provided data fails validation.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Savings cannot exceed income",
        ...     field="target_savings",
        ...     value=600000,
        ...     constraint="target_savings <= total_income",
        ... )
        ValidationError: Savings cannot exceed income
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True since the caller normally re-prompts.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class BudgetValidationError(ValidationError):
    """An allocation, income or savings change rejected by the budget guard.

    The budget state is never modified when this error is produced; the
    caller shows ``message`` next to the offending field and re-prompts.

    Example:
        >>> raise BudgetValidationError(
        ...     "Insufficient funds. Available: $2000.00",
        ...     code=BudgetErrorCode.INSUFFICIENT_FUNDS,
        ...     field="allocated_amount",
        ...     value=250000,
        ... )
        BudgetValidationError: Insufficient funds. Available: $2000.00
    """

    def __init__(
        self,
        message: str,
        *,
        code: BudgetErrorCode,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            field=field,
            value=value,
            constraint=constraint,
            details=details,
        )
        self.code = code
        self.details["code"] = code.value


class AllocationNotFoundError(CentsibleError):
    """Raised when an operation targets an allocation id that does not exist."""

    code = BudgetErrorCode.NOT_FOUND

    def __init__(
        self,
        allocation_id: str,
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Allocation not found: {allocation_id}",
            details=details,
            recoverable=True,
        )
        self.allocation_id = allocation_id
        self.details["allocation_id"] = allocation_id
        self.details["code"] = self.code.value


class InvalidAmountError(ValidationError):
    """Raised when a money value cannot be converted.

    Conversion failures are fatal to the call: a non-finite, unparseable or
    out-of-range amount is never coerced to zero.
    """

    def __init__(
        self,
        message: str,
        *,
        value: Optional[Any] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            field=field,
            value=None if value is None else repr(value),
            constraint="finite amount with magnitude <= $1,000,000,000",
            recoverable=False,
        )


class TransactionError(CentsibleError):
    """Error raised when a raw transaction cannot be normalized.

    Every failure is typed with a ``code`` and, where it can be attributed,
    the ``field`` at fault. Errors are recoverable per row: batch callers
    report the row and continue with the next one.

    Example:
        >>> raise TransactionError(
        ...     "Missing required fields",
        ...     code=TransactionErrorCode.MISSING_FIELDS,
        ...     field="raw_amount, raw_date",
        ... )
        TransactionError: Missing required fields
    """

    def __init__(
        self,
        message: str,
        *,
        code: TransactionErrorCode,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=True)
        self.code = code
        self.field = field

        self.details["code"] = code.value
        if field:
            self.details["field"] = field


class ConfigurationError(CentsibleError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "BudgetErrorCode",
    "TransactionErrorCode",
    "CentsibleError",
    "ValidationError",
    "BudgetValidationError",
    "AllocationNotFoundError",
    "InvalidAmountError",
    "TransactionError",
    "ConfigurationError",
]
