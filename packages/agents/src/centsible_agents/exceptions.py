"""Exceptions raised by the agents package."""

from typing import Any, Optional

from centsible_core.exceptions import TransactionError, TransactionErrorCode


class ClassificationError(TransactionError):
    """The classifier kept failing for a row after all retries.

    A TransactionError with code PROCESSING_ERROR, so batch callers report
    it like any other failed row.

    Attributes:
        attempts: Number of classifier calls made for the row.
    """

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            code=TransactionErrorCode.PROCESSING_ERROR,
            field="category",
            details=details,
        )
        self.attempts = attempts
        self.details["attempts"] = attempts


__all__ = ["ClassificationError"]
