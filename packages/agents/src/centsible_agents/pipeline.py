"""Classified ingestion: classifier, then normalizer.

For each raw row the external classifier is asked for a category and tags,
its answer is merged into the row and the row is normalized by the core
``TransactionProcessor``. The core never retries; this module owns retries
around the classifier and the optional keyword fallback.
"""

import time
from typing import Iterable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from centsible_core.exceptions import TransactionError
from centsible_core.models import EnhancedTransaction, RawTransaction
from centsible_core.transactions import (
    REQUIRED_FIELDS,
    BatchResult,
    RawInput,
    RowError,
    TransactionProcessor,
)

from .classifier import KeywordClassifier
from .config import ClassifierConfig
from .exceptions import ClassificationError
from .interfaces.base import Classification, ClassifierProtocol

logger = structlog.get_logger()


def _as_classification(answer: object) -> Classification:
    """Accept a Classification or anything that validates into one, such as
    the parsed JSON of an AI response.

    Raises:
        ValueError: If the answer is not a usable classification.
    """
    if isinstance(answer, Classification):
        return answer
    try:
        return Classification.model_validate(answer)
    except PydanticValidationError as e:
        raise ValueError(
            f"Malformed classification ({type(answer).__name__}): "
            f"{e.error_count()} validation error(s)"
        ) from e


class ClassifiedIngestion:
    """Normalize raw rows with categories from an external classifier.

    Args:
        classifier: Primary classifier, typically an AI service client.
        processor: Normalizer to use; a default TransactionProcessor if None.
        config: Retry and fallback settings.
        fallback: Classifier used once the primary one has failed
            ``max_retries + 1`` times. Defaults to a KeywordClassifier when
            ``config.use_fallback`` is set.

    Example:
        ingestion = ClassifiedIngestion(ai_client, config=ClassifierConfig(retry_delay=0.5))
        result = ingestion.process_batch(rows)
        print(result.summary)
    """

    def __init__(
        self,
        classifier: ClassifierProtocol,
        processor: Optional[TransactionProcessor] = None,
        config: Optional[ClassifierConfig] = None,
        fallback: Optional[ClassifierProtocol] = None,
    ):
        self.classifier = classifier
        self.processor = processor or TransactionProcessor()
        self.config = config or ClassifierConfig()
        if fallback is None and self.config.use_fallback:
            fallback = KeywordClassifier()
        self.fallback = fallback

    def classify(self, raw: RawTransaction) -> Classification:
        """Call the classifier, retrying on failure.

        A malformed answer counts as a failed attempt.

        Raises:
            ClassificationError: If every attempt failed and there is no
                fallback, or the fallback failed as well.
        """
        attempts = self.config.max_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                return _as_classification(self.classifier.classify(raw))
            except Exception as e:
                last_error = e
                if attempt < attempts:
                    logger.warning(
                        "classifier_retry",
                        attempt=attempt,
                        max_attempts=attempts,
                        error=str(e),
                    )
                    if self.config.retry_delay:
                        time.sleep(self.config.retry_delay)

        if self.fallback is not None:
            logger.warning("classifier_fallback", attempts=attempts, error=str(last_error))
            try:
                return _as_classification(self.fallback.classify(raw))
            except Exception as e:
                raise ClassificationError(
                    f"Fallback classifier failed: {e}",
                    attempts=attempts,
                ) from e

        raise ClassificationError(
            f"Classifier failed after {attempts} attempts: {last_error}",
            attempts=attempts,
        ) from last_error

    def process(self, raw: RawInput) -> EnhancedTransaction:
        """Classify and normalize one row.

        Rows missing a required field are not sent to the classifier; the
        normalizer rejects them with MISSING_FIELDS.

        Raises:
            TransactionError: Including ClassificationError.
        """
        row = self.processor.coerce(raw)
        if all(getattr(row, name) for name in REQUIRED_FIELDS):
            row = self.classify(row).apply_to(row)
        return self.processor.process(row)

    def process_batch(self, rows: Iterable[RawInput]) -> BatchResult:
        """Process rows independently; one failure never stops the rest."""
        result = BatchResult(total=0)

        for index, raw in enumerate(rows):
            result.total += 1
            try:
                result.transactions.append(self.process(raw))
            except TransactionError as e:
                result.errors.append(
                    RowError(index=index, code=e.code, message=e.message, field=e.field)
                )
                logger.info(
                    "transaction_row_failed",
                    row=index,
                    code=e.code.value,
                    field=e.field,
                )

        logger.info(
            "classified_batch_processed",
            total=result.total,
            succeeded=result.succeeded,
            failed=result.failed,
        )
        return result


__all__ = ["ClassifiedIngestion"]
