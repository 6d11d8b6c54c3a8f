"""Tests for transaction normalization."""

from decimal import Decimal

import pytest

from centsible_core.config import IngestionConfig
from centsible_core.exceptions import TransactionError, TransactionErrorCode
from centsible_core.models import (
    RawTransaction,
    ThresholdLevel,
    TransactionCategory,
    TransactionTag,
    TransactionType,
)
from centsible_core.transactions import (
    TransactionProcessor,
    calculate_confidence,
    clean_description,
    generate_merchant_id,
    get_amount_threshold,
    parse_transaction_amount,
)


class TestFieldDerivation:
    """Tests for the individual derivation helpers."""

    def test_parse_transaction_amount(self):
        assert parse_transaction_amount("42.99") == Decimal("42.99")
        assert parse_transaction_amount("$1,234.56") == Decimal("1234.56")
        assert parse_transaction_amount("-25.50") == Decimal("-25.50")
        assert parse_transaction_amount(12) == Decimal("12")
        assert parse_transaction_amount(10.5) == Decimal("10.5")

    def test_parse_uses_leading_number(self):
        assert parse_transaction_amount("12.5-3") == Decimal("12.5")

    def test_parse_rejects_unusable_values(self):
        assert parse_transaction_amount("abc") is None
        assert parse_transaction_amount("") is None
        assert parse_transaction_amount(float("nan")) is None
        assert parse_transaction_amount(float("inf")) is None
        assert parse_transaction_amount(None) is None
        assert parse_transaction_amount(True) is None

    def test_generate_merchant_id(self):
        assert generate_merchant_id("WHOLE FOODS MKT #123") == "WHOLEFOODSMKT123"
        assert generate_merchant_id("Starbucks Coffee") == "STARBUCKSCOFFEE"
        assert len(generate_merchant_id("A" * 80)) == 50

    def test_merchant_id_is_deterministic(self):
        assert generate_merchant_id("Shell Oil 0042") == generate_merchant_id("Shell Oil 0042")

    def test_clean_description(self):
        assert clean_description("  WHOLE   FOODS MKT #123 ") == "WHOLE FOODS MKT 123"
        assert clean_description("Pay-Pal *Transfer") == "Pay-Pal Transfer"
        assert len(clean_description("x" * 150)) == 100

    def test_confidence_bands(self):
        merchant = "WHOLEFOODSMKT123"
        assert calculate_confidence(
            "WHOLE FOODS MKT 123", TransactionCategory.OTHER, Decimal("42.99"), merchant
        ) == pytest.approx(0.8)
        assert calculate_confidence(
            "WHOLE FOODS MKT 123", TransactionCategory.FOOD, Decimal("42.99"), merchant
        ) == pytest.approx(1.0)
        assert calculate_confidence(
            "ATM", TransactionCategory.OTHER, Decimal("2500"), None
        ) == pytest.approx(0.4)

    @pytest.mark.parametrize(
        "amount,level,within",
        [
            ("42.99", ThresholdLevel.NORMAL, True),
            ("1000", ThresholdLevel.NORMAL, True),
            ("1000.01", ThresholdLevel.HIGH, True),
            ("-1500", ThresholdLevel.HIGH, True),
            ("5000", ThresholdLevel.HIGH, True),
            ("5000.01", ThresholdLevel.VERY_HIGH, False),
            ("-7500", ThresholdLevel.VERY_HIGH, False),
        ],
    )
    def test_amount_threshold(self, amount, level, within):
        threshold = get_amount_threshold(Decimal(amount))
        assert threshold.threshold is level
        assert threshold.is_within_limits is within


class TestProcess:
    """Tests for TransactionProcessor.process."""

    def test_whole_foods_row(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process(whole_foods_row)

        assert txn.amount == Decimal("42.99")
        assert txn.amount_cents == 4299
        assert txn.transaction_type is TransactionType.CREDIT
        assert txn.merchant_id == "WHOLEFOODSMKT123"
        assert txn.description == "WHOLE FOODS MKT 123"
        assert txn.original_description == "WHOLE FOODS MKT #123"
        assert txn.category is TransactionCategory.OTHER
        assert txn.ai_tags == []
        assert txn.confidence == pytest.approx(0.8)
        assert txn.amount_threshold.threshold is ThresholdLevel.NORMAL
        assert txn.amount_threshold.is_within_limits is True
        assert txn.source == "csv"
        assert txn.schema_version == "1.0.0"
        assert txn.date == "2023-01-01T00:00:00Z"

    def test_accepts_raw_transaction_model(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process(RawTransaction(**whole_foods_row))
        assert txn.merchant_id == "WHOLEFOODSMKT123"

    def test_negative_amount_is_debit(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process({**whole_foods_row, "raw_amount": "-25.50"})

        assert txn.transaction_type is TransactionType.DEBIT
        assert txn.is_debit
        assert txn.amount_cents == -2550

    def test_zero_string_amount_is_debit(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process({**whole_foods_row, "raw_amount": "0.00"})
        assert txn.transaction_type is TransactionType.DEBIT

    def test_formatted_amount(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process({**whole_foods_row, "raw_amount": "$1,234.56"})

        assert txn.amount == Decimal("1234.56")
        assert txn.amount_threshold.threshold is ThresholdLevel.HIGH

    def test_missing_fields_are_listed(self, processor: TransactionProcessor):
        with pytest.raises(TransactionError) as exc_info:
            processor.process({"raw_amount": "10.00", "raw_description": ""})

        assert exc_info.value.code is TransactionErrorCode.MISSING_FIELDS
        assert exc_info.value.field == "raw_date, raw_description"
        assert exc_info.value.recoverable is True

    def test_numeric_zero_amount_counts_as_missing(
        self, processor: TransactionProcessor, whole_foods_row
    ):
        with pytest.raises(TransactionError) as exc_info:
            processor.process({**whole_foods_row, "raw_amount": 0})
        assert exc_info.value.code is TransactionErrorCode.MISSING_FIELDS
        assert exc_info.value.field == "raw_amount"

    def test_invalid_amount(self, processor: TransactionProcessor, whole_foods_row):
        with pytest.raises(TransactionError) as exc_info:
            processor.process({**whole_foods_row, "raw_amount": "abc"})

        assert exc_info.value.code is TransactionErrorCode.INVALID_AMOUNT
        assert exc_info.value.field == "raw_amount"

    def test_invalid_date_is_processing_error(
        self, processor: TransactionProcessor, whole_foods_row
    ):
        with pytest.raises(TransactionError) as exc_info:
            processor.process({**whole_foods_row, "raw_date": "not-a-date"})

        assert exc_info.value.code is TransactionErrorCode.PROCESSING_ERROR
        assert "date" in exc_info.value.message

    def test_description_with_only_symbols_fails_schema(
        self, processor: TransactionProcessor, whole_foods_row
    ):
        with pytest.raises(TransactionError) as exc_info:
            processor.process({**whole_foods_row, "raw_description": "###"})
        assert exc_info.value.code is TransactionErrorCode.PROCESSING_ERROR

    def test_amount_out_of_range(self, processor: TransactionProcessor, whole_foods_row):
        with pytest.raises(TransactionError) as exc_info:
            processor.process({**whole_foods_row, "raw_amount": "2000000000"})
        assert exc_info.value.code is TransactionErrorCode.PROCESSING_ERROR

    def test_non_mapping_input(self, processor: TransactionProcessor):
        with pytest.raises(TransactionError) as exc_info:
            processor.process(42)
        assert exc_info.value.code is TransactionErrorCode.PROCESSING_ERROR

    def test_classifier_output_is_kept(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process(
            {
                **whole_foods_row,
                "category": "FOOD",
                "ai_tags": ["essential", "recurring"],
            }
        )

        assert txn.category is TransactionCategory.FOOD
        assert txn.ai_tags == [TransactionTag.ESSENTIAL, TransactionTag.RECURRING]
        assert txn.confidence == pytest.approx(1.0)

    def test_classifier_overrides(self, processor: TransactionProcessor, whole_foods_row):
        txn = processor.process(
            {**whole_foods_row, "confidence": 0.35, "merchant_id": "WFM"}
        )

        assert txn.confidence == pytest.approx(0.35)
        assert txn.merchant_id == "WFM"

    def test_invalid_classifier_output(self, processor: TransactionProcessor, whole_foods_row):
        for override in (
            {"category": "GROCERIES"},
            {"ai_tags": ["made_up"]},
            {"confidence": 1.5},
        ):
            with pytest.raises(TransactionError) as exc_info:
                processor.process({**whole_foods_row, **override})
            assert exc_info.value.code is TransactionErrorCode.PROCESSING_ERROR

    def test_source_and_version_come_from_config(self, whole_foods_row):
        processor = TransactionProcessor(
            IngestionConfig(default_source="upload", schema_version="2.0.0")
        )
        row = {k: v for k, v in whole_foods_row.items() if k != "source"}

        txn = processor.process(row)

        assert txn.source == "upload"
        assert txn.schema_version == "2.0.0"

    def test_serializes_with_camel_case_aliases(
        self, processor: TransactionProcessor, whole_foods_row
    ):
        txn = processor.process(whole_foods_row)
        data = txn.model_dump(mode="json", by_alias=True)

        assert data["merchantId"] == "WHOLEFOODSMKT123"
        assert data["originalDescription"] == "WHOLE FOODS MKT #123"
        assert data["transactionType"] == "credit"
        assert data["amountThreshold"] == {"isWithinLimits": True, "threshold": "NORMAL"}
        assert "amount_cents" in txn.model_dump()

    def test_processing_is_pure(self, processor: TransactionProcessor, whole_foods_row):
        first = processor.process(whole_foods_row)
        second = processor.process(whole_foods_row)

        exclude = {"processing_timestamp"}
        assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)


class TestProcessBatch:
    """Tests for TransactionProcessor.process_batch."""

    def test_failures_do_not_stop_the_batch(
        self, processor: TransactionProcessor, whole_foods_row
    ):
        rows = [
            whole_foods_row,
            {**whole_foods_row, "raw_amount": "abc"},
            {**whole_foods_row, "raw_amount": "-12.00"},
            {"raw_amount": "5"},
        ]

        result = processor.process_batch(rows)

        assert result.total == 4
        assert result.succeeded == 2
        assert result.failed == 2
        assert result.summary == "2 of 4 rows failed"
        assert [(e.index, e.code) for e in result.errors] == [
            (1, TransactionErrorCode.INVALID_AMOUNT),
            (3, TransactionErrorCode.MISSING_FIELDS),
        ]

    def test_empty_batch(self, processor: TransactionProcessor):
        result = processor.process_batch([])

        assert result.total == 0
        assert result.summary == "0 of 0 rows failed"
