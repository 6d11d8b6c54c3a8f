"""Tests for the money helpers."""

from decimal import Decimal

import pytest

from centsible_core.exceptions import InvalidAmountError, ValidationError
from centsible_core.money import (
    MAX_CENTS,
    cents_to_dollars,
    dollars_to_cents,
    ensure_cents,
    format_money,
    is_valid_money_amount,
    parse_dollar_amount,
)


class TestParseDollarAmount:
    """Tests for parse_dollar_amount."""

    def test_number_inputs(self):
        assert parse_dollar_amount(10.99) == Decimal("10.99")
        assert parse_dollar_amount(0) == Decimal("0")
        assert parse_dollar_amount(-10.99) == Decimal("-10.99")
        assert parse_dollar_amount(Decimal("5")) == Decimal("5.00")

    def test_string_inputs(self):
        assert parse_dollar_amount("10.99") == Decimal("10.99")
        assert parse_dollar_amount("$10.99") == Decimal("10.99")
        assert parse_dollar_amount("$1,234.56") == Decimal("1234.56")
        assert parse_dollar_amount("-10.99") == Decimal("-10.99")
        assert parse_dollar_amount("  $10.99  ") == Decimal("10.99")

    def test_parentheses_mean_negative(self):
        """Accounting notation ($10.99) is a negative amount."""
        assert parse_dollar_amount("($10.99)") == Decimal("-10.99")

    def test_invalid_inputs_return_none(self):
        assert parse_dollar_amount("invalid") is None
        assert parse_dollar_amount("$1B") is None
        assert parse_dollar_amount("") is None
        assert parse_dollar_amount("1_000") is None
        assert parse_dollar_amount(float("nan")) is None
        assert parse_dollar_amount(float("inf")) is None
        assert parse_dollar_amount(None) is None
        assert parse_dollar_amount(True) is None

    def test_out_of_range_returns_none(self):
        """Values above $1B are rejected, not clamped."""
        assert parse_dollar_amount(1000000001) is None
        assert parse_dollar_amount("-1,000,000,000.01") is None
        assert parse_dollar_amount(1000000000) == Decimal("1000000000.00")

    def test_rounds_half_up_to_cents(self):
        assert parse_dollar_amount(10.999) == Decimal("11.00")
        assert parse_dollar_amount(10.994) == Decimal("10.99")
        assert parse_dollar_amount(10.995) == Decimal("11.00")


class TestDollarsToCents:
    """Tests for dollars_to_cents."""

    def test_converts_numbers(self):
        assert dollars_to_cents(10.99) == 1099
        assert dollars_to_cents(0) == 0
        assert dollars_to_cents(-10.99) == -1099

    def test_converts_strings(self):
        assert dollars_to_cents("$10.99") == 1099
        assert dollars_to_cents("1,234.56") == 123456

    def test_rounds_to_nearest_cent(self):
        assert dollars_to_cents(10.994) == 1099
        assert dollars_to_cents(10.995) == 1100
        assert dollars_to_cents(10.996) == 1100

    def test_invalid_input_raises(self):
        """Invalid input is never coerced to zero."""
        with pytest.raises(InvalidAmountError):
            dollars_to_cents("invalid")
        with pytest.raises(InvalidAmountError):
            dollars_to_cents(float("nan"))
        with pytest.raises(InvalidAmountError):
            dollars_to_cents(float("inf"))
        with pytest.raises(InvalidAmountError):
            dollars_to_cents(2_000_000_000)

    def test_error_is_not_recoverable(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            dollars_to_cents("abc")
        assert exc_info.value.recoverable is False
        assert "abc" in exc_info.value.message


class TestCentsToDollars:
    """Tests for cents_to_dollars."""

    def test_converts_cents(self):
        assert cents_to_dollars(1099) == Decimal("10.99")
        assert cents_to_dollars(0) == Decimal("0.00")
        assert cents_to_dollars(-1099) == Decimal("-10.99")

    def test_fractional_cents_round_half_up(self):
        assert cents_to_dollars(1099.5) == Decimal("11.00")
        assert cents_to_dollars(1099.4) == Decimal("10.99")

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidAmountError):
            cents_to_dollars(float("nan"))

    @pytest.mark.parametrize(
        "cents",
        [0, 1, -1, 99, 1099, -1099, 123456789, MAX_CENTS - 1, MAX_CENTS, -MAX_CENTS],
    )
    def test_round_trip_is_exact(self, cents):
        """Integer cents survive a trip through dollars unchanged."""
        assert dollars_to_cents(cents_to_dollars(cents)) == cents


class TestFormatMoney:
    """Tests for format_money."""

    def test_usd_by_default(self):
        assert format_money(1099) == "$10.99"
        assert format_money(0) == "$0.00"
        assert format_money(-1099) == "-$10.99"
        assert format_money(123456789) == "$1,234,567.89"

    def test_other_locales_and_currencies(self):
        eur = format_money(1099, "de-DE", "EUR")
        assert "10,99" in eur
        assert "€" in eur

        gbp = format_money(1099, "en-GB", "GBP")
        assert "10.99" in gbp
        assert "£" in gbp

    def test_yen_has_no_fraction_digits(self):
        jpy = format_money(1099, "ja-JP", "JPY")
        assert "11" in jpy
        assert "." not in jpy
        assert "￥" in jpy or "¥" in jpy

    def test_totals_beyond_storable_range(self):
        """Sums of valid amounts can exceed MAX_CENTS and still display."""
        assert format_money(2 * MAX_CENTS) == "$2,000,000,000.00"
        assert format_money(-3 * MAX_CENTS) == "-$3,000,000,000.00"

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidAmountError):
            format_money(float("inf"))

    def test_unknown_locale_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            format_money(1099, "xx-XX")
        assert exc_info.value.field == "locale"


class TestIsValidMoneyAmount:
    """Tests for is_valid_money_amount."""

    def test_valid_amounts(self):
        assert is_valid_money_amount(10.99) is True
        assert is_valid_money_amount(0) is True
        assert is_valid_money_amount(-10.99) is True
        assert is_valid_money_amount(999999999) is True
        assert is_valid_money_amount(Decimal("12.34")) is True

    def test_invalid_amounts(self):
        assert is_valid_money_amount("10.99") is False
        assert is_valid_money_amount(float("nan")) is False
        assert is_valid_money_amount(float("inf")) is False
        assert is_valid_money_amount(1000000001) is False
        assert is_valid_money_amount(None) is False
        assert is_valid_money_amount(True) is False


class TestEnsureCents:
    """Tests for ensure_cents."""

    def test_accepts_integer_cents(self):
        assert ensure_cents(500000) == 500000
        assert ensure_cents(-1) == -1

    def test_rejects_non_integers(self):
        with pytest.raises(InvalidAmountError):
            ensure_cents(10.5)
        with pytest.raises(InvalidAmountError):
            ensure_cents("100")
        with pytest.raises(InvalidAmountError):
            ensure_cents(True)

    def test_rejects_out_of_range(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            ensure_cents(MAX_CENTS + 1, field="total_income")
        assert exc_info.value.field == "total_income"
