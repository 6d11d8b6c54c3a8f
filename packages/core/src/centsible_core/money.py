"""Money helpers for consistent handling of monetary values.

Amounts are stored and transported as integer cents. Dollars only appear at
the input and presentation boundary, and are always ``Decimal``; no
binary floating-point value reaches storage.

All conversions round half-up to the nearest cent. Magnitudes above
$1,000,000,000 are rejected, never clamped.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

from babel.core import Locale, UnknownLocaleError
from babel.numbers import UnknownCurrencyError, format_currency

from .exceptions import InvalidAmountError, ValidationError

MAX_DOLLARS = Decimal("1000000000")
MAX_CENTS = 100_000_000_000

CENT = Decimal("0.01")
_WHOLE = Decimal("1")

# Characters dropped from user-typed amounts: currency symbol, separators, spaces
_STRIP_CHARS = re.compile(r"[$,\s]")
_PARENTHESIZED = re.compile(r"^\((.*)\)$")
_DECIMAL_LITERAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

Number = Union[int, float, Decimal]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _number_to_decimal(value: Number) -> Optional[Decimal]:
    """Convert a finite number to Decimal, or None for NaN/Infinity."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # str() keeps the shortest repr, so 10.995 stays 10.995
        return Decimal(str(value))
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    return Decimal(value)


def _string_to_decimal(value: str) -> Optional[Decimal]:
    cleaned = _STRIP_CHARS.sub("", value)
    negate = False
    match = _PARENTHESIZED.match(cleaned)
    if match:
        cleaned = match.group(1)
        negate = True

    if not _DECIMAL_LITERAL.match(cleaned):
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return -amount if negate else amount


def parse_dollar_amount(value: Any) -> Optional[Decimal]:
    """Parse a string or number into a dollar amount.

    Strings may carry a ``$`` sign, thousands separators and surrounding
    whitespace; an amount wrapped in parentheses is negative, as in
    accounting statements.

    Args:
        value: String or number representing dollars (e.g. "$1,234.56").

    Returns:
        The amount rounded half-up to cents, or None if the value is not a
        finite amount within the supported range.

    Example:
        >>> parse_dollar_amount("($10.99)")
        Decimal('-10.99')
    """
    if _is_number(value):
        amount = _number_to_decimal(value)
    elif isinstance(value, str):
        amount = _string_to_decimal(value)
    else:
        return None

    if amount is None or abs(amount) > MAX_DOLLARS:
        return None
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def dollars_to_cents(value: Any) -> int:
    """Convert a dollar amount (number or string) to integer cents.

    Raises:
        InvalidAmountError: If the value is unparseable, non-finite or out
            of range. Invalid input is never coerced to zero.
    """
    parsed = parse_dollar_amount(value)
    if parsed is None:
        raise InvalidAmountError(f"Invalid dollar amount: {value!r}", value=value)
    return int(parsed * 100)


def _to_dollars(cents: Number) -> Optional[Decimal]:
    amount = _number_to_decimal(cents) if _is_number(cents) else None
    if amount is None:
        return None
    whole_cents = amount.quantize(_WHOLE, rounding=ROUND_HALF_UP)
    return (whole_cents / 100).quantize(CENT)


def cents_to_dollars(cents: Number) -> Decimal:
    """Convert cents to dollars, rounding fractional cents half-up.

    Raises:
        InvalidAmountError: If ``cents`` is not a finite number within range.
    """
    dollars = _to_dollars(cents)
    if dollars is None or abs(cents) > MAX_CENTS:
        raise InvalidAmountError(f"Invalid cent amount: {cents!r}", value=cents)
    return dollars


def format_money(cents: Number, locale: str = "en-US", currency: str = "USD") -> str:
    """Format a cent amount as a localized currency string.

    Uses the CLDR number of digits for the currency, so JPY renders without
    a fractional part. Totals beyond the storable range (a sum of large
    allocations, say) are still formatted.

    Args:
        cents: Amount in cents (e.g. 1099).
        locale: BCP 47 or POSIX locale identifier (e.g. "en-US", "de_DE").
        currency: ISO 4217 currency code.

    Returns:
        The formatted string, e.g. "$10.99" or "-$10.99".

    Raises:
        InvalidAmountError: If ``cents`` is not a finite number.
        ValidationError: If the locale or currency is unknown.
    """
    dollars = _to_dollars(cents)
    if dollars is None:
        raise InvalidAmountError(f"Invalid cent amount: {cents!r}", value=cents)
    try:
        parsed_locale = Locale.parse(locale.replace("-", "_"))
        return format_currency(dollars, currency, locale=parsed_locale)
    except (UnknownLocaleError, ValueError) as e:
        raise ValidationError(
            f"Unknown locale: {locale}", field="locale", value=locale
        ) from e
    except UnknownCurrencyError as e:
        raise ValidationError(
            f"Unknown currency: {currency}", field="currency", value=currency
        ) from e


def is_valid_money_amount(value: Any) -> bool:
    """Check that a value is a number that can safely be used as money.

    Strings are not money amounts; parse them with ``parse_dollar_amount``.
    """
    if not _is_number(value):
        return False
    amount = _number_to_decimal(value)
    return amount is not None and abs(amount) <= MAX_DOLLARS


def ensure_cents(value: Any, field: str = "amount") -> int:
    """Validate an integer cent amount and return it.

    Raises:
        InvalidAmountError: If the value is not an int or is out of range.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(
            f"{field} must be an integer number of cents, got {value!r}",
            value=value,
            field=field,
        )
    if abs(value) > MAX_CENTS:
        raise InvalidAmountError(
            f"{field} is outside the supported range: {value}",
            value=value,
            field=field,
        )
    return value


__all__ = [
    "MAX_DOLLARS",
    "MAX_CENTS",
    "parse_dollar_amount",
    "dollars_to_cents",
    "cents_to_dollars",
    "format_money",
    "is_valid_money_amount",
    "ensure_cents",
]
