"""
Input Parsing

Turns free text typed by a person into ledger values: transaction kinds with
their short synonyms, amounts with or without the currency symbol, and dates.
All failures raise ParseError so callers can re-prompt.
"""

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from string import Formatter
from typing import Optional, Set
import re

from .currency import Currency, Value, get_default_currency, value_from_decimal
from .exceptions import ParseError
from .transactions import TransactionKind, parse_timestamp


KIND_SYNONYMS = {
    "wd": TransactionKind.WITHDRAW,
    "withdraw": TransactionKind.WITHDRAW,
    "draw": TransactionKind.WITHDRAW,
    "dp": TransactionKind.DEPOSIT,
    "deposit": TransactionKind.DEPOSIT,
    "depo": TransactionKind.DEPOSIT,
}

# Digits with optional sign and grouping or decimal separators
PLAIN_AMOUNT = re.compile(r"[+-]?\d[\d.,]*")


def parse_kind(text: str) -> TransactionKind:
    """
    Map a kind synonym (case-insensitive) to a TransactionKind

    Raises:
        ParseError: If the text is not a known synonym
    """
    kind = KIND_SYNONYMS.get((text or "").strip().lower())
    if kind is None:
        raise ParseError(f"Unknown transaction type '{text}' (use wd or dp)")
    return kind


def _currency_marks(currency: Currency) -> Set[str]:
    """Symbols and code that may surround an amount in this currency"""
    marks = {currency.code}
    for literal, _, _, _ in Formatter().parse(currency.format):
        literal = literal.strip()
        if literal and literal not in ".,":
            marks.add(literal)
    return marks


def _strip_currency_marks(text: str, currency: Currency) -> str:
    for mark in _currency_marks(currency):
        if text.startswith(mark):
            text = text[len(mark):].strip()
        elif text.endswith(mark):
            text = text[:-len(mark)].strip()
    return text


def parse_amount(text: str, currency: Optional[Currency] = None) -> Value:
    """
    Parse an amount typed by a user

    Accepts the rendered form ("12.50€") as well as plain decimals such as
    "12.50", "12,50" or "1,234.50", optionally next to the currency's own
    symbol or code. Any other letters make the text invalid.

    Raises:
        ParseError: If the text is not an amount in the currency
    """
    currency = currency or get_default_currency()
    if not text or not isinstance(text, str) or not text.strip():
        raise ParseError("Amount must be a non-empty string")

    try:
        return currency.parse(text)
    except ParseError:
        pass

    clean_value = _strip_currency_marks(text.strip(), currency)
    if not PLAIN_AMOUNT.fullmatch(clean_value):
        raise ParseError(f"'{text.strip()}' is not a {currency.code} amount")

    # Handle comma as decimal separator (European format)
    if "," in clean_value and "." in clean_value:
        # Both comma and dot - the last one is the decimal separator
        if clean_value.rfind(",") > clean_value.rfind("."):
            clean_value = clean_value.replace(".", "").replace(",", ".")
        else:
            clean_value = clean_value.replace(",", "")
    elif "," in clean_value and clean_value.count(",") == 1:
        parts = clean_value.split(",")
        if len(parts[1]) < 3:  # Likely decimal separator
            clean_value = clean_value.replace(",", ".")
        else:
            clean_value = clean_value.replace(",", "")

    try:
        amount = Decimal(clean_value)
    except InvalidOperation as exc:
        raise ParseError(f"Cannot convert '{text.strip()}' to a {currency.code} amount") from exc
    return value_from_decimal(amount, currency)


def parse_date(text: str) -> datetime:
    """
    Parse a date ("2024-03-01") or date-time ("2024-03-01T18:30:00+01:00")

    Values without an offset are local time; a bare date means midnight.

    Raises:
        ParseError: If the text is not an ISO date or RFC3339 date-time
    """
    stripped = (text or "").strip()
    try:
        day = date.fromisoformat(stripped)
    except ValueError:
        pass
    else:
        return datetime.combine(day, time()).astimezone()

    try:
        return parse_timestamp(stripped)
    except ValueError as exc:
        raise ParseError(f"Invalid date '{stripped}' (use YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)") from exc
