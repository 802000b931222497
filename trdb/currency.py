"""
Monetary Value Module

Amounts are integer counts of minor currency units (cents). A Value carries no
currency of its own; rendering and parsing use the ambient default currency
unless one is passed explicitly. NEVER uses float for monetary values.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from string import Formatter
from typing import Optional
import re

from .exceptions import ParseError


class Currency(Enum):
    """Supported currencies: display name, display pattern, minor units per major unit"""
    EUR = ("Euro", "{sign}{major}.{minor:02d}€", 100)
    USD = ("US Dollar", "{sign}${major}.{minor:02d}", 100)
    GBP = ("Pound Sterling", "{sign}£{major}.{minor:02d}", 100)
    CHF = ("Swiss Franc", "{sign}CHF {major}.{minor:02d}", 100)
    JPY = ("Japanese Yen", "{sign}¥{major}", 1)

    def __init__(self, display_name: str, format: str, ratio: int):
        self.display_name = display_name
        self.format = format
        self.ratio = ratio

    @property
    def code(self) -> str:
        return self.name

    def render(self, value: "Value") -> str:
        """
        Render a value in this currency's display pattern.

        The sign is placed once in front; the minor part is always the
        unsigned remainder, so -50 cents renders as "-0.50€".
        """
        units = int(value)
        major, minor = divmod(abs(units), self.ratio)
        sign = "-" if units < 0 else ""
        return self.format.format(sign=sign, major=major, minor=minor)

    def parse(self, text: str) -> "Value":
        """
        Parse text produced by render() back into a Value

        Raises:
            ParseError: If the text does not match the display pattern
        """
        if not isinstance(text, str):
            raise ParseError(f"Cannot parse {type(text).__name__} as {self.code} amount")

        match = _compile_pattern(self.format).fullmatch(text.strip())
        if not match:
            raise ParseError(
                f"'{text.strip()}' is not a {self.code} amount "
                f"(expected e.g. {self.render(Value(123456))})"
            )

        major = int(match.group("major"))
        minor = int(match.groupdict().get("minor") or 0)
        if minor >= self.ratio:
            raise ParseError(f"Minor part {minor} out of range for {self.code}")

        units = major * self.ratio + minor
        if match.groupdict().get("sign") == "-":
            units = -units
        return Value(units)

    def minor_digits(self) -> int:
        """Number of decimal places a major-unit amount may carry"""
        return len(str(self.ratio)) - 1


@lru_cache(maxsize=None)
def _compile_pattern(fmt: str) -> "re.Pattern[str]":
    """Turn a display pattern into an anchored regular expression"""
    parts = []
    for literal, field, spec, _ in Formatter().parse(fmt):
        parts.append(re.escape(literal))
        if field is None:
            continue
        if field == "sign":
            parts.append(r"(?P<sign>-?)")
        elif field == "major":
            parts.append(r"(?P<major>[0-9]+)")
        elif field == "minor":
            width = re.fullmatch(r"0(\d+)d", spec or "")
            digits = f"{{{width.group(1)}}}" if width else "+"
            parts.append(rf"(?P<minor>[0-9]{digits})")
        else:
            raise ValueError(f"Unknown field '{field}' in currency format {fmt!r}")
    return re.compile("".join(parts))


@dataclass(frozen=True, order=True)
class Value:
    """
    Immutable amount of money in minor units of the ambient currency.
    Arithmetic is exact integer arithmetic and never checks currencies.
    """
    units: int = 0

    def __post_init__(self):
        if isinstance(self.units, bool) or not isinstance(self.units, int):
            raise TypeError(f"Value must be an integer count of minor units, got {self.units!r}")

    @classmethod
    def zero(cls) -> "Value":
        return cls(0)

    def add(self, other: "Value") -> "Value":
        """Exact sum of two values"""
        return Value(self.units + other.units)

    def smaller(self, other: "Value") -> bool:
        return self.units < other.units

    def larger(self, other: "Value") -> bool:
        return self.units > other.units

    def __add__(self, other: "Value") -> "Value":
        if not isinstance(other, Value):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Value") -> "Value":
        if not isinstance(other, Value):
            return NotImplemented
        return Value(self.units - other.units)

    def __neg__(self) -> "Value":
        return Value(-self.units)

    def __abs__(self) -> "Value":
        return Value(abs(self.units))

    def __int__(self) -> int:
        return self.units

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.units == 0

    def is_negative(self) -> bool:
        return self.units < 0

    def to_string(self, currency: Optional[Currency] = None) -> str:
        """Format for display"""
        return (currency or get_default_currency()).render(self)

    def __str__(self) -> str:
        return self.to_string()


def parse_value(text: str, currency: Optional[Currency] = None) -> Value:
    """Parse rendered money text in the given (or default) currency"""
    return (currency or get_default_currency()).parse(text)


def value_from_decimal(amount: Decimal, currency: Optional[Currency] = None) -> Value:
    """
    Convert a major-unit Decimal (12.50) into minor units (1250)

    Raises:
        ParseError: If the amount carries more precision than the currency allows
    """
    currency = currency or get_default_currency()
    if not amount.is_finite():
        raise ParseError(f"Cannot convert {amount!r} to {currency.code} amount")
    try:
        scaled = amount * currency.ratio
        if scaled != scaled.to_integral_value():
            raise ParseError(
                f"{amount} has more than {currency.minor_digits()} decimal places for {currency.code}"
            )
        return Value(int(scaled))
    except InvalidOperation as exc:
        raise ParseError(f"Cannot convert {amount!r} to {currency.code} amount") from exc


_default_currency: Optional[Currency] = None


def get_default_currency() -> Currency:
    """Get the process-wide currency, resolved from configuration on first use"""
    global _default_currency
    if _default_currency is None:
        from .config import get_config
        _default_currency = Currency[get_config().currency]
    return _default_currency


def set_default_currency(currency: Optional[Currency]) -> None:
    """Pin the process-wide currency (None re-reads configuration on next use)"""
    global _default_currency
    _default_currency = currency
