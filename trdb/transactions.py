"""
Transaction Records

A transaction is one monetary movement: a withdrawal taking money out or a
deposit putting money in. Records are immutable once created and carry no
currency; amounts are interpreted in the ambient default currency.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
import re

from .currency import Value
from .exceptions import DeserializationError


class TransactionKind(Enum):
    """Direction of a transaction"""
    WITHDRAW = "withdraw"  # Taking money from the account
    DEPOSIT = "deposit"    # Storing money on the account


# RFC3339 with up to nanosecond precision, as written by the original tool
_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})?$"
)


def parse_timestamp(text: str) -> datetime:
    """
    Parse an RFC3339 timestamp

    Fractions beyond microseconds are truncated and "Z" maps to UTC.
    Timestamps without an offset are taken as local time.

    Raises:
        ValueError: If the text is not an RFC3339 timestamp
    """
    match = _RFC3339_RE.match(text.strip())
    if not match:
        raise ValueError(f"Invalid RFC3339 timestamp: {text!r}")

    normalized = match.group("base").replace("t", "T").replace(" ", "T")
    fraction = match.group("fraction")
    if fraction:
        normalized += "." + fraction[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset:
        normalized += "+00:00" if offset in ("Z", "z") else offset

    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def format_timestamp(moment: datetime) -> str:
    """
    Format an aware datetime as RFC3339

    RFC3339 offsets have minute precision. Historical local mean time offsets
    such as +00:19:32 do not, so those moments are written in UTC instead.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    offset = moment.utcoffset()
    if offset is not None and (offset.seconds % 60 or offset.microseconds):
        moment = moment.astimezone(timezone.utc)
    return moment.isoformat()


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of one withdrawal or deposit
    """
    name: str
    amount: Value
    kind: TransactionKind
    date: datetime

    @classmethod
    def create(
        cls,
        name: str,
        kind: TransactionKind,
        amount: Value,
        date: Optional[datetime] = None
    ) -> "Transaction":
        """
        Create a transaction, stamping the current local time when no date is given

        Name and amount are taken as-is; input validation belongs to the caller.
        """
        if date is None:
            date = datetime.now().astimezone()
        elif date.tzinfo is None:
            date = date.astimezone()
        return cls(name=name, amount=amount, kind=kind, date=date)

    @property
    def signed_amount(self) -> Value:
        """Effect on the balance: positive for deposits, negative for withdrawals"""
        if self.kind == TransactionKind.WITHDRAW:
            return -self.amount
        return self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON shape"""
        return {
            "name": self.name,
            "amount": self.amount.units,
            "type": self.kind.value,
            "date": format_timestamp(self.date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """
        Create a transaction from its persisted JSON shape

        Raises:
            DeserializationError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise DeserializationError(f"Transaction must be an object, got {type(data).__name__}")

        missing = [key for key in ("name", "amount", "type", "date") if key not in data]
        if missing:
            raise DeserializationError(f"Transaction is missing fields: {', '.join(missing)}")

        name = data["name"]
        if not isinstance(name, str):
            raise DeserializationError("Transaction name must be a string")

        amount = data["amount"]
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise DeserializationError(f"Transaction amount must be an integer, got {amount!r}")

        try:
            kind = TransactionKind(data["type"])
        except ValueError as exc:
            raise DeserializationError(f"Unknown transaction type {data['type']!r}") from exc

        if not isinstance(data["date"], str):
            raise DeserializationError("Transaction date must be a string")
        try:
            date = parse_timestamp(data["date"])
        except ValueError as exc:
            raise DeserializationError(str(exc)) from exc

        return cls(name=name, amount=Value(amount), kind=kind, date=date)
