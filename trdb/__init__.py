"""
trdb Personal Ledger

Records withdrawals and deposits in a single JSON file, with integer minor-unit
money, positional transaction IDs and atomic, locked file updates.
"""

from .currency import Currency, Value, parse_value
from .exceptions import (
    DeserializationError,
    LedgerError,
    LedgerExistsError,
    LedgerIOError,
    ParseError,
    TransactionNotFoundError,
)
from .ledger import Ledger
from .queries import filter_transactions, latest, running_balance
from .storage import InMemoryStorage, JSONFileStorage, LedgerStorage
from .transactions import Transaction, TransactionKind

__version__ = "1.0.0"

__all__ = [
    "Currency",
    "Value",
    "parse_value",
    "Transaction",
    "TransactionKind",
    "Ledger",
    "LedgerStorage",
    "JSONFileStorage",
    "InMemoryStorage",
    "filter_transactions",
    "latest",
    "running_balance",
    "LedgerError",
    "TransactionNotFoundError",
    "LedgerIOError",
    "LedgerExistsError",
    "DeserializationError",
    "ParseError",
]
