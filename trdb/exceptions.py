"""
Ledger Error Types

Every failure the ledger core can report derives from LedgerError so callers
can catch the whole family in one place. The core raises, it never logs or exits.
"""

from pathlib import Path
from typing import Optional, Union


class LedgerError(Exception):
    """Base class for all ledger failures"""


class TransactionNotFoundError(LedgerError, LookupError):
    """Raised when a positional ID is outside the ledger"""

    def __init__(self, transaction_id: int, size: int):
        self.transaction_id = transaction_id
        self.size = size
        super().__init__(
            f"Not found: transaction {transaction_id} does not exist "
            f"(ledger holds {size} transactions)"
        )


class LedgerIOError(LedgerError, OSError):
    """Raised when the ledger file cannot be read or written"""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class LedgerExistsError(LedgerIOError):
    """Raised when creating a ledger would overwrite an existing file"""


class DeserializationError(LedgerError, ValueError):
    """Raised when stored content is not a valid ledger document"""


class ParseError(LedgerError, ValueError):
    """Raised when user supplied text cannot be turned into a ledger value"""
