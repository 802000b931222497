"""
Ledger Engine

An ordered, named collection of transactions. Transactions are addressed by
their zero-based position at the time of the call. IDs are NOT stable: deleting
position i moves every later transaction down by one, which matches how the
listing shows them. Amending a transaction means delete + store, which moves
it to the end.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from .exceptions import DeserializationError, TransactionNotFoundError
from .transactions import Transaction


@dataclass
class Ledger:
    """
    Named, ordered list of transactions owned exclusively by the ledger
    """
    name: str
    transactions: List[Transaction] = field(default_factory=list)

    @classmethod
    def create(cls, name: str) -> "Ledger":
        """Create an empty ledger"""
        return cls(name=name, transactions=[])

    def size(self) -> int:
        """Count of transactions"""
        return len(self.transactions)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.transactions)

    def items(self) -> Iterator[Tuple[int, Transaction]]:
        """Iterate (id, transaction) pairs in ID order"""
        return enumerate(self.transactions)

    def store(self, transaction: Transaction) -> int:
        """
        Append a transaction

        Only changes in-memory state; persisting is the storage layer's job.

        Returns:
            ID of the stored transaction (the previous size)
        """
        self.transactions.append(transaction)
        return len(self.transactions) - 1

    def _check_id(self, transaction_id: int) -> None:
        if not 0 <= transaction_id < self.size():
            raise TransactionNotFoundError(transaction_id, self.size())

    def read(self, transaction_id: int) -> Transaction:
        """
        Get the transaction at a position

        Raises:
            TransactionNotFoundError: If the ID is negative or past the end
        """
        self._check_id(transaction_id)
        return self.transactions[transaction_id]

    def delete(self, transaction_id: int) -> Transaction:
        """
        Remove the transaction at a position, shifting later ones down by one

        Returns:
            The removed transaction

        Raises:
            TransactionNotFoundError: If the ID is out of range; the ledger is unchanged
        """
        self._check_id(transaction_id)
        return self.transactions.pop(transaction_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON shape"""
        return {
            "name": self.name,
            "transaction": [transaction.to_dict() for transaction in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Ledger":
        """
        Create a ledger from its persisted JSON shape

        Raises:
            DeserializationError: If the document is not a ledger
        """
        if not isinstance(data, dict):
            raise DeserializationError(f"Ledger must be a JSON object, got {type(data).__name__}")
        if "name" not in data:
            raise DeserializationError("Ledger is missing its name")
        if not isinstance(data["name"], str):
            raise DeserializationError("Ledger name must be a string")

        # Older files store an empty ledger as null
        entries = data.get("transaction")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise DeserializationError("Ledger transactions must be a list")

        transactions = []
        for index, entry in enumerate(entries):
            try:
                transactions.append(Transaction.from_dict(entry))
            except DeserializationError as exc:
                raise DeserializationError(f"Transaction {index}: {exc}") from exc

        return cls(name=data["name"], transactions=transactions)
