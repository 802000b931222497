"""
Ledger Queries

Read-only views over a ledger. Results are keyed by the current positional ID
so they can be fed straight back into read/delete.
"""

from typing import Dict, Iterable, Optional, Union

from .currency import Value
from .inputs import parse_kind
from .ledger import Ledger
from .transactions import Transaction, TransactionKind


def filter_transactions(
    ledger: Ledger,
    name: Optional[str] = None,
    min_amount: Optional[Value] = None,
    max_amount: Optional[Value] = None,
    kind: Optional[Union[TransactionKind, str]] = None
) -> Dict[int, Transaction]:
    """
    Select transactions matching every supplied predicate

    Args:
        ledger: Ledger to search
        name: Exact, case-sensitive transaction name
        min_amount: Inclusive lower bound on the amount
        max_amount: Inclusive upper bound on the amount
        kind: TransactionKind or a synonym such as "wd" / "dp"

    A predicate left as None is not applied; Value(0) is a real bound.

    Returns:
        Mapping of ID -> transaction in ascending ID order

    Raises:
        ParseError: If kind is text that names no transaction kind
    """
    if isinstance(kind, str):
        kind = parse_kind(kind)

    matches = {}
    for transaction_id, transaction in ledger.items():
        if name is not None and transaction.name != name:
            continue
        if min_amount is not None and transaction.amount.smaller(min_amount):
            continue
        if max_amount is not None and transaction.amount.larger(max_amount):
            continue
        if kind is not None and transaction.kind != kind:
            continue
        matches[transaction_id] = transaction
    return matches


def running_balance(transactions: Iterable[Transaction]) -> Value:
    """Sum deposits minus withdrawals in the given order"""
    balance = Value.zero()
    for transaction in transactions:
        balance = balance.add(transaction.signed_amount)
    return balance


def latest(ledger: Ledger, count: int) -> Dict[int, Transaction]:
    """The last `count` transactions keyed by their current ID"""
    if count <= 0:
        return {}
    start = max(ledger.size() - count, 0)
    return {
        transaction_id: ledger.transactions[transaction_id]
        for transaction_id in range(start, ledger.size())
    }
