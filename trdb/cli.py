"""
Command Line Interface

Thin front end over the ledger core. Every command is one full round trip:
open the ledger file, query or mutate it, and write it back for mutations.
Transaction IDs shown by `list` are positions; after `delete` the IDs of
later transactions move down by one.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional
import argparse
import sys

from pydantic import ValidationError

from .config import get_config
from .currency import Currency, Value, get_default_currency
from .exceptions import LedgerError, ParseError
from .inputs import parse_amount, parse_date, parse_kind
from .logging_config import get_logger, log_action, setup_logging
from .queries import filter_transactions, latest, running_balance
from .storage import JSONFileStorage, LedgerStorage
from .transactions import Transaction


HEADER_SYMBOL = "="
TIME_FORMAT = "%d. %B %Y %H:%M"

logger = get_logger("trdb.cli")


def format_time(moment: datetime) -> str:
    return moment.astimezone().strftime(TIME_FORMAT)


def format_table(title: str, rows: Dict[int, Transaction], currency: Currency) -> List[str]:
    """Render transactions keyed by ID as the listing table, closed by their balance"""
    lines = [f"{title:>20}  {HEADER_SYMBOL * 49}"]
    for transaction_id, transaction in rows.items():
        lines.append(
            f"{transaction_id:>4}  On {format_time(transaction.date):>20} {transaction.name:>16}"
            f" :: {transaction.kind.value:<8} {transaction.amount.to_string(currency):>12}"
        )
    balance = running_balance(rows.values())
    lines.append(f"{'':59}{'-' * 12}")
    lines.append(f"{'':59}{balance.to_string(currency):>12}")
    return lines


def _ask(question: str) -> str:
    return input(question).strip()


def _ask_until(question: str, convert: Callable[[str], object]):
    """Repeat a prompt until convert() accepts the answer"""
    while True:
        try:
            return convert(_ask(question))
        except ParseError as exc:
            print(exc)


def _required_text(text: str) -> str:
    if not text:
        raise ParseError("A value is required.")
    return text


def _positive_amount(currency: Currency) -> Callable[[str], Value]:
    def convert(text: str) -> Value:
        amount = parse_amount(text, currency)
        if amount.is_zero() or amount.is_negative():
            raise ParseError("Amount must be greater than zero.")
        return amount
    return convert


def cmd_init(args, storage: LedgerStorage, currency: Currency) -> int:
    """Create a new, empty ledger"""
    if storage.exists() and not args.force:
        answer = _ask("A ledger already exists. Are you sure you want to do this? (y / N): ")
        if answer.lower() != "y":
            print("Action aborted.")
            return 0

    name = args.name.strip() if args.name else ""
    if not name:
        name = _ask_until("Ledger name: ", _required_text)

    storage.create(name, overwrite=True)
    log_action(logger, "info", f"Ledger created: {name}",
               action="init", resource=str(storage))
    print(f"Created the ledger '{name}'.")
    return 0


def cmd_store(args, storage: LedgerStorage, currency: Currency) -> int:
    """Store a new transaction, prompting for anything not given as an option"""
    name = args.name.strip() if args.name else ""
    if not name:
        name = _ask_until("Transaction name: ", _required_text)

    if args.type:
        kind = parse_kind(args.type)
    else:
        kind = _ask_until("Transaction type (wd / dp): ", parse_kind)

    to_amount = _positive_amount(currency)
    if args.amount:
        amount = to_amount(args.amount)
    else:
        amount = _ask_until("Transaction amount: ", to_amount)

    date = parse_date(args.date) if args.date else None

    transaction = Transaction.create(name, kind, amount, date)
    transaction_id = storage.store_transaction(transaction)
    log_action(logger, "info", f"Transaction stored: {kind.value}",
               action="store", resource=str(storage),
               extra={"id": transaction_id, "name": name, "amount": amount.units})
    print(f"Stored the {kind.value} transaction '{name}' ({amount.to_string(currency)}) as #{transaction_id}.")
    return 0


def cmd_list(args, storage: LedgerStorage, currency: Currency) -> int:
    """List all transactions with the running balance"""
    ledger = storage.open()
    for line in format_table(ledger.name, dict(ledger.items()), currency):
        print(line)
    return 0


def cmd_show(args, storage: LedgerStorage, currency: Currency) -> int:
    """Show a single transaction"""
    transaction = storage.get_transaction(args.id)
    print(f"ID:     {args.id}")
    print(f"Name:   {transaction.name}")
    print(f"Type:   {transaction.kind.value}")
    print(f"Amount: {transaction.amount.to_string(currency)}")
    print(f"Date:   {format_time(transaction.date)}")
    return 0


def cmd_delete(args, storage: LedgerStorage, currency: Currency) -> int:
    """Delete a transaction by its current ID"""
    transaction = storage.delete_transaction(args.id)
    log_action(logger, "info", f"Transaction deleted: {transaction.kind.value}",
               action="delete", resource=str(storage),
               extra={"id": args.id, "name": transaction.name, "amount": transaction.amount.units})
    print(f"Deleted the {transaction.kind.value} transaction '{transaction.name}' "
          f"({transaction.amount.to_string(currency)}). Later IDs moved down by one.")
    return 0


def cmd_filter(args, storage: LedgerStorage, currency: Currency) -> int:
    """List transactions matching all given predicates"""
    min_amount = parse_amount(args.min, currency) if args.min else None
    max_amount = parse_amount(args.max, currency) if args.max else None
    ledger = storage.open()
    matches = filter_transactions(
        ledger,
        name=args.name,
        min_amount=min_amount,
        max_amount=max_amount,
        kind=args.type
    )
    for line in format_table(ledger.name, matches, currency):
        print(line)
    return 0


def cmd_latest(args, storage: LedgerStorage, currency: Currency) -> int:
    """List the most recently stored transactions"""
    ledger = storage.open()
    for line in format_table(ledger.name, latest(ledger, args.count), currency):
        print(line)
    return 0


def cmd_balance(args, storage: LedgerStorage, currency: Currency) -> int:
    """Print the balance over the whole ledger"""
    ledger = storage.open()
    print(f"{ledger.name}: {running_balance(ledger).to_string(currency)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trdb", description="Personal transaction ledger")
    parser.add_argument("--db", help="Ledger file (default: $TRDB_DATABASE_PATH or ~/.trdb)")
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Initialize the ledger")
    init.add_argument("name", nargs="?", help="Ledger name")
    init.add_argument("--force", action="store_true", help="Overwrite an existing ledger without asking")
    init.set_defaults(handler=cmd_init)

    store = commands.add_parser("store", help="Store a new transaction")
    store.add_argument("--name", help="Transaction name")
    store.add_argument("--type", help="wd (withdraw) or dp (deposit)")
    store.add_argument("--amount", help="Amount, e.g. 12.50")
    store.add_argument("--date", help="YYYY-MM-DD or RFC3339 date-time (default: now)")
    store.set_defaults(handler=cmd_store)

    listing = commands.add_parser("list", help="List all transactions")
    listing.set_defaults(handler=cmd_list)

    show = commands.add_parser("show", help="Show one transaction")
    show.add_argument("id", type=int, help="Transaction ID as shown by list")
    show.set_defaults(handler=cmd_show)

    delete = commands.add_parser("delete", help="Delete one transaction")
    delete.add_argument("id", type=int, help="Transaction ID as shown by list")
    delete.set_defaults(handler=cmd_delete)

    search = commands.add_parser("filter", help="List transactions matching all given filters")
    search.add_argument("--name", help="Exact transaction name")
    search.add_argument("--min", help="Minimum amount (inclusive)")
    search.add_argument("--max", help="Maximum amount (inclusive)")
    search.add_argument("--type", help="wd / withdraw / draw or dp / deposit / depo")
    search.set_defaults(handler=cmd_filter)

    recent = commands.add_parser("latest", help="List the most recent transactions")
    recent.add_argument("count", nargs="?", type=int, default=10, help="How many (default 10)")
    recent.set_defaults(handler=cmd_latest)

    balance = commands.add_parser("balance", help="Show the balance")
    balance.set_defaults(handler=cmd_balance)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the `trdb` command; returns the process exit code"""
    parser = build_parser()

    # argparse calls sys.exit on error; convert that into an int return code
    try:
        args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else 2

    try:
        config = get_config()
        currency = get_default_currency()
    except ValidationError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    storage = JSONFileStorage(args.db or config.database_path)

    try:
        return args.handler(args, storage, currency)
    except LedgerError as exc:
        log_action(logger, "warning", str(exc), action=args.command,
                   resource=str(storage), extra={"error": type(exc).__name__})
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print("\nAction aborted.", file=sys.stderr)
        return 1
