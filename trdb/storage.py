"""
Storage Backend Module

Provides the abstract ledger storage interface and two implementations:
an in-memory store (testing, embedding) and a single JSON file (persistence).

The whole ledger is rewritten on every write. File writes go to a temporary
file in the same directory which is then renamed over the target, so a crash
leaves either the previous or the new document, never a truncated one.
Read-modify-write sequences run under an exclusive lock so two processes
storing at the same time cannot lose each other's update.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union
import contextlib
import fcntl
import json
import os
import stat
import tempfile
import threading

from .exceptions import DeserializationError, LedgerExistsError, LedgerIOError
from .ledger import Ledger
from .transactions import Transaction


def encode_ledger(ledger: Ledger) -> str:
    """Serialize a ledger to its JSON document"""
    return json.dumps(ledger.to_dict(), ensure_ascii=False, indent=2)


def decode_ledger(document: Union[str, bytes]) -> Ledger:
    """
    Deserialize a JSON document into a ledger

    Raises:
        DeserializationError: If the document is not valid ledger JSON
    """
    try:
        data = json.loads(document)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DeserializationError(f"Ledger file is not valid JSON: {exc}") from exc
    return Ledger.from_dict(data)


class LedgerStorage(ABC):
    """Abstract interface for ledger storage backends"""

    path: Optional[Path] = None

    @abstractmethod
    def exists(self) -> bool:
        """Check if a ledger is stored"""
        pass

    @abstractmethod
    def open(self) -> Ledger:
        """Load the stored ledger"""
        pass

    @abstractmethod
    def write(self, ledger: Ledger) -> None:
        """Replace the stored ledger"""
        pass

    @abstractmethod
    def lock(self):
        """Context manager holding exclusive write access"""
        pass

    @contextmanager
    def atomic(self) -> Iterator[Ledger]:
        """
        Open the ledger under the lock, yield it for mutation and write it back

        Nothing is written when the block raises.
        """
        with self.lock():
            ledger = self.open()
            yield ledger
            self.write(ledger)

    def create(self, name: str, overwrite: bool = False) -> Ledger:
        """
        Store a new empty ledger

        Raises:
            LedgerExistsError: If a ledger is already stored and overwrite is False
        """
        with self.lock():
            if self.exists() and not overwrite:
                raise LedgerExistsError(f"A ledger already exists at {self}", self.path)
            ledger = Ledger.create(name)
            self.write(ledger)
            return ledger

    def store_transaction(self, transaction: Transaction) -> int:
        """Append a transaction to the stored ledger and return its ID"""
        with self.atomic() as ledger:
            return ledger.store(transaction)

    def delete_transaction(self, transaction_id: int) -> Transaction:
        """Remove a transaction from the stored ledger and return it"""
        with self.atomic() as ledger:
            return ledger.delete(transaction_id)

    def get_transaction(self, transaction_id: int) -> Transaction:
        """Read a single transaction from the stored ledger"""
        return self.open().read(transaction_id)


class InMemoryStorage(LedgerStorage):
    """In-memory storage implementation for testing"""

    def __init__(self, document: Optional[str] = None):
        self._document = document
        self._lock = threading.RLock()

    def exists(self) -> bool:
        return self._document is not None

    def open(self) -> Ledger:
        """Load a copy of the stored ledger"""
        with self._lock:
            if self._document is None:
                raise LedgerIOError("No ledger stored in memory")
            return decode_ledger(self._document)

    def write(self, ledger: Ledger) -> None:
        # Serialized copy to prevent external mutation
        with self._lock:
            self._document = encode_ledger(ledger)

    @contextmanager
    def lock(self):
        with self._lock:
            yield

    def __str__(self) -> str:
        return "memory"


class JSONFileStorage(LedgerStorage):
    """Single JSON file storage implementation for persistence"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def exists(self) -> bool:
        return self.path.exists()

    def open(self) -> Ledger:
        """
        Read and decode the ledger file

        Raises:
            LedgerIOError: If the file cannot be read
            DeserializationError: If the file is not a ledger
        """
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise LedgerIOError(
                f"Cannot read ledger {self.path}: {exc.strerror or exc}", self.path
            ) from exc
        return decode_ledger(raw)

    def write(self, ledger: Ledger) -> None:
        """
        Replace the ledger file atomically

        Raises:
            LedgerIOError: If the file cannot be written; the previous file is kept
        """
        document = encode_ledger(ledger)
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as exc:
            raise LedgerIOError(
                f"Cannot write ledger {self.path}: {exc.strerror or exc}", self.path
            ) from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, self._file_mode())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise LedgerIOError(
                f"Cannot write ledger {self.path}: {exc.strerror or exc}", self.path
            ) from exc

    def _file_mode(self) -> int:
        """Keep the permissions of an existing ledger, owner-only for new ones"""
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            return 0o600

    @contextmanager
    def lock(self):
        """
        Hold an exclusive flock on the sidecar lock file

        The lock file is left in place after release; deleting it would let a
        waiting process lock an unlinked inode.
        """
        try:
            handle = open(self.lock_path, "a")
        except OSError as exc:
            raise LedgerIOError(
                f"Cannot lock ledger {self.path}: {exc.strerror or exc}", self.path
            ) from exc

        with handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def __str__(self) -> str:
        return str(self.path)
