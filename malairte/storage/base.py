"""Key-value storage abstraction and an in-memory implementation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional

PREFIX_BLOCK = b"b/"
PREFIX_BLOCK_TXS = b"bx/"
PREFIX_HEIGHT = b"h/"
KEY_BEST_TIP = b"tip"
PREFIX_UTXO = b"u/"
PREFIX_BLOCK_UNDO = b"bu/"
PREFIX_TX_INDEX = b"tx/"
PREFIX_ADDR_INDEX = b"ai/"
PREFIX_CFILTER = b"cf/"
PREFIX_CFHEADER = b"ch/"
PREFIX_CHAIN_WORK = b"cw/"

Operation = tuple[bytes, Optional[bytes]]


class NotFoundError(LookupError):
    """Raised when a key does not exist in the database."""

    def __init__(self, key: bytes | None = None) -> None:
        message = "key not found" if key is None else f"key not found: {key!r}"
        super().__init__(message)
        self.key = key


class Batch:
    """Buffered writes applied atomically by write().

    A queued delete is stored as (key, None). Used as a context manager the
    batch is written on a clean exit and discarded when an exception escapes.
    """

    def __init__(self, apply: Callable[[list[Operation]], None]) -> None:
        self._apply = apply
        self._ops: list[Operation] = []

    def put(self, key: bytes, value: bytes) -> None:
        self._ops.append((bytes(key), bytes(value)))

    def delete(self, key: bytes) -> None:
        self._ops.append((bytes(key), None))

    def write(self) -> None:
        """Commit every queued operation in order, all or nothing."""
        self._apply(list(self._ops))

    def __len__(self) -> int:
        return len(self._ops)

    def __enter__(self) -> "Batch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.write()


class Database(ABC):
    """Storage for all chain data; implementations are thread-safe."""

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Store value under key."""

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        """Return the value for key or raise NotFoundError."""

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Remove key; a missing key is not an error."""

    @abstractmethod
    def has(self, key: bytes) -> bool:
        """Return True if key exists."""

    @abstractmethod
    def new_batch(self) -> Batch:
        """Return a batch whose write() commits atomically."""

    @abstractmethod
    def items_with_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """Yield (key, value) pairs whose key starts with prefix, in key order."""

    @abstractmethod
    def close(self) -> None:
        """Release resources; later operations fail."""

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class MemoryDatabase(Database):
    """A dictionary-backed database, useful for tests and ephemeral nodes."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}
        self._lock = threading.RLock()
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("database is closed")

    def put(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._check_open()
            self._data[bytes(key)] = bytes(value)

    def get(self, key: bytes) -> bytes:
        key = bytes(key)
        with self._lock:
            self._check_open()
            try:
                return self._data[key]
            except KeyError:
                raise NotFoundError(key) from None

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._check_open()
            self._data.pop(bytes(key), None)

    def has(self, key: bytes) -> bool:
        with self._lock:
            self._check_open()
            return bytes(key) in self._data

    def new_batch(self) -> Batch:
        return Batch(self._apply)

    def _apply(self, ops: list[Operation]) -> None:
        with self._lock:
            self._check_open()
            for key, value in ops:
                if value is None:
                    self._data.pop(key, None)
                else:
                    self._data[key] = value

    def items_with_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        prefix = bytes(prefix)
        with self._lock:
            self._check_open()
            snapshot = sorted(
                (key, value)
                for key, value in self._data.items()
                if key.startswith(prefix)
            )
        return iter(snapshot)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._data.clear()