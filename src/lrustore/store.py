"""Bounded in-memory key-value store with least-recently-used eviction.

The recency order and the data live in a single ``OrderedDict``: the first key
is the least recently used one and is the next eviction victim, the last key
is the most recently used one. Promotion and eviction are both O(1).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Callable, Hashable, Iterator
from os import PathLike
from typing import Any

from lrustore.errors import LRUStoreConfigError
from lrustore.snapshot import LoadReport, export_snapshot, import_snapshot

logger = logging.getLogger("lrustore.store")


class Cache(ABC):
    @abstractmethod
    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value stored for `key`, or `default` when absent."""

    @abstractmethod
    def put(self, key: Hashable, value: Any) -> None:
        """Insert or replace the value stored for `key`."""


def _validate_capacity(capacity: object) -> int:
    if not isinstance(capacity, int) or isinstance(capacity, bool):
        raise LRUStoreConfigError(f"Expected capacity to be an integer, got {capacity!r}.")
    if capacity < 1:
        raise LRUStoreConfigError(f"Invalid capacity: {capacity} (must be >= 1).")
    return capacity


class LRUStore(Cache):
    """Fixed-capacity mapping that evicts the least recently used entry.

    Both a ``get`` hit and a ``put`` count as a use. Membership tests,
    ``len()`` and iteration do not touch the recency order.

    Not thread safe: guard a shared instance with a lock.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = _validate_capacity(capacity)
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()

    @classmethod
    def persistent(
        cls,
        capacity: int,
        path: str | PathLike[str],
        *,
        key_parser: Callable[[str], Any] = str,
        value_parser: Callable[[str], Any] = str,
    ) -> LRUStore:
        """Create a store pre-loaded from the snapshot at `path`.

        A missing snapshot yields an empty store. Any other read failure raises
        :class:`~lrustore.errors.SnapshotIOError`.
        """

        store = cls(capacity)
        store.load(path, key_parser=key_parser, value_parser=value_parser)
        return store

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: Hashable, default: Any = None) -> Any:
        if key not in self._entries:
            # A miss is not a use: leave the order alone.
            return default
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: Hashable, value: Any) -> None:
        if key in self._entries:
            self._entries[key] = value
            self._entries.move_to_end(key)
            return

        if len(self._entries) >= self._capacity:
            victim, _ = self._entries.popitem(last=False)
            logger.debug("Evicted %r (capacity %d)", victim, self._capacity)
        self._entries[key] = value

    def keys(self) -> list[Hashable]:
        """Resident keys, least recently used first."""

        return list(self._entries)

    def items(self) -> list[tuple[Hashable, Any]]:
        """Resident ``(key, value)`` pairs, least recently used first."""

        return list(self._entries.items())

    def save(self, path: str | PathLike[str]) -> None:
        export_snapshot(self, path)

    def load(
        self,
        path: str | PathLike[str],
        *,
        key_parser: Callable[[str], Any] = str,
        value_parser: Callable[[str], Any] = str,
    ) -> LoadReport:
        return import_snapshot(self, path, key_parser=key_parser, value_parser=value_parser)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(capacity={self._capacity}, size={len(self._entries)})"
