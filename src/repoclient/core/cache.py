"""In-memory caches used to memoize entities fetched from the repository.

:class:`AbstractCache` is the contract the repository backends depend on so
that a different store can be supplied through ``RepositoryConfig``.
:class:`BoundedCache` is the default: a fixed-capacity store evicting the
oldest inserted key first.

The cache is not synchronized.  A cache shared between threads must be
guarded by the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

from repoclient.core.exceptions import InvalidArgumentError
from repoclient.core.logger import UnifiedLogger

__all__ = ["AbstractCache", "BoundedCache", "DEFAULT_CAPACITY"]

T = TypeVar("T")

DEFAULT_CAPACITY = 100


class AbstractCache(ABC, Generic[T]):
    """Basic key/value caching contract."""

    @abstractmethod
    def add(self, key: Hashable, value: T) -> bool:
        """Store ``value`` unless ``key`` is already cached.

        Returns ``False`` and leaves the cache untouched when ``key`` exists.
        """

    @abstractmethod
    def get(self, key: Hashable, default: Any = None) -> T | Any:
        """Return the cached value or ``default`` when ``key`` is absent."""

    @abstractmethod
    def set(self, key: Hashable, value: T) -> bool:
        """Create or update ``key``. Always succeeds."""

    @abstractmethod
    def delete(self, key: Hashable) -> bool:
        """Remove ``key``; ``True`` if it existed."""


class BoundedCache(AbstractCache[T]):
    """Fixed-capacity cache with first-in first-out eviction.

    Insertion order is tracked in a queue independent of the key/value
    mapping.  Reading an entry never changes its position, and overwriting
    an entry through :meth:`set` keeps the position it was first added at.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = self._validate_capacity(capacity)
        self._entries: dict[Hashable, T] = {}
        self._order: deque[Hashable] = deque()
        self._logger = UnifiedLogger.get(__name__).bind(component="cache")

    @staticmethod
    def _validate_capacity(capacity: int) -> int:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0:
            raise InvalidArgumentError(
                f"Cache capacity must be a non-negative integer, got {capacity!r}",
                component="cache",
            )
        return capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[Hashable]:
        """Return cached keys, oldest first."""
        return list(self._order)

    def get(self, key: Hashable, default: Any = None) -> T | Any:
        return self._entries.get(key, default)

    def add(self, key: Hashable, value: T) -> bool:
        if key in self._entries:
            return False
        self._entries[key] = value
        self._order.append(key)
        if len(self._order) > self._capacity:
            evicted = self._order.popleft()
            del self._entries[evicted]
            self._logger.debug("cache.evict", key=str(evicted), capacity=self._capacity)
        return True

    def set(self, key: Hashable, value: T) -> bool:
        if not self.add(key, value):
            self._entries[key] = value
        return True

    def delete(self, key: Hashable) -> bool:
        if key not in self._entries:
            return False
        del self._entries[key]
        self._order.remove(key)
        return True

    def resize(self, capacity: int) -> None:
        """Change the capacity of the cache.

        Growing keeps every entry.  Any other change flushes the cache before
        adopting the new capacity; entries are never partially evicted to fit.
        """
        capacity = self._validate_capacity(capacity)
        if capacity > self._capacity:
            self._capacity = capacity
            return
        self._logger.debug(
            "cache.flush",
            reason="resize",
            old_capacity=self._capacity,
            new_capacity=capacity,
            dropped=len(self._entries),
        )
        self.clear()
        self._capacity = capacity

    def clear(self) -> None:
        """Drop every entry, keeping the current capacity."""
        self._entries.clear()
        self._order.clear()

    def reset(self) -> None:
        """Flush the cache and restore the default capacity."""
        self.clear()
        self._capacity = DEFAULT_CAPACITY
