"""Lock-guarded key/value store shared by caches in the core."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

_K = TypeVar("_K")
_V = TypeVar("_V")


class LockedStore(Generic[_K, _V]):
    """Dict wrapper whose every access holds one lock.

    Entries are snapshots: nothing expires or invalidates on its own.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[_K, _V] = {}

    def get(self, key: _K) -> _V | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: _K, value: _V) -> None:
        with self._lock:
            self._data[key] = value

    def get_or_set(self, key: _K, factory: Callable[[], _V]) -> _V:
        """Return the cached value, computing and storing it on a miss.

        *factory* runs outside the lock; concurrent misses may both compute.
        """
        with self._lock:
            if key in self._data:
                return self._data[key]
        value = factory()
        with self._lock:
            return self._data.setdefault(key, value)

    def pop(self, key: _K) -> _V | None:
        with self._lock:
            return self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> list[_K]:
        with self._lock:
            return list(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
