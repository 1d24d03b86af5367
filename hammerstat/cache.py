"""
A small fixed-capacity LRU cache.

Building a distribution for a few hundred trials means a row of big binomial
coefficients and a few hundred float products. The UI recomputes the same
handful of (trials, probability) pairs on every rerun, so CombatMath keeps one
of these per session and the statistics functions consult it before doing
any work.

Reads promote: a key returned by try_get() becomes the most recently used,
and so does a key that is added again with a new value. When the cache is
full, add() evicts exactly one entry, the least recently used.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any

from hammerstat.errors import DomainError


class BoundedCache:
    """Key/value store holding at most ``capacity`` entries.

    Every public method runs under a single lock, so the recency update
    and the size invariant hold even when a cache is shared between
    threads (e.g. Streamlit script runs).
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise DomainError(f"cache capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        # Ordered least to most recently used.
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def try_get(self, key: Hashable) -> tuple[bool, Any]:
        """Return ``(True, value)`` and mark key as most recently used,
        or ``(False, None)`` if the key isn't cached."""
        with self._lock:
            if key not in self._entries:
                return False, None
            self._entries.move_to_end(key)
            return True, self._entries[key]

    def add(self, key: Hashable, value: Any) -> None:
        """Insert or update key, making it the most recently used."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        # Membership checks don't count as a use.
        with self._lock:
            return key in self._entries
