"""
Caches for Fermi break-up split enumeration.

Enumerating every partition of a light nucleus is the expensive part of
Fermi break-up, so the partitions are memoised per (A, Z).
"""

from itertools import count
from typing import Any, Dict, Hashable, List, Optional


class SimpleCache:
    """Unbounded dictionary cache."""

    def __init__(self):
        self._data: Dict[Hashable, Any] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._data.get(key, default)

    def insert(self, key: Hashable, value: Any):
        self._data[key] = value

    def clear(self):
        self._data.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"SimpleCache(size={len(self)})"


class LFUCache:
    """
    Bounded least-frequently-used cache.

    On overflow the entry with the fewest hits is evicted; ties go to the
    entry that was touched longest ago.
    """

    def __init__(self, capacity: int):
        """
        Initialize cache.

        Parameters:
            capacity: Maximum number of entries (>= 1)
        """
        if capacity < 1:
            raise ValueError(f"LFU cache capacity must be positive, got {capacity}")
        self.capacity = capacity
        # key -> [value, hits, last touch]
        self._entries: Dict[Hashable, List[Any]] = {}
        self._clock = count()

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        entry[1] += 1
        entry[2] = next(self._clock)
        return entry[0]

    def insert(self, key: Hashable, value: Any):
        entry = self._entries.get(key)
        if entry is not None:
            entry[0] = value
            entry[1] += 1
            entry[2] = next(self._clock)
            return

        if len(self._entries) >= self.capacity:
            victim = min(self._entries, key=lambda k: (self._entries[k][1], self._entries[k][2]))
            del self._entries[victim]

        self._entries[key] = [value, 0, next(self._clock)]

    def hits(self, key: Hashable) -> Optional[int]:
        entry = self._entries.get(key)
        return entry[1] if entry is not None else None

    def clear(self):
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LFUCache(size={len(self)}, capacity={self.capacity})"
