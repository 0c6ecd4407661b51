"""
Short-lived cache of public market data responses.

The cache is process-local and built once by the composition root, like the
rate window store, so tests get isolation by constructing fresh instances.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


DEFAULT_TTL_MS = 500


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheEntry:
    stored_at: int
    data: Any


class InMemoryResponseCache:
    """
    TTL cache keyed by upper-cased symbol.

    An entry is served while it is younger than ``ttl_ms``.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = _now_ms):
        """
        Args:
            ttl_ms: Lifetime of an entry in milliseconds
            clock: Epoch-millisecond clock
        """
        self.ttl_ms = ttl_ms
        self.clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, symbol: str) -> Optional[Any]:
        key = symbol.upper()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self.clock() - entry.stored_at >= self.ttl_ms:
                del self._entries[key]
                return None
            return entry.data

    def put(self, symbol: str, data: Any) -> None:
        with self._lock:
            self._entries[symbol.upper()] = CacheEntry(stored_at=self.clock(), data=data)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
