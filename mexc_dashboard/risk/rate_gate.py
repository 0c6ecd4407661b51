"""
Fixed-window order submission gate.

Counts operations per ``(account, resource)`` key in discrete windows that
reset entirely once expired. The gate is local to the process.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def rate_key(account_id: str, resource: str = "orders") -> str:
    return f"{account_id}:{resource}"


@dataclass
class RateWindow:
    window_start: int
    count: int

    def expired(self, now_ms: int, window_ms: int) -> bool:
        return now_ms - self.window_start > window_ms


class InMemoryRateWindowStore:
    """
    Process-local store of rate windows.

    Built once by the composition root and handed to every gate that needs
    it. ``lock`` serializes read-modify-write cycles on windows.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._windows: Dict[str, RateWindow] = {}

    def get(self, key: str) -> Optional[RateWindow]:
        return self._windows.get(key)

    def put(self, key: str, window: RateWindow) -> None:
        self._windows[key] = window

    def delete(self, key: str) -> None:
        self._windows.pop(key, None)

    def clear(self) -> None:
        with self.lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


class AccountRateGate:
    """Fixed-window counter used to throttle order submission per account."""

    def __init__(self, store: Optional[InMemoryRateWindowStore] = None,
                 clock: Callable[[], int] = _now_ms):
        """
        Args:
            store: Window store shared by every gate of the process
            clock: Epoch-millisecond clock
        """
        self.store = store if store is not None else InMemoryRateWindowStore()
        self.clock = clock

    def check_and_increment(self, key: str, limit: int, window_ms: int) -> bool:
        """
        Count one operation against ``key`` if the window still has room.

        Returns:
            bool: True if the operation is allowed
        """
        now = self.clock()
        with self.store.lock:
            window = self.store.get(key)

            if window is None or window.expired(now, window_ms):
                self.store.put(key, RateWindow(window_start=now, count=1))
                return True

            if window.count < limit:
                window.count += 1
                return True

        logger.warning(f"Rate limit reached for {key}", extra={
            'rate_key': key,
            'limit': limit,
            'window_ms': window_ms,
        })
        return False

    def remaining(self, key: str, limit: int, window_ms: int) -> int:
        """Operations still allowed in the current window for ``key``."""
        now = self.clock()
        with self.store.lock:
            window = self.store.get(key)
            if window is None or window.expired(now, window_ms):
                return limit
            return max(limit - window.count, 0)

    def reset(self, key: str) -> None:
        with self.store.lock:
            self.store.delete(key)
