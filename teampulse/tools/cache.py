"""
Short-lived in-memory cache for source clients.

Each client owns its own TTLCache. Entries expire ttl_seconds after they
were written; the clock is injectable so tests can move time forward.
"""

import time
from typing import Any, Callable, Hashable

_MISSING = object()


class TTLCache:
    """Key-value store whose entries expire after a fixed time-to-live."""

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key, _MISSING)
        if entry is _MISSING:
            return default
        expires_at, value = entry
        if self._clock() >= expires_at:
            # Expired entries are dropped on access
            self._entries.pop(key, None)
            return default
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
