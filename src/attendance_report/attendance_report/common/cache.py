from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TtlCache:
    """Small in-process cache with per-entry TTL.

    Single process, last writer wins, no locking (the pipeline runs one
    invocation at a time). The clock is injectable so tests can move time.
    """

    def __init__(self, default_ttl: float, *, clock: Optional[Callable[[], float]] = None):
        self._default_ttl = float(default_ttl)
        self._clock = clock or time.monotonic
        self._entries: dict[Hashable, _Entry] = {}

    def get(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, *, ttl: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl is None else float(ttl)
        if ttl <= 0:
            self._entries.pop(key, None)
            return
        self._purge_expired()
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def _purge_expired(self) -> None:
        now = self._clock()
        for stale in [k for k, e in self._entries.items() if e.expires_at <= now]:
            del self._entries[stale]

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
