import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from fnmatch import fnmatchcase
from time import monotonic

from abuse_guard.api.modules.inspection.services.store.base import ExpiryWrite

_PURGE_EVERY = 512


@dataclass(slots=True)
class _Entry:
    value: int
    expires_at: float | None


class InMemoryKeyValueStore:
    """Single-process store with expiring keys.

    Note: per-process memory store. For multi-worker deployments use Redis,
    counters and bans here are not shared between processes.
    """

    def __init__(self, clock: Callable[[], float] = monotonic):
        self._clock = clock
        self._items: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._call_count = 0

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return entry.expires_at is not None and entry.expires_at <= now

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._items.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._items[key]

    def _live(self, key: str, now: float) -> _Entry | None:
        self._call_count += 1
        if self._call_count >= _PURGE_EVERY:
            self._call_count = 0
            self._purge_expired(now)

        entry = self._items.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, now):
            del self._items[key]
            return None
        return entry

    async def increment_and_arm(self, key: str, window_seconds: int) -> int:
        now = self._clock()
        async with self._lock:
            entry = self._live(key, now)
            if entry is None:
                entry = _Entry(value=0, expires_at=now + window_seconds)
                self._items[key] = entry
            entry.value += 1
            return entry.value

    async def set_with_expiry(self, key: str, seconds: int) -> ExpiryWrite:
        now = self._clock()
        expires_at = now + seconds
        async with self._lock:
            entry = self._live(key, now)
            if entry is None:
                self._items[key] = _Entry(value=1, expires_at=expires_at)
                return ExpiryWrite.CREATED
            if entry.expires_at is None or entry.expires_at >= expires_at:
                return ExpiryWrite.UNCHANGED
            entry.expires_at = expires_at
            return ExpiryWrite.EXTENDED

    async def exists(self, key: str) -> bool:
        now = self._clock()
        async with self._lock:
            return self._live(key, now) is not None

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._items.pop(key, None)

    async def scan_keys(self, pattern: str) -> list[str]:
        now = self._clock()
        async with self._lock:
            self._purge_expired(now)
            return sorted(key for key in self._items if fnmatchcase(key, pattern))

    async def ping(self) -> bool:
        return True

    async def ttl(self, key: str) -> float | None:
        """Seconds left before ``key`` expires, ``None`` if it is absent."""
        now = self._clock()
        async with self._lock:
            entry = self._live(key, now)
            if entry is None or entry.expires_at is None:
                return None
            return entry.expires_at - now


__all__ = ("InMemoryKeyValueStore",)
