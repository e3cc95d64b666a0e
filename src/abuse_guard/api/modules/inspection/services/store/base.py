from enum import IntEnum
from typing import Protocol


class StoreUnavailable(Exception):
    """The shared store could not be reached or did not answer in time."""

    def __init__(self, operation: str, key: str | None = None):
        self.operation = operation
        self.key = key
        target = f" on {key!r}" if key else ""
        super().__init__(f"Store unavailable during {operation}{target}")


class ExpiryWrite(IntEnum):
    """Outcome of ``set_with_expiry``."""

    UNCHANGED = 0
    EXTENDED = 1
    CREATED = 2


class KeyValueStore(Protocol):
    """Atomic primitives the inspection engine relies on.

    Every implementation must serialize ``increment_and_arm`` and
    ``set_with_expiry`` per key; the engine never reads then writes.
    """

    async def increment_and_arm(self, key: str, window_seconds: int) -> int:
        """Increment ``key``; arm ``window_seconds`` expiry if this call created it."""
        ...

    async def set_with_expiry(self, key: str, seconds: int) -> ExpiryWrite:
        """Set ``key`` unless its remaining lifetime already covers ``seconds``.

        ``CREATED`` means no live key existed before this call.
        """
        ...

    async def exists(self, key: str) -> bool: ...

    async def delete(self, key: str) -> None: ...

    async def scan_keys(self, pattern: str) -> list[str]: ...

    async def ping(self) -> bool: ...


__all__ = ("ExpiryWrite", "KeyValueStore", "StoreUnavailable")
