import logging
from dataclasses import dataclass

from abuse_guard.api.modules.inspection.services.store import (
    KeyValueStore,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

HIT_COUNTER_PREFIX = "fp:"


def hit_counter_key(fingerprint: str) -> str:
    return f"{HIT_COUNTER_PREFIX}{fingerprint}"


@dataclass(slots=True, frozen=True)
class CounterResult:
    count: int
    ok: bool = True


class HitCounter:
    """Fixed-window request counter per fingerprint."""

    def __init__(self, store: KeyValueStore, window_seconds: int):
        self._store = store
        self._window_seconds = window_seconds

    async def increment(self, fingerprint: str) -> CounterResult:
        key = hit_counter_key(fingerprint)
        try:
            count = await self._store.increment_and_arm(key, self._window_seconds)
        except StoreUnavailable as exc:
            logger.warning("Hit counter unavailable, failing open: %s", exc)
            return CounterResult(count=0, ok=False)
        return CounterResult(count=count)


__all__ = ("CounterResult", "HitCounter", "hit_counter_key")
