import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from abuse_guard.api.modules.inspection.services.store.base import (
    ExpiryWrite,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

# INCR and EXPIRE run in one script so a freshly created counter is never
# observable without its window.
_INCREMENT_AND_ARM = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return count
"""

# PTTL is -2 for a missing key and -1 for a key without expiry.
# Returns 2 when the key was created, 1 when extended, 0 when left alone.
_SET_WITH_EXPIRY = """
local remaining = redis.call('PTTL', KEYS[1])
local wanted = tonumber(ARGV[1])
if remaining == -2 then
    redis.call('SET', KEYS[1], ARGV[2], 'PX', wanted)
    return 2
end
if remaining >= 0 and remaining < wanted then
    redis.call('PEXPIRE', KEYS[1], wanted)
    return 1
end
return 0
"""

_SCAN_COUNT = 500


class RedisKeyValueStore:
    def __init__(self, client: Redis):
        self._client = client
        self._increment_and_arm = client.register_script(_INCREMENT_AND_ARM)
        self._set_with_expiry = client.register_script(_SET_WITH_EXPIRY)

    async def increment_and_arm(self, key: str, window_seconds: int) -> int:
        try:
            count = await self._increment_and_arm(keys=[key], args=[window_seconds])
        except (RedisError, TimeoutError, OSError) as exc:
            raise StoreUnavailable("increment_and_arm", key) from exc
        return int(count)

    async def set_with_expiry(self, key: str, seconds: int) -> ExpiryWrite:
        try:
            written = await self._set_with_expiry(
                keys=[key],
                args=[seconds * 1000, "1"],
            )
        except (RedisError, TimeoutError, OSError) as exc:
            raise StoreUnavailable("set_with_expiry", key) from exc
        return ExpiryWrite(int(written))

    async def exists(self, key: str) -> bool:
        try:
            return await self._client.exists(key) > 0
        except (RedisError, TimeoutError, OSError) as exc:
            raise StoreUnavailable("exists", key) from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except (RedisError, TimeoutError, OSError) as exc:
            raise StoreUnavailable("delete", key) from exc

    async def scan_keys(self, pattern: str) -> list[str]:
        keys: list[str] = []
        try:
            async for key in self._client.scan_iter(match=pattern, count=_SCAN_COUNT):
                keys.append(key.decode() if isinstance(key, bytes) else key)
        except (RedisError, TimeoutError, OSError) as exc:
            raise StoreUnavailable("scan_keys", pattern) from exc
        return sorted(keys)

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (RedisError, TimeoutError, OSError) as exc:
            logger.debug("Redis ping failed: %s", exc)
            return False


__all__ = ("RedisKeyValueStore",)
