from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from abuse_guard.api.modules.inspection.services import (
    ExpiryWrite,
    RedisKeyValueStore,
    StoreUnavailable,
)


def _client(increment=None, set_with_expiry=None):
    client = MagicMock()
    scripts = [
        increment or AsyncMock(return_value=1),
        set_with_expiry or AsyncMock(return_value=1),
    ]
    client.register_script.side_effect = scripts
    return client


async def test_increment_runs_script_with_window():
    increment = AsyncMock(return_value=3)
    store = RedisKeyValueStore(_client(increment=increment))

    assert await store.increment_and_arm("fp:abc", 300) == 3
    increment.assert_awaited_once_with(keys=["fp:abc"], args=[300])


async def test_set_with_expiry_passes_milliseconds():
    set_script = AsyncMock(return_value=0)
    store = RedisKeyValueStore(_client(set_with_expiry=set_script))

    assert await store.set_with_expiry("ban:fp:abc", 600) is ExpiryWrite.UNCHANGED
    set_script.assert_awaited_once_with(keys=["ban:fp:abc"], args=[600_000, "1"])


@pytest.mark.parametrize("error", [RedisConnectionError("down"), RedisTimeoutError("slow")])
async def test_errors_become_store_unavailable(error):
    client = _client(increment=AsyncMock(side_effect=error))
    client.exists = AsyncMock(side_effect=error)
    store = RedisKeyValueStore(client)

    with pytest.raises(StoreUnavailable) as exc_info:
        await store.increment_and_arm("fp:abc", 300)
    assert exc_info.value.operation == "increment_and_arm"

    with pytest.raises(StoreUnavailable):
        await store.exists("ban:ip:1.2.3.4")


async def test_ping_reports_down_instead_of_raising():
    client = _client()
    client.ping = AsyncMock(side_effect=RedisConnectionError("down"))

    assert await RedisKeyValueStore(client).ping() is False


async def test_scan_collects_matching_keys():
    async def scan_iter(match, count):
        for key in ("ban:ip:10.0.0.2", "ban:ip:10.0.0.1"):
            yield key

    client = _client()
    client.scan_iter = scan_iter

    assert await RedisKeyValueStore(client).scan_keys("ban:ip:*") == [
        "ban:ip:10.0.0.1",
        "ban:ip:10.0.0.2",
    ]
