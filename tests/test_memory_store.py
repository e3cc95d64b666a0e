import asyncio

import pytest

from abuse_guard.api.modules.inspection.services import ExpiryWrite


async def test_first_increment_returns_one_and_arms_window(store, clock):
    assert await store.increment_and_arm("fp:a", 300) == 1
    assert await store.ttl("fp:a") == pytest.approx(300)

    clock.advance(100)
    assert await store.increment_and_arm("fp:a", 300) == 2
    # later increments never push the window out
    assert await store.ttl("fp:a") == pytest.approx(200)


async def test_counter_resets_after_window(store, clock):
    for _ in range(5):
        await store.increment_and_arm("fp:a", 300)

    clock.advance(300)

    assert await store.exists("fp:a") is False
    assert await store.increment_and_arm("fp:a", 300) == 1


async def test_concurrent_increments_lose_nothing(store):
    results = await asyncio.gather(
        *(store.increment_and_arm("fp:busy", 300) for _ in range(50))
    )

    assert sorted(results) == list(range(1, 51))
    assert await store.increment_and_arm("fp:busy", 300) == 51


async def test_repeat_ban_keeps_later_expiry(store, clock):
    assert await store.set_with_expiry("ban:fp:a", 600) is ExpiryWrite.CREATED
    clock.advance(10)
    assert await store.set_with_expiry("ban:fp:a", 600) is ExpiryWrite.EXTENDED

    assert await store.ttl("ban:fp:a") == pytest.approx(600)
    assert await store.scan_keys("ban:fp:*") == ["ban:fp:a"]


async def test_shorter_ban_never_shortens_existing(store):
    await store.set_with_expiry("ban:ip:1.2.3.4", 1800)

    assert await store.set_with_expiry("ban:ip:1.2.3.4", 600) is ExpiryWrite.UNCHANGED
    assert await store.ttl("ban:ip:1.2.3.4") == pytest.approx(1800)


async def test_ban_expires(store, clock):
    await store.set_with_expiry("ban:fp:a", 600)

    clock.advance(599)
    assert await store.exists("ban:fp:a") is True
    clock.advance(1)
    assert await store.exists("ban:fp:a") is False


async def test_scan_and_delete(store, clock):
    await store.set_with_expiry("ban:ip:10.0.0.1", 1800)
    await store.set_with_expiry("ban:ip:10.0.0.2", 60)
    await store.set_with_expiry("ban:fp:abc", 600)

    clock.advance(61)
    assert await store.scan_keys("ban:ip:*") == ["ban:ip:10.0.0.1"]

    await store.delete("ban:ip:10.0.0.1")
    assert await store.scan_keys("ban:ip:*") == []
    assert await store.ping() is True
