from abuse_guard.api.modules.inspection.services import (
    BanStore,
    EscalationTracker,
    HitCounter,
    device_scope,
    escalation_key,
    network_scope,
)
from abuse_guard.settings import InspectionConfig


async def test_hit_counter_keys_by_fingerprint(store):
    counter = HitCounter(store, window_seconds=300)

    first = await counter.increment("abc")
    second = await counter.increment("abc")

    assert (first.count, first.ok) == (1, True)
    assert second.count == 2
    assert await store.exists("fp:abc")


async def test_hit_counter_fails_open(down_store):
    result = await HitCounter(down_store, window_seconds=300).increment("abc")

    assert result.count == 0
    assert result.ok is False


async def test_ban_store_fails_open(down_store):
    bans = BanStore(down_store)

    check = await bans.is_banned(device_scope("abc"))

    assert check.banned is False
    assert check.ok is False
    assert (await bans.ban(device_scope("abc"), 600)).ok is False


async def test_ban_scopes(store):
    bans = BanStore(store)

    first = await bans.ban(network_scope("203.0.113.7"), 1800)
    again = await bans.ban(network_scope("203.0.113.7"), 1800)

    assert (first.ok, first.created) == (True, True)
    assert (again.ok, again.created) == (True, False)
    assert (await bans.is_banned("ban:ip:203.0.113.7")).banned is True
    assert (await bans.is_banned(device_scope("abc"))).banned is False


async def test_escalation_threshold_is_configurable(store):
    bans = BanStore(store)
    tracker = EscalationTracker(store, bans, InspectionConfig(escalation_threshold=2))

    assert await tracker.record_device_ban("192.0.2.1") is False
    assert await tracker.record_device_ban("192.0.2.1") is True
    assert await store.exists(network_scope("192.0.2.1"))
    assert await store.exists(escalation_key("192.0.2.1")) is False


async def test_escalation_with_store_down(down_store):
    tracker = EscalationTracker(down_store, BanStore(down_store), InspectionConfig())

    assert await tracker.record_device_ban("192.0.2.1") is False
