import logging
from dataclasses import dataclass

from abuse_guard.api.modules.inspection.services.store import (
    ExpiryWrite,
    KeyValueStore,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

DEVICE_BAN_PREFIX = "ban:fp:"
NETWORK_BAN_PREFIX = "ban:ip:"


def device_scope(fingerprint: str) -> str:
    return f"{DEVICE_BAN_PREFIX}{fingerprint}"


def network_scope(ip_address: str) -> str:
    return f"{NETWORK_BAN_PREFIX}{ip_address}"


@dataclass(slots=True, frozen=True)
class BanCheck:
    banned: bool
    ok: bool = True


@dataclass(slots=True, frozen=True)
class BanWrite:
    ok: bool
    created: bool = False


@dataclass(slots=True)
class ActiveBans:
    network: list[str]
    device: list[str]


class BanStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    async def is_banned(self, scope_key: str) -> BanCheck:
        try:
            banned = await self._store.exists(scope_key)
        except StoreUnavailable as exc:
            logger.warning("Ban lookup unavailable, failing open: %s", exc)
            return BanCheck(banned=False, ok=False)
        return BanCheck(banned=banned)

    async def ban(self, scope_key: str, duration_seconds: int) -> BanWrite:
        """Create or extend a ban.

        ``created`` is set only when no live ban existed for ``scope_key``, so
        concurrent writers for one scope see exactly one creation.
        """
        try:
            outcome = await self._store.set_with_expiry(scope_key, duration_seconds)
        except StoreUnavailable as exc:
            logger.error("Failed to record ban %s: %s", scope_key, exc)
            return BanWrite(ok=False)
        if outcome is ExpiryWrite.CREATED:
            logger.info("Ban recorded: %s for %ss", scope_key, duration_seconds)
        return BanWrite(ok=True, created=outcome is ExpiryWrite.CREATED)

    async def list_active(self) -> ActiveBans:
        network = await self._store.scan_keys(f"{NETWORK_BAN_PREFIX}*")
        device = await self._store.scan_keys(f"{DEVICE_BAN_PREFIX}*")
        return ActiveBans(
            network=[key.removeprefix(NETWORK_BAN_PREFIX) for key in network],
            device=[key.removeprefix(DEVICE_BAN_PREFIX) for key in device],
        )


__all__ = (
    "ActiveBans",
    "BanCheck",
    "BanStore",
    "BanWrite",
    "device_scope",
    "network_scope",
)
