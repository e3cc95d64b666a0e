import logging

from abuse_guard.api.modules.inspection.services.bans import BanStore, network_scope
from abuse_guard.api.modules.inspection.services.store import (
    KeyValueStore,
    StoreUnavailable,
)
from abuse_guard.settings import InspectionConfig

logger = logging.getLogger(__name__)

ESCALATION_PREFIX = "ip:risk:"


def escalation_key(ip_address: str) -> str:
    return f"{ESCALATION_PREFIX}{ip_address}"


class EscalationTracker:
    """Promotes repeated device bans from one address to a network ban.

    The counter window is armed by the first device ban only; once the
    threshold is met the network ban is written and the counter is cleared,
    so the ban record is the only trace left of that cycle.
    """

    def __init__(
        self,
        store: KeyValueStore,
        bans: BanStore,
        config: InspectionConfig,
    ):
        self._store = store
        self._bans = bans
        self._window_seconds = config.escalation_window_seconds
        self._threshold = config.escalation_threshold
        self._network_ban_seconds = config.network_ban_seconds

    async def record_device_ban(self, ip_address: str) -> bool:
        """Count one newly created device ban for ``ip_address``.

        Returns ``True`` if it escalated to a network ban.
        """
        key = escalation_key(ip_address)
        try:
            count = await self._store.increment_and_arm(key, self._window_seconds)
        except StoreUnavailable as exc:
            logger.warning("Escalation counter unavailable: %s", exc)
            return False

        if count < self._threshold:
            return False

        logger.warning(
            "Escalating %s to network ban after %s device bans",
            ip_address,
            count,
        )
        written = await self._bans.ban(network_scope(ip_address), self._network_ban_seconds)
        if not written.ok:
            return False

        try:
            await self._store.delete(key)
        except StoreUnavailable as exc:
            logger.warning("Failed to reset escalation counter: %s", exc)
        return True


__all__ = ("EscalationTracker", "escalation_key")
