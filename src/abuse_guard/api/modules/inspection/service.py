import logging

from starlette.requests import Request

from abuse_guard.api.modules.inspection.schema import (
    DecisionRecord,
    InspectionResult,
    RequestSignals,
    Verdict,
)
from abuse_guard.api.modules.inspection.services import (
    BanStore,
    DecisionLogSink,
    EscalationTracker,
    HitCounter,
    RequestSignalsReader,
    RiskScorer,
    build_fingerprint,
    device_scope,
    network_scope,
)
from abuse_guard.settings import InspectionConfig

logger = logging.getLogger(__name__)


class DecisionEngine:
    """Per-request allow/deny state machine.

    Order is fixed: network ban, device ban, count and score, then ban writes.
    Every store failure degrades to admitting the request; nothing is retried.
    """

    def __init__(
        self,
        config: InspectionConfig,
        signals_reader: RequestSignalsReader,
        hit_counter: HitCounter,
        bans: BanStore,
        escalation: EscalationTracker,
        scorer: RiskScorer,
        log_sink: DecisionLogSink,
    ):
        self._device_ban_seconds = config.device_ban_seconds
        self._block_score_threshold = config.block_score_threshold
        self._signals_reader = signals_reader
        self._hit_counter = hit_counter
        self._bans = bans
        self._escalation = escalation
        self._scorer = scorer
        self._log_sink = log_sink

    async def inspect_request(self, request: Request) -> InspectionResult:
        return await self.inspect(self._signals_reader.read(request))

    async def inspect(self, signals: RequestSignals) -> InspectionResult:
        fingerprint = build_fingerprint(signals)
        ip_address = signals.ip_address

        if ip_address:
            network_ban = await self._bans.is_banned(network_scope(ip_address))
            if network_ban.banned:
                return self._finish(signals, fingerprint, "denied_network_ban")

        device_ban = await self._bans.is_banned(device_scope(fingerprint))
        if device_ban.banned:
            return self._finish(signals, fingerprint, "denied_device_ban")

        counter = await self._hit_counter.increment(fingerprint)
        hit_count = counter.count if counter.ok else 0

        risk_score = self._scorer.score(
            hit_count=hit_count,
            user_agent=signals.user_agent,
            accept_present=signals.accept_present,
            path=signals.path,
        )

        if risk_score < self._block_score_threshold:
            return self._finish(
                signals, fingerprint, "admitted", hit_count, risk_score
            )

        logger.info(
            "High risk request from %s (fingerprint %s, score %s)",
            ip_address,
            fingerprint[:12],
            risk_score,
        )
        device_write = await self._bans.ban(
            device_scope(fingerprint), self._device_ban_seconds
        )
        # only the request that created the ban counts toward escalation
        if ip_address and device_write.created:
            await self._escalation.record_device_ban(ip_address)

        return self._finish(
            signals, fingerprint, "denied_newly_scored", hit_count, risk_score
        )

    def _finish(
        self,
        signals: RequestSignals,
        fingerprint: str,
        verdict: Verdict,
        hit_count: int = 0,
        risk_score: int = 0,
    ) -> InspectionResult:
        record = DecisionRecord(
            ip_address=signals.ip_address,
            fingerprint=fingerprint,
            hit_count=hit_count,
            risk_score=risk_score,
            path=signals.path,
            user_agent=signals.user_agent or "unknown",
        )
        try:
            self._log_sink.submit(record)
        except Exception:
            logger.exception("Decision log submit failed")

        return InspectionResult(
            verdict=verdict,
            fingerprint=fingerprint,
            ip_address=signals.ip_address,
            hit_count=hit_count,
            risk_score=risk_score,
        )


__all__ = ("DecisionEngine",)
