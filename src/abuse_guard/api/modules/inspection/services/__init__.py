from abuse_guard.api.modules.inspection.services.bans import (
    ActiveBans,
    BanCheck,
    BanStore,
    BanWrite,
    device_scope,
    network_scope,
)
from abuse_guard.api.modules.inspection.services.counters import (
    CounterResult,
    HitCounter,
    hit_counter_key,
)
from abuse_guard.api.modules.inspection.services.escalation import (
    EscalationTracker,
    escalation_key,
)
from abuse_guard.api.modules.inspection.services.fingerprint import build_fingerprint
from abuse_guard.api.modules.inspection.services.log_sink import (
    DecisionLogSink,
    QueuedDecisionLogSink,
)
from abuse_guard.api.modules.inspection.services.scoring import (
    RiskScorer,
    score_request,
)
from abuse_guard.api.modules.inspection.services.signals import (
    RequestIpResolver,
    RequestSignalsReader,
)
from abuse_guard.api.modules.inspection.services.store import (
    ExpiryWrite,
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
    StoreUnavailable,
)

__all__ = (
    "ActiveBans",
    "BanCheck",
    "BanStore",
    "BanWrite",
    "CounterResult",
    "DecisionLogSink",
    "EscalationTracker",
    "ExpiryWrite",
    "HitCounter",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "QueuedDecisionLogSink",
    "RedisKeyValueStore",
    "RequestIpResolver",
    "RequestSignalsReader",
    "RiskScorer",
    "StoreUnavailable",
    "build_fingerprint",
    "device_scope",
    "escalation_key",
    "hit_counter_key",
    "network_scope",
    "score_request",
)
