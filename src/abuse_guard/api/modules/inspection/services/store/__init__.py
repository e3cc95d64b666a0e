from abuse_guard.api.modules.inspection.services.store.base import (
    ExpiryWrite,
    KeyValueStore,
    StoreUnavailable,
)
from abuse_guard.api.modules.inspection.services.store.memory import (
    InMemoryKeyValueStore,
)
from abuse_guard.api.modules.inspection.services.store.redis_store import (
    RedisKeyValueStore,
)

__all__ = (
    "ExpiryWrite",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "StoreUnavailable",
)
