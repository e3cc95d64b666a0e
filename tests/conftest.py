# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable

import pytest

os.environ.setdefault("APP__POSTGRES__USER", "guard")
os.environ.setdefault("APP__POSTGRES__PASSWORD", "guard")
os.environ.setdefault("APP__POSTGRES__HOST", "localhost")
os.environ.setdefault("APP__POSTGRES__DB", "guard")

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from abuse_guard.api.modules.inspection.models import RequestLog  # noqa: F401
from abuse_guard.api.modules.inspection.schema import DecisionRecord, RequestSignals
from abuse_guard.api.modules.inspection.service import DecisionEngine
from abuse_guard.api.modules.inspection.services import (
    BanStore,
    EscalationTracker,
    ExpiryWrite,
    HitCounter,
    InMemoryKeyValueStore,
    RequestIpResolver,
    RequestSignalsReader,
    RiskScorer,
    StoreUnavailable,
)
from abuse_guard.database.base import Base
from abuse_guard.settings import InspectionConfig

TEST_DB_URL = "sqlite+aiosqlite://"


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingLogSink:
    def __init__(self) -> None:
        self.records: list[DecisionRecord] = []

    def submit(self, record: DecisionRecord) -> bool:
        self.records.append(record)
        return True


class DownStore:
    """Store whose every round-trip fails, as if Redis were unreachable."""

    async def increment_and_arm(self, key: str, window_seconds: int) -> int:
        raise StoreUnavailable("increment_and_arm", key)

    async def set_with_expiry(self, key: str, seconds: int) -> ExpiryWrite:
        raise StoreUnavailable("set_with_expiry", key)

    async def exists(self, key: str) -> bool:
        raise StoreUnavailable("exists", key)

    async def delete(self, key: str) -> None:
        raise StoreUnavailable("delete", key)

    async def scan_keys(self, pattern: str) -> list[str]:
        raise StoreUnavailable("scan_keys", pattern)

    async def ping(self) -> bool:
        return False


def build_engine(
    store,
    config: InspectionConfig,
    log_sink,
) -> DecisionEngine:
    bans = BanStore(store)
    return DecisionEngine(
        config=config,
        signals_reader=RequestSignalsReader(RequestIpResolver(config)),
        hit_counter=HitCounter(store, window_seconds=config.hit_window_seconds),
        bans=bans,
        escalation=EscalationTracker(store, bans, config),
        scorer=RiskScorer(config),
        log_sink=log_sink,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture()
def inspection_config() -> InspectionConfig:
    return InspectionConfig()


@pytest.fixture()
def log_sink() -> RecordingLogSink:
    return RecordingLogSink()


@pytest.fixture()
def engine(
    store: InMemoryKeyValueStore,
    inspection_config: InspectionConfig,
    log_sink: RecordingLogSink,
) -> DecisionEngine:
    return build_engine(store, inspection_config, log_sink)


@pytest.fixture()
def make_signals() -> Callable[..., RequestSignals]:
    def _make(
        ip_address: str | None = "203.0.113.7",
        path: str = "/v1/items",
        user_agent: str | None = "Mozilla/5.0 (X11; Linux x86_64) Firefox/124.0",
        accept: str | None = "application/json",
        **headers: str,
    ) -> RequestSignals:
        values = {
            "user-agent": user_agent,
            "accept": accept,
            "accept-language": "en-US,en;q=0.9",
            "accept-encoding": "gzip, deflate",
        }
        values.update({name.replace("_", "-"): value for name, value in headers.items()})
        return RequestSignals(
            ip_address=ip_address,
            path=path,
            headers={name: value for name, value in values.items() if value},
        )

    return _make


@pytest.fixture()
async def db_engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture()
def down_store() -> DownStore:
    return DownStore()


@pytest.fixture()
def engine_factory(
    inspection_config: InspectionConfig,
) -> Callable[..., DecisionEngine]:
    def _factory(store, log_sink=None, config: InspectionConfig | None = None):
        return build_engine(
            store,
            config or inspection_config,
            log_sink if log_sink is not None else RecordingLogSink(),
        )

    return _factory
