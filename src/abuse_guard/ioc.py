from collections.abc import AsyncIterator

from dishka import AsyncContainer, Provider, Scope, make_async_container, provide
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from abuse_guard.api.modules.dashboard.service import DashboardService
from abuse_guard.api.modules.inspection.service import DecisionEngine
from abuse_guard.api.modules.inspection.services import (
    BanStore,
    DecisionLogSink,
    EscalationTracker,
    HitCounter,
    KeyValueStore,
    QueuedDecisionLogSink,
    RequestIpResolver,
    RequestSignalsReader,
    RiskScorer,
)
from abuse_guard.clients.providers import DatabaseProvider, StoreProvider
from abuse_guard.database.uow import UnitOfWork
from abuse_guard.settings import Config, get_config


class AppProvider(Provider):
    """Application provider for dependency injection."""

    @provide(scope=Scope.APP)
    def get_config(self) -> Config:
        return get_config()


class ServicesProvider(Provider):
    """Services provider for dependency injection."""

    @provide(scope=Scope.APP)
    def get_request_ip_resolver(self, config: Config) -> RequestIpResolver:
        return RequestIpResolver(config.inspection)

    @provide(scope=Scope.APP)
    def get_request_signals_reader(
        self, ip_resolver: RequestIpResolver
    ) -> RequestSignalsReader:
        return RequestSignalsReader(ip_resolver)

    @provide(scope=Scope.APP)
    def get_hit_counter(self, store: KeyValueStore, config: Config) -> HitCounter:
        return HitCounter(store, window_seconds=config.inspection.hit_window_seconds)

    @provide(scope=Scope.APP)
    def get_ban_store(self, store: KeyValueStore) -> BanStore:
        return BanStore(store)

    @provide(scope=Scope.APP)
    def get_escalation_tracker(
        self,
        store: KeyValueStore,
        bans: BanStore,
        config: Config,
    ) -> EscalationTracker:
        return EscalationTracker(store, bans, config.inspection)

    @provide(scope=Scope.APP)
    def get_risk_scorer(self, config: Config) -> RiskScorer:
        return RiskScorer(config.inspection)

    @provide(scope=Scope.APP)
    async def get_decision_log_sink(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: Config,
    ) -> AsyncIterator[DecisionLogSink]:
        sink = QueuedDecisionLogSink(
            session_factory,
            max_size=config.inspection.log_queue_size,
            drain_timeout=config.inspection.log_drain_seconds,
        )
        sink.start()
        yield sink
        await sink.close()

    @provide(scope=Scope.APP)
    def get_decision_engine(
        self,
        config: Config,
        signals_reader: RequestSignalsReader,
        hit_counter: HitCounter,
        bans: BanStore,
        escalation: EscalationTracker,
        scorer: RiskScorer,
        log_sink: DecisionLogSink,
    ) -> DecisionEngine:
        return DecisionEngine(
            config=config.inspection,
            signals_reader=signals_reader,
            hit_counter=hit_counter,
            bans=bans,
            escalation=escalation,
            scorer=scorer,
            log_sink=log_sink,
        )

    @provide(scope=Scope.REQUEST)
    def get_dashboard_service(
        self,
        uow: UnitOfWork,
        bans: BanStore,
        config: Config,
    ) -> DashboardService:
        return DashboardService(uow=uow, bans=bans, config=config.inspection)


def get_async_container() -> AsyncContainer:
    return make_async_container(
        AppProvider(),
        ServicesProvider(),
        StoreProvider(),
        DatabaseProvider(),
    )
