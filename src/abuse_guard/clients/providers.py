"""Store and database providers for dependency injection."""

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from abuse_guard.api.modules.inspection.services import (
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)
from abuse_guard.database import build_engine, build_session_factory
from abuse_guard.database.uow import UnitOfWork
from abuse_guard.settings import Config


def build_redis_client(config: Config) -> Redis:
    return Redis.from_url(
        config.redis_url,
        password=config.redis.password,
        socket_timeout=config.redis.socket_timeout_seconds,
        socket_connect_timeout=config.redis.socket_connect_timeout_seconds,
        decode_responses=True,
    )


class StoreProvider(Provider):
    """Provider for the shared counter and ban store.

    The Redis client is created once per APP scope and closed on container
    shutdown. Socket timeouts bound every store round-trip, so an unreachable
    Redis surfaces as ``StoreUnavailable`` instead of a hung request.
    """

    @provide(scope=Scope.APP)
    async def get_key_value_store(self, config: Config) -> AsyncIterator[KeyValueStore]:
        if config.inspection.store_backend == "memory":
            yield InMemoryKeyValueStore()
            return

        client = build_redis_client(config)
        try:
            yield RedisKeyValueStore(client)
        finally:
            await client.aclose()


class DatabaseProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterator[AsyncEngine]:
        engine = build_engine(config)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        return build_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    @provide(scope=Scope.REQUEST)
    def get_uow(self, session: AsyncSession) -> UnitOfWork:
        return UnitOfWork(session)
