from sqlalchemy.ext.asyncio import AsyncSession

from abuse_guard.api.modules.inspection.gateway import RequestLogGateway


class UnitOfWork:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.request_logs = RequestLogGateway(session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
