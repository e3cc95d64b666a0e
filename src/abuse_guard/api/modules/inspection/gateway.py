from collections.abc import Sequence

from sqlalchemy import BinaryExpression, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from abuse_guard.api.modules.inspection.models import RequestLog


class RequestLogGateway:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_total_count(
        self, filters: list[BinaryExpression] | None = None
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(RequestLog)
            .where(*(filters or []))
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_all(
        self,
        limit: int,
        offset: int = 0,
        filters: list[BinaryExpression] | None = None,
    ) -> Sequence[RequestLog]:
        stmt = (
            select(RequestLog)
            .filter(*(filters or []))
            .order_by(RequestLog.requested_at.desc(), RequestLog.id.desc())
            .offset(offset=offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_unique_ip_count(self) -> int:
        stmt = select(func.count(func.distinct(RequestLog.ip_address)))
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_high_risk_count(self, min_risk_score: int) -> int:
        return await self.get_total_count(
            [RequestLog.risk_score >= min_risk_score]
        )

    async def get_top_ips(self, limit: int) -> list[tuple[str, int]]:
        requests = func.count(RequestLog.id).label("requests")
        stmt = (
            select(RequestLog.ip_address, requests)
            .where(RequestLog.ip_address.is_not(None))
            .group_by(RequestLog.ip_address)
            .order_by(requests.desc(), RequestLog.ip_address)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(ip, count) for ip, count in result.all()]

    async def create(self, log: RequestLog) -> RequestLog:
        self.session.add(log)
        await self.session.flush()
        return log
