import logging

from fastapi import HTTPException

from abuse_guard.api.common.utils import build_filters
from abuse_guard.api.modules.dashboard.schema import (
    ActiveBansResponse,
    OverviewResponse,
    RequestLogListResponse,
    RequestLogPaginationParams,
    RequestLogResponse,
    TopIpResponse,
)
from abuse_guard.api.modules.inspection.models import RequestLog
from abuse_guard.api.modules.inspection.services import BanStore, StoreUnavailable
from abuse_guard.database.uow import UnitOfWork
from abuse_guard.settings import InspectionConfig

logger = logging.getLogger(__name__)


class DashboardService:
    """Read-side reporting over the request log and the ban store."""

    def __init__(self, uow: UnitOfWork, bans: BanStore, config: InspectionConfig):
        self._uow = uow
        self._bans = bans
        self._config = config

    async def overview(self) -> OverviewResponse:
        logs = self._uow.request_logs
        recent = await logs.get_all(limit=self._config.recent_logs_limit)
        return OverviewResponse(
            total_requests=await logs.get_total_count(),
            unique_ips=await logs.get_unique_ip_count(),
            high_risk=await logs.get_high_risk_count(self._config.block_score_threshold),
            recent=[RequestLogResponse.model_validate(item) for item in recent],
        )

    async def top_ips(self) -> list[TopIpResponse]:
        rows = await self._uow.request_logs.get_top_ips(self._config.top_ips_limit)
        return [TopIpResponse(ip_address=ip, requests=count) for ip, count in rows]

    async def active_bans(self) -> ActiveBansResponse:
        try:
            bans = await self._bans.list_active()
        except StoreUnavailable as exc:
            logger.error("Ban listing failed: %s", exc)
            raise HTTPException(status_code=503, detail="ban_store_unavailable") from exc

        return ActiveBansResponse(
            ip_ban_count=len(bans.network),
            fingerprint_ban_count=len(bans.device),
            ip_bans=bans.network,
            fingerprint_bans=bans.device,
        )

    async def list_logs(
        self, params: RequestLogPaginationParams
    ) -> RequestLogListResponse:
        filter_data = params.model_dump(
            exclude={"page", "page_size"},
            exclude_none=True,
        )
        filters = build_filters(RequestLog, filter_data)

        items = await self._uow.request_logs.get_all(
            limit=params.page_size,
            offset=params.offset,
            filters=filters,
        )
        total = await self._uow.request_logs.get_total_count(filters)

        return RequestLogListResponse(
            items=[RequestLogResponse.model_validate(item) for item in items],
            total=total,
            page=params.page,
            page_size=params.page_size,
        )
