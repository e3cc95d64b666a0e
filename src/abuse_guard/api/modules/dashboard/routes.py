from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query

from abuse_guard.api.modules.dashboard.schema import (
    ActiveBansResponse,
    OverviewResponse,
    RequestLogListResponse,
    RequestLogPaginationParams,
    TopIpResponse,
)
from abuse_guard.api.modules.dashboard.service import DashboardService

router = APIRouter(route_class=DishkaRoute)


@router.get("/overview", response_model=OverviewResponse, status_code=200)
async def get_overview(
    dashboard: FromDishka[DashboardService],
) -> OverviewResponse:
    return await dashboard.overview()


@router.get("/top-ips", response_model=list[TopIpResponse], status_code=200)
async def get_top_ips(
    dashboard: FromDishka[DashboardService],
) -> list[TopIpResponse]:
    return await dashboard.top_ips()


@router.get("/bans", response_model=ActiveBansResponse, status_code=200)
async def get_active_bans(
    dashboard: FromDishka[DashboardService],
) -> ActiveBansResponse:
    return await dashboard.active_bans()


@router.get("/logs", response_model=RequestLogListResponse, status_code=200)
async def get_request_logs(
    dashboard: FromDishka[DashboardService],
    params: RequestLogPaginationParams = Query(),
) -> RequestLogListResponse:
    return await dashboard.list_logs(params)
