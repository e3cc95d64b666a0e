from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from abuse_guard.api.common.schema import Pagination, PaginationParams


class RequestLogResponse(BaseModel):
    id: int
    ip_address: str | None
    requested_at: datetime
    fingerprint: str
    hit_count: int
    risk_score: int
    path: str
    user_agent: str

    model_config = ConfigDict(from_attributes=True)


class RequestLogPaginationParams(PaginationParams):
    ip_address: str | None = Field(default=None, max_length=64)
    fingerprint: str | None = Field(default=None, max_length=64)
    min_risk_score: int | None = Field(default=None, ge=0)


class RequestLogListResponse(Pagination[RequestLogResponse]):
    pass


class OverviewResponse(BaseModel):
    total_requests: int
    unique_ips: int
    high_risk: int
    recent: list[RequestLogResponse]


class TopIpResponse(BaseModel):
    ip_address: str
    requests: int


class ActiveBansResponse(BaseModel):
    ip_ban_count: int
    fingerprint_ban_count: int
    ip_bans: list[str]
    fingerprint_bans: list[str]
