from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Verdict = Literal[
    "admitted",
    "denied_network_ban",
    "denied_device_ban",
    "denied_newly_scored",
]

_STATUS_BY_VERDICT: dict[str, int] = {
    "admitted": 200,
    "denied_network_ban": 403,
    "denied_device_ban": 403,
    "denied_newly_scored": 429,
}


@dataclass(slots=True, frozen=True)
class RequestSignals:
    """Everything the engine reads from an inbound request.

    ``headers`` holds lower-cased header names. Absent headers are simply
    missing from the mapping.
    """

    ip_address: str | None
    path: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def accept_present(self) -> bool:
        return bool(self.headers.get("accept"))


@dataclass(slots=True, frozen=True)
class InspectionResult:
    verdict: Verdict
    fingerprint: str
    ip_address: str | None
    hit_count: int = 0
    risk_score: int = 0

    @property
    def allowed(self) -> bool:
        return self.verdict == "admitted"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_VERDICT[self.verdict]


@dataclass(slots=True, frozen=True)
class DecisionRecord:
    ip_address: str | None
    fingerprint: str
    hit_count: int
    risk_score: int
    path: str
    user_agent: str
    requested_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class BanDeniedResponse(BaseModel):
    message: str


class ScoreDeniedResponse(BaseModel):
    message: str
    risk_score: int = Field(..., ge=0, serialization_alias="riskScore")

    model_config = ConfigDict(populate_by_name=True)
