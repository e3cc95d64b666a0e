import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from abuse_guard.database.base import Base, DateTimeMixin


class RequestLog(Base, DateTimeMixin):
    __tablename__ = "request_logs"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    ip_address: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    requested_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), index=True
    )
    fingerprint: Mapped[str] = mapped_column(String(64), index=True)
    hit_count: Mapped[int] = mapped_column(Integer, default=0)
    risk_score: Mapped[int] = mapped_column(Integer, index=True)
    path: Mapped[str] = mapped_column(Text)
    user_agent: Mapped[str] = mapped_column(Text, default="unknown")
