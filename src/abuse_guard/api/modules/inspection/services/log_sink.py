import asyncio
import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from abuse_guard.api.modules.inspection.models import RequestLog
from abuse_guard.api.modules.inspection.schema import DecisionRecord
from abuse_guard.database.uow import UnitOfWork

logger = logging.getLogger(__name__)


class DecisionLogSink(Protocol):
    def submit(self, record: DecisionRecord) -> bool:
        """Hand a record over without waiting for it to be written."""
        ...


class QueuedDecisionLogSink:
    """Bounded fire-and-forget queue in front of the ``request_logs`` table.

    ``submit`` never awaits. When the queue is full the record is dropped and a
    warning is logged; a failed database write is logged and rolled back.
    ``close`` drains for at most ``drain_timeout`` seconds, then drops the rest.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_size: int,
        drain_timeout: float = 5.0,
    ):
        self._session_factory = session_factory
        self._drain_timeout = drain_timeout
        self._queue: asyncio.Queue[DecisionRecord] = asyncio.Queue(maxsize=max(1, max_size))
        self._worker: asyncio.Task[None] | None = None
        self._dropped = 0

    @property
    def dropped(self) -> int:
        return self._dropped

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="decision-log-writer")

    async def close(self) -> None:
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self._drain_timeout)
        except TimeoutError:
            pending = self._queue.qsize()
            self._dropped += pending
            logger.warning(
                "Decision log drain timed out after %ss, dropping %s queued records",
                self._drain_timeout,
                pending,
            )
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    def submit(self, record: DecisionRecord) -> bool:
        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                "Decision log queue full, dropping record for %s",
                record.ip_address,
            )
            return False
        return True

    async def _run(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                await self._write(record)
            except Exception:
                logger.exception("Failed to save decision log")
            finally:
                self._queue.task_done()

    async def _write(self, record: DecisionRecord) -> None:
        async with self._session_factory() as session:
            uow = UnitOfWork(session)
            try:
                await uow.request_logs.create(
                    RequestLog(
                        ip_address=record.ip_address,
                        requested_at=record.requested_at,
                        fingerprint=record.fingerprint,
                        hit_count=record.hit_count,
                        risk_score=record.risk_score,
                        path=record.path,
                        user_agent=record.user_agent or "unknown",
                    )
                )
                await uow.commit()
            except Exception:
                await uow.rollback()
                raise


__all__ = ("DecisionLogSink", "QueuedDecisionLogSink")
