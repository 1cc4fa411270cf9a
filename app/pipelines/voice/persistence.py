"""Best-effort conversation logging (Stage 05/07) of the voice pipeline."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from app.telemetry import increment_log_write_failure

from .collaborators import MessageLog
from .errors import LogWriteFailed
from .types import CallerIdentity, LogRecord, LogWriteResult, TurnRole

logger = logging.getLogger("app.services.voice_pipeline")


class ConversationLogger:
    """Request-scoped writer of conversation turns to the message log.

    Writes run as tasks so they never hold up the pipeline; :meth:`drain`
    must be awaited before the request finishes (the controller attaches it
    as the response's background task).
    """

    def __init__(
        self,
        message_log: MessageLog,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._message_log = message_log
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._pending: list[asyncio.Task[LogWriteResult]] = []

    def build_record(self, identity: CallerIdentity, role: TurnRole, content: str) -> LogRecord:
        return LogRecord(
            user_id=identity.id,
            role=role,
            content=content,
            timestamp=self._clock(),
            source="voice" if role == "user" else "assistant",
        )

    async def write(self, record: LogRecord) -> LogWriteResult:
        """Append one record; failures are logged and returned, never raised."""

        try:
            await self._message_log.append(record)
        except Exception as exc:
            failure = LogWriteFailed(
                f"Could not log {record.role} message from {record.iso_timestamp}: {exc}"
            )
            logger.warning("%s", failure)
            increment_log_write_failure(record.role)
            return LogWriteResult(record=record, error=str(failure))
        return LogWriteResult(record=record)

    def record_turn(
        self,
        identity: CallerIdentity,
        role: TurnRole,
        content: str,
    ) -> asyncio.Task[LogWriteResult]:
        task = asyncio.create_task(self.write(self.build_record(identity, role, content)))
        self._pending.append(task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for task in self._pending if not task.done())

    async def drain(self) -> list[LogWriteResult]:
        """Wait for every scheduled write and return their results."""

        tasks, self._pending = self._pending, []
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))


__all__ = ["ConversationLogger"]
