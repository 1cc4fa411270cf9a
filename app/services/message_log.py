"""SQL-backed append-only conversation message log."""

from __future__ import annotations

from app.database import session_scope
from app.models.message import ConversationMessage
from app.pipelines.voice.types import LogRecord


class SqlMessageLog:
    """Insert one ``messages`` row per conversation turn."""

    async def append(self, record: LogRecord) -> None:
        async with session_scope() as session:
            session.add(
                ConversationMessage(
                    user_id=record.user_id,
                    role=record.role,
                    content=record.content,
                    timestamp=record.timestamp,
                    source=record.source,
                )
            )
            try:
                await session.commit()
            except Exception:
                await session.rollback()
                raise


__all__ = ["SqlMessageLog"]
