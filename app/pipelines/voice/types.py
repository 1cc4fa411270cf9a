"""Typed containers shared across the voice pipeline stages.

Each stage of :class:`~app.pipelines.voice.flow.VoicePipeline` consumes and
produces one of these values, so the order of the stages is visible in their
signatures rather than only in the control flow of ``run``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Literal, Sequence

from app.views.voice import ConversationTurn

ANONYMOUS_USER_ID = "anonymous"

LogSource = Literal["voice", "assistant"]
TurnRole = Literal["user", "assistant"]


@dataclass(frozen=True)
class AudioUpload:
    """Raw audio blob submitted under the ``input`` field."""

    data: bytes
    filename: str | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class VoiceRequest:
    """Validated request payload: the new utterance plus prior turns."""

    input: str | AudioUpload
    history: Sequence[ConversationTurn] = ()


@dataclass(frozen=True)
class AmbientContext:
    """Per-request grounding for the reply generator."""

    location_label: str
    local_time: str


@dataclass(frozen=True)
class CallerIdentity:
    """Who the turn is attributed to in the message log."""

    id: str = ANONYMOUS_USER_ID
    resolution_failed: bool = False
    resolution_error: str | None = None


@dataclass(frozen=True)
class LogRecord:
    """One append-only row in the conversation message log."""

    user_id: str
    role: TurnRole
    content: str
    timestamp: datetime
    source: LogSource

    @property
    def iso_timestamp(self) -> str:
        return self.timestamp.isoformat()


@dataclass(frozen=True)
class LogWriteResult:
    """Outcome of a best-effort log write; ``error`` is set when it failed."""

    record: LogRecord
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ChatMessage:
    """Message handed to the chat completion collaborator."""

    role: Literal["system", "user", "assistant"]
    content: str


@dataclass
class PipelineResult:
    """Transcript, reply and the single-pass synthesized audio stream."""

    transcript: str
    reply_text: str
    audio_stream: AsyncIterator[bytes] = field(repr=False)


__all__ = [
    "ANONYMOUS_USER_ID",
    "AmbientContext",
    "AudioUpload",
    "CallerIdentity",
    "ChatMessage",
    "LogRecord",
    "LogSource",
    "LogWriteResult",
    "PipelineResult",
    "TurnRole",
    "VoiceRequest",
]
