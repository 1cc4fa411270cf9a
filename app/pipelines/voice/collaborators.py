"""Contracts the voice pipeline requires of its external collaborators.

Concrete clients live in :mod:`app.services`; they are built once at startup
by :func:`app.config.dependencies.build_collaborators` and handed to the
pipeline through :class:`VoiceCollaborators`, which keeps them swappable for
fakes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Protocol, Sequence

from .types import ChatMessage, LogRecord


class SpeechToText(Protocol):
    async def transcribe(
        self,
        audio_bytes: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str: ...


class IdentityProvider(Protocol):
    async def resolve_user_id(self, token: str) -> str | None: ...


class MessageLog(Protocol):
    async def append(self, record: LogRecord) -> None: ...


class ChatCompletion(Protocol):
    async def complete(self, messages: Sequence[ChatMessage]) -> str | None: ...


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str) -> AsyncIterator[bytes]: ...


@dataclass
class VoiceCollaborators:
    """Process-lifetime client handles injected into each request."""

    speech_to_text: SpeechToText
    identity: IdentityProvider
    message_log: MessageLog
    completion: ChatCompletion
    synthesizer: SpeechSynthesizer

    async def aclose(self) -> None:
        """Release any client that owns network resources."""

        for client in (
            self.speech_to_text,
            self.identity,
            self.message_log,
            self.completion,
            self.synthesizer,
        ):
            close = getattr(client, "aclose", None)
            if close is not None:
                await close()


__all__ = [
    "ChatCompletion",
    "IdentityProvider",
    "MessageLog",
    "SpeechSynthesizer",
    "SpeechToText",
    "VoiceCollaborators",
]
