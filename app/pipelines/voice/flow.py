"""Composed stages of the voice request pipeline.

``VoicePipeline.run`` executes the stages in order; each stage is a plain
function with an explicit result type so a failing stage short-circuits the
rest:

1. ``ingestion``: parse the multipart body (done by the controller).
2. ``context``: derive location and local time from edge headers.
3. ``transcription``: typed text or speech-to-text.
4. ``identity``: bearer token to user id, anonymous on failure.
5. ``persistence``: schedule the user turn log write.
6. ``llm``: system prompt + history + utterance to the completion service.
7. ``persistence``: schedule the assistant turn log write.
8. ``synthesis``: open the text-to-speech stream.
9. ``assembly``: stream audio with percent-encoded transcript headers.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Iterable, Iterator, List, Mapping

from app.config.settings import VoiceConfig, settings
from app.telemetry import observe_stage

from .collaborators import VoiceCollaborators
from .context import resolve_ambient_context
from .errors import InvalidAudio
from .identity import resolve_caller_identity
from .llm import generate_reply
from .persistence import ConversationLogger
from .synthesis import synthesize_reply
from .transcription import transcribe_input
from .types import PipelineResult, VoiceRequest

logger = logging.getLogger("app.services.voice_pipeline")
transcript_logger = logging.getLogger("app.logs.transcript")

LOCAL_REQUEST_ID = "local"


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the voice pipeline."""

    order: int
    name: str
    module: str
    summary: str


@contextmanager
def timed_stage(stage: str, request_id: str) -> Iterator[None]:
    """Log and record the wall-clock duration of one stage."""

    start_time = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start_time
        observe_stage(stage, elapsed)
        logger.info("%s %s: %.1fms", stage, request_id, elapsed * 1000)


async def timed_stream(
    stream: AsyncIterator[bytes],
    request_id: str,
    *,
    on_close: Callable[[], Awaitable[object]] | None = None,
) -> AsyncIterator[bytes]:
    """Pass chunks through untouched, timing the stream until it closes.

    ``on_close`` is awaited on every exit, including a client that
    disconnects mid-stream.
    """

    start_time = time.perf_counter()
    total_bytes = 0
    try:
        async for chunk in stream:
            total_bytes += len(chunk)
            yield chunk
    finally:
        try:
            close = getattr(stream, "aclose", None)
            if close is not None:
                await close()
        finally:
            elapsed = time.perf_counter() - start_time
            observe_stage("stream", elapsed)
            logger.info("stream %s: %.1fms bytes=%d", request_id, elapsed * 1000, total_bytes)
            if on_close is not None:
                await on_close()


class VoicePipeline:
    """Turn one validated voice request into a streamed spoken reply."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Validation",
            "app.pipelines.voice.ingestion",
            "Parse the multipart input and JSON-encoded history turns.",
        ),
        PipelineStage(
            2,
            "Ambient Context",
            "app.pipelines.voice.context",
            "Derive the caller's location label and local time from edge headers.",
        ),
        PipelineStage(
            3,
            "Transcription",
            "app.pipelines.voice.transcription",
            "Trim typed text or send the audio blob to speech-to-text.",
        ),
        PipelineStage(
            4,
            "Identity",
            "app.pipelines.voice.identity",
            "Resolve the bearer token to a user id, falling back to anonymous.",
        ),
        PipelineStage(
            5,
            "User Turn Log",
            "app.pipelines.voice.persistence",
            "Schedule a best-effort write of the user's utterance.",
        ),
        PipelineStage(
            6,
            "Reply Generation",
            "app.pipelines.voice.llm",
            "Send system prompt, history and utterance to the completion service.",
        ),
        PipelineStage(
            7,
            "Assistant Turn Log",
            "app.pipelines.voice.persistence",
            "Schedule a best-effort write of the generated reply.",
        ),
        PipelineStage(
            8,
            "Speech Synthesis",
            "app.pipelines.voice.synthesis",
            "Open the raw PCM stream for the reply text.",
        ),
        PipelineStage(
            9,
            "Response Assembly",
            "app.pipelines.voice.assembly",
            "Stream the audio with percent-encoded transcript and reply headers.",
        ),
    ]

    def __init__(
        self,
        collaborators: VoiceCollaborators,
        *,
        config: VoiceConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._collaborators = collaborators
        self._config = config or settings.voice
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    def request_id(self, headers: Mapping[str, str]) -> str:
        return headers.get(self._config.request_id_header) or LOCAL_REQUEST_ID

    async def run(
        self,
        request: VoiceRequest,
        *,
        headers: Mapping[str, str],
        conversation_log: ConversationLogger,
    ) -> PipelineResult:
        """Run every stage after validation; terminal errors propagate."""

        collaborators = self._collaborators
        request_id = self.request_id(headers)

        ambient = resolve_ambient_context(headers, self._config, now=self._clock())

        with timed_stage("transcribe", request_id):
            transcript = await transcribe_input(request.input, collaborators.speech_to_text)
        if transcript is None:
            raise InvalidAudio("Transcription produced no text")

        identity = await resolve_caller_identity(headers.get("authorization"), collaborators.identity)

        transcript_logger.info("user | request=%s | user_id=%s | text=%s", request_id, identity.id, transcript)
        conversation_log.record_turn(identity, "user", transcript)

        with timed_stage("text completion", request_id):
            reply_text = await generate_reply(
                transcript,
                request.history,
                ambient,
                collaborators.completion,
            )

        transcript_logger.info("assistant | request=%s | user_id=%s | text=%s", request_id, identity.id, reply_text)
        conversation_log.record_turn(identity, "assistant", reply_text)

        with timed_stage("synthesis request", request_id):
            audio_stream = await synthesize_reply(reply_text, collaborators.synthesizer)

        return PipelineResult(
            transcript=transcript,
            reply_text=reply_text,
            audio_stream=timed_stream(
                audio_stream,
                request_id,
                on_close=conversation_log.drain,
            ),
        )


__all__ = ["LOCAL_REQUEST_ID", "PipelineStage", "VoicePipeline", "timed_stage", "timed_stream"]
