"""Response assembly (Stage 09): stream the audio with transcript headers."""

from __future__ import annotations

from urllib.parse import quote

from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from .types import PipelineResult

TRANSCRIPT_HEADER = "X-Transcript"
RESPONSE_HEADER = "X-Response"
AUDIO_MEDIA_TYPE = "application/octet-stream"

# Characters JavaScript's encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_header_text(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def assemble_response(
    result: PipelineResult,
    *,
    background: BackgroundTask | None = None,
) -> StreamingResponse:
    return StreamingResponse(
        result.audio_stream,
        media_type=AUDIO_MEDIA_TYPE,
        headers={
            TRANSCRIPT_HEADER: encode_header_text(result.transcript),
            RESPONSE_HEADER: encode_header_text(result.reply_text),
        },
        background=background,
    )


__all__ = [
    "AUDIO_MEDIA_TYPE",
    "RESPONSE_HEADER",
    "TRANSCRIPT_HEADER",
    "assemble_response",
    "encode_header_text",
]
