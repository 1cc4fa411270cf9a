"""Voice conversation endpoint.

``POST /api`` accepts a multipart body with one ``input`` (typed text or an
audio blob) and zero or more JSON ``message`` history turns, and answers with
the spoken reply as a raw PCM stream (32-bit float, 24 kHz, mono). The
transcript and reply text travel percent-encoded in the ``X-Transcript`` and
``X-Response`` headers. See ``app.pipelines.voice.flow.VoicePipeline`` for the
stage-by-stage map.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.background import BackgroundTask

from app.controllers.dependencies import CollaboratorsDep
from app.pipelines.voice import (
    ConversationLogger,
    VoicePipeline,
    VoicePipelineError,
    assemble_response,
    parse_voice_request,
)
from app.telemetry import increment_pipeline_failure

router = APIRouter(prefix="/api", tags=["voice"])

logger = logging.getLogger(__name__)


@router.post("", response_class=Response)
async def respond(request: Request, collaborators: CollaboratorsDep) -> Response:
    """Transcribe the input, generate a reply and stream it back as speech."""

    conversation_log = ConversationLogger(collaborators.message_log)
    drain_logs = BackgroundTask(conversation_log.drain)
    pipeline = VoicePipeline(collaborators)

    try:
        voice_request = await parse_voice_request(request)
        result = await pipeline.run(
            voice_request,
            headers=request.headers,
            conversation_log=conversation_log,
        )
    except VoicePipelineError as exc:
        logger.info(
            "Voice request %s failed with %s: %s",
            pipeline.request_id(request.headers),
            type(exc).__name__,
            exc.detail,
        )
        increment_pipeline_failure(type(exc).__name__)
        return PlainTextResponse(exc.message, status_code=exc.status_code, background=drain_logs)
    except Exception:
        await conversation_log.drain()
        raise

    return assemble_response(result, background=drain_logs)
