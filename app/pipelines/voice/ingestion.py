"""Request validation (Stage 01 of the voice pipeline)."""

from __future__ import annotations

from fastapi import Request
from pydantic import ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from app.views.voice import ConversationTurn

from .errors import InvalidRequest
from .types import AudioUpload, VoiceRequest

INPUT_FIELD = "input"
HISTORY_FIELD = "message"


async def parse_voice_request(request: Request) -> VoiceRequest:
    """Parse the multipart body into a :class:`VoiceRequest`.

    Exactly one non-empty ``input`` (text or file) is required; every
    ``message`` entry must be a JSON ``{role, content}`` object. Any problem
    rejects the whole request.
    """

    try:
        form = await request.form()
    except (HTTPException, MultiPartException, ValueError) as exc:
        raise InvalidRequest("Body is not valid form data") from exc

    inputs = form.getlist(INPUT_FIELD)
    if len(inputs) != 1:
        raise InvalidRequest(f"Expected exactly one '{INPUT_FIELD}' field, got {len(inputs)}")

    raw_input = inputs[0]
    user_input: str | AudioUpload
    if isinstance(raw_input, UploadFile):
        audio_bytes = await raw_input.read()
        await raw_input.close()
        if not audio_bytes:
            raise InvalidRequest("Uploaded audio is empty")
        user_input = AudioUpload(
            data=audio_bytes,
            filename=raw_input.filename,
            content_type=raw_input.content_type,
        )
    else:
        if not raw_input:
            raise InvalidRequest("Input text is empty")
        user_input = raw_input

    history: list[ConversationTurn] = []
    for index, entry in enumerate(form.getlist(HISTORY_FIELD)):
        if not isinstance(entry, str):
            raise InvalidRequest(f"'{HISTORY_FIELD}' #{index} must be a JSON string")
        try:
            history.append(ConversationTurn.model_validate_json(entry))
        except ValidationError as exc:
            raise InvalidRequest(f"'{HISTORY_FIELD}' #{index} is not a valid turn") from exc

    return VoiceRequest(input=user_input, history=tuple(history))


__all__ = ["HISTORY_FIELD", "INPUT_FIELD", "parse_voice_request"]
