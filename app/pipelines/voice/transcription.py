"""Transcription stage (Stage 03) of the voice pipeline."""

from __future__ import annotations

import logging

from .collaborators import SpeechToText
from .types import AudioUpload

logger = logging.getLogger("app.services.voice_pipeline")


async def transcribe_input(
    user_input: str | AudioUpload,
    speech_to_text: SpeechToText,
) -> str | None:
    """Return the trimmed utterance, or ``None`` when there is nothing usable.

    Typed text never reaches the speech-to-text service.
    """

    if isinstance(user_input, str):
        return user_input.strip() or None

    try:
        text = await speech_to_text.transcribe(
            user_input.data,
            filename=user_input.filename,
            content_type=user_input.content_type,
        )
    except Exception as exc:
        logger.warning("Transcription failed: %s", exc)
        return None

    return (text or "").strip() or None


__all__ = ["transcribe_input"]
