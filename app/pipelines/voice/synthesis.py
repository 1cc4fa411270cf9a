"""TTS synthesis stage (Stage 08) of the voice pipeline."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from app.services.speech_synthesis import SpeechSynthesisError

from .collaborators import SpeechSynthesizer
from .errors import SynthesisFailed

logger = logging.getLogger("app.services.voice_pipeline")


async def synthesize_reply(reply_text: str, synthesizer: SpeechSynthesizer) -> AsyncIterator[bytes]:
    """Open the audio stream for ``reply_text`` without buffering it.

    The upstream diagnostic body is logged here and never attached to the
    raised error's caller-facing message.
    """

    try:
        return await synthesizer.synthesize(reply_text)
    except SpeechSynthesisError as exc:
        logger.error(
            "Speech synthesis rejected status=%s: %s",
            exc.status_code,
            exc.diagnostic,
        )
        raise SynthesisFailed(f"Synthesis returned status {exc.status_code}") from exc
    except Exception as exc:
        logger.exception("Speech synthesis request failed")
        raise SynthesisFailed("Synthesis request failed") from exc


__all__ = ["synthesize_reply"]
