"""Whisper transcription over an OpenAI-compatible HTTP API (Groq)."""

from __future__ import annotations

import logging

import httpx

from app.config.settings import GroqConfig, settings

from .errors import CollaboratorRateLimited

logger = logging.getLogger(__name__)


class SpeechToTextError(RuntimeError):
    """Raised when the transcription service fails to process audio."""


class WhisperTranscriptionClient:
    """Send audio blobs to ``/audio/transcriptions`` and return the text."""

    def __init__(
        self,
        config: GroqConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or settings.groq
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key.get_secret_value()}"
        self._client = client or httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
        )

    async def transcribe(
        self,
        audio_bytes: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        if not audio_bytes:
            raise SpeechToTextError("The uploaded audio is empty.")

        files = {
            "file": (
                filename or "input.webm",
                audio_bytes,
                content_type or "application/octet-stream",
            )
        }
        data = {"model": self._config.transcription_model, "response_format": "json"}

        try:
            response = await self._client.post("/audio/transcriptions", data=data, files=files)
        except httpx.HTTPError as exc:
            raise SpeechToTextError(f"Transcription request failed: {exc}") from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise CollaboratorRateLimited("speech-to-text", response.text)
        if response.is_error:
            logger.warning(
                "Transcription service returned %s: %s",
                response.status_code,
                response.text[:500],
            )
            raise SpeechToTextError(f"Transcription service returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise SpeechToTextError("Transcription service returned invalid JSON") from exc

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise SpeechToTextError("Transcription response had no text field")
        return text

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["SpeechToTextError", "WhisperTranscriptionClient"]
