"""Cartesia streaming text-to-speech client."""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx

from app.config.settings import CartesiaConfig, settings

logger = logging.getLogger(__name__)


class SpeechSynthesisError(RuntimeError):
    """Raised when Cartesia rejects a synthesis request.

    ``diagnostic`` holds the upstream response body for server-side logs; it
    must never be forwarded to the caller.
    """

    def __init__(self, status_code: int | None, diagnostic: str) -> None:
        super().__init__(f"Speech synthesis failed with status {status_code}")
        self.status_code = status_code
        self.diagnostic = diagnostic


class CartesiaTtsClient:
    """Request raw PCM audio from ``/tts/bytes`` and stream it back lazily."""

    def __init__(
        self,
        config: CartesiaConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or settings.cartesia
        headers = {
            "Cartesia-Version": self._config.api_version,
            "Content-Type": "application/json",
        }
        if self._config.api_key:
            headers["X-API-Key"] = self._config.api_key.get_secret_value()
        self._client = client or httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
        )

    def build_payload(self, text: str) -> dict:
        return {
            "model_id": self._config.model_id,
            "transcript": text,
            "voice": {"mode": "id", "id": self._config.voice_id},
            "output_format": {
                "container": self._config.container,
                "encoding": self._config.encoding,
                "sample_rate": self._config.sample_rate,
            },
        }

    async def synthesize(self, text: str) -> AsyncIterator[bytes]:
        """Open the synthesis stream; raise before any byte is yielded on failure."""

        request = self._client.build_request("POST", "/tts/bytes", json=self.build_payload(text))
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise SpeechSynthesisError(None, str(exc)) from exc

        if response.is_error:
            try:
                body = await response.aread()
            finally:
                await response.aclose()
            raise SpeechSynthesisError(
                response.status_code,
                body.decode("utf-8", errors="replace"),
            )

        return self._iter_audio(response)

    @staticmethod
    async def _iter_audio(response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                if chunk:
                    yield chunk
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["CartesiaTtsClient", "SpeechSynthesisError"]
