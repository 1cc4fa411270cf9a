"""Thin Bedrock client wrapper for conversational LLM invocations."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from app.config.settings import BedrockConfig, settings
from app.pipelines.voice.types import ChatMessage
from app.services.aws import create_boto3_client

from .errors import CollaboratorRateLimited

logger = logging.getLogger(__name__)

_THROTTLING_CODES = frozenset({"ThrottlingException", "TooManyRequestsException"})
_EARLIER_REPLY_PREFIX = "Earlier in this conversation you said: "


class LlmInvocationError(RuntimeError):
    """Raised when the Bedrock invocation fails."""


def to_converse_payload(
    messages: Sequence[ChatMessage],
) -> tuple[list[dict[str, str]], list[dict[str, Any]]]:
    """Split chat messages into Bedrock ``system`` blocks and ``messages``.

    Converse requires the first turn to come from the user, rejects blank
    text blocks and two consecutive turns with the same role. Blank messages
    are dropped, assistant turns before the first user turn become system
    blocks, and adjacent same-role messages share one message.
    """

    system: list[dict[str, str]] = []
    converse: list[dict[str, Any]] = []
    for message in messages:
        if not message.content.strip():
            continue
        if message.role == "system":
            system.append({"text": message.content})
            continue
        if not converse and message.role == "assistant":
            system.append({"text": f"{_EARLIER_REPLY_PREFIX}{message.content}"})
            continue
        block = {"text": message.content}
        if converse and converse[-1]["role"] == message.role:
            converse[-1]["content"].append(block)
        else:
            converse.append({"role": message.role, "content": [block]})
    return system, converse


class BedrockChatClient:
    """Invoke Amazon Bedrock chat models with standard configuration."""

    def __init__(self, config: BedrockConfig | None = None, *, client: Any = None) -> None:
        self._config = config or settings.bedrock
        self._model_id = self._config.model_id

        if client is not None:
            self._client = client
            return
        try:
            self._client = create_boto3_client(
                "bedrock-runtime",
                region_name=self._config.region,
            )
        except Exception as exc:  # pragma: no cover - configuration issue
            logger.warning("Could not initialise Bedrock client: %s", exc)
            self._client = None

    async def complete(self, messages: Sequence[ChatMessage]) -> str | None:
        """Run a Bedrock ``converse`` call and return the aggregate text output."""

        if not self._client or not self._model_id:
            raise LlmInvocationError("Bedrock client is not configured")

        system, converse = to_converse_payload(messages)
        inference_cfg = {
            "maxTokens": self._config.max_tokens,
            "temperature": self._config.temperature,
            "topP": self._config.top_p,
        }

        def _call() -> str:
            response = self._client.converse(
                modelId=self._model_id,
                system=system,
                messages=converse,
                inferenceConfig=inference_cfg,
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        try:
            result = await run_in_threadpool(_call)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _THROTTLING_CODES:
                raise CollaboratorRateLimited("completion", str(exc)) from exc
            raise LlmInvocationError(str(exc)) from exc
        except BotoCoreError as exc:  # pragma: no cover - external dependency
            raise LlmInvocationError(str(exc)) from exc

        return result or None


__all__ = ["BedrockChatClient", "LlmInvocationError", "to_converse_payload"]
