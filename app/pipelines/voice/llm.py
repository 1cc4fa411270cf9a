"""Reply generation stage (Stage 06) of the voice pipeline."""

from __future__ import annotations

import logging
from typing import Sequence

from app.services.errors import CollaboratorRateLimited
from app.views.voice import ConversationTurn

from .collaborators import ChatCompletion
from .errors import EmptyCompletion, RateLimited
from .prompts import build_system_prompt
from .types import AmbientContext, ChatMessage

logger = logging.getLogger("app.services.voice_pipeline")


def build_reply_messages(
    transcript: str,
    history: Sequence[ConversationTurn],
    ambient: AmbientContext,
    *,
    system_prompt: str | None = None,
) -> list[ChatMessage]:
    """System prompt, then the caller's history verbatim, then the new utterance."""

    messages = [ChatMessage(role="system", content=system_prompt or build_system_prompt(ambient))]
    messages.extend(ChatMessage(role=turn.role, content=turn.content) for turn in history)
    messages.append(ChatMessage(role="user", content=transcript))
    return messages


async def generate_reply(
    transcript: str,
    history: Sequence[ConversationTurn],
    ambient: AmbientContext,
    completion: ChatCompletion,
) -> str:
    """Ask the completion service for a reply; no retries."""

    messages = build_reply_messages(transcript, history, ambient)
    try:
        reply = await completion.complete(messages)
    except CollaboratorRateLimited as exc:
        raise RateLimited(str(exc)) from exc
    except Exception as exc:
        logger.exception("Completion request failed")
        raise EmptyCompletion(f"Completion request failed: {exc}") from exc

    if not isinstance(reply, str) or not reply.strip():
        raise EmptyCompletion("Completion returned no content")
    return reply


__all__ = ["build_reply_messages", "generate_reply"]
