"""Schemas for the voice conversation endpoint."""

from typing import Literal

from pydantic import BaseModel


class ConversationTurn(BaseModel):
    """One prior turn resent by the client under the ``message`` field."""

    role: Literal["user", "assistant"]
    content: str
