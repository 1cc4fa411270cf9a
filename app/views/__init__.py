"""Pydantic schemas used as views in the MVC architecture."""

from .voice import ConversationTurn

__all__ = [
    "ConversationTurn",
]
