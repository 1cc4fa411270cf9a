"""SQLAlchemy models."""

from .base import Base
from .message import ConversationMessage  # noqa: F401

__all__ = [
    "Base",
    "ConversationMessage",
]
