"""Session and message storage."""

from workflow_assistant.storage.database import Database, translate_storage_errors
from workflow_assistant.storage.models import (
    Base,
    ChatMessage,
    ChatMode,
    ChatSession,
    MessageRole,
)

__all__ = [
    "Base",
    "ChatMessage",
    "ChatMode",
    "ChatSession",
    "Database",
    "MessageRole",
    "translate_storage_errors",
]
