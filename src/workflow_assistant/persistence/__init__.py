"""Chat session persistence: messages, token accounting and auto-reset."""

from workflow_assistant.persistence.auto_reset import AutoResetManager
from workflow_assistant.persistence.message_persistence import MessagePersistenceService
from workflow_assistant.persistence.models import (
    AssistantTurnInfo,
    ChatSessionSummary,
    OutgoingMessage,
    SaveMessagesParams,
    SessionSnapshot,
    StoredMessage,
)
from workflow_assistant.persistence.summarizer import ConversationSummarizer, Summarizer

__all__ = [
    "AssistantTurnInfo",
    "AutoResetManager",
    "ChatSessionSummary",
    "ConversationSummarizer",
    "MessagePersistenceService",
    "OutgoingMessage",
    "SaveMessagesParams",
    "SessionSnapshot",
    "StoredMessage",
    "Summarizer",
]
