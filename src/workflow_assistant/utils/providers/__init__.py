"""Completion providers."""

from workflow_assistant.utils.providers.base import (
    BaseCompletionProvider,
    CompletionRequest,
    CompletionResponse,
    ToolCall,
    Usage,
)
from workflow_assistant.utils.providers.openai import OpenAIResponsesProvider

__all__ = [
    "BaseCompletionProvider",
    "CompletionRequest",
    "CompletionResponse",
    "OpenAIResponsesProvider",
    "ToolCall",
    "Usage",
]
