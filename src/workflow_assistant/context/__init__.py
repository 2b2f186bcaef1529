"""Context composition from pluggable, prioritized providers."""

from workflow_assistant.context.builder import BuiltContext, ContextBuilder, ContextBuilderFactory
from workflow_assistant.context.providers import MiniPromptLibraryProvider, WorkflowContextProvider
from workflow_assistant.context.types import (
    ContextProvider,
    ContextRequest,
    ContextSection,
    CurrentMiniPrompt,
    MiniPromptSummary,
    StageContext,
    StageMiniPrompt,
    WorkflowContext,
    WorkflowSummary,
)

__all__ = [
    "BuiltContext",
    "ContextBuilder",
    "ContextBuilderFactory",
    "ContextProvider",
    "ContextRequest",
    "ContextSection",
    "CurrentMiniPrompt",
    "MiniPromptLibraryProvider",
    "MiniPromptSummary",
    "StageContext",
    "StageMiniPrompt",
    "WorkflowContext",
    "WorkflowContextProvider",
    "WorkflowSummary",
]
