from workflow_assistant.context.providers.mini_prompt_library import (
    MAX_LISTED_MINI_PROMPTS,
    MiniPromptLibraryProvider,
)
from workflow_assistant.context.providers.session_summary import SessionSummaryProvider
from workflow_assistant.context.providers.workflow import WorkflowContextProvider

__all__ = [
    "MAX_LISTED_MINI_PROMPTS",
    "MiniPromptLibraryProvider",
    "SessionSummaryProvider",
    "WorkflowContextProvider",
]
