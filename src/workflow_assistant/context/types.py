"""Types for context composition.

The workflow/mini-prompt models accept the camelCase keys sent by the web
client (``availableMiniPrompts``, ``includeMultiAgentChat``...) as well as
their snake_case names.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Mode = Literal["workflow", "mini-prompt"]


class _ClientModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MiniPromptSummary(_ClientModel):
    id: str
    name: str
    description: str | None = None


class StageMiniPrompt(_ClientModel):
    mini_prompt: MiniPromptSummary
    order: int = 0


class StageContext(_ClientModel):
    id: str
    name: str
    description: str | None = None
    color: str | None = None
    with_review: bool = False
    order: int = 0
    mini_prompts: list[StageMiniPrompt] = Field(default_factory=list)


class WorkflowSummary(_ClientModel):
    id: str
    name: str
    description: str | None = None
    complexity: str | None = None
    include_multi_agent_chat: bool = False
    stages: list[StageContext] = Field(default_factory=list)


class CurrentMiniPrompt(_ClientModel):
    """The mini-prompt open in the editor."""

    id: str
    name: str
    description: str | None = None
    content: str = ""


class WorkflowContext(_ClientModel):
    """Client-supplied snapshot of what the user is looking at."""

    workflow: WorkflowSummary | None = None
    available_mini_prompts: list[MiniPromptSummary] = Field(default_factory=list)
    current_mini_prompt: CurrentMiniPrompt | None = None
    mode: Mode | None = None


class ContextRequest(BaseModel):
    """Input to every context provider."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    mode: Mode
    chat_id: str | None = None
    workflow_context: WorkflowContext | None = None
    include_extended_context: bool = True


@dataclass(frozen=True)
class ContextSection:
    """One provider's contribution; higher priority renders first."""

    content: str
    priority: int


class ContextProvider(ABC):
    """A source of context for the system or user channel."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def should_provide(self, request: ContextRequest) -> bool:
        """Whether this provider participates. Must not have side effects."""
        ...

    @abstractmethod
    async def build_context(self, request: ContextRequest) -> ContextSection | None:
        ...
