"""Immutable state threaded through the pipeline steps."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from workflow_assistant.context.types import Mode, WorkflowContext
from workflow_assistant.pipeline.result import CompletionResult


class PipelineContext(BaseModel):
    """
    Turn state. Steps never mutate it; each returns ``extend(...)``.

    Caller-supplied fields come first; the rest are filled in by steps.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    # Request
    user_id: str
    api_key: str
    mode: Mode
    message: str
    session_id: str | None = None
    workflow_context: WorkflowContext | None = None

    # Session
    chat_id: str | None = None
    is_new_session: bool = False
    auto_reset_triggered: bool = False
    chain_broken: bool = False
    previous_response_id: str | None = None

    # Request building
    include_extended_context: bool = True
    system_prompt: str | None = None
    user_content: str | None = None
    tools: list[Any] = Field(default_factory=list)

    # Completion
    completion_result: CompletionResult | None = None
    response_id: str | None = None
    token_count: int = 0

    def extend(self, **updates: Any) -> "PipelineContext":
        """Validated copy with ``updates`` applied."""
        return self.model_validate({**self.__dict__, **updates})
