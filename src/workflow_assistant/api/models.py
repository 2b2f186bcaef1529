"""API request/response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from workflow_assistant.context.types import Mode, WorkflowContext


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = Field(description="User message")
    mode: Mode = Field(default="workflow", description="Chat mode")
    session_id: str | None = Field(default=None, description="Existing chat session to continue")
    workflow_context: WorkflowContext | None = Field(
        default=None, description="What the user is currently editing"
    )


class SessionSummaryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    mode: str
    workflow_id: str | None = None
    mini_prompt_id: str | None = None
    last_message_at: datetime
    message_count: int
    total_tokens: int
    archived: bool = False


class SessionsResponse(BaseModel):
    sessions: list[SessionSummaryResponse]
    count: int


class CreateSessionRequest(BaseModel):
    """Request model for explicitly starting a chat session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    mode: Mode
    workflow_id: str | None = None
    mini_prompt_id: str | None = None


class SessionResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    mode: str
    workflow_id: str | None = None
    mini_prompt_id: str | None = None
    total_tokens: int
    last_message_at: datetime
    created_at: datetime
    archived: bool = False


class MessageResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    role: str
    content: str
    tool_invocations: list[dict[str, Any]] | None = None


class SessionEnvelope(BaseModel):
    session: SessionResponse


class SessionDetailResponse(BaseModel):
    """A session with its most recent messages, oldest first."""

    session: SessionResponse
    messages: list[MessageResponse]


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    version: str
