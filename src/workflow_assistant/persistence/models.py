"""Value objects exchanged with the persistence services."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["user", "assistant", "system"]


class OutgoingMessage(BaseModel):
    """A message to be written; content may be a structured payload."""

    role: Role
    content: Any
    tool_invocations: list[Any] | None = None


class SaveMessagesParams(BaseModel):
    """Everything written for one turn."""

    session_id: str
    user_id: str
    messages: list[OutgoingMessage]
    response_id: str | None = None
    token_count: int = Field(default=0, ge=0)


class StoredMessage(BaseModel):
    """A message read back from a session's history."""

    model_config = ConfigDict(from_attributes=True)

    role: Role
    content: str
    tool_invocations: list[dict[str, Any]] | None = None


class AssistantTurnInfo(BaseModel):
    """Response-chain state of the most recent assistant message."""

    response_id: str | None
    has_tool_invocations: bool


class SessionSnapshot(BaseModel):
    """Read-only view of a chat session row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    workflow_id: str | None = None
    mini_prompt_id: str | None = None
    mode: str
    total_tokens: int
    last_message_at: datetime
    created_at: datetime
    archived_at: datetime | None = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None


class ChatSessionSummary(BaseModel):
    """List view of a chat session."""

    id: str
    mode: str
    workflow_id: str | None = None
    mini_prompt_id: str | None = None
    last_message_at: datetime
    message_count: int
    total_tokens: int
    archived: bool = False
