"""Base interface for completion providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from workflow_assistant.tools.base import ChatTool


@dataclass
class Usage:
    """Token usage summed over every model call of one completion."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )


@dataclass
class ToolCall:
    """A tool the model asked for."""

    tool_call_id: str
    tool_name: str
    input: dict[str, Any]


@dataclass
class CompletionRequest:
    """One turn sent to the provider."""

    system: str
    user_message: str
    model: str
    api_key: str
    tools: list[ChatTool] = field(default_factory=list)
    previous_response_id: str | None = None
    store: bool = True
    metadata: dict[str, str] = field(default_factory=dict)
    max_steps: int = 5


@dataclass
class CompletionResponse:
    """
    Unified result of a completion.

    ``response_messages`` holds the turns produced during the tool loop:

        {"role": "assistant", "content": [{"type": "tool-call", ...}]}
        {"role": "tool", "content": [{"type": "tool-result", "toolCallId": ...,
            "toolName": ..., "input": ..., "output": {"type": "json", "value": ...}}]}
    """

    text: Any
    tool_calls: list[ToolCall] = field(default_factory=list)
    response_messages: list[dict[str, Any]] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    response_id: str | None = None


class BaseCompletionProvider(ABC):
    """
    Abstract base class for completion providers.

    A provider runs the whole tool loop for one turn and reports the handle
    that continues the provider-side conversation.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'openai')."""
        ...

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """
        Run one turn, including any tool calls.

        Raises:
            ToolInputValidationError: The model called a tool with invalid arguments
            UpstreamError: The provider rejected the request
        """
        ...

    @abstractmethod
    async def summarize(self, system: str, prompt: str, model: str, api_key: str) -> str:
        """Plain-text, tool-free completion used for conversation summaries."""
        ...
