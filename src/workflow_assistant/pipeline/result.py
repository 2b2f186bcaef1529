"""Completion outcome and the pipeline's final result."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompletionResult(BaseModel):
    """What ExecuteCompletionStep extracted from the provider response."""

    text: str
    tool_calls: list[dict[str, Any]] = Field(default_factory=list)
    tool_results: list[dict[str, Any]] = Field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0


class ToolInvocation(_CamelModel):
    """A tool call as shown to and stored for the client."""

    type: Literal["tool-result", "tool-call"]
    tool_call_id: str
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)
    output: Any = None
    state: Literal["result", "pending"]


def normalize_tool_invocations(result: CompletionResult) -> list[ToolInvocation]:
    """Prefer executed tool results; fall back to bare calls marked pending."""
    if result.tool_results:
        return [
            ToolInvocation(
                type="tool-result",
                tool_call_id=part.get("toolCallId", ""),
                tool_name=part.get("toolName", ""),
                input=part.get("input") or {},
                output=(part.get("output") or {}).get("value"),
                state="result",
            )
            for part in result.tool_results
        ]

    return [
        ToolInvocation(
            type="tool-call",
            tool_call_id=call.get("toolCallId", ""),
            tool_name=call.get("toolName", ""),
            input=call.get("input") or {},
            output=None,
            state="pending",
        )
        for call in result.tool_calls
    ]


class AssistantMessage(_CamelModel):
    role: Literal["assistant"] = "assistant"
    content: str
    tool_invocations: list[ToolInvocation] = Field(default_factory=list)


class TokenUsage(_CamelModel):
    input: int
    output: int
    total: int


class PipelineResult(_CamelModel):
    """Outcome of one chat turn."""

    session_id: str
    message: AssistantMessage
    token_usage: TokenUsage
    auto_reset_triggered: bool = False
    chain_broken: bool = False

    def to_response(self) -> dict[str, Any]:
        """Wire format for the web client."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            include={"session_id", "message", "token_usage"},
        )
