"""Chat turn pipeline."""

from workflow_assistant.pipeline.base import AgentPipeline, PipelineDependencies, PipelineStep
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.pipeline.result import (
    AssistantMessage,
    CompletionResult,
    PipelineResult,
    TokenUsage,
    ToolInvocation,
)

__all__ = [
    "AgentPipeline",
    "AssistantMessage",
    "CompletionResult",
    "PipelineContext",
    "PipelineDependencies",
    "PipelineResult",
    "PipelineStep",
    "TokenUsage",
    "ToolInvocation",
]
