"""Sequential agent pipeline for one chat turn."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from workflow_assistant.core.exceptions import (
    AgenticChatError,
    PipelineIncompleteError,
    PipelineStepError,
)
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.pipeline.result import (
    AssistantMessage,
    PipelineResult,
    TokenUsage,
    normalize_tool_invocations,
)
from workflow_assistant.utils.logging import get_logger

if TYPE_CHECKING:
    from workflow_assistant.config.settings import Settings
    from workflow_assistant.context.builder import ContextBuilder
    from workflow_assistant.persistence.auto_reset import AutoResetManager
    from workflow_assistant.persistence.message_persistence import MessagePersistenceService
    from workflow_assistant.tools.registry import ToolRegistry
    from workflow_assistant.utils.providers.base import BaseCompletionProvider

logger = get_logger(__name__)


@dataclass
class PipelineDependencies:
    """Collaborators shared by the steps."""

    persistence: MessagePersistenceService
    auto_reset: AutoResetManager
    context_builder: ContextBuilder
    completion_provider: BaseCompletionProvider
    tool_registry: ToolRegistry
    settings: Settings


class PipelineStep(ABC):
    """One stage of the turn; returns an extended copy of its input."""

    name: str = "Step"

    @abstractmethod
    async def execute(self, context: PipelineContext) -> PipelineContext:
        ...


class AgentPipeline:
    """
    Runs steps strictly in order and assembles the turn result.

    A failing step stops the run. Domain errors keep their type and gain
    ``step_name``; anything else is wrapped in PipelineStepError.
    """

    def __init__(self) -> None:
        self._steps: list[PipelineStep] = []

    @property
    def steps(self) -> list[PipelineStep]:
        return list(self._steps)

    @classmethod
    def for_completion(cls, deps: PipelineDependencies) -> AgentPipeline:
        """The standard seven-step completion chain."""
        from workflow_assistant.pipeline.steps import (
            BuildContextStep,
            CheckAutoResetStep,
            DetermineSessionStep,
            ExecuteCompletionStep,
            PersistMessagesStep,
            PrepareDataStep,
            PrepareRequestStep,
        )

        return (
            cls()
            .add_step(PrepareDataStep())
            .add_step(DetermineSessionStep(deps.persistence))
            .add_step(CheckAutoResetStep(deps.persistence, deps.auto_reset))
            .add_step(BuildContextStep(deps.context_builder))
            .add_step(PrepareRequestStep(deps.tool_registry))
            .add_step(ExecuteCompletionStep(deps.completion_provider, deps.settings))
            .add_step(PersistMessagesStep(deps.persistence))
        )

    def add_step(self, step: PipelineStep) -> AgentPipeline:
        self._steps.append(step)
        return self

    async def execute(self, initial: PipelineContext) -> PipelineResult:
        context = initial

        for step in self._steps:
            try:
                context = await step.execute(context)
            except AgenticChatError as e:
                logger.error("pipeline_step_failed", step=step.name, error=str(e))
                if e.step_name is None:
                    e.step_name = step.name
                raise
            except Exception as e:
                logger.exception("pipeline_step_failed", step=step.name, error=str(e))
                raise PipelineStepError(step.name, e) from e

        result = context.completion_result
        if result is None or not context.chat_id:
            raise PipelineIncompleteError("Pipeline execution incomplete - missing required results")

        return PipelineResult(
            session_id=context.chat_id,
            message=AssistantMessage(
                content=result.text,
                tool_invocations=normalize_tool_invocations(result),
            ),
            token_usage=TokenUsage(
                input=result.input_tokens,
                output=result.output_tokens,
                total=context.token_count,
            ),
            auto_reset_triggered=context.auto_reset_triggered,
            chain_broken=context.chain_broken,
        )
