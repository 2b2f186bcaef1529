from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.tools.registry import ToolRegistry


class PrepareRequestStep(PipelineStep):
    """Selects the tool set for the chat mode."""

    name = "PrepareRequest"

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    async def execute(self, context: PipelineContext) -> PipelineContext:
        return context.extend(tools=self._registry.for_mode(context.mode))
