from workflow_assistant.core.exceptions import InputValidationError
from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext


class PrepareDataStep(PipelineStep):
    """Validates and normalizes caller input."""

    name = "PrepareData"

    async def execute(self, context: PipelineContext) -> PipelineContext:
        message = context.message.strip()
        if not message:
            raise InputValidationError("Message is required", field="message")
        if not context.user_id:
            raise InputValidationError("User id is required", field="user_id")
        if not context.api_key:
            raise InputValidationError("OpenAI API key is not configured", field="api_key")

        ctx_mode = context.workflow_context.mode if context.workflow_context else None
        if ctx_mode is not None and ctx_mode != context.mode:
            raise InputValidationError(
                f"Workflow context mode '{ctx_mode}' does not match chat mode '{context.mode}'",
                field="mode",
            )

        return context.extend(message=message)
