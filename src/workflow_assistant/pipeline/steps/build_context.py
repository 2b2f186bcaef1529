from workflow_assistant.config.prompts import BASE_SYSTEM_PROMPT, MODE_PROMPTS, USER_CONTEXT_HEADER
from workflow_assistant.context.builder import ContextBuilder
from workflow_assistant.context.types import ContextRequest
from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext


class BuildContextStep(PipelineStep):
    """
    Assembles the system prompt and the user content.

    Provider context is attached only when the provider-side conversation
    does not already hold it: on the first turn of a chain, or after the
    chain was broken.
    """

    name = "BuildContext"

    def __init__(self, builder: ContextBuilder):
        self._builder = builder

    async def execute(self, context: PipelineContext) -> PipelineContext:
        include_extended = context.previous_response_id is None or context.chain_broken

        built = await self._builder.build_context(
            ContextRequest(
                user_id=context.user_id,
                mode=context.mode,
                chat_id=context.chat_id,
                workflow_context=context.workflow_context,
                include_extended_context=include_extended,
            )
        )

        system_parts = [BASE_SYSTEM_PROMPT, MODE_PROMPTS[context.mode]]
        if built.system_message:
            system_parts.append(built.system_message)

        user_content = context.message
        if include_extended and built.user_content:
            user_content = f"{context.message}\n\n{USER_CONTEXT_HEADER}\n{built.user_content}"

        return context.extend(
            include_extended_context=include_extended,
            system_prompt="\n\n".join(system_parts),
            user_content=user_content,
        )
