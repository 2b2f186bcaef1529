from workflow_assistant.core.exceptions import PipelineIncompleteError
from workflow_assistant.persistence.message_persistence import MessagePersistenceService
from workflow_assistant.persistence.models import OutgoingMessage, SaveMessagesParams
from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.pipeline.result import normalize_tool_invocations


class PersistMessagesStep(PipelineStep):
    """Saves the user message and the reply, stamped with the new response id."""

    name = "PersistMessages"

    def __init__(self, persistence: MessagePersistenceService):
        self._persistence = persistence

    async def execute(self, context: PipelineContext) -> PipelineContext:
        result = context.completion_result
        if result is None or not context.chat_id:
            raise PipelineIncompleteError("Completion result and chat ID are required")

        token_count = result.input_tokens + result.output_tokens
        invocations = normalize_tool_invocations(result)

        await self._persistence.save_messages(
            SaveMessagesParams(
                session_id=context.chat_id,
                user_id=context.user_id,
                messages=[
                    OutgoingMessage(role="user", content=context.message),
                    OutgoingMessage(
                        role="assistant",
                        content=result.text,
                        tool_invocations=invocations or None,
                    ),
                ],
                response_id=context.response_id,
                token_count=token_count,
            )
        )

        return context.extend(token_count=token_count)
