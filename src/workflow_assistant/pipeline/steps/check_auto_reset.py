from workflow_assistant.core.exceptions import PipelineIncompleteError
from workflow_assistant.persistence.auto_reset import AutoResetManager
from workflow_assistant.persistence.message_persistence import MessagePersistenceService
from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.utils.logging import get_logger

logger = get_logger(__name__)


class CheckAutoResetStep(PipelineStep):
    """
    Rolls the session over when its token budget is spent, otherwise
    resolves the response handle that continues the provider chain.
    """

    name = "CheckAutoReset"

    def __init__(self, persistence: MessagePersistenceService, auto_reset: AutoResetManager):
        self._persistence = persistence
        self._auto_reset = auto_reset

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if not context.chat_id:
            raise PipelineIncompleteError("Chat ID is required for auto-reset check")

        if await self._persistence.should_trigger_auto_reset(context.chat_id):
            logger.info("token_threshold_exceeded", chat_id=context.chat_id)

            new_chat_id = await self._auto_reset.trigger_auto_reset(
                context.chat_id,
                context.user_id,
                context.api_key,
            )
            return context.extend(
                chat_id=new_chat_id,
                auto_reset_triggered=True,
                chain_broken=True,
                previous_response_id=None,
            )

        turn = await self._persistence.get_last_assistant_turn(context.chat_id)
        if turn is None:
            return context.extend(previous_response_id=None)

        if turn.has_tool_invocations:
            logger.info("response_chain_broken", chat_id=context.chat_id, reason="tool_invocations")
            return context.extend(previous_response_id=None, chain_broken=True)

        return context.extend(previous_response_id=turn.response_id or None)
