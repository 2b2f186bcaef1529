from workflow_assistant.core.exceptions import NotFoundError, SessionArchivedError
from workflow_assistant.persistence.message_persistence import MessagePersistenceService
from workflow_assistant.pipeline.base import PipelineStep
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.utils.logging import get_logger

logger = get_logger(__name__)


class DetermineSessionStep(PipelineStep):
    """Reuses the caller's session or starts a new one for the subject."""

    name = "DetermineSession"

    def __init__(self, persistence: MessagePersistenceService):
        self._persistence = persistence

    async def execute(self, context: PipelineContext) -> PipelineContext:
        if context.session_id:
            session = await self._persistence.get_session(context.session_id)
            # Another user's session is reported as missing
            if session is None or session.user_id != context.user_id:
                raise NotFoundError(
                    f"Chat session {context.session_id} not found",
                    entity="ChatSession",
                    entity_id=context.session_id,
                )
            if session.is_archived:
                raise SessionArchivedError(context.session_id)

            return context.extend(chat_id=session.id, is_new_session=False)

        workflow_id, mini_prompt_id = self._subject(context)
        chat_id = await self._persistence.create_session(
            user_id=context.user_id,
            mode=context.mode,
            workflow_id=workflow_id,
            mini_prompt_id=mini_prompt_id,
        )
        logger.info("session_started", chat_id=chat_id, mode=context.mode)

        return context.extend(chat_id=chat_id, is_new_session=True)

    @staticmethod
    def _subject(context: PipelineContext) -> tuple[str | None, str | None]:
        ctx = context.workflow_context
        if ctx is None:
            return None, None
        if context.mode == "mini-prompt" and ctx.current_mini_prompt is not None:
            return None, ctx.current_mini_prompt.id
        if ctx.workflow is not None:
            return ctx.workflow.id, None
        return None, None
