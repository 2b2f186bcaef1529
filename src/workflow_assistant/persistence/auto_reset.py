"""Token-budget auto-reset: archive a session and continue in a successor.

The successor inherits the subject and mode of the archived session and
starts with one system message carrying a summary of the old conversation.
"""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from workflow_assistant.config.prompts import SUMMARY_PREFIX
from workflow_assistant.core.exceptions import NotFoundError, SessionArchivedError
from workflow_assistant.core.resilience import DEFAULT_RETRY_POLICY, RetryPolicy, with_retry
from workflow_assistant.persistence.summarizer import Summarizer
from workflow_assistant.storage.database import Database
from workflow_assistant.storage.models import ChatMessage, ChatSession, MessageRole
from workflow_assistant.utils.logging import get_logger

logger = get_logger(__name__)


def format_summary_message(summary: str) -> str:
    return f"{SUMMARY_PREFIX}\n\n{summary}"


class AutoResetManager:
    """
    Performs the archive-and-succeed transition.

    Reads and summarizing happen before any write, so a summarizer failure
    leaves the original session untouched. The three writes (archive,
    successor, summary message) share one transaction.
    """

    def __init__(
        self,
        db: Database,
        summarizer: Summarizer,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    ):
        self._db = db
        self._summarizer = summarizer
        self._retry_policy = retry_policy

    async def trigger_auto_reset(self, session_id: str, user_id: str, api_key: str) -> str:
        """
        Archive ``session_id`` and return the id of its successor.

        Raises:
            NotFoundError: Unknown session
            SessionArchivedError: Session was already superseded
            UpstreamError: Summary could not be produced
        """
        logger.info("auto_reset_started", session_id=session_id)

        session = await self._load_session(session_id)
        if session.is_archived:
            raise SessionArchivedError(session_id)

        messages = [{"role": m.role, "content": m.content} for m in session.messages]
        summary = await self._summarizer.summarize(messages, api_key)

        async def _swap() -> str:
            async with self._db.transaction() as tx:
                current = await tx.get(ChatSession, session_id, with_for_update=True)
                if current is None:
                    raise NotFoundError(
                        f"Chat session {session_id} not found",
                        entity="ChatSession",
                        entity_id=session_id,
                    )
                if current.is_archived:
                    raise SessionArchivedError(session_id)

                current.archived_at = datetime.now(UTC)

                successor = ChatSession(
                    user_id=user_id,
                    mode=current.mode,
                    workflow_id=current.workflow_id,
                    mini_prompt_id=current.mini_prompt_id,
                    total_tokens=0,
                )
                tx.add(successor)
                await tx.flush()

                tx.add(
                    ChatMessage(
                        session_id=successor.id,
                        user_id=user_id,
                        role=MessageRole.SYSTEM.value,
                        content=format_summary_message(summary),
                        token_count=0,
                        sequence=1,
                    )
                )
                return successor.id

        new_session_id = await with_retry(_swap, self._retry_policy)

        logger.info(
            "auto_reset_completed",
            archived_session_id=session_id,
            new_session_id=new_session_id,
            summarized_messages=len(messages),
        )
        return new_session_id

    async def _load_session(self, session_id: str) -> ChatSession:
        async with self._db.session() as tx:
            session = await tx.scalar(
                select(ChatSession)
                .where(ChatSession.id == session_id)
                .options(selectinload(ChatSession.messages))
            )

        if session is None:
            raise NotFoundError(
                f"Chat session {session_id} not found",
                entity="ChatSession",
                entity_id=session_id,
            )
        return session
