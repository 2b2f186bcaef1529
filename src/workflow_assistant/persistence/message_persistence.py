"""Message persistence with response chaining and token accounting.

Every write for a turn happens in one transaction under the storage retry
policy: the message rows and the session's token/timestamp update commit
together or not at all.
"""

import json
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select, update

from workflow_assistant.core.exceptions import (
    InputValidationError,
    NotFoundError,
    SessionArchivedError,
)
from workflow_assistant.core.resilience import DEFAULT_RETRY_POLICY, RetryPolicy, with_retry
from workflow_assistant.persistence.models import (
    AssistantTurnInfo,
    ChatSessionSummary,
    OutgoingMessage,
    SaveMessagesParams,
    SessionSnapshot,
    StoredMessage,
)
from workflow_assistant.storage.database import Database
from workflow_assistant.storage.models import ChatMessage, ChatMode, ChatSession, MessageRole
from workflow_assistant.utils.logging import get_logger

logger = get_logger(__name__)


def _to_json_safe(value: Any) -> Any:
    """Plain JSON data for a JSON column (pydantic models dumped by alias)."""
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_to_json_safe(v) for v in value]
    return json.loads(json.dumps(value, default=str))


def _serialize_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(_to_json_safe(content))


class MessagePersistenceService:
    """
    Durable storage of chat turns.

    Owns every write to a session's token counter and message log, except
    the archive-and-succeed transition performed by AutoResetManager.
    """

    # Auto-reset token threshold (100k tokens)
    AUTO_RESET_TOKEN_THRESHOLD = 100_000

    def __init__(
        self,
        db: Database,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        token_threshold: int = AUTO_RESET_TOKEN_THRESHOLD,
    ):
        self._db = db
        self._retry_policy = retry_policy
        self.token_threshold = token_threshold

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    async def create_session(
        self,
        user_id: str,
        mode: str = ChatMode.WORKFLOW.value,
        workflow_id: str | None = None,
        mini_prompt_id: str | None = None,
    ) -> str:
        """Create an empty session linked to at most one subject."""
        if workflow_id and mini_prompt_id:
            raise InputValidationError(
                "A chat session is linked to a workflow or a mini-prompt, not both",
                field="subject",
            )

        async def _create() -> str:
            async with self._db.transaction() as session:
                chat = ChatSession(
                    user_id=user_id,
                    mode=ChatMode(mode).value,
                    workflow_id=workflow_id,
                    mini_prompt_id=mini_prompt_id,
                    total_tokens=0,
                )
                session.add(chat)
                await session.flush()
                return chat.id

        session_id = await with_retry(_create, self._retry_policy)
        logger.info("chat_session_created", session_id=session_id, mode=mode)
        return session_id

    async def get_session(self, session_id: str) -> SessionSnapshot | None:
        async with self._db.session() as session:
            chat = await session.get(ChatSession, session_id)
            return SessionSnapshot.model_validate(chat) if chat else None

    async def list_sessions(
        self,
        user_id: str,
        include_archived: bool = False,
        mode: str | None = None,
    ) -> list[ChatSessionSummary]:
        """A user's sessions with message counts, most recently active first."""
        counts = (
            select(ChatMessage.session_id, func.count(ChatMessage.id).label("message_count"))
            .group_by(ChatMessage.session_id)
            .subquery()
        )
        stmt = (
            select(ChatSession, func.coalesce(counts.c.message_count, 0))
            .outerjoin(counts, counts.c.session_id == ChatSession.id)
            .where(ChatSession.user_id == user_id)
            .order_by(ChatSession.last_message_at.desc())
        )
        if not include_archived:
            stmt = stmt.where(ChatSession.archived_at.is_(None))
        if mode is not None:
            stmt = stmt.where(ChatSession.mode == mode)

        async with self._db.session() as session:
            rows = (await session.execute(stmt)).all()

        return [
            ChatSessionSummary(
                id=chat.id,
                mode=chat.mode,
                workflow_id=chat.workflow_id,
                mini_prompt_id=chat.mini_prompt_id,
                last_message_at=chat.last_message_at,
                message_count=count,
                total_tokens=chat.total_tokens,
                archived=chat.is_archived,
            )
            for chat, count in rows
        ]

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    async def save_messages(self, params: SaveMessagesParams) -> None:
        """
        Save one turn's messages and charge its tokens to the session.

        Each row carries the shared ``response_id`` and ``token_count``.

        Raises:
            NotFoundError: Session does not exist (nothing is written)
            SessionArchivedError: Session was superseded (nothing is written)
            RetryExhaustedError: Transient failures on every attempt
        """

        async def _save() -> None:
            async with self._db.transaction() as session:
                await self._insert_messages(session, params)
                await self._charge_session(session, params.session_id, params.token_count)

        await with_retry(_save, self._retry_policy)

        logger.debug(
            "messages_saved",
            session_id=params.session_id,
            count=len(params.messages),
            token_count=params.token_count,
            response_id=params.response_id,
        )

    async def _insert_messages(self, session: Any, params: SaveMessagesParams) -> None:
        last_sequence = await session.scalar(
            select(func.coalesce(func.max(ChatMessage.sequence), 0)).where(
                ChatMessage.session_id == params.session_id
            )
        )
        for offset, message in enumerate(params.messages, start=1):
            session.add(self._to_row(params, message, last_sequence + offset))
        await session.flush()

    @staticmethod
    def _to_row(params: SaveMessagesParams, message: OutgoingMessage, sequence: int) -> ChatMessage:
        return ChatMessage(
            session_id=params.session_id,
            user_id=params.user_id,
            role=MessageRole(message.role).value,
            content=_serialize_content(message.content),
            previous_response_id=params.response_id or None,
            token_count=params.token_count,
            tool_invocations=(
                _to_json_safe(message.tool_invocations) if message.tool_invocations else None
            ),
            sequence=sequence,
        )

    async def _charge_session(self, session: Any, session_id: str, token_count: int) -> None:
        result = await session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id, ChatSession.archived_at.is_(None))
            .values(
                total_tokens=ChatSession.total_tokens + token_count,
                last_message_at=datetime.now(UTC),
            )
        )
        if result.rowcount == 0:
            chat = await session.get(ChatSession, session_id)
            if chat is None:
                raise NotFoundError(
                    f"Chat session {session_id} not found",
                    entity="ChatSession",
                    entity_id=session_id,
                )
            raise SessionArchivedError(session_id)

    async def should_trigger_auto_reset(self, session_id: str) -> bool:
        """True iff the session's stored total_tokens reached the threshold."""
        async with self._db.session() as session:
            total = await session.scalar(
                select(ChatSession.total_tokens).where(ChatSession.id == session_id)
            )

        if total is None:
            return False

        return total >= self.token_threshold

    async def get_last_assistant_turn(self, session_id: str) -> AssistantTurnInfo | None:
        """Response handle and tool usage of the newest assistant message."""
        async with self._db.session() as session:
            row = (
                await session.execute(
                    select(ChatMessage.previous_response_id, ChatMessage.tool_invocations)
                    .where(
                        ChatMessage.session_id == session_id,
                        ChatMessage.role == MessageRole.ASSISTANT.value,
                    )
                    .order_by(ChatMessage.sequence.desc())
                    .limit(1)
                )
            ).first()

        if row is None:
            return None

        response_id, tool_invocations = row
        return AssistantTurnInfo(
            response_id=response_id,
            has_tool_invocations=isinstance(tool_invocations, list) and len(tool_invocations) > 0,
        )

    async def get_last_response_id(self, session_id: str) -> str | None:
        """
        Handle for continuing the provider-side chain.

        Returns None when there is no assistant message, or when that message
        carried tool invocations: a chained continuation would have to supply
        the matching tool outputs.
        """
        turn = await self.get_last_assistant_turn(session_id)
        if turn is None:
            return None

        if turn.has_tool_invocations:
            logger.info("response_chain_broken", session_id=session_id, reason="tool_invocations")
            return None

        return turn.response_id or None

    async def get_session_summary(self, session_id: str) -> str | None:
        """Content of the session's earliest system message (the carried-over summary)."""
        async with self._db.session() as session:
            return await session.scalar(
                select(ChatMessage.content)
                .where(
                    ChatMessage.session_id == session_id,
                    ChatMessage.role == MessageRole.SYSTEM.value,
                )
                .order_by(ChatMessage.sequence)
                .limit(1)
            )

    async def get_message_history(self, session_id: str, limit: int = 50) -> list[StoredMessage]:
        """The newest ``limit`` messages, oldest first."""
        async with self._db.session() as session:
            rows = (
                await session.scalars(
                    select(ChatMessage)
                    .where(ChatMessage.session_id == session_id)
                    .order_by(ChatMessage.sequence.desc())
                    .limit(limit)
                )
            ).all()

        return [StoredMessage.model_validate(row) for row in reversed(rows)]
