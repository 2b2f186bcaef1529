"""Tests for MessagePersistenceService."""

import pytest
from sqlalchemy import func, select

from workflow_assistant.core.exceptions import (
    InputValidationError,
    NotFoundError,
    RetryExhaustedError,
    SessionArchivedError,
    TransientStorageError,
)
from workflow_assistant.persistence.models import OutgoingMessage, SaveMessagesParams
from workflow_assistant.storage.models import ChatMessage, ChatSession

TOOL_INVOCATION = {
    "type": "tool-result",
    "toolCallId": "call_1",
    "toolName": "add_stage",
    "input": {"name": "Review"},
    "output": {"action": "add_stage", "message": "Stage added"},
    "state": "result",
}


def turn(session_id, response_id="resp_1", token_count=15, tool_invocations=None, text="4"):
    return SaveMessagesParams(
        session_id=session_id,
        user_id="user-1",
        messages=[
            OutgoingMessage(role="user", content="What is 2+2?"),
            OutgoingMessage(role="assistant", content=text, tool_invocations=tool_invocations),
        ],
        response_id=response_id,
        token_count=token_count,
    )


async def count_messages(database, session_id) -> int:
    async with database.session() as session:
        return await session.scalar(
            select(func.count(ChatMessage.id)).where(ChatMessage.session_id == session_id)
        )


class TestSessions:
    """Tests for session creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, persistence):
        """Test a new session starts empty with zero tokens."""
        session_id = await persistence.create_session("user-1", "workflow", workflow_id="wf-1")

        snapshot = await persistence.get_session(session_id)

        assert snapshot.user_id == "user-1"
        assert snapshot.workflow_id == "wf-1"
        assert snapshot.mini_prompt_id is None
        assert snapshot.mode == "workflow"
        assert snapshot.total_tokens == 0
        assert snapshot.is_archived is False

    @pytest.mark.asyncio
    async def test_get_unknown_session(self, persistence):
        """Test unknown ids return None."""
        assert await persistence.get_session("missing") is None

    @pytest.mark.asyncio
    async def test_rejects_two_subjects(self, persistence):
        """Test a session links to at most one subject."""
        with pytest.raises(InputValidationError):
            await persistence.create_session(
                "user-1", "workflow", workflow_id="wf-1", mini_prompt_id="mp-1"
            )

    @pytest.mark.asyncio
    async def test_list_sessions(self, persistence):
        """Test listing returns the user's sessions with message counts."""
        first = await persistence.create_session("user-1", "workflow", workflow_id="wf-1")
        second = await persistence.create_session("user-1", "mini-prompt", mini_prompt_id="mp-1")
        await persistence.create_session("user-2", "workflow")
        await persistence.save_messages(turn(second))

        sessions = await persistence.list_sessions("user-1")

        assert [s.id for s in sessions] == [second, first]
        assert sessions[0].message_count == 2
        assert sessions[0].total_tokens == 15
        assert sessions[1].message_count == 0

    @pytest.mark.asyncio
    async def test_list_sessions_mode_filter(self, persistence):
        """Test listing can be narrowed to one chat mode."""
        await persistence.create_session("user-1", "workflow", workflow_id="wf-1")
        mini = await persistence.create_session("user-1", "mini-prompt", mini_prompt_id="mp-1")

        sessions = await persistence.list_sessions("user-1", mode="mini-prompt")

        assert [s.id for s in sessions] == [mini]


class TestSaveMessages:
    """Tests for save_messages."""

    @pytest.mark.asyncio
    async def test_saves_rows_and_charges_tokens(self, persistence, database):
        """Test both rows are stamped and the counter incremented once."""
        session_id = await persistence.create_session("user-1", "workflow")

        await persistence.save_messages(turn(session_id, response_id="resp_a", token_count=42))

        async with database.session() as session:
            rows = (
                await session.scalars(
                    select(ChatMessage)
                    .where(ChatMessage.session_id == session_id)
                    .order_by(ChatMessage.sequence)
                )
            ).all()
        assert [r.role for r in rows] == ["user", "assistant"]
        assert all(r.previous_response_id == "resp_a" for r in rows)
        assert all(r.token_count == 42 for r in rows)

        snapshot = await persistence.get_session(session_id)
        assert snapshot.total_tokens == 42

    @pytest.mark.asyncio
    async def test_structured_content_serialized(self, persistence):
        """Test non-string content is stored as JSON text."""
        session_id = await persistence.create_session("user-1", "workflow")

        await persistence.save_messages(
            SaveMessagesParams(
                session_id=session_id,
                user_id="user-1",
                messages=[OutgoingMessage(role="assistant", content={"answer": 4})],
            )
        )

        history = await persistence.get_message_history(session_id)
        assert history[0].content == '{"answer": 4}'

    @pytest.mark.asyncio
    async def test_unknown_session_writes_nothing(self, persistence, database):
        """Test a missing session rolls back the inserted messages."""
        with pytest.raises(NotFoundError):
            await persistence.save_messages(turn("missing"))

        assert await count_messages(database, "missing") == 0

    @pytest.mark.asyncio
    async def test_failure_after_insert_rolls_back(self, persistence, database, monkeypatch):
        """Test messages and token counter commit together or not at all."""
        session_id = await persistence.create_session("user-1", "workflow")
        attempts = []

        async def failing_charge(session, sid, token_count):
            attempts.append(sid)
            raise TransientStorageError("database is locked")

        monkeypatch.setattr(persistence, "_charge_session", failing_charge)

        with pytest.raises(RetryExhaustedError):
            await persistence.save_messages(turn(session_id))

        assert len(attempts) == 3
        assert await count_messages(database, session_id) == 0
        snapshot = await persistence.get_session(session_id)
        assert snapshot.total_tokens == 0

    @pytest.mark.asyncio
    async def test_archived_session_rejected(self, persistence, database):
        """Test archived sessions accept no new messages."""
        session_id = await persistence.create_session("user-1", "workflow")
        async with database.transaction() as session:
            chat = await session.get(ChatSession, session_id)
            chat.archived_at = chat.created_at

        with pytest.raises(SessionArchivedError):
            await persistence.save_messages(turn(session_id))

        assert await count_messages(database, session_id) == 0


class TestAutoResetThreshold:
    """Tests for should_trigger_auto_reset."""

    @pytest.mark.asyncio
    async def test_below_threshold(self, persistence):
        """Test 99,999 tokens does not trigger."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(turn(session_id, token_count=99_999))

        assert await persistence.should_trigger_auto_reset(session_id) is False

    @pytest.mark.asyncio
    async def test_at_threshold(self, persistence):
        """Test exactly 100,000 tokens triggers."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(turn(session_id, token_count=99_999))
        await persistence.save_messages(turn(session_id, token_count=1))

        assert await persistence.should_trigger_auto_reset(session_id) is True

    @pytest.mark.asyncio
    async def test_unknown_session(self, persistence):
        """Test unknown sessions never trigger."""
        assert await persistence.should_trigger_auto_reset("missing") is False


class TestResponseChain:
    """Tests for response id lookup and chain breaking."""

    @pytest.mark.asyncio
    async def test_no_assistant_message(self, persistence):
        """Test a fresh session has no handle."""
        session_id = await persistence.create_session("user-1", "workflow")

        assert await persistence.get_last_response_id(session_id) is None
        assert await persistence.get_last_assistant_turn(session_id) is None

    @pytest.mark.asyncio
    async def test_returns_latest_handle(self, persistence):
        """Test the newest assistant message's handle is returned."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(turn(session_id, response_id="resp_1"))
        await persistence.save_messages(turn(session_id, response_id="resp_2"))

        assert await persistence.get_last_response_id(session_id) == "resp_2"

    @pytest.mark.asyncio
    async def test_tool_invocations_break_chain(self, persistence):
        """Test a handle on a tool-using reply is not returned."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(
            turn(session_id, response_id="resp_1", tool_invocations=[TOOL_INVOCATION])
        )

        assert await persistence.get_last_response_id(session_id) is None
        info = await persistence.get_last_assistant_turn(session_id)
        assert info.response_id == "resp_1"
        assert info.has_tool_invocations is True

    @pytest.mark.asyncio
    async def test_chain_resumes_after_plain_reply(self, persistence):
        """Test a later tool-free reply restores chaining."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(
            turn(session_id, response_id="resp_1", tool_invocations=[TOOL_INVOCATION])
        )
        await persistence.save_messages(turn(session_id, response_id="resp_2"))

        assert await persistence.get_last_response_id(session_id) == "resp_2"


class TestMessageHistory:
    """Tests for get_message_history."""

    @pytest.mark.asyncio
    async def test_newest_limit_oldest_first(self, persistence):
        """Test the window is the newest messages in chronological order."""
        session_id = await persistence.create_session("user-1", "workflow")
        for i in range(3):
            await persistence.save_messages(turn(session_id, text=f"answer {i}"))

        history = await persistence.get_message_history(session_id, limit=3)

        assert [(m.role, m.content) for m in history] == [
            ("assistant", "answer 1"),
            ("user", "What is 2+2?"),
            ("assistant", "answer 2"),
        ]

    @pytest.mark.asyncio
    async def test_includes_tool_invocations(self, persistence):
        """Test stored tool invocations are returned."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(turn(session_id, tool_invocations=[TOOL_INVOCATION]))

        history = await persistence.get_message_history(session_id)

        assert history[0].tool_invocations is None
        assert history[1].tool_invocations == [TOOL_INVOCATION]


class TestSessionSummary:
    """Tests for get_session_summary."""

    @pytest.mark.asyncio
    async def test_no_summary(self, persistence):
        """Test sessions without a system message have no summary."""
        session_id = await persistence.create_session("user-1", "workflow")
        await persistence.save_messages(turn(session_id))

        assert await persistence.get_session_summary(session_id) is None

    @pytest.mark.asyncio
    async def test_summary_survives_history_window(self, persistence, auto_reset):
        """Test the seeded summary is found however long the successor grows."""
        old_id = await persistence.create_session("user-1", "workflow")
        new_id = await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")
        for _ in range(3):
            await persistence.save_messages(turn(new_id))

        recent = await persistence.get_message_history(new_id, limit=2)
        summary = await persistence.get_session_summary(new_id)

        assert all(m.role != "system" for m in recent)
        assert summary == "Previous conversation summary:\n\nUser is building a code review workflow."
