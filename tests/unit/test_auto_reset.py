"""Tests for AutoResetManager and ConversationSummarizer."""

import json

import pytest
from sqlalchemy import select

from workflow_assistant.core.exceptions import NotFoundError, SessionArchivedError, UpstreamError
from workflow_assistant.persistence.models import OutgoingMessage, SaveMessagesParams
from workflow_assistant.persistence.summarizer import ConversationSummarizer
from workflow_assistant.storage.models import ChatMessage


async def seed_session(persistence, **subject) -> str:
    session_id = await persistence.create_session("user-1", **subject)
    await persistence.save_messages(
        SaveMessagesParams(
            session_id=session_id,
            user_id="user-1",
            messages=[
                OutgoingMessage(role="user", content="Build me a code review workflow"),
                OutgoingMessage(role="assistant", content="Here is a draft with three stages."),
            ],
            response_id="resp_1",
            token_count=120_000,
        )
    )
    return session_id


class TestAutoResetManager:
    """Tests for the archive-and-succeed transition."""

    @pytest.mark.asyncio
    async def test_creates_successor_with_summary(self, persistence, auto_reset, database, fake_provider):
        """Test the old session is archived and the successor seeded."""
        old_id = await seed_session(persistence, mode="workflow", workflow_id="wf-1")

        new_id = await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")

        assert new_id != old_id

        old = await persistence.get_session(old_id)
        assert old.is_archived

        new = await persistence.get_session(new_id)
        assert new.is_archived is False
        assert new.total_tokens == 0
        assert new.workflow_id == "wf-1"
        assert new.mode == "workflow"

        async with database.session() as session:
            rows = (
                await session.scalars(select(ChatMessage).where(ChatMessage.session_id == new_id))
            ).all()
        assert len(rows) == 1
        assert rows[0].role == "system"
        assert rows[0].token_count == 0
        assert rows[0].content == (
            "Previous conversation summary:\n\nUser is building a code review workflow."
        )

    @pytest.mark.asyncio
    async def test_summary_request(self, persistence, auto_reset, fake_provider):
        """Test the summarizer receives the ordered conversation as JSON."""
        old_id = await seed_session(persistence, mode="workflow")

        await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")

        call = fake_provider.summary_calls[0]
        assert call["model"] == "gpt-4o-mini"
        assert call["api_key"] == "sk-test"
        assert "under 500 tokens" in call["system"]
        assert json.loads(call["prompt"]) == [
            {"role": "user", "content": "Build me a code review workflow"},
            {"role": "assistant", "content": "Here is a draft with three stages."},
        ]

    @pytest.mark.asyncio
    async def test_mini_prompt_subject_preserved(self, persistence, auto_reset):
        """Test the successor keeps a mini-prompt subject and mode."""
        old_id = await seed_session(persistence, mode="mini-prompt", mini_prompt_id="mp-1")

        new_id = await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")

        new = await persistence.get_session(new_id)
        assert new.mini_prompt_id == "mp-1"
        assert new.workflow_id is None
        assert new.mode == "mini-prompt"

    @pytest.mark.asyncio
    async def test_summarizer_failure_leaves_session_untouched(
        self, persistence, auto_reset, fake_provider
    ):
        """Test nothing is written when the summary cannot be produced."""
        old_id = await seed_session(persistence, mode="workflow")
        fake_provider.summary = UpstreamError("OpenAI unavailable")

        with pytest.raises(UpstreamError):
            await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")

        old = await persistence.get_session(old_id)
        assert old.is_archived is False
        sessions = await persistence.list_sessions("user-1", include_archived=True)
        assert [s.id for s in sessions] == [old_id]

    @pytest.mark.asyncio
    async def test_already_archived(self, persistence, auto_reset):
        """Test an archived session cannot be reset again."""
        old_id = await seed_session(persistence, mode="workflow")
        await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")

        with pytest.raises(SessionArchivedError):
            await auto_reset.trigger_auto_reset(old_id, "user-1", "sk-test")

    @pytest.mark.asyncio
    async def test_unknown_session(self, auto_reset):
        """Test unknown sessions raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await auto_reset.trigger_auto_reset("missing", "user-1", "sk-test")


class TestConversationSummarizer:
    """Tests for ConversationSummarizer."""

    @pytest.mark.asyncio
    async def test_strips_text(self, fake_provider):
        """Test surrounding whitespace is removed."""
        fake_provider.summary = "  Short summary.\n"
        summarizer = ConversationSummarizer(fake_provider, model="tiny-model")

        summary = await summarizer.summarize([{"role": "user", "content": "hi"}], "sk-test")

        assert summary == "Short summary."
        assert fake_provider.summary_calls[0]["model"] == "tiny-model"

    @pytest.mark.asyncio
    async def test_empty_summary_is_error(self, fake_provider):
        """Test an empty summary is rejected."""
        fake_provider.summary = "   "
        summarizer = ConversationSummarizer(fake_provider)

        with pytest.raises(UpstreamError):
            await summarizer.summarize([], "sk-test")
