"""Carries an auto-reset summary into every turn of the successor session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from workflow_assistant.context.types import ContextProvider, ContextRequest, ContextSection

if TYPE_CHECKING:
    from workflow_assistant.persistence.message_persistence import MessagePersistenceService

SUMMARY_PRIORITY = 10


class SessionSummaryProvider(ContextProvider):
    """
    System-channel provider for the summary seeded by an auto-reset.

    Instructions are not carried along a response chain, so the summary is
    added on every turn rather than only when the chain starts over.
    """

    def __init__(self, persistence: MessagePersistenceService):
        self._persistence = persistence

    def should_provide(self, request: ContextRequest) -> bool:
        return request.chat_id is not None

    async def build_context(self, request: ContextRequest) -> ContextSection | None:
        summary = await self._persistence.get_session_summary(request.chat_id)
        if not summary:
            return None
        return ContextSection(content=summary, priority=SUMMARY_PRIORITY)
