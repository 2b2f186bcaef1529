"""Conversation summarizer used by auto-reset.

Produces the short carry-over summary that seeds a successor session.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Protocol

from workflow_assistant.config.prompts import SUMMARY_SYSTEM_PROMPT
from workflow_assistant.core.exceptions import UpstreamError
from workflow_assistant.utils.logging import get_logger
from workflow_assistant.utils.providers.base import BaseCompletionProvider


logger = get_logger(__name__)

DEFAULT_SUMMARY_MODEL = "gpt-4o-mini"


class Summarizer(Protocol):
    async def summarize(self, messages: Sequence[dict[str, Any]], api_key: str) -> str: ...


class ConversationSummarizer:
    """
    Summarizes a session's messages with a small model.

    The role-normalized message list is serialized to JSON and sent as the
    single user turn under a fixed system instruction.
    """

    def __init__(
        self,
        provider: BaseCompletionProvider,
        model: str = DEFAULT_SUMMARY_MODEL,
        system_prompt: str = SUMMARY_SYSTEM_PROMPT,
    ):
        self._provider = provider
        self._model = model
        self._system_prompt = system_prompt

    async def summarize(self, messages: Sequence[dict[str, Any]], api_key: str) -> str:
        """
        Args:
            messages: ``{"role", "content"}`` dicts, oldest first
            api_key: Caller's provider key

        Raises:
            UpstreamError: The model returned no text
        """
        prompt = json.dumps(list(messages))

        logger.debug("summarizing_conversation", messages=len(messages), model=self._model)

        text = await self._provider.summarize(
            system=self._system_prompt,
            prompt=prompt,
            model=self._model,
            api_key=api_key,
        )

        summary = (text or "").strip()
        if not summary:
            raise UpstreamError("Summary model returned no text")

        return summary
