"""Composes provider sections into the system and user context channels."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from workflow_assistant.context.providers import (
    MiniPromptLibraryProvider,
    SessionSummaryProvider,
    WorkflowContextProvider,
)
from workflow_assistant.context.types import ContextProvider, ContextRequest, ContextSection
from workflow_assistant.utils.logging import get_logger

if TYPE_CHECKING:
    from workflow_assistant.persistence.message_persistence import MessagePersistenceService

logger = get_logger(__name__)

SECTION_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class BuiltContext:
    """Channel text; None when no provider contributed."""

    system_message: str | None = None
    user_content: str | None = None


class ContextBuilder:
    """
    Runs registered providers and merges their sections.

    Sections are ordered by priority, highest first. Equal priorities keep
    registration order. A provider that raises is logged and skipped.
    """

    def __init__(
        self,
        system_providers: Sequence[ContextProvider] = (),
        user_providers: Sequence[ContextProvider] = (),
    ):
        self._system_providers = list(system_providers)
        self._user_providers = list(user_providers)

    def add_system_provider(self, provider: ContextProvider) -> "ContextBuilder":
        self._system_providers.append(provider)
        return self

    def add_user_provider(self, provider: ContextProvider) -> "ContextBuilder":
        self._user_providers.append(provider)
        return self

    async def build_context(self, request: ContextRequest) -> BuiltContext:
        return BuiltContext(
            system_message=await self._build_channel(self._system_providers, request, "system"),
            user_content=await self._build_channel(self._user_providers, request, "user"),
        )

    async def _build_channel(
        self,
        providers: list[ContextProvider],
        request: ContextRequest,
        channel: str,
    ) -> str | None:
        sections: list[ContextSection] = []

        for provider in providers:
            try:
                if not provider.should_provide(request):
                    continue
                section = await provider.build_context(request)
            except Exception as e:
                logger.warning(
                    "context_provider_failed",
                    provider=provider.name,
                    channel=channel,
                    error=str(e),
                )
                continue

            if section is not None:
                sections.append(section)

        if not sections:
            return None

        # sorted() is stable
        ordered = sorted(sections, key=lambda s: s.priority, reverse=True)
        return SECTION_SEPARATOR.join(s.content for s in ordered)


class ContextBuilderFactory:
    """Standard builder configurations."""

    @staticmethod
    def create_default(
        max_listed_mini_prompts: int | None = None,
        persistence: MessagePersistenceService | None = None,
    ) -> ContextBuilder:
        """
        Workflow and library context in the user channel.

        The session summary joins the system channel when ``persistence`` is given.
        """
        library = (
            MiniPromptLibraryProvider(max_listed_mini_prompts)
            if max_listed_mini_prompts is not None
            else MiniPromptLibraryProvider()
        )
        system_providers = [SessionSummaryProvider(persistence)] if persistence is not None else []
        return ContextBuilder(
            system_providers=system_providers,
            user_providers=[WorkflowContextProvider(), library],
        )
