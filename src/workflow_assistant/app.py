"""Application class with startup/shutdown lifecycle."""

import asyncio
from typing import Set

from structlog.contextvars import bound_contextvars

from workflow_assistant.config.settings import Settings, get_settings
from workflow_assistant.context.builder import ContextBuilderFactory
from workflow_assistant.core.locks import SessionLockRegistry
from workflow_assistant.core.resilience import ResilienceConfig
from workflow_assistant.persistence.auto_reset import AutoResetManager
from workflow_assistant.persistence.message_persistence import MessagePersistenceService
from workflow_assistant.persistence.summarizer import ConversationSummarizer
from workflow_assistant.pipeline.base import AgentPipeline, PipelineDependencies
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.pipeline.result import PipelineResult
from workflow_assistant.storage.database import Database
from workflow_assistant.tools import ToolRegistry
from workflow_assistant.utils.logging import configure_logging, get_logger
from workflow_assistant.utils.providers.base import BaseCompletionProvider
from workflow_assistant.utils.providers.openai import OpenAIResponsesProvider


logger = get_logger(__name__)


class Application:
    """
    Owns the database and the services built on it.

    Handles:
    - Opening and closing the database
    - Wiring the pipeline dependencies
    - Serializing turns per chat session
    - Draining in-flight turns on shutdown
    """

    def __init__(
        self,
        settings: Settings | None = None,
        completion_provider: BaseCompletionProvider | None = None,
        database: Database | None = None,
    ):
        self.settings = settings or get_settings()
        self.database = database or Database(
            self.settings.database_url,
            echo=self.settings.database_echo,
        )
        self.completion_provider = completion_provider or OpenAIResponsesProvider()
        self.session_locks = SessionLockRegistry()
        self.persistence: MessagePersistenceService | None = None
        self.dependencies: PipelineDependencies | None = None
        self._active_requests: Set[int] = set()
        self._is_shutting_down = False

    @property
    def is_shutting_down(self) -> bool:
        return self._is_shutting_down

    async def startup(self) -> None:
        """Initialize resources on startup."""
        configure_logging(self.settings.log_level, self.settings.log_json)
        logger.info("application_starting")

        ResilienceConfig.LLM_TIMEOUT = self.settings.llm_timeout_seconds

        await self.database.open(create_schema=self.settings.database_create_schema)

        self.persistence = MessagePersistenceService(
            self.database,
            token_threshold=self.settings.auto_reset_token_threshold,
        )
        summarizer = ConversationSummarizer(
            self.completion_provider,
            model=self.settings.summary_model,
        )
        self.dependencies = PipelineDependencies(
            persistence=self.persistence,
            auto_reset=AutoResetManager(self.database, summarizer),
            context_builder=ContextBuilderFactory.create_default(
                self.settings.mini_prompt_list_limit,
                persistence=self.persistence,
            ),
            completion_provider=self.completion_provider,
            tool_registry=ToolRegistry(),
            settings=self.settings,
        )
        self._is_shutting_down = False

        logger.info("application_started")

    async def shutdown(self, timeout: float = 30.0) -> None:
        """
        Graceful shutdown: wait for in-flight turns (bounded), then close
        the database.
        """
        logger.info("shutdown_initiated")
        self._is_shutting_down = True

        if self._active_requests:
            logger.info("waiting_for_requests", count=len(self._active_requests))
            try:
                await asyncio.wait_for(self._wait_for_requests(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("shutdown_timeout", pending=len(self._active_requests))

        await self.database.close()
        logger.info("shutdown_complete")

    async def _wait_for_requests(self) -> None:
        while self._active_requests:
            await asyncio.sleep(0.1)

    def pipeline(self) -> AgentPipeline:
        if self.dependencies is None:
            raise RuntimeError("Application is not started")
        return AgentPipeline.for_completion(self.dependencies)

    async def run_turn(self, context: PipelineContext) -> PipelineResult:
        """Run one chat turn while holding the caller's session lock."""
        token = id(context)
        self._active_requests.add(token)
        try:
            with bound_contextvars(
                user_id=context.user_id,
                session_id=context.session_id,
                mode=context.mode,
            ):
                async with self.session_locks.hold(context.session_id):
                    return await self.pipeline().execute(context)
        finally:
            self._active_requests.discard(token)
