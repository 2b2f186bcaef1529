"""Pytest fixtures for testing."""

from typing import Any, AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio

from workflow_assistant.config.settings import Settings
from workflow_assistant.context.builder import ContextBuilderFactory
from workflow_assistant.core.resilience import RetryPolicy
from workflow_assistant.persistence.auto_reset import AutoResetManager
from workflow_assistant.persistence.message_persistence import MessagePersistenceService
from workflow_assistant.persistence.summarizer import ConversationSummarizer
from workflow_assistant.pipeline.base import AgentPipeline, PipelineDependencies
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.storage.database import Database
from workflow_assistant.tools import ToolRegistry
from workflow_assistant.utils.providers.base import (
    BaseCompletionProvider,
    CompletionRequest,
    CompletionResponse,
    Usage,
)

# No waiting between storage retries in tests
FAST_RETRY = RetryPolicy(max_attempts=3, delays=(0.0, 0.0, 0.0))

ScriptedItem = CompletionResponse | Exception | Callable[[CompletionRequest], Awaitable[CompletionResponse]]


class FakeCompletionProvider(BaseCompletionProvider):
    """
    Scripted completion provider.

    ``responses`` are consumed in order; an Exception entry is raised, a
    callable entry is awaited with the request. When the script runs out a
    default reply with a fresh response id is returned.
    """

    provider_name = "fake"

    def __init__(
        self,
        responses: list[ScriptedItem] | None = None,
        summary: str | Exception = "User is building a code review workflow.",
    ):
        self.responses = list(responses or [])
        self.summary = summary
        self.requests: list[CompletionRequest] = []
        self.summary_calls: list[dict[str, Any]] = []

    def script(self, *items: ScriptedItem) -> None:
        self.responses.extend(items)

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        if not self.responses:
            return CompletionResponse(
                text="OK",
                usage=Usage(input_tokens=10, output_tokens=5),
                response_id=f"resp_{len(self.requests)}",
            )

        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return await item(request)
        return item

    async def summarize(self, system: str, prompt: str, model: str, api_key: str) -> str:
        self.summary_calls.append(
            {"system": system, "prompt": prompt, "model": model, "api_key": api_key}
        )
        if isinstance(self.summary, Exception):
            raise self.summary
        return self.summary


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        database_url="sqlite+aiosqlite:///:memory:",
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def database() -> AsyncIterator[Database]:
    """In-memory database with the schema created."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.open(create_schema=True)
    yield db
    await db.close()


@pytest.fixture
def fake_provider() -> FakeCompletionProvider:
    return FakeCompletionProvider()


@pytest.fixture
def persistence(database: Database) -> MessagePersistenceService:
    return MessagePersistenceService(database, retry_policy=FAST_RETRY)


@pytest.fixture
def auto_reset(database: Database, fake_provider: FakeCompletionProvider) -> AutoResetManager:
    return AutoResetManager(
        database,
        ConversationSummarizer(fake_provider),
        retry_policy=FAST_RETRY,
    )


@pytest.fixture
def dependencies(
    persistence: MessagePersistenceService,
    auto_reset: AutoResetManager,
    fake_provider: FakeCompletionProvider,
    settings: Settings,
) -> PipelineDependencies:
    return PipelineDependencies(
        persistence=persistence,
        auto_reset=auto_reset,
        context_builder=ContextBuilderFactory.create_default(persistence=persistence),
        completion_provider=fake_provider,
        tool_registry=ToolRegistry(),
        settings=settings,
    )


@pytest.fixture
def pipeline(dependencies: PipelineDependencies) -> AgentPipeline:
    return AgentPipeline.for_completion(dependencies)


@pytest.fixture
def workflow_context_payload() -> dict[str, Any]:
    """Workflow context as sent by the web client (camelCase)."""
    return {
        "workflow": {
            "id": "wf-1",
            "name": "Code Review",
            "description": "Review pull requests",
            "complexity": "M",
            "includeMultiAgentChat": False,
            "stages": [
                {
                    "id": "st-2",
                    "name": "Report",
                    "order": 1,
                    "withReview": False,
                    "miniPrompts": [
                        {"miniPrompt": {"id": "mp-3", "name": "Summarize"}, "order": 0},
                    ],
                },
                {
                    "id": "st-1",
                    "name": "Analyze",
                    "description": "Read the diff",
                    "order": 0,
                    "withReview": True,
                    "miniPrompts": [
                        {"miniPrompt": {"id": "mp-2", "name": "Lint"}, "order": 1},
                        {"miniPrompt": {"id": "mp-1", "name": "Read Diff"}, "order": 0},
                    ],
                },
            ],
        },
        "availableMiniPrompts": [
            {"id": "mp-1", "name": "Read Diff", "description": "Load the diff"},
            {"id": "mp-2", "name": "Lint"},
        ],
    }


@pytest.fixture
def make_context() -> Callable[..., PipelineContext]:
    """Factory for initial pipeline contexts."""

    def _make(**overrides: Any) -> PipelineContext:
        values: dict[str, Any] = {
            "user_id": "user-1",
            "api_key": "sk-test",
            "mode": "workflow",
            "message": "What is 2+2?",
        }
        values.update(overrides)
        return PipelineContext(**values)

    return _make
