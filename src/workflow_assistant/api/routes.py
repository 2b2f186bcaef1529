"""FastAPI routes for the assistant API."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from workflow_assistant import __version__
from workflow_assistant.api.dependencies import ApiKeyDep, ApplicationDep, CurrentUserDep
from workflow_assistant.api.models import (
    ChatRequest,
    CreateSessionRequest,
    HealthResponse,
    MessageResponse,
    SessionDetailResponse,
    SessionEnvelope,
    SessionResponse,
    SessionsResponse,
    SessionSummaryResponse,
)
from workflow_assistant.context.types import Mode
from workflow_assistant.core.exceptions import (
    AgenticChatError,
    InputValidationError,
    NotFoundError,
    SessionArchivedError,
    UpstreamError,
)
from workflow_assistant.persistence.models import SessionSnapshot
from workflow_assistant.pipeline.context import PipelineContext
from workflow_assistant.utils.logging import get_logger


logger = get_logger(__name__)
router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _session_response(snapshot: SessionSnapshot) -> SessionResponse:
    return SessionResponse(
        archived=snapshot.is_archived,
        **snapshot.model_dump(exclude={"user_id", "archived_at"}),
    )


def _chat_failed(user_id: str, e: AgenticChatError) -> JSONResponse:
    logger.error(
        "chat_failed",
        user_id=user_id,
        step=e.step_name,
        error_type=type(e).__name__,
        error=str(e),
    )
    return _error(500, "Failed to process chat message")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


@router.post("/api/ai-assistant/chat")
async def chat(
    chat_request: ChatRequest,
    user_id: CurrentUserDep,
    api_key: ApiKeyDep,
    application: ApplicationDep,
) -> JSONResponse:
    """
    Run one assistant turn.

    Returns ``{sessionId, message: {role, content, toolInvocations},
    tokenUsage: {input, output, total}}``.
    """
    if not api_key:
        return _error(400, "OpenAI API key is not configured")

    if application.is_shutting_down:
        return _error(503, "Server is shutting down")

    context = PipelineContext(
        user_id=user_id,
        api_key=api_key,
        mode=chat_request.mode,
        message=chat_request.message,
        session_id=chat_request.session_id,
        workflow_context=chat_request.workflow_context,
    )

    try:
        result = await application.run_turn(context)
    except InputValidationError as e:
        return _error(400, str(e))
    except NotFoundError as e:
        return _error(404, str(e))
    except SessionArchivedError as e:
        return _error(409, str(e))
    except UpstreamError as e:
        if e.status_code != 401:
            return _chat_failed(user_id, e)
        logger.warning("openai_key_rejected", user_id=user_id)
        return _error(400, "Invalid OpenAI API key")
    except AgenticChatError as e:
        return _chat_failed(user_id, e)

    logger.info(
        "chat_completed",
        session_id=result.session_id,
        total_tokens=result.token_usage.total,
        auto_reset=result.auto_reset_triggered,
        chain_broken=result.chain_broken,
    )
    return JSONResponse(content=result.to_response())


@router.get("/api/ai-assistant/sessions", response_model=SessionsResponse, response_model_by_alias=True)
async def list_sessions(
    user_id: CurrentUserDep,
    application: ApplicationDep,
    include_archived: bool = False,
    mode: Mode | None = Query(default=None),
) -> SessionsResponse:
    """The current user's chat sessions, most recently active first."""
    summaries = await application.persistence.list_sessions(user_id, include_archived, mode=mode)
    sessions = [SessionSummaryResponse(**s.model_dump()) for s in summaries]
    return SessionsResponse(sessions=sessions, count=len(sessions))


@router.post("/api/ai-assistant/sessions", response_model=SessionEnvelope, response_model_by_alias=True)
async def create_session(
    create_request: CreateSessionRequest,
    user_id: CurrentUserDep,
    application: ApplicationDep,
) -> SessionEnvelope | JSONResponse:
    """Start an empty chat session linked to at most one workflow or mini-prompt."""
    persistence = application.persistence
    try:
        session_id = await persistence.create_session(
            user_id=user_id,
            mode=create_request.mode,
            workflow_id=create_request.workflow_id,
            mini_prompt_id=create_request.mini_prompt_id,
        )
    except InputValidationError as e:
        return _error(400, str(e))

    snapshot = await persistence.get_session(session_id)
    return SessionEnvelope(session=_session_response(snapshot))


@router.get(
    "/api/ai-assistant/sessions/{session_id}",
    response_model=SessionDetailResponse,
    response_model_by_alias=True,
)
async def get_session(
    session_id: str,
    user_id: CurrentUserDep,
    application: ApplicationDep,
) -> SessionDetailResponse | JSONResponse:
    """One of the current user's sessions with its recent message history."""
    persistence = application.persistence
    snapshot = await persistence.get_session(session_id)
    # Another user's session is reported as missing
    if snapshot is None or snapshot.user_id != user_id:
        return _error(404, "Chat session not found")

    history = await persistence.get_message_history(
        session_id, limit=application.settings.history_limit
    )
    return SessionDetailResponse(
        session=_session_response(snapshot),
        messages=[MessageResponse.model_validate(m, from_attributes=True) for m in history],
    )
