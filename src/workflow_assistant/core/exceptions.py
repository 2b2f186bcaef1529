"""Domain exceptions for the workflow assistant."""


class AgenticChatError(Exception):
    """Base exception for all workflow assistant errors."""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(message)
        self.recoverable = recoverable
        # Set by the pipeline when the error escapes a step
        self.step_name: str | None = None


class InputValidationError(AgenticChatError):
    """Malformed or missing caller input."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, recoverable=False)
        self.field = field


# =============================================================================
# STORAGE
# =============================================================================


class StorageError(AgenticChatError):
    """Error raised by the session/message store."""


class TransientStorageError(StorageError):
    """Connection hiccup or lock timeout; the same operation may succeed on retry."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)


class ConstraintViolationError(StorageError):
    """Unique / foreign key constraint violated."""


class StorageValidationError(StorageError):
    """The store rejected a value as invalid."""


class NotFoundError(StorageError):
    """A requested record does not exist."""

    def __init__(self, message: str, entity: str | None = None, entity_id: str | None = None):
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class SessionArchivedError(StorageError):
    """The session was superseded by an auto-reset and is read-only."""

    def __init__(self, session_id: str):
        super().__init__(f"Chat session {session_id} is archived")
        self.session_id = session_id


class RetryExhaustedError(StorageError):
    """A transient failure persisted through every retry attempt."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


# =============================================================================
# UPSTREAM
# =============================================================================


class UpstreamError(AgenticChatError):
    """Error returned by the completion provider."""

    def __init__(self, message: str, recoverable: bool = False, status_code: int | None = None):
        super().__init__(message, recoverable)
        self.status_code = status_code


class ToolInputValidationError(UpstreamError):
    """The model called a tool with arguments that fail the tool's schema."""

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message)
        self.tool_name = tool_name


# =============================================================================
# PIPELINE
# =============================================================================


class PipelineStepError(AgenticChatError):
    """Non-domain error raised inside a pipeline step."""

    def __init__(self, step_name: str, original: BaseException):
        super().__init__(f"Pipeline step {step_name} failed: {original}")
        self.step_name = step_name
        self.original = original


class PipelineIncompleteError(AgenticChatError):
    """The pipeline finished without producing its mandatory outputs."""
