"""Core domain modules."""

from workflow_assistant.core.exceptions import (
    AgenticChatError,
    InputValidationError,
    StorageError,
    TransientStorageError,
    ConstraintViolationError,
    StorageValidationError,
    NotFoundError,
    SessionArchivedError,
    RetryExhaustedError,
    UpstreamError,
    ToolInputValidationError,
    PipelineStepError,
    PipelineIncompleteError,
)
from workflow_assistant.core.locks import SessionLockRegistry

__all__ = [
    # Exceptions
    "AgenticChatError",
    "InputValidationError",
    "StorageError",
    "TransientStorageError",
    "ConstraintViolationError",
    "StorageValidationError",
    "NotFoundError",
    "SessionArchivedError",
    "RetryExhaustedError",
    "UpstreamError",
    "ToolInputValidationError",
    "PipelineStepError",
    "PipelineIncompleteError",
    # Concurrency
    "SessionLockRegistry",
]
