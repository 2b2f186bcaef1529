"""HTTP API."""

from workflow_assistant.api.routes import router

__all__ = ["router"]
