"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workflow_assistant import __version__
from workflow_assistant.api.routes import router
from workflow_assistant.app import Application
from workflow_assistant.config.settings import get_settings
from workflow_assistant.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database and wire services; on exit drain in-flight turns and close it."""
    application: Application = app.state.application

    await application.startup()
    try:
        yield
    finally:
        await application.shutdown()


def create_app(application: Application | None = None) -> FastAPI:
    """
    Build the FastAPI app around ``application`` (a default one from settings
    when omitted; tests pass one with a fake completion provider).
    """
    settings = application.settings if application else get_settings()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="Workflow Assistant API",
        description="AI assistant for building workflows and mini-prompts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.application = application or Application(settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


def main() -> None:
    """Entry point for running the application."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "workflow_assistant.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
