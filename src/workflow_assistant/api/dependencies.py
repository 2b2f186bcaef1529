"""FastAPI dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from workflow_assistant.app import Application
from workflow_assistant.config.settings import Settings


def get_application(request: Request) -> Application:
    """Get the Application from app state."""
    return request.app.state.application


ApplicationDep = Annotated[Application, Depends(get_application)]


def get_app_settings(application: ApplicationDep) -> Settings:
    return application.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_current_user(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str:
    """
    Resolve the authenticated user.

    Authentication is handled upstream; the gateway forwards the user id.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


async def get_openai_api_key(
    settings: SettingsDep,
    x_openai_key: Annotated[str | None, Header(alias="X-OpenAI-Key")] = None,
) -> str:
    """The caller's own key, else the server's configured key ("" if neither)."""
    return x_openai_key or settings.openai_api_key


# Type aliases for dependency injection
CurrentUserDep = Annotated[str, Depends(get_current_user)]
ApiKeyDep = Annotated[str, Depends(get_openai_api_key)]
