"""Application settings via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings via environment variables."""

    # OpenAI Responses API
    openai_api_key: str = ""
    completion_model: str = "gpt-4.1"
    summary_model: str = "gpt-4o-mini"  # Fast model for auto-reset summaries
    max_tool_steps: int = 5
    llm_timeout_seconds: float = 120.0

    # Database
    database_url: str = "sqlite+aiosqlite:///./workflow_assistant.db"
    database_echo: bool = False
    database_create_schema: bool = True

    # Conversation budget
    auto_reset_token_threshold: int = 100_000
    history_limit: int = 50

    # Context
    mini_prompt_list_limit: int = 20

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # One JSON object per line instead of console output

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_allow_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
