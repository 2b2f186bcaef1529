"""Configuration module."""

from workflow_assistant.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
