"""Registry for assistant tools, with the per-mode tool sets."""

from typing import Type

from workflow_assistant.tools.base import ChatTool
from workflow_assistant.utils.logging import get_logger


logger = get_logger(__name__)


class ToolRegistry:
    """
    Registry of tool classes.

    Usage:
        @ToolRegistry.register
        class MyTool(ChatTool):
            name = "my_tool"
            ...

        tools = ToolRegistry().for_mode("workflow")
    """

    _tools: dict[str, Type[ChatTool]] = {}

    MODE_TOOLS: dict[str, tuple[str, ...]] = {
        "workflow": (
            "create_workflow",
            "add_stage",
            "remove_stage",
            "update_workflow_settings",
            "create_mini_prompt",
        ),
        "mini-prompt": (
            "create_mini_prompt",
            "modify_mini_prompt",
        ),
    }

    @classmethod
    def register(cls, tool_class: Type[ChatTool]) -> Type[ChatTool]:
        """
        Register a tool class.

        Can be used as a decorator:
            @ToolRegistry.register
            class MyTool(ChatTool):
                ...
        """
        name = tool_class.name
        if name in cls._tools:
            logger.warning("tool_overwritten", tool=name)
        cls._tools[name] = tool_class
        return tool_class

    @classmethod
    def get(cls, name: str) -> Type[ChatTool] | None:
        return cls._tools.get(name)

    @classmethod
    def list_tools(cls) -> list[str]:
        return list(cls._tools.keys())

    def for_mode(self, mode: str) -> list[ChatTool]:
        """
        Fresh tool instances for a chat mode.

        Raises:
            KeyError: Unknown mode or unregistered tool
        """
        return [self._tools[name]() for name in self.MODE_TOOLS[mode]]
