"""Tools offered to the model, per chat mode."""

from workflow_assistant.tools.base import ChatTool
from workflow_assistant.tools.outputs import ToolOutput, dump_tool_output, tool_output_adapter
from workflow_assistant.tools.registry import ToolRegistry

# Import tool modules to register them
from workflow_assistant.tools import mini_prompt_tools, workflow_tools  # noqa: E402, F401

__all__ = [
    "ChatTool",
    "ToolOutput",
    "ToolRegistry",
    "dump_tool_output",
    "tool_output_adapter",
]
