"""Base class for assistant tools.

Tools run in-process and only describe a planned change:

- Arguments are validated against a pydantic model before execution
- The result is a ToolOutput variant, never a library write
- The same model produces the function schema sent to the provider
"""

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from workflow_assistant.core.exceptions import ToolInputValidationError
from workflow_assistant.tools.outputs import ToolOutput


class ChatTool(ABC):
    """
    Base class for tools exposed to the completion model.

    Example:
        @ToolRegistry.register
        class RemoveStageTool(ChatTool):
            name = "remove_stage"
            description = "Remove a stage from the workflow by its index."
            input_model = RemoveStageArgs

            async def execute(self, args: RemoveStageArgs) -> ToolOutput:
                return RemoveStageOutput(stage_index=args.stage_index, message="...")
    """

    # Metadata - must be set by subclasses
    name: ClassVar[str]
    description: ClassVar[str]
    input_model: ClassVar[type[BaseModel]]

    @abstractmethod
    async def execute(self, args: Any) -> ToolOutput:
        """
        Describe the change requested by validated ``args``.

        Args:
            args: Instance of ``input_model``
        """
        pass

    def parse_input(self, raw: str | dict[str, Any] | None) -> BaseModel:
        """
        Validate raw arguments (a JSON string or a dict) from the model.

        Raises:
            ToolInputValidationError: Arguments do not match ``input_model``
        """
        try:
            data = json.loads(raw) if isinstance(raw, str) else (raw or {})
            return self.input_model.model_validate(data)
        except (ValidationError, json.JSONDecodeError) as e:
            raise ToolInputValidationError(
                f"Invalid value for tool {self.name}: {e}",
                tool_name=self.name,
            ) from e

    def to_openai_schema(self) -> dict[str, Any]:
        """Function tool definition for the Responses API."""
        return {
            "type": "function",
            "name": self.name,
            "description": self.description,
            "parameters": self.input_model.model_json_schema(by_alias=True),
            "strict": False,
        }
