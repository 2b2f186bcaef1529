"""Tool results as a tagged union on ``action``.

Every tool returns one of these. The client applies the described change
after the user approves it; tools never write to the library themselves.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from workflow_assistant.tools.schemas import (
    AddStageArgs,
    CreateMiniPromptArgs,
    CreateWorkflowArgs,
    MiniPromptUpdates,
    ToolArgs,
    UpdateWorkflowSettingsArgs,
)


class _Output(ToolArgs):
    success: bool = True
    message: str


class CreateWorkflowOutput(_Output):
    action: Literal["create_workflow"] = "create_workflow"
    workflow: CreateWorkflowArgs


class AddStageOutput(_Output):
    action: Literal["add_stage"] = "add_stage"
    stage: AddStageArgs


class RemoveStageOutput(_Output):
    action: Literal["remove_stage"] = "remove_stage"
    stage_index: int


class UpdateWorkflowSettingsOutput(_Output):
    action: Literal["update_workflow_settings"] = "update_workflow_settings"
    updates: UpdateWorkflowSettingsArgs


class CreateMiniPromptOutput(_Output):
    action: Literal["create_mini_prompt"] = "create_mini_prompt"
    mini_prompt: CreateMiniPromptArgs


class ModifyMiniPromptOutput(_Output):
    action: Literal["modify_mini_prompt"] = "modify_mini_prompt"
    mini_prompt_id: str | None = None
    stage_position: int | None = None
    mini_prompt_position: int | None = None
    updates: MiniPromptUpdates


class ToolErrorOutput(_Output):
    action: Literal["error"] = "error"
    success: bool = False
    error: str


ToolOutput = Annotated[
    Union[
        CreateWorkflowOutput,
        AddStageOutput,
        RemoveStageOutput,
        UpdateWorkflowSettingsOutput,
        CreateMiniPromptOutput,
        ModifyMiniPromptOutput,
        ToolErrorOutput,
    ],
    Field(discriminator="action"),
]

tool_output_adapter: TypeAdapter[ToolOutput] = TypeAdapter(ToolOutput)


def dump_tool_output(output: Any) -> dict[str, Any]:
    """JSON-ready dict with camelCase keys, unset optionals omitted."""
    return output.model_dump(mode="json", by_alias=True, exclude_none=True)
